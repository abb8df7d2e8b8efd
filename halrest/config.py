# Configuration settings should be set in app.config
# The HALRest class attributes hold the defaults, environment variables are used as a last resort
import os
import logging
from flask import current_app
import halrest
from typing import Any, Optional


def get_config(option: str) -> Optional[Any]:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # RuntimeError: working outside of application context
        result = getattr(halrest.HALRest, option, None)
        if result is None:
            result = os.environ.get(option, None)
    return result


def get_int_config(option: str) -> int:
    """
    :param option: configuration parameter
    :return: configuration value converted to an int
    """
    value = get_config(option)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise halrest.errors.ConfigurationError(f"Invalid {option} configuration: {value!r}")


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    """
    return halrest.log.getEffectiveLevel() < logging.INFO

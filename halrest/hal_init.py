import logging
import os
import sys
from flask import Flask
import flask.app


class HALRest:
    """This class holds the halrest configuration defaults and configures the Flask application
    :param app: a Flask application.
    :param LOGLEVEL: loglevel configuration variable, values from logging module (0: trace, .. 50: critical)
    """

    # Configuration settings are stored as class variables,
    # app.config values with the same name take precedence (cfr. config.get_config)
    PAGE_SIZE = 20
    MAX_PAGE = 2**31
    LOGLEVEL = logging.WARNING
    TOKEN_KEY = None
    TOKEN_ALGORITHM = "HS256"
    TOKEN_EXPIRES_IN = 86400  # seconds
    HAL_MEDIATYPE = "application/hal+json"

    def __init__(self, app: flask.app.Flask, **kwargs) -> None:
        self.app = app
        if app is not None:
            self.init_app(app, **kwargs)

    def init_app(self, app: flask.app.Flask, **kwargs) -> None:
        """
        Application initialization: configuration overrides and the app loglevel
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        app.url_map.strict_slashes = False

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        for conf_name, conf_val in kwargs.items():
            setattr(HALRest, conf_name, conf_val)

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        The webserver will catch stderr so we redirect everything to sys.stderr
        """
        log = logging.getLogger("halrest")
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# logging initialization
#
try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = HALRest.init_logging(LOGLEVEL)

# Response class
from flask import Response, current_app
from .config import get_config


class HALResponse(Response):
    """
    Response class
    """

    default_mimetype = "application/hal+json"


def output_hal(data, code, headers=None):
    """
    flask_restful representation for the hal mediatype
    :param data: json serializable response body
    :param code: http status code
    :param headers: extra headers
    :return: HALResponse
    """
    response = HALResponse(current_app.json.dumps(data) + "\n", status=code, mimetype=get_config("HAL_MEDIATYPE"))
    response.headers.extend(headers or {})
    return response

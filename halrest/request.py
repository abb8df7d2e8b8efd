"""
Host-neutral request and response objects

The registry and the actions only see ActionRequest instances, the http host
(cfr. hal_api.HALAPI) converts its own request objects.
"""
import json
from typing import Any, Dict, Optional
from werkzeug.datastructures import Headers, MultiDict
from .errors import BadRequestError


class ActionRequest:
    """
    :param method: http method, e.g. "GET"
    :param path: request path without leading slash, e.g. "tasks/1"
    :param args: query string arguments
    :param payload: decoded json body
    :param headers: request headers
    """

    def __init__(self, method: str = "GET", path: str = "", args=None, payload: Any = None, headers=None) -> None:
        self.method = method.upper()
        self.path = path.strip("/")
        self.args = args if isinstance(args, MultiDict) else MultiDict(args or {})
        self.payload = payload
        self.headers = headers if isinstance(headers, Headers) else Headers(headers or {})
        # set by the security plugin when the request is authenticated
        self.principal: Any = None

    @classmethod
    def from_flask(cls, flask_request, path: str = "") -> "ActionRequest":
        """
        :param flask_request: flask.Request
        :param path: the routed path
        :raise BadRequestError: if the body isn't valid json
        """
        payload = None
        body = flask_request.get_data(cache=True)
        if body:
            try:
                payload = json.loads(body)
            except ValueError:
                raise BadRequestError("Request body is not valid json")
        return cls(flask_request.method, path, flask_request.args, payload, flask_request.headers)

    @property
    def bearer_token(self) -> Optional[str]:
        authorization = self.headers.get("Authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None
        return token.strip()

    def __repr__(self):
        return f"<ActionRequest {self.method} /{self.path}>"


class ActionResponse:
    """
    Result of a dispatched request

    :param status: http status code
    :param body: json serializable body, None for an empty body
    :param headers: extra response headers (e.g. Location)
    """

    def __init__(self, status: int, body: Any = None, headers: Optional[Dict[str, str]] = None) -> None:
        self.status = status
        self.body = body
        self.headers = dict(headers or {})

    def __repr__(self):
        return f"<ActionResponse {self.status}>"

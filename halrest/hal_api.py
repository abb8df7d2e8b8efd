# flask_restful API subclass exposing a Registry
from functools import wraps
from http import HTTPStatus
from typing import Callable
import werkzeug
from urllib.parse import quote
from flask import request
from flask.app import Flask
from flask_restful import Api as FRApiBase, Resource
from flask_restful.utils import OrderedDict
import halrest
from .config import get_config, is_debug
from .errors import HalError
from .json_encoder import HALJSONProvider
from .request import ActionRequest
from .response import HALResponse, output_hal


class HALAPI(FRApiBase):
    """
    Flask-RESTful Api that routes all requests to the actions of a Registry:

        app = Flask("demo")
        registry = Registry()
        registry.register_action(Root(), crud_actions(resources["tasks"]))
        api = HALAPI(app, registry)

    The registry is frozen before the first request is served
    """

    def __init__(self, app: Flask, registry, **kwargs) -> None:
        halrest.HALRest(app, **kwargs)
        self.registry = registry
        mediatype = get_config("HAL_MEDIATYPE")
        super().__init__(app, default_mediatype=mediatype)
        app.json = HALJSONProvider(app)
        self.representations = OrderedDict([(mediatype, output_hal), ("application/json", output_hal)])

        api_class = type("HAL_API", (HALRestAPI,), {"registry": registry})
        self.add_resource(api_class, "/", "/<path:path>", endpoint="hal_api")
        app.before_request(self.freeze)

    def freeze(self) -> None:
        """
        Freeze the registry, a misconfigured api (e.g. security without backend) won't serve traffic
        """
        if not self.registry.frozen:
            self.registry.freeze()
            halrest.log.info(f"Serving {len(self.registry.actions)} actions")


def http_method_decorator(fun: Callable) -> Callable:
    """Decorator for the supported HTTP methods (get, post, patch, delete)
    convert all exceptions to a JSON serializable error body

    :param fun:
    :return: wrapped fun
    """

    @wraps(fun)
    def method_wrapper(*args, **kwargs):
        try:
            return fun(*args, **kwargs)

        except HalError as exc:
            return exc.to_dict(), exc.status_code

        except werkzeug.exceptions.HTTPException as exc:
            halrest.log.error(exc.description)
            return {"statusCode": exc.code, "error": HTTPStatus(exc.code).phrase}, exc.code

        except Exception as exc:
            halrest.log.exception(exc)
            status = HTTPStatus.INTERNAL_SERVER_ERROR
            body = {"statusCode": status.value, "error": status.phrase}
            if is_debug():
                body["message"] = str(exc)
            return body, status.value

    return method_wrapper


class HALRestAPI(Resource):
    """
    Resource handling all the api routes, the `registry` attribute is set by HALAPI
    """

    registry = None
    method_decorators = [http_method_decorator]

    def _dispatch(self, path: str):
        path = routed_path(request, path)
        action_request = ActionRequest.from_flask(request, path)
        method = "GET" if request.method == "HEAD" else request.method
        result = self.registry.dispatch(method, path, action_request)
        if result.body is None:
            return HALResponse("", status=result.status, headers=result.headers)
        return result.body, result.status, result.headers

    def get(self, path=""):
        return self._dispatch(path)

    def post(self, path=""):
        return self._dispatch(path)

    def patch(self, path=""):
        return self._dispatch(path)

    def delete(self, path=""):
        return self._dispatch(path)

    def put(self, path=""):
        # no PUT actions are registered, the registry answers 405 (or 404)
        return self._dispatch(path)


def routed_path(flask_request, path: str) -> str:
    """
    Werkzeug decodes the url before routing, so an encoded "/" inside a path parameter
    (e.g. /tags/x%2Fy) would split the parameter. The raw request uri is used when the
    server provides it, the action matching decodes every segment on its own.

    :param flask_request: flask.Request
    :param path: the path routed by flask
    :return: request path without leading slash, segments still percent-encoded
    """
    raw_uri = flask_request.environ.get("RAW_URI") or flask_request.environ.get("REQUEST_URI")
    if not raw_uri:
        return quote(path)
    raw_path = raw_uri.split("?", 1)[0].split("#", 1)[0]
    script_root = quote(flask_request.script_root)
    if script_root and raw_path.startswith(script_root):
        raw_path = raw_path[len(script_root):]
    return raw_path.strip("/")

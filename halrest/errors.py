# Exception Handlers
#
# The exceptions will be caught in hal_api.http_method_decorator and formatted, for example:
# {
#      "statusCode": 404,
#      "error": "Not Found"
# }
#
# Validation errors (including normalized constraint violations) are formatted as
# {
#      "errors": [{"dataPath": ..., "schemaPath": ..., "message": ..., "params": ...}]
# }
#
from http import HTTPStatus
import halrest
from .config import is_debug


class HalError(Exception):
    """
    Base class for the errors that are sent back to the client
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = ""

    def to_dict(self):
        """
        :return: the response body
        """
        result = {"statusCode": self.status_code, "error": HTTPStatus(self.status_code).phrase}
        if self.message:
            result["message"] = self.message
        return result


class NotFoundError(HalError):
    """
    This exception is raised when an item or a route was not found
    """

    status_code = HTTPStatus.NOT_FOUND.value

    def __init__(self, message=""):
        HalError.__init__(self, message)
        halrest.log.error("Not found: %s", message)

    def to_dict(self):
        # the body never contains details about what wasn't found
        return {"statusCode": self.status_code, "error": HTTPStatus.NOT_FOUND.phrase}


class MethodNotAllowedError(HalError):
    """
    This exception is raised when a route exists but the http method isn't registered for it
    """

    status_code = HTTPStatus.METHOD_NOT_ALLOWED.value

    def __init__(self, method="", path=""):
        HalError.__init__(self, method, path)
        halrest.log.warning("Method %s not allowed on /%s", method, path)


class BadRequestError(HalError):
    """
    This exception is raised when the query string can't be parsed (where=, order=, page=)
    """

    status_code = HTTPStatus.BAD_REQUEST.value

    def __init__(self, message=""):
        HalError.__init__(self, message)
        halrest.log.warning("BadRequestError: %s", message)
        self.message = message


class UnAuthorizedError(HalError):
    """
    This exception is raised when an authentication error occured
    """

    status_code = HTTPStatus.UNAUTHORIZED.value
    message = "Invalid credentials"

    def __init__(self, message=""):
        HalError.__init__(self, message)
        halrest.log.error("UnAuthorizedError: %s", message)
        if is_debug() and message:
            self.message = message


class ValidationError(HalError):
    """
    This exception is raised when invalid input has been detected (client side input)
    Always send back the errors to the client in the response
    """

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY.value

    def __init__(self, errors):
        """
        :param errors: list of normalized validation errors
        """
        HalError.__init__(self, errors)
        self.errors = list(errors)
        halrest.log.warning("ValidationError: %s", self.errors)

    def to_dict(self):
        return {"errors": self.errors}


class ConstraintViolation(HalError):
    """
    Raised by a persistence port when a foreign key or unique constraint fails.
    It is normalized into a ValidationError before it reaches the client.
    """

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY.value

    def __init__(self, field=None, data_path=""):
        """
        :param field: name of the offending field, None when the port can't tell
        :param data_path: json pointer of the object holding the field
        """
        HalError.__init__(self, field, data_path)
        self.field = field
        self.data_path = data_path


class GenericError(HalError):
    """
    This exception is raised when an internal error has been detected
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value

    def __init__(self, message, status_code=HTTPStatus.INTERNAL_SERVER_ERROR.value):
        HalError.__init__(self, message)
        self.status_code = status_code
        halrest.log.error("Generic Error: %s", message)
        if is_debug():
            self.message = str(message)


#
# Startup errors: these are raised while the api is being assembled and are never
# translated into http responses, the process must not start serving traffic
#
class ConfigurationError(Exception):
    pass


class DuplicateActionError(ConfigurationError):
    """
    An action with the same method and path has already been registered
    """


class RegistryFrozenError(ConfigurationError):
    """
    Actions can't be registered after the registry has been frozen
    """


class AlreadyRegisteredError(ConfigurationError):
    """
    A security backend has already been registered
    """


class MissingBackendError(ConfigurationError):
    """
    The security plugin is installed but no backend has been registered
    """

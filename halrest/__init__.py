# flake8: noqa: F401
#
# The log and HALRest configuration class are imported first:
# the other modules use `halrest.log` and `halrest.HALRest` at runtime
#
from .hal_init import log, HALRest
from .errors import (
    HalError,
    NotFoundError,
    MethodNotAllowedError,
    BadRequestError,
    UnAuthorizedError,
    ValidationError,
    ConstraintViolation,
    GenericError,
    ConfigurationError,
    DuplicateActionError,
    RegistryFrozenError,
    AlreadyRegisteredError,
    MissingBackendError,
)
from .document import Document, Link, Form
from .resource import Resource, Relation
from .source import Source
from .source.sql import SQLAlchemySource, sqlite_foreign_keys
from .introspect import build_resources
from .action import Action, Root, ReadItem, ReadCollection, CreateItem, UpdateItem, DeleteItem, crud_actions
from .request import ActionRequest, ActionResponse
from .registry import Registry
from .security import SecurityPlugin, Backend, ResourceBackend, CreateToken
from .hal_api import HALAPI
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    #
    "HALAPI",
    "HALRest",
    "Registry",
    # documents:
    "Document",
    "Link",
    "Form",
    # resources:
    "Resource",
    "Relation",
    "Source",
    "SQLAlchemySource",
    "sqlite_foreign_keys",
    "build_resources",
    # actions:
    "Action",
    "Root",
    "ReadItem",
    "ReadCollection",
    "CreateItem",
    "UpdateItem",
    "DeleteItem",
    "crud_actions",
    "ActionRequest",
    "ActionResponse",
    # security:
    "SecurityPlugin",
    "Backend",
    "ResourceBackend",
    "CreateToken",
    # Errors:
    "HalError",
    "NotFoundError",
    "MethodNotAllowedError",
    "BadRequestError",
    "UnAuthorizedError",
    "ValidationError",
    "ConstraintViolation",
    "GenericError",
    "ConfigurationError",
    "DuplicateActionError",
    "RegistryFrozenError",
    "AlreadyRegisteredError",
    "MissingBackendError",
)

# -*- coding: utf-8 -*-
"""
The Registry holds the actions of an api and dispatches the requests:

1. resolve the primary action from the method and the path
2. authenticate the request when the action is secure and a security plugin is installed
3. let the primary action handle the request
4. let every other action decorate the resulting document (and its embedded documents),
   in registration order
5. serialize the document

A Registry is built once at startup and frozen before it serves traffic,
it's passed explicitly to the http integration (cfr. hal_api.HALAPI).
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple
import halrest
from .action import Action
from .document import Document
from .errors import (
    AlreadyRegisteredError,
    DuplicateActionError,
    MethodNotAllowedError,
    NotFoundError,
    RegistryFrozenError,
)
from .request import ActionRequest, ActionResponse


class Registry:
    def __init__(self) -> None:
        self._actions: List[Action] = []
        self._frozen = False
        self.security = None

    @property
    def actions(self) -> Tuple[Action, ...]:
        return tuple(self._actions)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register_action(self, *actions) -> "Registry":
        """
        :param actions: Action instances or iterables of Action instances
        :raise DuplicateActionError: an action with the same method and path is already registered
        :raise RegistryFrozenError: the registry already serves traffic
        """
        for action in _flatten(actions):
            if not isinstance(action, Action):
                raise TypeError(f"Not an Action: {action!r}")
            if self._frozen:
                raise RegistryFrozenError(f"Can't register {action}: the registry is frozen")
            for registered in self._actions:
                if registered.key == action.key:
                    raise DuplicateActionError(f"{action} has already been registered ({registered})")
            self._actions.append(action)
            halrest.log.info(f"Registered {action}")
        return self

    def use_security(self, plugin) -> None:
        if self.security is not None:
            raise AlreadyRegisteredError("A security plugin has already been installed")
        self.security = plugin

    def freeze(self) -> "Registry":
        """
        Stop accepting actions, called before serving traffic
        :raise MissingBackendError: a security plugin is installed without backend
        """
        if self.security is not None:
            self.security.check()
        self._frozen = True
        return self

    def resolve(self, method: str, path: str) -> Tuple[Action, Dict[str, str]]:
        """
        :return: the primary action and the path parameters
        :raise NotFoundError: no action matches the path
        :raise MethodNotAllowedError: the path matches but not the method
        """
        method = method.upper()
        path = path.strip("/")
        path_found = False
        for action in self._actions:
            params = action.match(path)
            if params is None:
                continue
            if action.method == method:
                return action, params
            path_found = True
        if path_found:
            raise MethodNotAllowedError(method, path)
        raise NotFoundError(f"No route for /{path}")

    def dispatch(self, method: str, path: str, request: Optional[ActionRequest] = None) -> ActionResponse:
        """
        :param method: http method
        :param path: request path
        :param request: the ActionRequest, a bare request is created when omitted
        :return: ActionResponse
        :raise HalError: the request can't be served
        """
        if request is None:
            request = ActionRequest(method, path)
        action, params = self.resolve(method, path)
        halrest.log.debug(f"Dispatching {method} /{path.strip('/')} to {action}")

        if self.security is not None and action.secure:
            request.principal = self.security.authenticate(request)

        result = action.handle(params, request)
        if isinstance(result, ActionResponse):
            return result

        self.decorate(result, request, primary=action)
        return ActionResponse(200, result.to_dict())

    def decorate(self, document: Document, request: ActionRequest, primary: Optional[Action] = None) -> Document:
        """
        Let all actions, except the primary action, decorate document and its embedded documents
        """
        documents = list(document.documents())
        for action in self._actions:
            if action is primary:
                continue
            for target in documents:
                action.decorate(target, request)
        halrest.log.debug(f"Decorated {len(documents)} document(s)")
        return document


def _flatten(actions: Iterable[Any]):
    for action in actions:
        if isinstance(action, (list, tuple)):
            yield from _flatten(action)
        else:
            yield action

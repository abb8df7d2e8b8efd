"""
Action base class

An action binds an http method and a path template to a resource. For every request
the registry selects one (primary) action that builds the document, all the other
registered actions then get the chance to decorate that document with their links and forms.
"""
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import unquote
from ..document import Document
from ..request import ActionRequest, ActionResponse


class Action:
    """
    :param resource: the Resource the action operates on, None for resource-less actions
    """

    method = "GET"
    # requests for secure actions are authenticated when a security plugin is installed
    secure = True

    def __init__(self, resource=None) -> None:
        self.resource = resource

    @property
    def path(self) -> str:
        """
        :return: the path template without leading slash, e.g. "tasks/{id}"
        """
        raise NotImplementedError

    @property
    def key(self) -> Tuple[str, str]:
        return (self.method, self.path)

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """
        :param path: request path without leading slash
        :return: the path parameters when path matches the template, None otherwise
        """
        template = self.path.split("/") if self.path else []
        parts = path.split("/") if path else []
        if len(template) != len(parts):
            return None
        params = {}
        for segment, part in zip(template, parts):
            if segment.startswith("{") and segment.endswith("}"):
                if not part:
                    return None
                params[segment[1:-1]] = unquote(part)
            elif segment != part:
                return None
        return params

    def handle(self, params: Dict[str, Any], request: ActionRequest) -> Union[Document, ActionResponse]:
        """
        Execute the action as the primary action of a request
        :param params: path parameters
        :param request: ActionRequest
        :return: the document to decorate, or a complete response
        """
        raise NotImplementedError

    def decorate(self, document: Document, request: ActionRequest) -> Document:
        """
        Add the links and forms of this action to a document built by another action.
        Decoration never touches the persistence layer.
        """
        return document

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.method} /{self.path}>"

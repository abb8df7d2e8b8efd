"""
POST /token : exchange login data for a signed access token
"""
from ..document import ROOT, Document, Form, Link
from ..errors import UnAuthorizedError
from ..schema import validate
from ..action.base import Action


class CreateToken(Action):
    """
    :param backend: the Backend resolving the principal from the login data
    :param plugin: the SecurityPlugin that signs the token
    """

    method = "POST"
    secure = False

    def __init__(self, backend, plugin):
        super().__init__()
        self.backend = backend
        self.plugin = plugin

    @property
    def path(self):
        return "token"

    def handle(self, params, request):
        credentials = request.payload if request.payload is not None else {}
        validate(credentials, self.backend.schema)
        principal = self.backend.login(credentials, request)
        if not principal:
            raise UnAuthorizedError("Invalid login")

        document = Document({"token": self.plugin.issue(self.backend.claims(principal))}, resource="token")
        document.add_link("self", Link("/" + self.path))
        return document

    def decorate(self, document, request):
        if document.kind == ROOT:
            document.add_form("token", Form("create", "/" + self.path, self.method, schema=self.backend.schema))
        return document

from ..document import ROOT, Document, Link
from .base import Action


class Root(Action):
    """
    GET / : the api entry point, an empty document that every other action decorates
    """

    method = "GET"
    secure = False

    @property
    def path(self):
        return ""

    def handle(self, params, request):
        document = Document(kind=ROOT)
        document.add_link("self", Link("/"))
        return document

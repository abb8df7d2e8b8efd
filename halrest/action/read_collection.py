"""
GET /<resource>?where=<field>,<value>&order=<field>,<direction>&page=<n>
"""
from ..config import get_int_config
from ..document import COLLECTION, ROOT, Document, Link
from ..links import collection_links
from ..query import QueryContext
from ..source import ReadQuery
from .base import Action
from .read_item import item_document


class ReadCollection(Action):
    method = "GET"

    @property
    def path(self):
        return self.resource.name

    def page_size(self) -> int:
        return self.resource.page_size or get_int_config("PAGE_SIZE")

    def handle(self, params, request):
        resource = self.resource
        query = QueryContext.parse(request.args, resource)
        page_size = self.page_size()

        read = ReadQuery(resource.name, query.conditions, query.order, page_size, query.offset(page_size))
        rows = resource.source.read_many(read)
        count = resource.source.count(read)

        document = Document(kind=COLLECTION, resource=resource.name).set_property("count", count)
        for relation, link in collection_links("/" + resource.name, query, page_size, count).items():
            document.add_link(relation, link)
        document.add_embedded(resource.name, [item_document(resource, row) for row in rows])
        return document

    def decorate(self, document, request):
        if document.kind == ROOT:
            href = f"/{self.resource.name}{{?where,page,order}}"
            document.add_link(self.resource.name, Link(href, name="collection", templated=True))
        return document

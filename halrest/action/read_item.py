"""
GET /<resource>/<pk>...

The item document contains the row properties, a self link, a "collection" link for
every resource that references the item and the referenced (parent) items as
embedded documents:

{
    "id": 1, "title": "Task", "owner": 1,
    "_links": {"self": {"href": "/tasks/1"}, "comments": {"name": "collection", "href": "/comments?where=task,1"}},
    "_embedded": {"users": {"id": 1, ...}}
}
"""
from typing import Any, Dict, FrozenSet, Tuple
import halrest
from ..document import ITEM, ROOT, Document, Link
from ..errors import NotFoundError
from ..links import merge_params, query_params
from ..query import Condition
from ..source import ReadQuery
from .base import Action


def item_document(resource, row: Dict[str, Any], seen: FrozenSet[Tuple] = frozenset()) -> Document:
    """
    :param resource: Resource of the row
    :param row: the row properties
    :param seen: identities of the items already embedded above this one, to stop on cycles
    :return: item Document
    """
    params = resource.primary_key(row)
    identity = (resource.name, tuple(params.items()))
    seen = seen | {identity}

    document = Document(row, ITEM, resource.name, params)
    document.add_link("self", Link(resource.href(params)))

    for incoming in resource.collections:
        value = row.get(incoming.local_field)
        if value is None:
            continue
        href = merge_params(f"/{incoming.target.name}", query_params([Condition(incoming.target_field, value)]))
        document.add_link(incoming.target.name, Link(href, name="collection"))

    for relation in resource.relations:
        value = row.get(relation.local_field)
        if value is None:
            continue
        target = relation.target
        parent = target.source.read_one(ReadQuery(target.name, [Condition(relation.target_field, value)]))
        if parent is None:
            halrest.log.warning(f"{resource.name}.{relation.local_field}={value!r} references no {target.name}")
            continue
        if (target.name, tuple(target.primary_key(parent).items())) in seen:
            continue
        document.add_embedded(target.name, item_document(target, parent, seen))

    return document


class ReadItem(Action):
    method = "GET"

    @property
    def path(self):
        return self.resource.path

    def handle(self, params, request):
        resource = self.resource
        row = resource.source.read_one(ReadQuery(resource.name, resource.pk_conditions(params)))
        if row is None:
            raise NotFoundError(f"{resource.name} {params}")
        return item_document(resource, row)

    def decorate(self, document, request):
        if document.kind == ROOT:
            document.add_link(self.resource.name, Link("/" + self.path, name="item", templated=True))
        return document

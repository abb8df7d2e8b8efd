"""
The action variants

crud_actions(resource) returns the five resource actions in the order they're
usually registered, this is also the order of their links and forms in the documents.
"""
from .base import Action
from .root import Root
from .read_item import ReadItem, item_document
from .read_collection import ReadCollection
from .create_item import CreateItem
from .update_item import UpdateItem
from .delete_item import DeleteItem


def crud_actions(resource):
    return [ReadItem(resource), ReadCollection(resource), CreateItem(resource), UpdateItem(resource), DeleteItem(resource)]


__all__ = (
    "Action",
    "Root",
    "ReadItem",
    "ReadCollection",
    "CreateItem",
    "UpdateItem",
    "DeleteItem",
    "crud_actions",
    "item_document",
)

"""
The hypermedia document built for every request

A Document is created by the primary action, decorated by every other registered
action and serialized once, as a HAL-style json object:

{
    <properties>,
    "_links": {"self": {"href": "/tasks/1"}, "users": [...]},
    "_forms": {"tasks": [{"name": "update", "href": "/tasks/1", "method": "PATCH", "schema": {...}}]},
    "_embedded": {"projects": {...}}
}

A key that holds a single entry is serialized as an object, a key holding more entries
as a list. Embedded documents that were added as a list (collections) are always serialized as a list.
"""
from typing import Any, Dict, Iterator, List, Optional, Union

ROOT = "root"
ITEM = "item"
COLLECTION = "collection"


class Link:
    """
    Navigational link
    """

    def __init__(self, href: str, name: Optional[str] = None, templated: bool = False) -> None:
        self.href = href
        self.name = name
        self.templated = templated

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        if self.name is not None:
            result["name"] = self.name
        result["href"] = self.href
        if self.templated:
            result["templated"] = True
        return result

    def __eq__(self, other):
        return isinstance(other, Link) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"<Link {self.to_dict()}>"


class Form:
    """
    State transition available on a resource
    """

    def __init__(self, name: str, href: str, method: str, templated: bool = False, schema: Optional[dict] = None) -> None:
        self.name = name
        self.href = href
        self.method = method
        self.templated = templated
        self.schema = schema

    def to_dict(self) -> Dict[str, Any]:
        result = {"name": self.name, "href": self.href}
        if self.templated:
            result["templated"] = True
        result["method"] = self.method
        if self.schema is not None:
            result["schema"] = self.schema
        return result

    def __eq__(self, other):
        return isinstance(other, Form) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"<Form {self.to_dict()}>"


def _append(mapping: dict, key: str, value: Any) -> None:
    """
    Add value to mapping[key], turning the entry into a list when the key is already in use
    """
    if key not in mapping:
        mapping[key] = value
    elif isinstance(mapping[key], list):
        if isinstance(value, list):
            mapping[key].extend(value)
        else:
            mapping[key].append(value)
    else:
        existing = mapping[key]
        mapping[key] = [existing] + (value if isinstance(value, list) else [value])


def _encode(entry: Any) -> Any:
    if isinstance(entry, list):
        return [_encode(item) for item in entry]
    return entry.to_dict()


class Document:
    """
    Per-request hypermedia representation: properties, links, forms and embedded documents

    :param properties: the field values of the represented row(s)
    :param kind: ROOT, ITEM or COLLECTION, tells the decorating actions what is being built
    :param resource: name of the resource the document represents (None for the root)
    :param params: the (primary key) parameters bound to the document
    """

    def __init__(self, properties=None, kind: Optional[str] = None, resource: Optional[str] = None, params=None) -> None:
        self.properties: Dict[str, Any] = dict(properties or {})
        self.kind = kind
        self.resource = resource
        self.params: Dict[str, Any] = dict(params or {})
        self.links: Dict[str, Union[Link, List[Link]]] = {}
        self.forms: Dict[str, Union[Form, List[Form]]] = {}
        self.embedded: Dict[str, Union["Document", List["Document"]]] = {}

    def set_property(self, key: str, value: Any) -> "Document":
        self.properties[key] = value
        return self

    def add_link(self, relation: str, link: Union[Link, List[Link]]) -> "Document":
        _append(self.links, relation, link)
        return self

    def add_form(self, resource_name: str, form: Union[Form, List[Form]]) -> "Document":
        _append(self.forms, resource_name, form)
        return self

    def add_embedded(self, relation: str, document: Union["Document", List["Document"]]) -> "Document":
        if isinstance(document, list):
            # collections stay a list, even when they contain a single document
            document = list(document)
        _append(self.embedded, relation, document)
        return self

    def merge(self, other: "Document") -> "Document":
        """
        Field-wise union with other:
        - properties of other are only used where this document has none
        - links, forms and embedded documents of other are appended per key
        """
        for key, value in other.properties.items():
            self.properties.setdefault(key, value)
        for relation, link in other.links.items():
            self.add_link(relation, list(link) if isinstance(link, list) else link)
        for name, form in other.forms.items():
            self.add_form(name, list(form) if isinstance(form, list) else form)
        for relation, document in other.embedded.items():
            self.add_embedded(relation, document)
        return self

    def documents(self) -> Iterator["Document"]:
        """
        :return: this document and all (nested) embedded documents, depth first
        """
        yield self
        for embedded in self.embedded.values():
            for document in embedded if isinstance(embedded, list) else [embedded]:
                yield from document.documents()

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.properties)
        if self.links:
            result["_links"] = {relation: _encode(link) for relation, link in self.links.items()}
        if self.forms:
            result["_forms"] = {name: _encode(form) for name, form in self.forms.items()}
        if self.embedded:
            result["_embedded"] = {relation: _encode(document) for relation, document in self.embedded.items()}
        return result

    def __repr__(self):
        return f"<Document {self.kind} {self.resource} {self.properties}>"

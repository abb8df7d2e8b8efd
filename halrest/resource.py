"""
Resource descriptors: the static metadata of one exposed table

A descriptor is constructed once at startup (see introspect.build_resources) and
is shared, read-only, by all actions bound to it.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote
from .errors import NotFoundError
from .query import Condition

JSON_CASTS = {"integer": int, "number": float, "string": str}


@dataclass(frozen=True)
class Relation:
    """
    Foreign key link between two resources, seen from the resource that holds it

    :param local_field: field of the resource holding the relation
    :param target: related Resource
    :param target_field: field of the target resource referenced by local_field
    """

    local_field: str
    target: "Resource"
    target_field: str

    def __repr__(self):
        return f"<Relation {self.local_field} -> {self.target.name}.{self.target_field}>"


class Resource:
    """
    Binding of a name, a json schema, primary keys, relations and a persistence port

    :param name: unique name, also used as url segment
    :param schema: json schema describing the properties, relation fields hold a
                   reference-or-embed "oneOf" (cfr. schema.reference_or_embed)
    :param primary_keys: ordered primary key field names
    :param source: persistence port (halrest.source.Source)
    :param relations: outgoing relations, i.e. the foreign keys held by this resource
    :param page_size: collection page size, defaults to the PAGE_SIZE configuration
    """

    def __init__(
        self,
        name: str,
        schema: Dict[str, Any],
        primary_keys: Sequence[str],
        source,
        relations: Sequence[Relation] = (),
        page_size: Optional[int] = None,
    ) -> None:
        if not primary_keys:
            raise ValueError(f"Resource {name} has no primary keys")
        self.name = name
        self.schema = schema
        self.primary_keys = tuple(primary_keys)
        self.source = source
        self.relations: List[Relation] = list(relations)
        # incoming relations, i.e. the relations of other resources targeting this one.
        # Here, `target` is the resource holding the foreign key (`target_field`)
        self.collections: List[Relation] = []
        self.page_size = page_size

    @property
    def path(self) -> str:
        """
        :return: item path template, e.g. "tasks/{id}"
        """
        return "/".join([self.name] + [f"{{{pk}}}" for pk in self.primary_keys])

    def href(self, params: Dict[str, Any]) -> str:
        """
        :param params: mapping that contains the primary key values
        :return: concrete item href, e.g. "/tasks/1", the values are percent-encoded
        """
        return "/" + "/".join([self.name] + [quote(str(params[pk]), safe="") for pk in self.primary_keys])

    def primary_key(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {pk: row[pk] for pk in self.primary_keys}

    def field_type(self, field: str) -> Optional[str]:
        """
        :return: the json type of field, the reference type for relation fields
        """
        prop = self.schema.get("properties", {}).get(field)
        if prop is None:
            return None
        if "oneOf" in prop:
            prop = prop["oneOf"][0]
        json_type = prop.get("type")
        if isinstance(json_type, list):
            json_type = next((t for t in json_type if t != "null"), None)
        return json_type

    def has_field(self, field: str) -> bool:
        return field in self.schema.get("properties", {})

    def cast(self, field: str, value: str) -> Any:
        """
        Convert a url string value to the json type of field
        :raise ValueError: when the value can't be converted
        """
        json_type = self.field_type(field)
        if json_type == "boolean":
            if value.lower() in ("true", "1"):
                return True
            if value.lower() in ("false", "0"):
                return False
            raise ValueError(f"Invalid boolean {value!r}")
        return JSON_CASTS.get(json_type, str)(value)

    def pk_params(self, params: Dict[str, str]) -> Dict[str, Any]:
        """
        :param params: url path parameters
        :return: primary key values, cast to their type
        :raise NotFoundError: if a value doesn't match its type, no such item can exist
        """
        result = {}
        for pk in self.primary_keys:
            try:
                result[pk] = self.cast(pk, params[pk])
            except (KeyError, ValueError):
                raise NotFoundError(f"Invalid {self.name} primary key {params}")
        return result

    def pk_conditions(self, params: Dict[str, Any]) -> List[Condition]:
        """
        :param params: url path parameters
        :return: equality conditions selecting the item
        """
        return [Condition(pk, value) for pk, value in self.pk_params(params).items()]

    def __repr__(self):
        return f"<Resource {self.name}>"

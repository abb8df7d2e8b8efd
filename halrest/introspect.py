# -*- coding: utf-8 -*-
"""
    introspect.py: create Resource descriptors from SQLAlchemy table metadata
"""
from typing import Any, Dict, Iterable, List, Optional
import sqlalchemy
import halrest
from .resource import Relation, Resource
from .schema import reference_or_embed

#
# Map SQLA types to json schema types
# If a type isn't found in the table, "string" will be used
#
SQLALCHEMY_JSON_TYPE = {
    "INTEGER": "integer",
    "SMALLINT": "integer",
    "BIGINT": "integer",
    "TINYINT": "integer",
    "MEDIUMINT": "integer",
    "YEAR": "integer",
    "NUMERIC": "number",
    "DECIMAL": "number",
    "FLOAT": "number",
    "REAL": "number",
    "DOUBLE": "number",
    "DOUBLE_PRECISION": "number",
    "BOOLEAN": "boolean",
    "VARCHAR": "string",
    "NVARCHAR": "string",
    "CHAR": "string",
    "TEXT": "string",
    "TINYTEXT": "string",
    "MEDIUMTEXT": "string",
    "LONGTEXT": "string",
    "DATE": "string",
    "DATETIME": "string",
    "TIMESTAMP": "string",
    "TIME": "string",
    "INTERVAL": "string",
    "ENUM": "string",
    "UUID": "string",
    "BLOB": "string",
    "BYTEA": "string",
}


def json_type(column: sqlalchemy.Column) -> str:
    try:
        type_name = column.type.compile()
    except Exception:
        # types without a default dialect compilation (eg. dialect specific types)
        type_name = type(column.type).__name__
    type_name = type_name.split("(")[0].upper()
    return SQLALCHEMY_JSON_TYPE.get(type_name, "string")


def column_schema(column: sqlalchemy.Column) -> Dict[str, Any]:
    result: Dict[str, Any] = {"type": json_type(column)}
    if column.nullable and not column.primary_key:
        result["type"] = [result["type"], "null"]
    if isinstance(column.type, sqlalchemy.Enum) and column.type.enums:
        result["enum"] = list(column.type.enums)
    length = getattr(column.type, "length", None)
    if result.get("type") == "string" and isinstance(length, int):
        result["maxLength"] = length
    default = column.default
    if default is not None and getattr(default, "is_scalar", False):
        result["default"] = default.arg
    return result


def is_required(column: sqlalchemy.Column) -> bool:
    """
    A column is required when the client must supply it: not nullable,
    without (server) default and not generated by the database
    """
    if column.nullable or column.default is not None or column.server_default is not None:
        return False
    if column.primary_key and column.autoincrement in (True, "auto") and json_type(column) == "integer":
        return False
    return True


def table_schema(table: sqlalchemy.Table) -> Dict[str, Any]:
    properties = {column.name: column_schema(column) for column in table.columns}
    required = [column.name for column in table.columns if is_required(column)]
    return {"title": table.name, "type": "object", "properties": properties, "required": required}


def build_resources(
    tables: Iterable[sqlalchemy.Table], source, page_size: Optional[int] = None
) -> Dict[str, Resource]:
    """
    :param tables: SQLAlchemy tables (eg. `metadata.sorted_tables`)
    :param source: the persistence port all resources are bound to
    :param page_size: optional page size for all collections
    :return: mapping of resource names to Resource descriptors
    """
    tables = list(tables)
    resources = {}
    for table in tables:
        primary_keys = [column.name for column in table.primary_key.columns]
        if not primary_keys:
            halrest.log.warning(f"Not exposing {table.name}: no primary key")
            continue
        resources[table.name] = Resource(table.name, table_schema(table), primary_keys, source, page_size=page_size)

    # foreign keys become relations, in both directions
    for table in tables:
        resource = resources.get(table.name)
        if resource is None:
            continue
        for fk in sorted(table.foreign_keys, key=lambda fk: fk.parent.name):
            target = resources.get(fk.column.table.name)
            if target is None:
                halrest.log.warning(f"{table.name}.{fk.parent.name} references an unexposed table")
                continue
            resource.relations.append(Relation(fk.parent.name, target, fk.column.name))
            target.collections.append(Relation(fk.column.name, resource, fk.parent.name))

    _embed_relation_schemas(resources.values())
    return resources


def _embed_relation_schemas(resources: Iterable[Resource]) -> None:
    """
    Replace the relation field schemas with reference-or-embed alternatives.
    The embedded alternative is the complete (recursively expanded) schema of the target,
    a resource that is already being expanded only accepts references (cycles).
    """
    plain = {resource.name: resource.schema for resource in resources}

    def expand(resource: Resource, seen: List[str]) -> Dict[str, Any]:
        schema = dict(plain[resource.name])
        properties = dict(schema["properties"])
        for relation in resource.relations:
            target = relation.target
            reference = {"type": plain[target.name]["properties"][relation.target_field]["type"]}
            if "null" in properties[relation.local_field]["type"]:
                reference["type"] = [reference["type"], "null"]
            if target.name in seen + [resource.name]:
                properties[relation.local_field] = reference_or_embed(reference)
            else:
                properties[relation.local_field] = reference_or_embed(reference, expand(target, seen + [resource.name]))
        schema["properties"] = properties
        return schema

    expanded = {resource.name: expand(resource, []) for resource in resources}
    for resource in resources:
        resource.schema = expanded[resource.name]


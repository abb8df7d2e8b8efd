"""
Embedded resource resolution

A write payload may contain new related objects in its relation fields:

    {"title": "T", "owner": 1, "project": {"name": "New Project"}}

Before the enclosing row can be persisted, these objects are created (recursively,
depth first) and replaced by the primary key that was assigned to them:

    {"title": "T", "owner": 1, "project": 4}

A child is always persisted before the parent that references it. Siblings are
resolved one after the other, each with all of its own children.

The resolver relies on the transaction of the persistence port for atomicity:
with a non-transactional port, the rows created before a failure stay persisted.
"""
from dataclasses import dataclass
from typing import Any, Dict, Union
import halrest
from .errors import ConstraintViolation, ValidationError
from .schema import constraint_error, validate
from .source import CreateQuery


@dataclass(frozen=True)
class Reference:
    """A relation field value that references an existing row by its key"""

    value: Any


@dataclass(frozen=True)
class Embedded:
    """A relation field value that is a new object of the related resource"""

    payload: Dict[str, Any]


def classify(value: Any) -> Union[Reference, Embedded]:
    if isinstance(value, dict):
        return Embedded(value)
    return Reference(value)


def _prefix(errors, data_path):
    result = []
    for error in errors:
        error = dict(error, dataPath=data_path + error.get("dataPath", ""))
        if "subErrors" in error:
            error["subErrors"] = _prefix(error["subErrors"], data_path)
        result.append(error)
    return result


class EmbeddedResolver:
    """
    :param resource: the Resource the payload is written to
    """

    def __init__(self, resource):
        self.resource = resource

    def resolve(self, payload: Dict[str, Any], data_path: str = "") -> Dict[str, Any]:
        """
        :param payload: validated write payload
        :param data_path: json pointer of payload within the request payload
        :return: copy of payload where every embedded object has been replaced by a key
        :raise ValidationError: invalid embedded object or constraint violation, at any depth
        """
        result = dict(payload)
        for relation in self.resource.relations:
            if relation.local_field not in payload:
                continue
            value = classify(payload[relation.local_field])
            if isinstance(value, Embedded):
                field_path = f"{data_path}/{relation.local_field}"
                result[relation.local_field] = self._create(relation, value, field_path)
        return result

    def _create(self, relation, embedded: Embedded, data_path: str) -> Any:
        """
        Create the embedded object of relation, after its own embedded objects
        :return: the value of the target field of the created row
        """
        target = relation.target
        try:
            validate(embedded.payload, target.schema)
        except ValidationError as exc:
            raise ValidationError(_prefix(exc.errors, data_path))

        data = EmbeddedResolver(target).resolve(embedded.payload, data_path)

        returning = list(target.primary_keys)
        if relation.target_field not in returning:
            returning.append(relation.target_field)
        try:
            created = target.source.create(CreateQuery(target.name, data, returning))
        except ConstraintViolation as exc:
            raise ValidationError([constraint_error(exc.field, data_path + exc.data_path)])

        halrest.log.debug(f"Created embedded {target.name} {created} at {data_path}")
        return created[relation.target_field]

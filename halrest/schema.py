"""
json schema validation and error normalization

The validation itself is performed by the jsonschema library (draft 4),
this module shapes its errors into

    {"dataPath": "/title", "schemaPath": "/properties/title/type", "message": ..., "params": {...}}

unmatched "oneOf" alternatives carry one sub error per branch in "subErrors".
"""
import copy
from typing import Optional
from jsonschema import Draft4Validator
from .errors import ValidationError

CONSTRAINT_MESSAGE = "Constraint violation"
ONE_OF_MESSAGE = 'Data does not match any schemas from "oneOf"'


def _pointer(path) -> str:
    return "".join(f"/{part}" for part in path)


def _json_type(instance) -> str:
    if instance is None:
        return "null"
    if isinstance(instance, bool):
        return "boolean"
    if isinstance(instance, (int, float)):
        return "number"
    if isinstance(instance, str):
        return "string"
    if isinstance(instance, list):
        return "array"
    return "object"


def _normalize(error) -> dict:
    """
    :param error: jsonschema.ValidationError
    :return: normalized error dict
    """
    data_path = _pointer(error.absolute_path)
    schema_path = list(error.absolute_schema_path)
    params = {}

    if error.validator == "required":
        # the jsonschema error refers to the "required" list, point at the missing key
        key = error.message.split("'")[1] if "'" in error.message else ""
        required = list(error.validator_value)
        if key in required:
            schema_path.append(required.index(key))
        message = f"Missing required property: {key}"
        params = {"key": key}
    elif error.validator == "type":
        expected = error.validator_value
        if isinstance(expected, list):
            expected = "/".join(expected)
        actual = _json_type(error.instance)
        message = f"Invalid type: {actual} (expected {expected})"
        params = {"type": actual, "expected": expected}
    elif error.validator == "oneOf" and error.context:
        message = ONE_OF_MESSAGE
    else:
        message = error.message

    result = {"dataPath": data_path, "schemaPath": _pointer(schema_path), "message": message, "params": params}

    if error.validator == "oneOf" and error.context:
        # one sub error per alternative, in branch order
        branches = {}
        for sub_error in error.context:
            branch = sub_error.relative_schema_path[0]
            branches.setdefault(branch, _normalize(sub_error))
        result["subErrors"] = [branches[branch] for branch in sorted(branches)]

    return result


def errors(data, schema) -> list:
    """
    :param data: payload to validate
    :param schema: json schema
    :return: list of normalized errors, empty if the payload is valid
    """
    validator = Draft4Validator(schema)
    return [_normalize(error) for error in validator.iter_errors(data)]


def validate(data, schema) -> None:
    """
    :raise ValidationError: if data doesn't match schema
    """
    found = errors(data, schema)
    if found:
        raise ValidationError(found)


def update_schema(schema: dict) -> dict:
    """
    :return: copy of schema that accepts any subset of the fields (partial updates)
    """
    result = copy.deepcopy(schema)
    result["required"] = []
    return result


def reference_or_embed(reference: dict, embedded: Optional[dict] = None) -> dict:
    """
    Schema of a relation field: the key of an existing target row or a new target object

    :param reference: schema of the referenced (primary key) field
    :param embedded: schema of the target resource, None when the target can't be embedded (cycles)
    """
    alternatives = [reference] if embedded is None else [reference, embedded]
    return {"oneOf": alternatives}


def constraint_error(field, data_path: str = "") -> dict:
    """
    A persistence layer constraint failure, shaped as a validation error
    :param field: the offending field, may be None when unknown
    :param data_path: json pointer of the object holding field
    """
    if field is None:
        return {"dataPath": data_path, "schemaPath": "/constraint", "message": CONSTRAINT_MESSAGE}
    return {
        "dataPath": f"{data_path}/{field}",
        "schemaPath": f"/properties/{field}/constraint",
        "message": CONSTRAINT_MESSAGE,
    }

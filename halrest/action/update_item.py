"""
PATCH /<resource>/<pk>... : partial update, nested objects in relation fields are created
"""
import copy
from ..document import ITEM, ROOT, Form
from ..errors import ConstraintViolation, NotFoundError, ValidationError
from ..request import ActionResponse
from ..resolver import EmbeddedResolver
from ..schema import constraint_error, update_schema, validate
from ..source import UpdateQuery
from .base import Action


class UpdateItem(Action):
    method = "PATCH"

    def __init__(self, resource=None):
        super().__init__(resource)
        self._schema = update_schema(resource.schema) if resource is not None else None

    @property
    def path(self):
        return self.resource.path

    def schema(self) -> dict:
        return copy.deepcopy(self._schema)

    def handle(self, params, request):
        resource = self.resource
        conditions = resource.pk_conditions(params)
        payload = request.payload if request.payload is not None else {}
        validate(payload, self._schema)

        with resource.source.transaction():
            data = EmbeddedResolver(resource).resolve(payload)
            try:
                affected = resource.source.update(UpdateQuery(resource.name, conditions, data, resource.primary_keys))
            except ConstraintViolation as exc:
                raise ValidationError([constraint_error(exc.field, exc.data_path)])
            if not affected:
                # raised inside the transaction: the embedded objects are rolled back too
                raise NotFoundError(f"{resource.name} {params}")

        return ActionResponse(204)

    def decorate(self, document, request):
        name = self.resource.name
        if document.kind == ROOT:
            document.add_form(name, Form("update", "/" + self.path, self.method, templated=True, schema=self.schema()))
        elif document.kind == ITEM and document.resource == name:
            schema = self.schema()
            schema["default"] = dict(document.properties)
            document.add_form(name, Form("update", self.resource.href(document.params), self.method, schema=schema))
        return document

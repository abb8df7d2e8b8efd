"""
POST /<resource>

Pipeline: validate -> resolve embedded objects -> persist, the last two stages run
inside the transaction of the resource source.
"""
import copy
import halrest
from ..document import COLLECTION, ROOT, Form
from ..errors import ConstraintViolation, ValidationError
from ..request import ActionResponse
from ..resolver import EmbeddedResolver
from ..schema import constraint_error, validate
from ..source import CreateQuery
from .base import Action


class CreateItem(Action):
    method = "POST"

    @property
    def path(self):
        return self.resource.name

    def schema(self) -> dict:
        return copy.deepcopy(self.resource.schema)

    def handle(self, params, request):
        resource = self.resource
        payload = request.payload if request.payload is not None else {}
        validate(payload, self.resource.schema)

        with resource.source.transaction():
            data = EmbeddedResolver(resource).resolve(payload)
            try:
                created = resource.source.create(CreateQuery(resource.name, data, resource.primary_keys))
            except ConstraintViolation as exc:
                raise ValidationError([constraint_error(exc.field, exc.data_path)])

        location = resource.href(created)
        halrest.log.info(f"Created {location}")
        return ActionResponse(201, headers={"Location": location})

    def decorate(self, document, request):
        if document.kind == ROOT or (document.kind == COLLECTION and document.resource == self.resource.name):
            document.add_form(self.resource.name, Form("create", "/" + self.path, self.method, schema=self.schema()))
        return document

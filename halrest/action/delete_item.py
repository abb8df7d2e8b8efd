from ..document import ITEM, ROOT, Form
from ..errors import ConstraintViolation, NotFoundError, ValidationError
from ..request import ActionResponse
from ..schema import constraint_error
from ..source import DeleteQuery
from .base import Action


class DeleteItem(Action):
    """
    DELETE /<resource>/<pk>...
    """

    method = "DELETE"

    @property
    def path(self):
        return self.resource.path

    def handle(self, params, request):
        resource = self.resource
        with resource.source.transaction():
            try:
                deleted = resource.source.delete(DeleteQuery(resource.name, resource.pk_conditions(params)))
            except ConstraintViolation as exc:
                # the item is still referenced
                raise ValidationError([constraint_error(exc.field, exc.data_path)])
        if not deleted:
            raise NotFoundError(f"{resource.name} {params}")
        return ActionResponse(204)

    def decorate(self, document, request):
        name = self.resource.name
        if document.kind == ROOT:
            document.add_form(name, Form("delete", "/" + self.path, self.method, templated=True))
        elif document.kind == ITEM and document.resource == name:
            document.add_form(name, Form("delete", self.resource.href(document.params), self.method))
        return document

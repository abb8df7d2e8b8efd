"""
Collection query parameters

- where=<field>,<value> : equality condition, repeatable, the conditions are ANDed
- order=<field>,<asc|desc> : single field ordering
- page=<n> : 1-based page number, the page size is fixed by the resource or the configuration
"""
import dataclasses
from dataclasses import dataclass
from typing import Any, List, Optional
from werkzeug.datastructures import MultiDict
import halrest
from .config import get_int_config
from .errors import BadRequestError

ASC = "asc"
DESC = "desc"


@dataclass(frozen=True)
class Condition:
    field: str
    value: Any
    # the value as it was sent in the url
    text: Optional[str] = dataclasses.field(default=None, compare=False)


@dataclass(frozen=True)
class Order:
    field: str
    direction: str = ASC


@dataclass(frozen=True)
class QueryContext:
    conditions: List[Condition] = dataclasses.field(default_factory=list)
    order: Optional[Order] = None
    page: int = 1
    # page is explicit when the client supplied it, it then shows up in the self link
    explicit_page: bool = False

    @classmethod
    def parse(cls, args, resource) -> "QueryContext":
        """
        :param args: query string arguments (werkzeug MultiDict or mapping)
        :param resource: the queried Resource, used to check and cast the field values
        :return: QueryContext
        :raise BadRequestError: malformed or unknown parameters
        """
        if not isinstance(args, MultiDict):
            args = MultiDict(args or {})

        conditions = [cls._parse_condition(where, resource) for where in args.getlist("where")]

        order = None
        order_arg = args.get("order")
        if order_arg is not None:
            order_field, _, direction = order_arg.partition(",")
            direction = direction.lower() or ASC
            if not resource.has_field(order_field):
                raise BadRequestError(f"Invalid order field {order_field!r}")
            if direction not in (ASC, DESC):
                raise BadRequestError(f"Invalid order direction {direction!r}")
            order = Order(order_field, direction)

        page_arg = args.get("page")
        page = 1
        if page_arg is not None:
            try:
                page = int(page_arg)
            except ValueError:
                raise BadRequestError(f"Invalid page {page_arg!r}")
            if page < 1 or page > get_int_config("MAX_PAGE"):
                raise BadRequestError(f"Invalid page {page}")

        result = cls(conditions, order, page, page_arg is not None)
        halrest.log.debug(f"Query {resource.name}: {result}")
        return result

    @staticmethod
    def _parse_condition(where: str, resource) -> Condition:
        if "," not in where:
            raise BadRequestError(f"Invalid condition {where!r}, expected where=<field>,<value>")
        cond_field, text = where.split(",", 1)
        if not resource.has_field(cond_field):
            raise BadRequestError(f"Invalid condition field {cond_field!r}")
        try:
            value = resource.cast(cond_field, text)
        except ValueError:
            raise BadRequestError(f"Invalid value for {cond_field}: {text!r}")
        return Condition(cond_field, value, text)

    def offset(self, page_size: int) -> int:
        return (self.page - 1) * page_size

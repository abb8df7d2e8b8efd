# Collection link formatting:
# - conditions (where=field,value)
# - ordering (order=field,direction)
# - pagination (page=n)
#
# Every link derived from a request keeps the conditions and the order of the request,
# only the page parameter changes from link to link.
#
import math
from collections import OrderedDict
from typing import List, Optional, Tuple
from urllib.parse import quote
from .document import Link
from .query import Condition, Order, QueryContext


def _encode(value) -> str:
    if isinstance(value, bool):
        value = str(value).lower()
    return quote(str(value), safe=",")


def query_params(conditions: List[Condition] = (), page: Optional[int] = None, order: Optional[Order] = None) -> List[Tuple[str, str]]:
    """
    :return: the query parameters in their canonical order: where..., page, order
    """
    params = [("where", f"{_encode(cond.field)},{_encode(cond.value if cond.text is None else cond.text)}") for cond in conditions]
    if page is not None:
        params.append(("page", str(page)))
    if order is not None:
        params.append(("order", f"{_encode(order.field)},{order.direction}"))
    return params


def merge_params(href: str, params: List[Tuple[str, str]]) -> str:
    """
    Append params to href, the parameters that href already encodes are kept
    :param href: link href, with or without a query string
    :param params: list of (name, value) tuples, values are expected to be encoded
    :return: href with the params appended
    """
    if not params:
        return href
    query = "&".join(f"{name}={value}" for name, value in params)
    separator = "&" if "?" in href else "?"
    return f"{href}{separator}{query}"


def page_count(count: int, page_size: int) -> int:
    return int(math.ceil(count / page_size)) if page_size > 0 else 0


def collection_links(base_path: str, query: QueryContext, page_size: int, count: int) -> "OrderedDict[str, Link]":
    """
    :param base_path: collection href, e.g. "/tasks"
    :param query: current QueryContext
    :param page_size: fixed page size of the collection
    :param count: total number of rows matching the conditions (ignoring pagination)
    :return: ordered mapping of self, first, prev, next and last links, only those that apply
    """

    def get_link(page: Optional[int]) -> Link:
        return Link(merge_params(base_path, query_params(query.conditions, page, query.order)))

    page = query.page
    last = page_count(count, page_size)

    links = OrderedDict()
    links["self"] = get_link(page if query.explicit_page else None)
    if last > 1 and page != 1:
        links["first"] = get_link(1)
    if page > 1 and last >= 1:
        links["prev"] = get_link(min(page - 1, last))
    if page < last:
        links["next"] = get_link(page + 1)
    if last > 1 and page != last:
        links["last"] = get_link(last)

    return links

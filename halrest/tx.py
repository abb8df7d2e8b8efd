# -*- coding: utf-8 -*-

"""Request transaction (unit-of-work) helpers.

A SQLAlchemySource groups the writes of one request on a single connection:
- `transaction()` opens the connection and binds it to the current context
- nested `transaction()` calls reuse the bound connection
- all source operations executed in the context use the bound connection
- commit happens when the outermost block exits, any exception rolls everything back

The connection is kept in a ContextVar so concurrent requests never share it.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

_CONNECTIONS: ContextVar[Optional[Dict[int, Any]]] = ContextVar("halrest_tx_connections", default=None)


def bound_connection(engine: Any) -> Optional[Any]:
    """Return the connection bound to engine in the current context, if any."""
    connections = _CONNECTIONS.get()
    if connections is None:
        return None
    return connections.get(id(engine))


def in_transaction(engine: Any) -> bool:
    """Return True when a unit of work is active for engine."""
    return bound_connection(engine) is not None


@contextmanager
def transaction(engine: Any) -> Iterator[Any]:
    """Bind one transactional connection to the current context."""
    connection = bound_connection(engine)
    if connection is not None:
        # nested: the outermost block commits or rolls back
        yield connection
        return

    with engine.begin() as connection:
        connections = dict(_CONNECTIONS.get() or {})
        connections[id(engine)] = connection
        token = _CONNECTIONS.set(connections)
        try:
            yield connection
        finally:
            _CONNECTIONS.reset(token)


@contextmanager
def connect(engine: Any) -> Iterator[Any]:
    """Yield the bound connection, or a connection in a transaction of its own."""
    connection = bound_connection(engine)
    if connection is not None:
        yield connection
        return
    with engine.begin() as connection:
        yield connection

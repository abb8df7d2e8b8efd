from contextlib import contextmanager
from typing import Optional

import pytest

import sample_db
from halrest import Registry, Root, build_resources, crud_actions
from halrest.errors import ConstraintViolation
from halrest.query import DESC
from halrest.source import Source


class FakeSource(Source):
    """
    In-memory persistence port over the sample_db tables, foreign keys are checked like a database would
    """

    def __init__(self, rows: Optional[dict] = None) -> None:
        self.rows = {table.name: [] for table in sample_db.metadata.sorted_tables}
        for name, table_rows in (rows or {}).items():
            self.rows[name].extend(dict(row) for row in table_rows)
        self.created = []
        self.active_transactions = 0
        self.committed = 0

    @contextmanager
    def transaction(self):
        self.active_transactions += 1
        try:
            yield
        finally:
            self.active_transactions -= 1
        self.committed += 1

    def _filter(self, query):
        return [row for row in self.rows[query.source] if all(row.get(cond.field) == cond.value for cond in query.conditions)]

    def _check_references(self, name, data):
        for fk in sample_db.metadata.tables[name].foreign_keys:
            value = data.get(fk.parent.name)
            if value is None:
                continue
            if not any(row[fk.column.name] == value for row in self.rows[fk.column.table.name]):
                raise ConstraintViolation(fk.parent.name)

    def read_one(self, query):
        rows = self.read_many(query)
        return rows[0] if rows else None

    def read_many(self, query):
        rows = self._filter(query)
        if query.order is not None:
            rows = sorted(rows, key=lambda row: row[query.order.field], reverse=query.order.direction == DESC)
        rows = rows[query.offset :]
        if query.limit is not None:
            rows = rows[: query.limit]
        return [dict(row) for row in rows]

    def count(self, query):
        return len(self._filter(query))

    def create(self, query):
        self._check_references(query.source, query.data)
        table = sample_db.metadata.tables[query.source]
        row = {column.name: column.default.arg if column.default is not None else None for column in table.columns}
        row.update(query.data)
        if row.get("id") is None:
            row["id"] = max([existing["id"] for existing in self.rows[query.source]], default=0) + 1
        self.rows[query.source].append(row)
        self.created.append((query.source, dict(row)))
        return {key: row[key] for key in (query.returning or ["id"])}

    def update(self, query):
        rows = self._filter(query)
        if rows:
            self._check_references(query.source, query.data)
        for row in rows:
            row.update(query.data)
        return len(rows)

    def delete(self, query):
        rows = self._filter(query)
        self.rows[query.source] = [row for row in self.rows[query.source] if not any(row is deleted for deleted in rows)]
        return len(rows)


@pytest.fixture
def source() -> FakeSource:
    return FakeSource(sample_db.sample_rows())


@pytest.fixture
def resources(source):
    return build_resources(sample_db.metadata.sorted_tables, source)


@pytest.fixture
def registry(resources) -> Registry:
    registry = Registry()
    registry.register_action(Root())
    for resource in resources.values():
        registry.register_action(crud_actions(resource))
    return registry


@pytest.fixture
def app():
    return sample_db.create_app()


@pytest.fixture
def client(app):
    return app.test_client()

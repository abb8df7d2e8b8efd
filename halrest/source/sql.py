# -*- coding: utf-8 -*-
"""
    sql.py: SQLAlchemy Core implementation of the persistence port
"""
#
# Only equality conditions, single field ordering and limit/offset pagination are supported
#
import re

from sqlalchemy import MetaData, Table, event, func, select
from sqlalchemy.exc import IntegrityError, NoSuchTableError
import halrest
from . import Source, ReadQuery, CreateQuery, UpdateQuery, DeleteQuery
from .. import tx
from ..errors import ConstraintViolation, GenericError
from ..query import DESC

# Column names reported in IntegrityError messages, eg.
#   sqlite  : UNIQUE constraint failed: users.username
#   postgres: DETAIL:  Key (username)=(test) already exists.
INTEGRITY_FIELD_RX = (re.compile(r"constraint failed: \w+\.(\w+)"), re.compile(r"Key \((\w+)\)="))


class SQLAlchemySource(Source):
    """
    Persistence port backed by an SQLAlchemy engine

    :param engine: SQLAlchemy engine (eg. flask_sqlalchemy `db.engine`)
    :param metadata: MetaData holding the tables, they're reflected from the database when omitted
    """

    def __init__(self, engine, metadata=None):
        self.engine = engine
        self.metadata = metadata if metadata is not None else MetaData()

    def table(self, name: str) -> Table:
        table = self.metadata.tables.get(name)
        if table is not None:
            return table
        try:
            return Table(name, self.metadata, autoload_with=self.engine)
        except NoSuchTableError:
            raise GenericError(f"No such table: {name}")

    def transaction(self):
        return tx.transaction(self.engine)

    @staticmethod
    def _where(table, conditions):
        return [table.c[cond.field] == cond.value for cond in conditions]

    def _select(self, query: ReadQuery):
        table = self.table(query.source)
        stmt = select(table).where(*self._where(table, query.conditions))
        if query.order is not None:
            column = table.c[query.order.field]
            stmt = stmt.order_by(column.desc() if query.order.direction == DESC else column.asc())
            # primary key as tie breaker
            stmt = stmt.order_by(*table.primary_key.columns)
        elif table.primary_key.columns:
            # a stable default order, required for offset pagination
            stmt = stmt.order_by(*table.primary_key.columns)
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        if query.offset:
            stmt = stmt.offset(query.offset)
        return stmt

    def read_one(self, query):
        with tx.connect(self.engine) as connection:
            row = connection.execute(self._select(query).limit(1)).mappings().first()
        return dict(row) if row is not None else None

    def read_many(self, query):
        with tx.connect(self.engine) as connection:
            rows = connection.execute(self._select(query)).mappings().all()
        return [dict(row) for row in rows]

    def count(self, query):
        table = self.table(query.source)
        stmt = select(func.count()).select_from(table).where(*self._where(table, query.conditions))
        with tx.connect(self.engine) as connection:
            return connection.execute(stmt).scalar_one()

    def create(self, query: CreateQuery):
        table = self.table(query.source)
        with tx.connect(self.engine) as connection:
            self._check_references(connection, table, query.data)
            try:
                result = connection.execute(table.insert().values(**query.data))
            except IntegrityError as exc:
                raise self._violation(exc)
            pk_values = dict(zip([col.name for col in table.primary_key.columns], result.inserted_primary_key))
        halrest.log.debug(f"Created {query.source} {pk_values}")
        returning = query.returning or list(pk_values)
        return {key: pk_values.get(key, query.data.get(key)) for key in returning}

    def update(self, query: UpdateQuery):
        table = self.table(query.source)
        where = self._where(table, query.conditions)
        with tx.connect(self.engine) as connection:
            if not query.data:
                # nothing to change, report whether the row exists
                return connection.execute(select(func.count()).select_from(table).where(*where)).scalar_one()
            self._check_references(connection, table, query.data)
            try:
                result = connection.execute(table.update().where(*where).values(**query.data))
            except IntegrityError as exc:
                raise self._violation(exc)
            return result.rowcount

    def delete(self, query: DeleteQuery):
        table = self.table(query.source)
        with tx.connect(self.engine) as connection:
            try:
                result = connection.execute(table.delete().where(*self._where(table, query.conditions)))
            except IntegrityError as exc:
                raise self._violation(exc)
            return result.rowcount

    def _check_references(self, connection, table, data):
        """
        Verify that the foreign key values in data reference existing rows,
        so the violation can be reported for the offending field.
        Databases that don't enforce foreign keys (eg. sqlite without the pragma) get the same behavior.
        """
        for fk in table.foreign_keys:
            name = fk.parent.name
            value = data.get(name)
            if value is None:
                continue
            target = fk.column
            stmt = select(func.count()).select_from(target.table).where(target == value)
            if not connection.execute(stmt).scalar_one():
                halrest.log.info(f"Foreign key {table.name}.{name}={value!r} references no {target.table.name}")
                raise ConstraintViolation(name)

    @staticmethod
    def _violation(exc: IntegrityError) -> ConstraintViolation:
        message = str(getattr(exc, "orig", exc))
        halrest.log.info(f"Integrity error: {message}")
        for regex in INTEGRITY_FIELD_RX:
            match = regex.search(message)
            if match:
                return ConstraintViolation(match.group(1))
        return ConstraintViolation()


def sqlite_foreign_keys(engine):
    """
    Make sqlite enforce foreign keys on every new connection
    """

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine

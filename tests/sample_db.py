"""
Tables and sample rows shared by the tests

    departments <- users <- tasks -> projects
"""
from sqlalchemy import Boolean, Column, ForeignKey, Integer, MetaData, String, Table, Text
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from werkzeug.security import generate_password_hash

from halrest import HALAPI, Registry, Root, SQLAlchemySource, build_resources, crud_actions, sqlite_foreign_keys

PASSWORD = "secret"
PASSWORD_HASH = generate_password_hash(PASSWORD)

metadata = MetaData()

departments = Table(
    "departments",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(100), nullable=False),
)

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("username", String(50), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("enabled", Boolean, nullable=False, default=True),
    Column("department", Integer, ForeignKey("departments.id"), nullable=False),
)

projects = Table(
    "projects",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(100), nullable=False),
)

tasks = Table(
    "tasks",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("title", String(255), nullable=False),
    Column("project", Integer, ForeignKey("projects.id"), nullable=False),
    Column("owner", Integer, ForeignKey("users.id"), nullable=False),
    Column("description", Text, nullable=True),
    Column("complete", Boolean, nullable=False, default=False),
)


def sample_rows(task_count=45):
    """
    :param task_count: number of tasks, the first 25 are owned by user 1, the others by user 2
    :return: mapping of table names to rows
    """
    return {
        "departments": [{"id": 1, "name": "Engineering"}, {"id": 2, "name": "Marketing"}, {"id": 3, "name": "Sales"}],
        "users": [
            {"id": 1, "username": "alice", "password": PASSWORD_HASH, "enabled": True, "department": 1},
            {"id": 2, "username": "bob", "password": PASSWORD_HASH, "enabled": True, "department": 2},
            {"id": 3, "username": "carol", "password": PASSWORD_HASH, "enabled": False, "department": 2},
        ],
        "projects": [{"id": 1, "name": "Website"}, {"id": 2, "name": "Mobile"}, {"id": 3, "name": "Backend"}],
        "tasks": [
            {
                "id": i,
                "title": f"Task {i}",
                "project": i % 3 + 1,
                "owner": 1 if i <= 25 else 2,
                "description": None,
                "complete": i % 5 == 0,
            }
            for i in range(1, task_count + 1)
        ],
    }


def seed(engine, rows):
    with engine.begin() as connection:
        for table in metadata.sorted_tables:
            if rows.get(table.name):
                connection.execute(table.insert(), rows[table.name])


def create_app(task_count=45, secure=None):
    """
    Flask app serving the sample database from an in-memory sqlite database

    :param task_count: number of sample tasks
    :param secure: optional callable(registry, resources) installing a security plugin
    """
    app = Flask("halrest_test")
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite://")
    db = SQLAlchemy(metadata=metadata)
    db.init_app(app)

    with app.app_context():
        engine = sqlite_foreign_keys(db.engine)
        db.create_all()
        seed(engine, sample_rows(task_count))

        resources = build_resources(metadata.sorted_tables, SQLAlchemySource(engine, metadata))
        registry = Registry()
        registry.register_action(Root())
        for resource in resources.values():
            registry.register_action(crud_actions(resource))
        if secure is not None:
            secure(registry, resources)
        HALAPI(app, registry)

    app.extensions["halrest_test"] = {"engine": engine, "registry": registry, "resources": resources}
    return app

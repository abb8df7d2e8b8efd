"""
Requests through Flask and Flask-RESTful to an in-memory sqlite database
"""
import json

import pytest
from flask import Flask
from sqlalchemy import Column, MetaData, String, Table, create_engine, func, select
from sqlalchemy.pool import StaticPool

from halrest import HALAPI, Registry, ResourceBackend, Root, SecurityPlugin, SQLAlchemySource, build_resources, crud_actions

import sample_db
from sample_db import create_app


def _count(app, table) -> int:
    engine = app.extensions["halrest_test"]["engine"]
    with engine.connect() as connection:
        return connection.execute(select(func.count()).select_from(table)).scalar_one()


def _post(client, path: str, payload):
    # the body is sent without content type
    return client.post(path, data=json.dumps(payload))


def test_root(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.mimetype == "application/hal+json"
    document = response.get_json(force=True)
    assert document["_links"]["self"] == {"href": "/"}
    assert [form["name"] for form in document["_forms"]["tasks"]] == ["create", "update", "delete"]


def test_read_item(client) -> None:
    document = client.get("/departments/2").get_json(force=True)

    assert document["name"] == "Marketing"
    assert document["_links"]["users"] == {"name": "collection", "href": "/users?where=department,2"}


def test_read_item_embeds_parents_like_direct_reads(client) -> None:
    task = client.get("/tasks/2").get_json(force=True)

    assert task["_embedded"] == {
        "users": client.get("/users/1").get_json(force=True),
        "projects": client.get("/projects/3").get_json(force=True),
    }


def test_not_found(client) -> None:
    for path in ("/departments/100", "/unknown"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.get_json(force=True) == {"statusCode": 404, "error": "Not Found"}


def test_method_not_allowed(client) -> None:
    response = client.post("/tasks/1", data="{}")
    assert response.status_code == 405
    assert response.get_json(force=True) == {"statusCode": 405, "error": "Method Not Allowed"}


def test_read_collection(client) -> None:
    document = client.get("/tasks?page=2").get_json(force=True)

    assert document["count"] == 45
    assert document["_links"] == {
        "self": {"href": "/tasks?page=2"},
        "first": {"href": "/tasks?page=1"},
        "prev": {"href": "/tasks?page=1"},
        "next": {"href": "/tasks?page=3"},
        "last": {"href": "/tasks?page=3"},
    }
    assert document["_embedded"]["tasks"][0]["id"] == 21
    assert len(document["_embedded"]["tasks"]) == 20


def test_read_collection_with_conditions_and_order(client) -> None:
    document = client.get("/tasks?where=owner,2&order=id,desc").get_json(force=True)

    assert document["count"] == 20
    assert document["_links"] == {"self": {"href": "/tasks?where=owner,2&order=id,desc"}}
    assert document["_embedded"]["tasks"][0]["id"] == 45


def test_bad_query(client) -> None:
    response = client.get("/tasks?page=0")
    assert response.status_code == 400
    assert response.get_json(force=True)["error"] == "Bad Request"


def test_create_in_an_empty_table() -> None:
    app = create_app(task_count=0)
    client = app.test_client()

    response = _post(client, "/tasks", {"title": "T", "owner": 1, "project": 1})

    assert response.status_code == 201
    assert response.headers["Location"] == "/tasks/1"
    assert response.get_data() == b""
    document = client.get("/tasks/1").get_json(force=True)
    assert {key: value for key, value in document.items() if not key.startswith("_")} == {
        "id": 1,
        "title": "T",
        "owner": 1,
        "project": 1,
        "complete": False,
        "description": None,
    }


def test_create_with_invalid_data(app, client) -> None:
    response = _post(client, "/tasks", {"project": 1})

    assert response.status_code == 422
    assert response.get_json(force=True) == {
        "errors": [
            {"dataPath": "", "schemaPath": "/required/0", "message": "Missing required property: title", "params": {"key": "title"}},
            {"dataPath": "", "schemaPath": "/required/2", "message": "Missing required property: owner", "params": {"key": "owner"}},
        ]
    }
    assert _count(app, sample_db.tasks) == 45


def test_create_with_invalid_json(client) -> None:
    response = client.post("/tasks", data="{not json")
    assert response.status_code == 400


def test_create_constraint_violation(app, client) -> None:
    response = _post(client, "/tasks", {"title": "T", "owner": 1, "project": 10})

    assert response.status_code == 422
    assert response.get_json(force=True) == {
        "errors": [{"dataPath": "/project", "schemaPath": "/properties/project/constraint", "message": "Constraint violation"}]
    }
    assert _count(app, sample_db.tasks) == 45


def test_unique_constraint_violation(app, client) -> None:
    payload = {"username": "alice", "password": "x", "department": 1}
    response = _post(client, "/users", payload)

    assert response.status_code == 422
    assert response.get_json(force=True)["errors"] == [
        {"dataPath": "/username", "schemaPath": "/properties/username/constraint", "message": "Constraint violation"}
    ]


def test_create_with_embedded_objects(app, client) -> None:
    payload = {
        "title": "Task w/ new Project, User and Department",
        "owner": {"username": "dave", "password": "x", "department": {"name": "Research"}},
        "project": {"name": "New Project"},
    }

    response = _post(client, "/tasks", payload)

    assert response.status_code == 201
    assert response.headers["Location"] == "/tasks/46"
    task = client.get("/tasks/46").get_json(force=True)
    assert (task["owner"], task["project"]) == (4, 4)
    assert task["_embedded"]["users"]["department"] == 4
    assert task["_embedded"]["users"]["_embedded"]["departments"]["name"] == "Research"
    assert task["_embedded"]["projects"]["name"] == "New Project"


def test_failed_nested_creation_is_rolled_back(app, client) -> None:
    # the department and the user are created before the task insert fails
    payload = {
        "title": "T",
        "owner": {"username": "erin", "password": "x", "department": {"name": "Research"}},
        "project": 10,
    }

    response = _post(client, "/tasks", payload)

    assert response.status_code == 422
    assert response.get_json(force=True)["errors"] == [
        {"dataPath": "/project", "schemaPath": "/properties/project/constraint", "message": "Constraint violation"}
    ]
    assert _count(app, sample_db.departments) == 3
    assert _count(app, sample_db.users) == 3
    assert _count(app, sample_db.tasks) == 45


def test_create_with_invalid_embedded_object(app, client) -> None:
    response = _post(client, "/tasks", {"title": "T", "owner": 1, "project": {"title": "Used title instead of name"}})

    assert response.status_code == 422
    (error,) = response.get_json(force=True)["errors"]
    assert error["dataPath"] == "/project"
    assert [sub["schemaPath"] for sub in error["subErrors"]] == [
        "/properties/project/oneOf/0/type",
        "/properties/project/oneOf/1/required/0",
    ]
    assert _count(app, sample_db.projects) == 3


def test_update(client) -> None:
    response = client.patch("/tasks/1", data=json.dumps({"title": "Renamed"}))

    assert response.status_code == 204
    assert response.get_data() == b""
    assert client.get("/tasks/1").get_json(force=True)["title"] == "Renamed"


def test_update_with_invalid_type(client) -> None:
    response = client.patch("/tasks/1", data=json.dumps({"title": 22}))

    assert response.status_code == 422
    (error,) = response.get_json(force=True)["errors"]
    assert (error["dataPath"], error["schemaPath"]) == ("/title", "/properties/title/type")


def test_update_with_empty_payload(client) -> None:
    before = client.get("/tasks/1").get_json(force=True)
    assert client.patch("/tasks/1", data="{}").status_code == 204
    assert client.get("/tasks/1").get_json(force=True) == before


def test_update_missing_item(client) -> None:
    assert client.patch("/tasks/100", data=json.dumps({"title": "Renamed"})).status_code == 404


def test_update_form_defaults(client) -> None:
    document = client.get("/projects/1").get_json(force=True)
    update = next(form for form in document["_forms"]["projects"] if form["name"] == "update")

    assert update["href"] == "/projects/1"
    assert update["schema"]["required"] == []
    assert update["schema"]["default"] == {"id": 1, "name": "Website"}


def test_delete(app, client) -> None:
    assert client.delete("/tasks/45").status_code == 204
    assert client.get("/tasks/45").status_code == 404
    assert client.delete("/tasks/45").status_code == 404
    assert client.get("/tasks").get_json(force=True)["count"] == 44


def test_delete_referenced_item(app, client) -> None:
    response = client.delete("/projects/1")

    assert response.status_code == 422
    assert response.get_json(force=True)["errors"][0]["message"] == "Constraint violation"
    assert _count(app, sample_db.projects) == 3


def _secure(registry, resources) -> None:
    plugin = SecurityPlugin(registry, key="test-signing-key")
    plugin.register_backend(ResourceBackend(resources["users"]))


def test_secured_api() -> None:
    client = create_app(secure=_secure).test_client()

    assert client.get("/").status_code == 200
    response = client.get("/tasks")
    assert response.status_code == 401
    assert response.get_json(force=True) == {"statusCode": 401, "error": "Unauthorized", "message": "Invalid credentials"}

    login = _post(client, "/token", {"username": "alice", "password": sample_db.PASSWORD})
    assert login.status_code == 200
    token = login.get_json(force=True)["token"]

    response = client.get("/tasks", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.get_json(force=True)["count"] == 45


def test_registry_is_frozen_by_the_first_request(app, client) -> None:
    registry = app.extensions["halrest_test"]["registry"]
    assert not registry.frozen
    client.get("/")
    assert registry.frozen


def test_put_is_not_allowed(client) -> None:
    response = client.put("/tasks/1", data="{}")
    assert response.status_code == 405
    assert response.get_json(force=True) == {"statusCode": 405, "error": "Method Not Allowed"}

    response = client.put("/unknown", data="{}")
    assert response.status_code == 404
    assert response.get_json(force=True) == {"statusCode": 404, "error": "Not Found"}


@pytest.fixture
def keyed_client():
    """
    Client for tables with string and composite primary keys
    """
    metadata = MetaData()
    Table("tags", metadata, Column("name", String(50), primary_key=True), Column("color", String(20)))
    Table(
        "memberships",
        metadata,
        Column("team", String(50), primary_key=True),
        Column("member", String(50), primary_key=True),
        Column("role", String(20)),
    )
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    metadata.create_all(engine)

    app = Flask("halrest_keys")
    registry = Registry().register_action(Root())
    for resource in build_resources(metadata.sorted_tables, SQLAlchemySource(engine, metadata)).values():
        registry.register_action(crud_actions(resource))
    HALAPI(app, registry)
    yield app.test_client()
    engine.dispose()


@pytest.mark.parametrize("name", ["plain", "x/y", "q?z", "a#b", "50%", "sp ace"])
def test_string_key_location_resolves(keyed_client, name: str) -> None:
    response = _post(keyed_client, "/tags", {"name": name, "color": "red"})
    assert response.status_code == 201

    location = response.headers["Location"]
    document = keyed_client.get(location).get_json(force=True)
    assert document["name"] == name
    assert document["_links"]["self"] == {"href": location}

    assert keyed_client.patch(location, data=json.dumps({"color": "blue"})).status_code == 204
    assert keyed_client.get(location).get_json(force=True)["color"] == "blue"
    assert keyed_client.delete(location).status_code == 204
    assert keyed_client.get(location).status_code == 404


def test_composite_key_location_resolves(keyed_client) -> None:
    response = _post(keyed_client, "/memberships", {"team": "r&d/ops", "member": "bob?", "role": "lead"})
    assert response.status_code == 201

    location = response.headers["Location"]
    assert location == "/memberships/r%26d%2Fops/bob%3F"
    document = keyed_client.get(location).get_json(force=True)
    assert (document["team"], document["member"], document["role"]) == ("r&d/ops", "bob?", "lead")
    assert document["_links"]["self"] == {"href": location}

from halrest.document import COLLECTION, ITEM, Document, Form, Link


def test_empty_sections_are_omitted() -> None:
    document = Document({"id": 1})
    assert document.to_dict() == {"id": 1}


def test_single_entry_is_an_object_and_more_entries_a_list() -> None:
    document = Document()
    document.add_link("self", Link("/"))
    document.add_link("tasks", Link("/tasks/{id}", name="item", templated=True))
    document.add_link("tasks", Link("/tasks{?where,page,order}", name="collection", templated=True))

    assert document.to_dict()["_links"] == {
        "self": {"href": "/"},
        "tasks": [
            {"name": "item", "href": "/tasks/{id}", "templated": True},
            {"name": "collection", "href": "/tasks{?where,page,order}", "templated": True},
        ],
    }


def test_form_serialization() -> None:
    form = Form("update", "/tasks/{id}", "PATCH", templated=True, schema={"type": "object"})
    assert form.to_dict() == {"name": "update", "href": "/tasks/{id}", "templated": True, "method": "PATCH", "schema": {"type": "object"}}
    assert Form("delete", "/tasks/1", "DELETE").to_dict() == {"name": "delete", "href": "/tasks/1", "method": "DELETE"}


def test_embedded_collection_stays_a_list() -> None:
    document = Document({"count": 1}, COLLECTION, "tasks")
    document.add_embedded("tasks", [Document({"id": 1}, ITEM, "tasks")])

    assert document.to_dict() == {"count": 1, "_embedded": {"tasks": [{"id": 1}]}}


def test_merge_is_a_field_wise_union() -> None:
    document = Document({"id": 1, "title": "mine"})
    document.add_link("self", Link("/tasks/1"))
    other = Document({"title": "theirs", "owner": 2})
    other.add_link("self", Link("/other"))
    other.add_form("tasks", Form("delete", "/tasks/1", "DELETE"))
    other.add_embedded("users", Document({"id": 2}))

    document.merge(other)

    assert document.properties == {"id": 1, "title": "mine", "owner": 2}
    assert document.links["self"] == [Link("/tasks/1"), Link("/other")]
    assert document.forms["tasks"] == Form("delete", "/tasks/1", "DELETE")
    assert document.to_dict()["_embedded"] == {"users": {"id": 2}}


def test_merge_appends_lists() -> None:
    document = Document()
    document.add_link("users", [Link("/users/1")])
    other = Document()
    other.add_link("users", [Link("/users/2"), Link("/users/3")])

    document.merge(other)

    assert [link.href for link in document.links["users"]] == ["/users/1", "/users/2", "/users/3"]


def test_documents_walks_embedded_documents_depth_first() -> None:
    department = Document({"id": 1}, ITEM, "departments")
    user = Document({"id": 1}, ITEM, "users").add_embedded("departments", department)
    task = Document({"id": 1}, ITEM, "tasks").add_embedded("users", user)
    collection = Document({"count": 1}, COLLECTION, "tasks").add_embedded("tasks", [task])

    assert list(collection.documents()) == [collection, task, user, department]


def test_set_property_overwrites_and_chains() -> None:
    document = Document({"count": 1}).set_property("count", 2).set_property("page", 1)
    assert document.to_dict() == {"count": 2, "page": 1}

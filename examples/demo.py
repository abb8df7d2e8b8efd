#!/usr/bin/env python3
"""
  This demo application demonstrates the functionality of the halrest hypermedia REST API
  When halrest is installed, you can run this app:
  $ python3 demo.py [Listener-IP] [--secure]

  This will run the example on http://Listener-Ip:5000

  - An sqlite database is created and populated
  - The tables are introspected and exposed as resources
  - With --secure, a token is required: POST /token {"username": "admin", "password": "password"}

"""
import sys
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from werkzeug.security import generate_password_hash
from halrest import HALAPI, Registry, ResourceBackend, Root, SecurityPlugin, SQLAlchemySource
from halrest import build_resources, crud_actions, sqlite_foreign_keys

db = SQLAlchemy()


# Example sqla database objects
class Department(db.Model):
    __tablename__ = "departments"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, unique=True)
    password = db.Column(db.String(255), nullable=False)
    enabled = db.Column(db.Boolean, nullable=False, default=True)
    department = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=False)


class Project(db.Model):
    __tablename__ = "projects"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)


class Task(db.Model):
    __tablename__ = "tasks"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    project = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable=False)
    owner = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    description = db.Column(db.Text)
    complete = db.Column(db.Boolean, nullable=False, default=False)


# Create the api endpoints
def create_api(app, host="localhost", port=5000, secure=False):
    source = SQLAlchemySource(db.engine, db.metadata)
    resources = build_resources(db.metadata.sorted_tables, source)

    registry = Registry()
    registry.register_action(Root())
    for resource in resources.values():
        registry.register_action(crud_actions(resource))

    if secure:
        security = SecurityPlugin(registry, key=app.config["SECRET_KEY"])
        security.register_backend(ResourceBackend(resources["users"]))

    # fail here rather than on the first request
    registry.freeze()
    HALAPI(app, registry)
    print(f"Created API: http://{host}:{port}/")


def populate():
    engineering, marketing = Department(name="Engineering"), Department(name="Marketing")
    db.session.add_all([engineering, marketing])
    db.session.flush()
    admin = User(username="admin", password=generate_password_hash("password"), department=engineering.id)
    user = User(username="user", password=generate_password_hash("password"), department=marketing.id)
    website, backend = Project(name="Website"), Project(name="Backend")
    db.session.add_all([admin, user, website, backend])
    db.session.flush()
    for i in range(100):
        owner = admin if i % 2 else user
        project = website if i % 3 else backend
        db.session.add(Task(title=f"Task {i}", owner=owner.id, project=project.id, complete=i % 7 == 0))
    db.session.commit()


def create_app(host="localhost", secure=False):
    app = Flask("demo_app")
    app.config.update(SQLALCHEMY_DATABASE_URI="sqlite://", SECRET_KEY="change-this-key")
    db.init_app(app)

    with app.app_context():
        sqlite_foreign_keys(db.engine)
        db.create_all()
        populate()
        create_api(app, host, secure=secure)

    return app


# Address where the api will be hosted, change this if you're not running the app on localhost!
args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
host = args[0] if args else "127.0.0.1"
app = create_app(host=host, secure="--secure" in sys.argv)

if __name__ == "__main__":
    app.run(host=host)

"""
Fixtures for the propdesk test suite.

Each test gets a fresh in-memory database and its own upload directory.
Helpers build the Riverside / Tower A / Apt 1 tree through the services so
slugs and vacancy come out exactly as they do in the API.
"""

import io

import pytest
from flask_jwt_extended import create_access_token
from werkzeug.datastructures import FileStorage

from propdesk import create_app
from propdesk.config import TestingConfig
from propdesk.extensions import db as _db
from propdesk.models import User, ROLE_MANAGER
from propdesk.services.hierarchy import create_zone, create_building, create_unit
from propdesk.services.tenants import create_tenant


@pytest.fixture
def app(tmp_path):
    class Config(TestingConfig):
        UPLOAD_ROOT = str(tmp_path / "storage")

    app = create_app(Config)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


def auth_headers_for(user):
    token = create_access_token(identity=str(user.id), additional_claims=user.jwt_claims())
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def manager(app):
    user = User(name="Morgan Manager", email="manager@example.com", role=ROLE_MANAGER, is_verified=True)
    user.set_password("Manager123")
    _db.session.add(user)
    _db.session.commit()
    return user


@pytest.fixture
def manager_headers(manager):
    return auth_headers_for(manager)


# Entity helpers
def make_zone(name="Riverside"):
    return create_zone({"name": name}).entity


def make_building(zone, name="Tower A", street="123 Main St"):
    return create_building(zone, {"name": name, "street": street}).entity


def make_unit(building, name="Apt 1", **fields):
    data = {"name": name, "type": "Flat", "postcode": "AB1 2CD"}
    data.update(fields)
    return create_unit(building, data).entity


def make_tenant(unit, first_name="Jane", last_name="Doe", email="jane@example.com", **fields):
    data = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "rent": "1200.00",
        "status": "active",
    }
    data.update(fields)
    return create_tenant(unit, data)


def upload(filename, content=b"%PDF-1.4 test", mimetype="application/pdf"):
    return FileStorage(stream=io.BytesIO(content), filename=filename, content_type=mimetype)


@pytest.fixture
def zone(app):
    return make_zone()


@pytest.fixture
def building(zone):
    return make_building(zone)


@pytest.fixture
def unit(building):
    return make_unit(building)

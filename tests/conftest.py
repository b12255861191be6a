import itertools
import os

os.environ["FLASK_ENV"] = "testing"

import pytest

from creepie.config import TestingConfig
from creepie.db import db
from creepie.models import Profile, Category, Product, ProductSize
from creepie.utils.auth import create_token
from wsgi import create_app

_emails = itertools.count(1)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Crea un perfil y devuelve su id"""

    def _make(role="customer", email=None, password="secret123", **fields):
        with app.app_context():
            user = Profile(
                email=email or f"user{next(_emails)}@example.com",
                role=role,
                first_name=fields.pop("first_name", "Ana"),
                last_name=fields.pop("last_name", "Quispe"),
                dni_ruc=fields.pop("dni_ruc", "12345678"),
                **fields,
            )
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture
def auth_header(app):
    def _header(user_id):
        with app.app_context():
            token = create_token(db.session.get(Profile, user_id))
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture
def admin_headers(make_user, auth_header):
    return auth_header(make_user(role="admin"))


@pytest.fixture
def customer(make_user, auth_header):
    user_id = make_user(role="customer")
    return user_id, auth_header(user_id)


@pytest.fixture
def make_product(app):
    def _make(name="Torta de Chocolate", price=65.0, **fields):
        with app.app_context():
            category = Category.query.filter_by(name="Tortas").first()
            if not category:
                category = Category(name="Tortas")
                db.session.add(category)
                db.session.flush()
            product = Product(name=name, price=price, category_id=category.id, stock=10, **fields)
            db.session.add(product)
            db.session.commit()
            return product.id

    return _make


@pytest.fixture
def make_size(app):
    def _make(name="Mediana", person_capacity=15, additional_price=25.0):
        with app.app_context():
            size = ProductSize(name=name, person_capacity=person_capacity, additional_price=additional_price)
            db.session.add(size)
            db.session.commit()
            return size.id

    return _make

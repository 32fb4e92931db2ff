import os
import tempfile
import uuid
from decimal import Decimal

import pytest

# Settings are read at import time, so the environment must be ready first
_IMPORT_DIR = tempfile.mkdtemp(prefix="pos-admin-tests-")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = f"sqlite:///{_IMPORT_DIR}/import.db"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from fastapi.testclient import TestClient

from pos_admin.main import create_app
from pos_admin.core.hashing import hash_password
from pos_admin.models.sale_items import SaleItem
from pos_admin.models.sales import Sale
from pos_admin.models.users import User, ROLE_ADMIN, ROLE_STAFF
from pos_admin.services.inventory import InventoryStore
from pos_admin.services.sale_poster import SalePoster


@pytest.fixture(scope='function')
def database_url(tmp_path):
    """Fresh SQLite file per test."""
    return f"sqlite:///{tmp_path / 'pos.db'}"


@pytest.fixture(scope='function')
def app(database_url):
    """Create application instance for testing."""
    app = create_app(database_url, seed=False)
    yield app
    app.state.datastore.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture(scope='function')
def datastore(app):
    return app.state.datastore


@pytest.fixture(scope='function')
def inventory(datastore):
    return InventoryStore(datastore)


@pytest.fixture(scope='function')
def poster(datastore):
    return SalePoster(datastore, retry_delay=0)


@pytest.fixture(scope='function')
def make_product(inventory):
    """Factory creating products through the inventory store."""
    def _make(name=None, price="10.00", stock=10, **extra):
        data = {
            "name": name or f"Product {uuid.uuid4().hex[:6]}",
            "price": Decimal(price),
            "stock": stock,
        }
        data.update(extra)
        return inventory.create(data)

    return _make


def _create_user(datastore, role, password="password123"):
    suffix = uuid.uuid4().hex[:8]
    with datastore.transaction() as db:
        user = User(
            email=f"{role}-{suffix}@test.com",
            name=f"{role.title()} {suffix}",
            password_hash=hash_password(password),
            role=role,
        )
        db.add(user)
        db.flush()
        db.refresh(user)
    return user


@pytest.fixture(scope='function')
def staff_user(datastore):
    return _create_user(datastore, ROLE_STAFF)


@pytest.fixture(scope='function')
def admin_user(datastore):
    return _create_user(datastore, ROLE_ADMIN)


def _login(client, user, password="password123"):
    response = client.post(
        "/api/auth/login",
        json={"email": user.email, "password": password},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture(scope='function')
def auth_headers(client, staff_user):
    """Bearer headers for a staff user."""
    return _login(client, staff_user)


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    """Bearer headers for an admin user."""
    return _login(client, admin_user)


@pytest.fixture(scope='function')
def count_sales(datastore):
    """Return (sales, sale_items) row counts."""
    def _count():
        with datastore.session() as db:
            return db.query(Sale).count(), db.query(SaleItem).count()

    return _count

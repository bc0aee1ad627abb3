import mongomock
import pytest
from fastapi.testclient import TestClient

from database import Store
from main import app, get_store


@pytest.fixture
def store():
    client = mongomock.MongoClient()
    return Store(client["flower_stop_test"], client)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def listing_body():
    return {
        "name": "Spring Bouquet",
        "date_listed": "2024-03-01",
        "description": "Fresh seasonal stems",
        "flower_type": ["rose", "lily"],
        "price": "45.5",
        "occasion": ["birthday"],
        "quantity": "3",
        "image": "https://example.com/bouquet.jpg",
        "florist": {
            "florist_id": "64b000000000000000000001",
            "florist_name": "Petal Studio",
            "contact": "91234567",
            "contact_method": ["whatsapp"],
        },
    }


@pytest.fixture
def florist_body():
    return {
        "name": "Petal Studio",
        "username": "petalstudio",
        "login_email": "hello@petal.sg",
        "contact_method": ["whatsapp", "instagram"],
        "contact": "91234567",
        "instagram": "https://instagram.com/petalstudio",
    }

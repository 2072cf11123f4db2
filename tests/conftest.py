import os

# Point the service at a private in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"

import httpx
import pytest
from fastapi.testclient import TestClient

from backoffice.main import app
from backoffice.admin import get_api_client, registry
from backoffice.admin.client import AdminApiClient
from backoffice.domain.models import Base
from backoffice.infrastructure.db import engine, SessionLocal

ACCOUNT = {
    "name": "A",
    "address": "X",
    "phoneNumber": "1",
    "bankAccountNumber": 111,
}

PAYMENT = {
    "amount": 50,
    "recipientName": "R",
    "recipientBankName": "B",
    "recipientAccountNumber": "999",
}

@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    registry.clear()
    yield
    app.dependency_overrides.clear()

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session

@pytest.fixture
def api_client():
    """Admin API client wired straight into the app, no network involved"""
    return AdminApiClient("http://testserver", transport=httpx.ASGITransport(app=app))

@pytest.fixture
def admin_client(client, api_client):
    app.dependency_overrides[get_api_client] = lambda: api_client
    return client

def create_account(client, **overrides):
    resp = client.post("/accounts", json={**ACCOUNT, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()

def create_payment(client, account_id, **overrides):
    resp = client.post(f"/payments/{account_id}", json={**PAYMENT, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()

import io

import pytest
import requests
from fastapi.testclient import TestClient

from linkharvest.main import app, get_rules, get_store
from linkharvest.rules import DomainRules
from linkharvest.storage import LinkStore


class FakeRaw:
    def __init__(self, body: bytes):
        self._body = io.BytesIO(body)

    def read1(self, amt=-1, decode_content=None):
        return self._body.read1(amt)


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, encoding: str = "utf-8"):
        self.status_code = status_code
        self.encoding = encoding
        self.raw = FakeRaw(text.encode(encoding))

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


@pytest.fixture
def rules():
    return DomainRules()


@pytest.fixture
def store(tmp_path):
    return LinkStore(tmp_path / "links.db")


@pytest.fixture
def client(store, rules):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_rules] = lambda: rules
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

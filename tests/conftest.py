"""
Shared test fixtures and configuration for envkit tests.
"""
import json
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

from envkit import create_app
from envkit.config import Config
from envkit.env import Env
from envkit.storage.path_store import PathStore, PathStoreView
from envkit.storage.collection import Database


@pytest.fixture
def store_file(tmp_path: Path) -> Path:
    """Path of a snapshot file inside a temporary directory (not created yet)."""
    return tmp_path / "state" / "envkit_store.json"


@pytest.fixture
def path_store(store_file: Path) -> PathStore:
    """A PathStore backed by a temporary snapshot."""
    return PathStore(store_file)


@pytest.fixture
def store(path_store: PathStore) -> PathStoreView:
    """The deep-copying public view over path_store."""
    return PathStoreView(path_store)


@pytest.fixture
def db(path_store: PathStore) -> Database:
    """A Database sharing path_store."""
    return Database(path_store)


@pytest.fixture
def users(db: Database):
    """An empty 'users' collection."""
    return db.collection("users")


@pytest.fixture
def env(store_file: Path):
    """A fresh Env on a temporary snapshot, closed after the test."""
    with Env(store_file) as e:
        yield e


@pytest.fixture
def app(store_file: Path) -> Flask:
    """Create and configure a test Flask application instance."""
    class TestConfig(Config):
        TESTING = True
        STORE_PATH = store_file
        LOG_LEVEL = "DEBUG"

    yield create_app(TestConfig)


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def runner(app: Flask):
    """Create a Flask CLI test runner."""
    return app.test_cli_runner()


@pytest.fixture
def read_snapshot(store_file: Path):
    """Return a function that loads the JSON snapshot from disk."""
    def _read() -> dict:
        with open(store_file, encoding="utf-8") as f:
            return json.load(f)
    return _read

from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient

from drop_server.config import Settings
from drop_server.main import create_app


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def make_client(data_dir):
    """Factory for a test client around an app built with the given settings."""
    with ExitStack() as stack:
        def _make(max_bytes=1024 * 1024 * 1024, public_base_url="http://localhost:8080"):
            settings = Settings(data_dir=data_dir, max_bytes=max_bytes, public_base_url=public_base_url)
            # Entering the client runs the lifespan, which creates the data directory
            return stack.enter_context(TestClient(create_app(settings)))

        yield _make


@pytest.fixture
def client(make_client):
    return make_client()

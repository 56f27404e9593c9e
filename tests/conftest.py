import pytest

from diploma_registry.api import app, _startup, reset_registry

_startup()

# Fresh registry before each test for isolation
@pytest.fixture(autouse=True)
def _reset_registry():
    reset_registry()
    yield

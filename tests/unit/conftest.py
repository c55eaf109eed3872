import pytest

from tests.unit.force_stub_app import start_forge_stub_app


@pytest.fixture(scope="module", autouse=True)
def setup_forge_stub_app():
    start_forge_stub_app()
    yield

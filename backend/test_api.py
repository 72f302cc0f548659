import pytest
from fastapi.testclient import TestClient

from svcdot.api.routes import DOT_MEDIA_TYPE, get_registry
from svcdot.errors import RegistryFault
from svcdot.main import app
from svcdot.registry.memory import MemoryRegistry


@pytest.fixture
def client(repository_file):
    app.dependency_overrides[get_registry] = lambda: MemoryRegistry.from_file(repository_file)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_graph(client):
    response = client.get("/graph", params={"simplify": "consolidate_inetd_svcs", "size": "10,10"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(DOT_MEDIA_TYPE)
    assert response.text.startswith("digraph scf {")
    assert 'size="10,10";' in response.text
    assert '"inetd_services"' in response.text


def test_graph_rejects_bad_options(client):
    assert client.get("/graph", params={"simplify": "bogus"}).status_code == 422
    assert client.get("/graph", params={"size": "huge"}).status_code == 422


def test_graph_reports_registry_faults():
    class BrokenRegistry(MemoryRegistry):
        def services(self):
            raise RegistryFault("list services", "repository unavailable")

    app.dependency_overrides[get_registry] = lambda: BrokenRegistry()
    try:
        response = TestClient(app).get("/graph")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["detail"] == "list services: repository unavailable"


def test_legend(client):
    response = client.get("/legend")

    assert response.status_code == 200
    assert response.text.startswith("digraph legend {")

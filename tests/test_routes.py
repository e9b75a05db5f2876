import pytest
from fastapi.testclient import TestClient

from app.core import dependencies
from app.core.errors import GenerationFailed
from app.main import app
from app.modules.deployments.schemas import DeploymentMetrics, GeneratedFiles
from app.modules.publishing.github_client import GitHubClient
from app.modules.publishing.service import PublishingService
from conftest import API, StubProvider, seed_board


NODES = [{"id": "n1", "data": {"level": 0, "title": "Todo list", "objective": "track tasks"}}]


@pytest.fixture
def provider(todo_response):
    return StubProvider(todo_response)


@pytest.fixture
def client(board_service, deployment_service, provider, github):
    app.dependency_overrides[dependencies.get_current_user] = lambda: {"id": "u1", "email": "alice@example.com"}
    app.dependency_overrides[dependencies.get_board_service] = lambda: board_service
    app.dependency_overrides[dependencies.get_deployment_service] = lambda: deployment_service
    app.dependency_overrides[dependencies.get_language_model_provider] = lambda: provider
    app.dependency_overrides[dependencies.get_publishing_service] = lambda: PublishingService(
        board_service,
        deployment_service,
        client_factory=lambda token: GitHubClient(token, session=github.session, api_url=API),
        sleep=lambda seconds: None,
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/ready").json() == {"status": "ready"}


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_generate_then_read_deployment(client, fake_db):
    seed_board(fake_db, nodes=NODES)

    response = client.post("/api/v1/boards/B1/generate")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["deployment"]["deployment_status"] == "deployed"
    assert body["metrics"]["total_entities"] == 1

    deployment = client.get("/api/v1/deployments/board/B1").json()
    assert deployment["generated_files"]["pages"] == {"Home": "export default()=>null"}

    logs = client.get("/api/v1/deployments/board/B1/logs").json()
    assert logs["status"] == "deployed"
    assert logs["has_more"] is False
    assert logs["logs"][0]["message"] == "Starting app generation..."


def test_generate_empty_board_is_400(client, fake_db):
    seed_board(fake_db, nodes=[])

    response = client.post("/api/v1/boards/B1/generate")

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "The board has no nodes. Add at least one intent before generating.",
        "details": "Empty board",
    }


def test_generate_unknown_board_is_404(client):
    response = client.post("/api/v1/boards/missing/generate")
    assert response.status_code == 404
    assert response.json()["error"] == "Board not found"


def test_generation_failure_envelope(client, fake_db, provider):
    seed_board(fake_db, nodes=NODES)
    provider.error = GenerationFailed("AI generation failed: quota exceeded", details="quota exceeded")

    response = client.post("/api/v1/boards/B1/generate")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "AI generation failed: quota exceeded"
    assert body["hint"] == "Check that OPENAI_API_KEY is configured and valid"
    assert "stack" in body

    logs = client.get("/api/v1/deployments/board/B1/logs").json()
    assert logs["status"] == "failed"


def test_missing_deployment_is_404(client, fake_db):
    seed_board(fake_db, nodes=NODES)
    assert client.get("/api/v1/deployments/board/B1").status_code == 404
    assert client.get("/api/v1/deployments/board/B1/logs").status_code == 404


def test_publish_to_github(client, fake_db, deployment_service, github):
    seed_board(fake_db, nodes=NODES)
    building = deployment_service.start_build("B1", "start")
    deployment_service.mark_deployed(
        building, GeneratedFiles(pages={"Home": "x"}), "// code", DeploymentMetrics(), {}, "done"
    )

    response = client.post(
        "/api/v1/publishing/github",
        json={"board_id": "B1", "repo_name": "todo-app", "github_token": "ghp_token"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["repository"]["full_name"] == "alice/todo-app"
    assert body["files_count"] == 5
    assert body["next_steps"]["required_env_vars"] == ["SUPABASE_URL", "SUPABASE_SERVICE_KEY", "JWT_SECRET"]


def test_publish_missing_parameters(client, github):
    response = client.post("/api/v1/publishing/github", json={"board_id": "B1"})

    assert response.status_code == 400
    assert response.json()["error"] == "Missing required parameters: boardId, repoName, githubToken"
    assert github.session.request.call_count == 0


def test_publish_without_deployment_is_404(client, fake_db, github):
    seed_board(fake_db, nodes=NODES)

    response = client.post(
        "/api/v1/publishing/github",
        json={"board_id": "B1", "repo_name": "todo-app", "github_token": "ghp_token"},
    )

    assert response.status_code == 404
    assert github.session.request.call_count == 0


def test_invalid_body_is_400(client):
    response = client.post("/api/v1/publishing/github", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"


def test_stackblitz(client):
    response = client.post(
        "/api/v1/publishing/stackblitz",
        json={"files": {"index.js": {"content": "1"}}, "project_name": "Todo"},
    )

    assert response.status_code == 200
    assert response.json()["payload"]["files"] == {"index.js": "1"}


def test_stackblitz_missing_inputs(client):
    response = client.post("/api/v1/publishing/stackblitz", json={"project_name": "Todo"})
    assert response.status_code == 400

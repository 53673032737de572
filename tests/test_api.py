from __future__ import annotations

from fastapi.testclient import TestClient

from dealspace.config import Settings
from dealspace.errors import CreditsExhaustedError, RateLimitError
from dealspace.llm import MockCompletionGateway
from dealspace.main import app
from dealspace.services.assistant import DealAssistantService, get_assistant_service
from dealspace.storage import DocumentRef, InMemoryDocumentStore, InMemoryObjectStorage


def _install_service(gateway: MockCompletionGateway, files: dict[str, bytes] | None = None) -> None:
    store = InMemoryDocumentStore()
    storage = InMemoryObjectStorage()
    for index, (name, data) in enumerate((files or {}).items()):
        store.add("deal-1", DocumentRef(id=str(index), name=name, storage_path=f"deal-1/{name}"))
        storage.put(f"deal-1/{name}", data)
    service = DealAssistantService(
        document_store=store, object_storage=storage, gateway=gateway, settings=Settings()
    )
    app.dependency_overrides[get_assistant_service] = lambda: service


def test_read_root_returns_ok() -> None:
    response = TestClient(app).get("/")

    assert response.status_code == 200
    assert response.text == "ok"


def test_healthz_reports_gateway() -> None:
    _install_service(MockCompletionGateway())

    response = TestClient(app).get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "model": "mock", "gateway_configured": True}


def test_question_returns_content_and_sources() -> None:
    _install_service(
        MockCompletionGateway("The rate is fixed (Term Sheet.txt)."),
        {"Term Sheet.txt": b"Rate: fixed 7%"},
    )

    response = TestClient(app).post(
        "/deal-space-ai",
        json={"dealId": "deal-1", "messages": [{"role": "user", "content": "What is the rate?"}]},
    )

    assert response.status_code == 200
    assert response.json() == {
        "content": "The rate is fixed (Term Sheet.txt).",
        "sources": ["Term Sheet.txt"],
    }


def test_missing_fields_return_400() -> None:
    _install_service(MockCompletionGateway())
    client = TestClient(app)

    for body in ({"messages": []}, {"dealId": "deal-1"}, {"dealId": "deal-1", "messages": "hi"}):
        response = client.post("/deal-space-ai", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "dealId and messages are required"}

    response = client.post("/deal-space-ai", json={"action": "summarize"})
    assert response.status_code == 400
    assert response.json() == {"error": "dealId is required"}


def test_rate_limit_maps_to_429() -> None:
    _install_service(MockCompletionGateway(error=RateLimitError()), {"a.txt": b"a"})

    response = TestClient(app).post("/deal-space-ai", json={"dealId": "deal-1", "messages": []})

    assert response.status_code == 429
    assert response.json() == {"error": "Rate limit exceeded. Please try again in a moment."}


def test_exhausted_credits_map_to_402() -> None:
    _install_service(MockCompletionGateway(error=CreditsExhaustedError()), {"a.txt": b"a"})

    response = TestClient(app).post("/deal-space-ai", json={"dealId": "deal-1", "messages": []})

    assert response.status_code == 402
    assert response.json() == {"error": "AI credits exhausted. Please add credits to continue."}


def test_summarize_returns_summary_payload() -> None:
    _install_service(
        MockCompletionGateway("## Key Points\n- Strong margins\n\n## Action Items\n- Request audit"),
        {"memo.txt": b"Margins are strong."},
    )

    response = TestClient(app).post("/deal-space-ai", json={"dealId": "deal-1", "action": "summarize"})

    assert response.status_code == 200
    assert response.json() == {
        "summary": "## Key Points\n- Strong margins\n\n## Action Items\n- Request audit",
        "keyPoints": ["Strong margins"],
        "documentCount": 1,
    }


def test_summarize_without_documents_returns_400() -> None:
    gateway = MockCompletionGateway()
    _install_service(gateway)

    response = TestClient(app).post("/deal-space-ai", json={"dealId": "deal-1", "action": "summarize"})

    assert response.status_code == 400
    assert response.json() == {"error": "No documents found to summarize"}
    assert gateway.requests == []

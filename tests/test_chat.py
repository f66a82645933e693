"""Tests for the HTTP API endpoints."""

from fastapi.testclient import TestClient

from api.main import create_app
from api.services import get_services
from llm.providers.base import ProviderError


def _create(client, **overrides):
    payload = {
        "clientName": "Test Client",
        "businessName": "Test Inn",
        "businessInfo": "Open 9-5",
        "knowledgeBase": "Wifi free",
    }
    payload.update(overrides)
    resp = client.post("/api/admin/create-chatbot", json=payload)
    assert resp.status_code == 200
    return resp.json()


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["chatbots"] == 0
    assert "timestamp" in data


def test_create_chatbot(client):
    data = _create(client)

    assert data["success"] is True
    assert data["chatbotId"].startswith("bot_")
    assert data["previewUrl"] == f"http://chat.example.com/widget/{data['chatbotId']}"
    assert data["previewUrl"] in data["embedCode"]
    assert client.get("/health").json()["chatbots"] == 1


def test_create_chatbot_persists_snapshot(client, snapshot_path):
    data = _create(client)
    assert data["chatbotId"] in snapshot_path.read_text()


def test_list_chatbots_hides_business_content(client):
    _create(client)
    resp = client.get("/api/admin/chatbots")

    assert resp.status_code == 200
    chatbots = resp.json()["chatbots"]
    assert len(chatbots) == 1
    assert set(chatbots[0]) == {"id", "clientName", "businessName", "createdAt", "active"}
    assert "Open 9-5" not in resp.text
    assert "Wifi free" not in resp.text


def test_message_endpoint(client, gateway):
    chatbot_id = _create(client)["chatbotId"]

    resp = client.post(
        f"/api/chat/{chatbot_id}/message",
        json={"message": "What time do you open?", "conversationId": "conv-1"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"response": "We open at 9am"}
    assert "Open 9-5" in gateway.calls[0]["system_prompt"]


def test_message_logged_under_given_conversation(client, conversation_log):
    chatbot_id = _create(client)["chatbotId"]
    client.post(f"/api/chat/{chatbot_id}/message", json={"message": "Hi", "conversationId": "conv-7"})

    assert [m.conversation_id for m in conversation_log._messages] == ["conv-7", "conv-7"]


def test_message_without_conversation_id(client, conversation_log):
    chatbot_id = _create(client)["chatbotId"]
    resp = client.post(f"/api/chat/{chatbot_id}/message", json={"message": "Hi"})

    assert resp.status_code == 200
    assert conversation_log._messages[0].conversation_id.startswith("conv_")


def test_message_unknown_chatbot(client, gateway):
    resp = client.post("/api/chat/bot_missing/message", json={"message": "Hi"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "Chatbot not found"}
    assert gateway.calls == []


def test_message_provider_failure_returns_fallback(client, gateway):
    chatbot_id = _create(client)["chatbotId"]
    gateway.error = ProviderError("upstream timeout")

    resp = client.post(f"/api/chat/{chatbot_id}/message", json={"message": "Hi"})

    assert resp.status_code == 200
    assert "(555) 000-1234" in resp.json()["response"]


def test_widget_page(client):
    chatbot_id = _create(client)["chatbotId"]

    resp = client.get(f"/widget/{chatbot_id}")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "<title>Test Inn</title>" in resp.text


def test_widget_unknown_chatbot(client):
    resp = client.get("/widget/bot_missing")
    assert resp.status_code == 404
    assert resp.text == "Chatbot not found"


def test_analytics_endpoint(client):
    chatbot_id = _create(client)["chatbotId"]
    client.post(f"/api/chat/{chatbot_id}/message", json={"message": "Is breakfast included?"})
    client.post(f"/api/chat/{chatbot_id}/message", json={"message": "Is breakfast included?"})

    resp = client.get(f"/api/analytics/{chatbot_id}?days=7")

    assert resp.status_code == 200
    data = resp.json()
    assert data["totalConversations"] == 2
    assert data["totalMessages"] == 4
    assert data["topQuestions"][0] == {"question": "Is breakfast included?", "count": 2}
    assert len(data["recentMessages"]) == 4


def test_analytics_unknown_chatbot(client):
    resp = client.get("/api/analytics/bot_missing")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Chatbot not found"}


def test_analytics_rejects_bad_window(client):
    chatbot_id = _create(client)["chatbotId"]
    assert client.get(f"/api/analytics/{chatbot_id}?days=0").status_code == 422


def test_admin_key_required_when_configured(client, services, settings):
    services.settings = settings.model_copy(update={"admin_api_key": "secret"})

    assert client.get("/api/admin/chatbots").status_code == 401
    assert client.get("/api/admin/chatbots", headers={"X-API-Key": "wrong"}).status_code == 401
    assert client.get("/api/admin/chatbots", headers={"X-API-Key": "secret"}).status_code == 200


def test_chat_is_public_when_admin_key_configured(client, services, settings):
    chatbot_id = _create(client)["chatbotId"]
    services.settings = settings.model_copy(update={"admin_api_key": "secret"})

    resp = client.post(f"/api/chat/{chatbot_id}/message", json={"message": "Hi"})
    assert resp.status_code == 200


def test_rate_limit(services, settings):
    app = create_app(settings.model_copy(update={"rate_limit_per_minute": 2}))
    app.dependency_overrides[get_services] = lambda: services
    client = TestClient(app)

    assert client.get("/widget/bot_missing").status_code == 404
    assert client.get("/widget/bot_missing").status_code == 404
    resp = client.get("/widget/bot_missing")
    assert resp.status_code == 429
    assert "error" in resp.json()
    # Health checks are never limited
    assert client.get("/health").status_code == 200


def test_metrics_endpoint(client):
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "automagixx_http_requests_total" in resp.text


def test_sliding_window_releases_old_hits():
    from api.middleware.rate_limit import SlidingWindow

    window = SlidingWindow(limit=2, window_seconds=60)
    assert window.try_acquire(0.0)
    assert window.try_acquire(10.0)
    assert not window.try_acquire(20.0)
    assert window.retry_after(20.0) == 40
    assert window.try_acquire(61.0)
    assert window.remaining == 0


def test_rate_limit_ignores_unknown_api_keys(services, settings):
    app = create_app(settings.model_copy(update={"rate_limit_per_minute": 2}))
    app.dependency_overrides[get_services] = lambda: services
    client = TestClient(app)

    for key in ("aaaaaaaa1", "bbbbbbbb2"):
        assert client.get("/widget/bot_missing", headers={"X-API-Key": key}).status_code == 404
    resp = client.get("/widget/bot_missing", headers={"X-API-Key": "cccccccc3"})
    assert resp.status_code == 429


def test_client_key_uses_configured_admin_key_only():
    from starlette.requests import Request

    from api.middleware.rate_limit import client_key

    def request(key):
        return Request({
            "type": "http",
            "headers": [(b"x-api-key", key.encode())],
            "client": ("10.0.0.1", 1234),
        })

    assert client_key(request("secret-admin"), admin_api_key="secret-admin") == "key:secret-a"
    assert client_key(request("made-up-key"), admin_api_key="secret-admin") == "ip:10.0.0.1"
    assert client_key(request("made-up-key")) == "ip:10.0.0.1"


def test_create_chatbot_runs_store_write_off_the_event_loop(client, services):
    import threading

    loop_threads = []
    original_create = services.config_store.create

    def recording_create(data):
        loop_threads.append(threading.current_thread())
        return original_create(data)

    services.config_store.create = recording_create

    @client.app.get("/_loop_thread")
    async def loop_thread():
        return {"name": threading.current_thread().name}

    loop_name = client.get("/_loop_thread").json()["name"]
    _create(client)

    assert len(loop_threads) == 1
    assert loop_threads[0].name != loop_name

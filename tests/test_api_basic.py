from advocat.errors import UpstreamError, UpstreamOverloaded
from advocat.llm.gemini import Completion

FORM = {
    "caseTitle": "Rent Dispute",
    "plaintiffName": "A",
    "defendantName": "B",
    "caseType": "property",
    "state": "Delhi",
    "city": "New Delhi",
    "description": "Landlord withheld deposit",
    "witnesses": [{"name": "Ravi", "connection": "Neighbour", "knowledge": "Saw the lock change"}],
    "evidence": [{"type": "documents", "description": "Lease deed", "fileName": "lease.pdf"}],
}


def test_health_and_liveness(client):
    assert client.get('/api/health').status_code == 200
    assert client.get('/api/health/live').get_json() == {"alive": True}
    ready = client.get('/api/health/ready')
    assert ready.status_code == 200
    assert ready.get_json()["checks"]["advisor_configured"] is True


def test_metrics_endpoint(client):
    client.get('/api/health/live')
    r = client.get('/metrics')
    assert r.status_code == 200
    assert 'text/plain' in r.content_type
    assert 'advocat_requests_total' in r.get_data(as_text=True)


def test_version_and_request_id(client):
    r = client.get('/version', headers={"X-Request-ID": "req-123"})
    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "req-123"
    assert "model" in r.get_json()
    assert client.get('/api/version').status_code == 200


def test_auth_flow(client):
    creds = {"email": "ravi@example.com", "password": "pw-123456"}
    assert client.post('/api/auth/signup', json=creds).status_code == 201
    assert client.post('/api/auth/signup', json=creds).status_code == 409
    assert client.post('/api/auth/login', json={**creds, "password": "nope"}).status_code == 401
    token = client.post('/api/auth/login', json=creds).get_json()["token"]
    r = client.post('/api/auth/validate', json={"token": token})
    assert r.get_json() == {"isValid": True, "email": "ravi@example.com"}
    assert client.post('/api/auth/logout', headers={"Authorization": f"Bearer {token}"}).get_json() == {"success": True}
    assert client.post('/api/auth/validate', json={"token": token}).get_json()["isValid"] is False


def test_signup_validation(client):
    r = client.post('/api/auth/signup', json={"email": "x"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "validation_failed"


def test_stateless_chat(client, advisor):
    advisor.queue(Completion("Under [Consumer Protection Act](https://example.gov/cpa) and Article 21...", 1000))
    r = client.post('/api/auth/chat', json={"prompt": "Shop refused refund", "mode": "quick",
                                            "history": [{"role": "user", "text": "Hi"}]})
    assert r.status_code == 200
    body = r.get_json()
    assert body["tokensUsed"] == 1000
    assert body["savedTokens"] == 500
    assert [c["title"] for c in body["citations"]] == ["Consumer Protection Act", "Article 21"]
    assert advisor.calls[0]["history"] == [{"role": "user", "text": "Hi"}]


def test_stateless_chat_errors(client, advisor):
    advisor.queue(UpstreamOverloaded())
    r = client.post('/api/auth/chat', json={"prompt": "Question", "mode": "deep"})
    assert r.status_code == 503
    assert "creditsSaved" not in r.get_json()

    advisor.queue(UpstreamError())
    r = client.post('/api/auth/chat', json={"prompt": "Question", "mode": "deep"})
    assert r.status_code == 500
    assert r.get_json()["creditsSaved"] == 20

    r = client.post('/api/auth/chat', json={"prompt": "Question", "mode": "thorough"})
    assert r.status_code == 400
    assert len(advisor.calls) == 2


def test_case_advisor(client, advisor):
    advisor.queue(Completion("Under [Consumer Protection Act](https://example.gov/cpa) and Article 21...", 1000))
    r = client.post('/api/case-advisor', json={"formData": FORM})
    assert r.status_code == 200
    body = r.get_json()
    assert body["creditsSaved"] == 2000
    assert body["message"] == "Analysis complete! Found 1 relevant legal acts."


def test_case_advisor_rejects_incomplete_form(client, advisor):
    r = client.post('/api/case-advisor', json={"formData": {**FORM, "description": "short"}})
    assert r.status_code == 400
    assert "description" in r.get_json()["fields"]
    assert advisor.calls == []


def test_non_json_body(client):
    r = client.post('/api/auth/chat', data="prompt", content_type='text/plain')
    assert r.status_code == 400
    assert r.get_json()["error"] == "invalid_body"


def test_client_uses_the_test_context(client, app_context):
    from advocat.api import state
    client.get('/api/health/live')
    assert state.context is app_context

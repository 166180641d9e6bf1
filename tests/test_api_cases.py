from advocat.errors import UpstreamError, UpstreamOverloaded
from advocat.llm.gemini import Completion


def _create(client, headers, title=None):
    body = {"title": title} if title else {}
    r = client.post('/api/cases', json=body, headers=headers)
    assert r.status_code == 201
    return r.get_json()


def test_cases_require_auth(client):
    r = client.get('/api/cases')
    assert r.status_code == 401
    assert r.get_json()["error"] == "unauthorized"
    assert client.get('/api/cases', headers={"Authorization": "Bearer nope"}).status_code == 401


def test_two_turns_then_delete(client, advisor, auth_headers):
    case = _create(client, auth_headers)
    # vague prompts earn 1.5x; the second turn hits the floor of 10
    advisor.queue(Completion("First answer.", 24), Completion("Second answer.", 16))
    r1 = client.post(f"/api/cases/{case['id']}/turns", json={"prompt": "Deposit?", "mode": "quick"}, headers=auth_headers)
    r2 = client.post(f"/api/cases/{case['id']}/turns", json={"prompt": "And then?", "mode": "quick"}, headers=auth_headers)
    assert r1.get_json()["creditsSaved"] == 12
    assert r2.get_json()["creditsSaved"] == 10
    detail = client.get(f"/api/cases/{case['id']}", headers=auth_headers).get_json()
    assert detail["total_credits_saved"] == 22
    assert detail["title"] == "Deposit?"
    assert len(detail["turns"]) == 4

    r = client.delete(f"/api/cases/{case['id']}", headers=auth_headers)
    assert r.status_code == 200
    listing = client.get('/api/cases', headers=auth_headers).get_json()
    assert listing["cases"] == []
    assert client.get(f"/api/cases/{case['id']}", headers=auth_headers).status_code == 404


def test_rename_select_export(client, advisor, auth_headers):
    first = _create(client, auth_headers, "Deposit")
    second = _create(client, auth_headers)
    listing = client.get('/api/cases', headers=auth_headers).get_json()
    assert listing["activeCaseId"] == second["id"]

    assert client.post(f"/api/cases/{first['id']}/select", headers=auth_headers).get_json() == {"activeCaseId": first["id"]}
    r = client.patch(f"/api/cases/{first['id']}", json={"title": "Security Deposit"}, headers=auth_headers)
    assert r.get_json()["title"] == "Security Deposit"
    assert client.patch(f"/api/cases/{first['id']}", json={"title": ""}, headers=auth_headers).status_code == 400

    advisor.queue(Completion("See Section 106 of the Transfer Of Property Act.", 100))
    client.post(f"/api/cases/{first['id']}/turns", json={"prompt": "Notice period?", "mode": "deep"}, headers=auth_headers)
    r = client.get(f"/api/cases/{first['id']}/export?mode=deep", headers=auth_headers)
    assert r.status_code == 200
    assert 'security_deposit.txt' in r.headers["Content-Disposition"]
    text = r.get_data(as_text=True)
    assert "Mode: deep" in text
    assert "- [STATUTE] Section 106" in text


def test_turn_failures(client, advisor, auth_headers):
    case = _create(client, auth_headers)
    advisor.queue(UpstreamOverloaded())
    r = client.post(f"/api/cases/{case['id']}/turns", json={"prompt": "Q"}, headers=auth_headers)
    assert r.status_code == 503
    assert r.get_json()["error"] == "upstream_overloaded"
    assert client.get(f"/api/cases/{case['id']}", headers=auth_headers).get_json()["turns"] == []

    advisor.queue(UpstreamError())
    r = client.post(f"/api/cases/{case['id']}/turns", json={"prompt": "Q"}, headers=auth_headers)
    assert r.status_code == 500
    body = r.get_json()
    assert body["creditsSaved"] == 10
    assert body["case"]["total_credits_saved"] == 10
    assert len(body["case"]["turns"]) == 2

    r = client.post('/api/cases/missing/turns', json={"prompt": "Q"}, headers=auth_headers)
    assert r.status_code == 404


def test_load_and_save(client, auth_headers):
    case = _create(client, auth_headers, "Deposit")
    loaded = client.post('/api/cases/load', json={}, headers=auth_headers).get_json()
    assert case["id"] in loaded["cases"]

    cases = loaded["cases"]
    cases[case["id"]]["title"] = "Edited elsewhere"
    r = client.post('/api/cases/save', json={"email": "asha@example.com", "cases": cases}, headers=auth_headers)
    assert r.get_json()["success"] is True
    assert client.get(f"/api/cases/{case['id']}", headers=auth_headers).get_json()["title"] == "Edited elsewhere"

    r = client.post('/api/cases/save', json={"email": "other@example.com", "cases": {}}, headers=auth_headers)
    assert r.status_code == 403
    r = client.post('/api/cases/save', json={"cases": {"x": "not a case"}}, headers=auth_headers)
    assert r.status_code == 400

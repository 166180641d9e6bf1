import os
import sys
import json
import uuid
import requests

BASE_URL = os.environ.get("SMOKE_URL") or os.environ.get("DEV_URL", "http://127.0.0.1:5002")
API = f"{BASE_URL.rstrip('/')}/api"


def get(path: str, token: str = ""):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    r = requests.get(f"{API}{path}", headers=headers, timeout=10)
    r.raise_for_status()
    return r


def post(path: str, payload: dict, token: str = ""):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    r = requests.post(f"{API}{path}", json=payload, headers=headers, timeout=60)
    r.raise_for_status()
    return r


def main():
    print(f"[smoke] Target: {API}")
    print("[smoke] /health/live:", get("/health/live").status_code)
    print("[smoke] /version:", get("/version").status_code)
    print("[smoke] /intake/options:", get("/intake/options").status_code)

    email = f"smoke-{uuid.uuid4().hex[:8]}@example.com"
    print("[smoke] /auth/signup:", post("/auth/signup", {"email": email, "password": "smoke-pass"}).status_code)
    token = post("/auth/login", {"email": email, "password": "smoke-pass"}).json()["token"]
    print("[smoke] /auth/validate:", post("/auth/validate", {"token": token}).json())

    case = post("/cases", {}, token).json()
    print("[smoke] /cases:", case["id"])

    try:
        r = post(f"/cases/{case['id']}/turns", {"prompt": "My landlord is not returning my deposit", "mode": "quick"}, token)
        print("[smoke] /turns:", r.status_code, json.dumps(r.json(), indent=2)[:300])
    except requests.HTTPError as he:
        if he.response is not None and he.response.status_code in (500, 503):
            print(f"[smoke] advisor unavailable ({he.response.status_code})")
        else:
            raise


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print("[smoke] FAILED:", e)
        sys.exit(1)

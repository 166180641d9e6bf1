import os
import sys
from collections import deque

import pytest

# Ensure the `src/` directory is on sys.path so we can import `advocat` package
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

# Config is read at import time; keep the server off the filesystem and the network
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["GEMINI_API_KEY"] = ""
os.environ["SENTRY_DSN"] = ""

# Importing the server runs its startup wiring; do it before any fixture swaps in a test context
from advocat.api.server import app  # noqa: E402
from advocat.llm.gemini import Completion  # noqa: E402
from advocat.storage.cases import CaseRepository  # noqa: E402
from advocat.storage.documents import MemoryDocumentStore  # noqa: E402


class FakeAdvisor:
    """Stands in for GeminiAdvisor: replays queued completions or raises queued errors."""

    def __init__(self, *replies):
        self.api_key = "test-key"
        self.replies = deque(replies)
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    def generate(self, prompt, **kwargs):
        self.calls.append({"prompt": prompt, **kwargs})
        reply = self.replies.popleft() if self.replies else Completion("Default answer.", 100)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def advisor():
    return FakeAdvisor()


@pytest.fixture
def documents():
    return MemoryDocumentStore()


@pytest.fixture
def repository(documents):
    return CaseRepository(documents)


@pytest.fixture
def app_context(documents, advisor):
    from advocat.api import state
    previous = state.context
    state.context = state.AppContext(documents, advisor)
    yield state.context
    state.context = previous


@pytest.fixture
def client(app_context):
    from advocat.api.extensions import limiter
    limiter.enabled = False
    with app.test_client() as c:
        yield c
    limiter.enabled = True


@pytest.fixture
def auth_headers(client):
    creds = {"email": "asha@example.com", "password": "s3cret-pass"}
    assert client.post('/api/auth/signup', json=creds).status_code == 201
    token = client.post('/api/auth/login', json=creds).get_json()["token"]
    return {"Authorization": f"Bearer {token}"}

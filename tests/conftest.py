import hashlib
import hmac
import json
import os
from typing import Any
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("WH_SECRET", "test_webhook_secret")
os.environ.setdefault("GH_TOKEN", "test_github_token")

from tagdog.dependencies import Collaborators, get_collaborators
from tagdog.main import app
from tagdog.utils.github import GitHubAPIClient
from tagdog.utils.webhook import WebhookVerifier

TEST_SECRET = "test-secret"


def make_push_payload(
    ref: str = "refs/tags/v1.2.3",
    created: bool = True,
    after: str = "abc123",
    sender: str = "test-actor",
) -> dict[str, Any]:
    return {
        "ref": ref,
        "before": "0000000000000000000000000000000000000000",
        "after": after,
        "created": created,
        "deleted": False,
        "forced": False,
        "repository": {
            "name": "test-repo",
            "full_name": "test-owner/test-repo",
            "owner": {"login": "test-owner"},
        },
        "sender": {"login": sender},
        "commits": [],
    }


def make_tag_ref(name: str, sha: str) -> dict[str, Any]:
    return {
        "ref": f"refs/tags/{name}",
        "node_id": "REF_x",
        "url": f"https://api.github.com/repos/test-owner/test-repo/git/refs/tags/{name}",
        "object": {"sha": sha, "type": "commit", "url": "https://example.com"},
    }


def sign(body: bytes, secret: str = TEST_SECRET) -> str:
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def push_request(payload: dict[str, Any], secret: str = TEST_SECRET):
    body = json.dumps(payload).encode()
    headers = {
        "X-GitHub-Event": "push",
        "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
        "X-Hub-Signature-256": sign(body, secret),
        "Content-Type": "application/json",
    }
    return body, headers


@pytest.fixture
def mock_github():
    github = AsyncMock(spec=GitHubAPIClient)
    github.list_tag_refs.return_value = []
    github.create_issue.return_value = (
        "https://github.com/test-owner/test-repo/issues/1"
    )
    return github


@pytest.fixture
def client(mock_github):
    """Create a test client wired to a mocked GitHub client."""
    collaborators = Collaborators(
        verifier=WebhookVerifier(TEST_SECRET),
        github=mock_github,
    )
    app.dependency_overrides[get_collaborators] = lambda: collaborators
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()

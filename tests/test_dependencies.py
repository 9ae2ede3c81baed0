import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from tagdog import dependencies
from tagdog.dependencies import get_collaborators
from tagdog.utils.webhook import WebhookVerifier


@pytest.fixture(autouse=True)
def reset_collaborators():
    with patch.object(dependencies, "_collaborators", None):
        yield


def test_get_collaborators_uses_settings():
    with (
        patch.object(dependencies.settings, "wh_secret", "s3cret"),
        patch.object(dependencies.settings, "gh_token", "gh-token"),
        patch.object(dependencies.settings, "github_api_url", "https://ghe.local/api/v3"),
    ):
        collaborators = get_collaborators()

    assert isinstance(collaborators.verifier, WebhookVerifier)
    assert collaborators.verifier.secret == b"s3cret"
    assert collaborators.github.base_url == "https://ghe.local/api/v3"
    assert collaborators.github.headers["Authorization"] == "Bearer gh-token"


def test_get_collaborators_is_cached():
    assert get_collaborators() is get_collaborators()


def test_get_collaborators_builds_once_under_concurrency():
    def slow_client(*args, **kwargs):
        time.sleep(0.05)
        return MagicMock()

    workers = 16
    barrier = threading.Barrier(workers)
    results = []

    def worker():
        barrier.wait()
        results.append(get_collaborators())

    with patch.object(
        dependencies, "GitHubAPIClient", side_effect=slow_client
    ) as client_factory:
        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    assert client_factory.call_count == 1
    assert len(results) == workers
    assert all(result is results[0] for result in results)

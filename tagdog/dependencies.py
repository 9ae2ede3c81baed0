import threading
from dataclasses import dataclass

import structlog

from tagdog.config import settings
from tagdog.utils.github import GitHubAPIClient
from tagdog.utils.webhook import WebhookVerifier

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Collaborators:
    verifier: WebhookVerifier
    github: GitHubAPIClient


_collaborators: Collaborators | None = None
_collaborators_lock = threading.Lock()


def get_collaborators() -> Collaborators:
    """Get or create the process-wide webhook verifier and GitHub client.

    Built on first use, exactly once even when the first requests arrive
    concurrently. Read-only afterwards.
    """
    global _collaborators
    if _collaborators is None:
        with _collaborators_lock:
            if _collaborators is None:
                _collaborators = Collaborators(
                    verifier=WebhookVerifier(settings.wh_secret),
                    github=GitHubAPIClient(
                        settings.gh_token, base_url=settings.github_api_url
                    ),
                )
                logger.info(
                    "Initialized collaborators", github_api_url=settings.github_api_url
                )
    return _collaborators

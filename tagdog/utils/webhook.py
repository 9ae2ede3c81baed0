import hashlib
import hmac
import json
from collections.abc import Mapping

from pydantic import ValidationError

from tagdog.schemas.github import IgnoredEvent, PushEvent, WebhookEvent

EVENT_HEADER = "X-GitHub-Event"
SIGNATURE_256_HEADER = "X-Hub-Signature-256"
SIGNATURE_HEADER = "X-Hub-Signature"


class WebhookError(Exception):
    pass


class MissingEventHeaderError(WebhookError):
    pass


class SignatureError(WebhookError):
    pass


class MissingSignatureError(SignatureError):
    pass


class SignatureMismatchError(SignatureError):
    pass


class PayloadError(WebhookError):
    pass


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


class WebhookVerifier:
    """
    Verifies and decodes GitHub webhook deliveries.

    Only ``push`` deliveries are decoded. Every other event type comes back
    as an ``IgnoredEvent`` before the signature is looked at, so ``ping`` and
    friends never need to be signed correctly to be acknowledged.
    """

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("A webhook secret is required.")
        self.secret = secret.encode()

    def parse(self, headers: Mapping[str, str], body: bytes) -> WebhookEvent:
        event = _header(headers, EVENT_HEADER)
        if not event:
            raise MissingEventHeaderError(f"Missing {EVENT_HEADER} header.")

        if event != "push":
            return IgnoredEvent(event=event)

        self.verify_signature(headers, body)

        try:
            payload = json.loads(body)
        except ValueError as err:
            raise PayloadError(f"Invalid JSON payload: {err}") from err

        try:
            return PushEvent.model_validate(payload)
        except ValidationError as err:
            raise PayloadError(
                f"Payload is not a valid push event: {err.error_count()} error(s)"
            ) from err

    def verify_signature(self, headers: Mapping[str, str], body: bytes) -> None:
        signature = _header(headers, SIGNATURE_256_HEADER)
        if signature:
            digest = hmac.new(self.secret, body, hashlib.sha256).hexdigest()
            expected = f"sha256={digest}"
        else:
            # Legacy SHA-1 signature, still sent by GitHub alongside SHA-256.
            signature = _header(headers, SIGNATURE_HEADER)
            if not signature:
                raise MissingSignatureError(
                    f"Missing {SIGNATURE_256_HEADER} header."
                )
            digest = hmac.new(self.secret, body, hashlib.sha1).hexdigest()
            expected = f"sha1={digest}"

        if not hmac.compare_digest(expected, signature):
            raise SignatureMismatchError("Invalid signature.")

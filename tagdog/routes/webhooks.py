import asyncio

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from tagdog.config import settings
from tagdog.dependencies import Collaborators, get_collaborators
from tagdog.schemas.github import IgnoredEvent
from tagdog.services.tag_audit import audit_push
from tagdog.utils.webhook import SignatureError, WebhookError

logger = structlog.get_logger(__name__)

webhooks_router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


@webhooks_router.post(
    "/github",
    status_code=status.HTTP_200_OK,
)
async def receive_github_webhook(
    request: Request,
    collaborators: Collaborators = Depends(get_collaborators),
    x_github_delivery: str | None = Header(None, description="GitHub delivery GUID"),
):
    body = await request.body()

    try:
        event = collaborators.verifier.parse(request.headers, body)
    except SignatureError as e:
        logger.warning(
            "Rejected webhook delivery", delivery=x_github_delivery, error=str(e)
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except WebhookError as e:
        logger.warning(
            "Malformed webhook delivery", delivery=x_github_delivery, error=str(e)
        )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if isinstance(event, IgnoredEvent):
        logger.info(
            "Ignoring non-push event",
            github_event=event.event,
            delivery=x_github_delivery,
        )
        return {"message": "Webhook received but ignored.", "event": event.event}

    try:
        outcome = await asyncio.wait_for(
            audit_push(event, collaborators.github),
            timeout=settings.request_timeout,
        )
    except asyncio.TimeoutError:
        logger.error(
            "Timed out talking to GitHub",
            repo=event.full_name,
            ref=event.ref,
            delivery=x_github_delivery,
            timeout=settings.request_timeout,
        )
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Timed out talking to GitHub.",
        )

    if outcome.failed:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"GitHub request failed: {outcome.value}",
        )

    return {"message": "Webhook processed", "outcome": outcome.value}

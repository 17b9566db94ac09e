import json

from api.dependencies.rate_limits import get_limiter
from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from infrastructure.logging import bind_request_context, get_module_logger
from modules.github.providers import GithubHandlerDep

logger = get_module_logger()
router = APIRouter(tags=["GitHub"])
limiter = get_limiter()

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"


# GitHub may redeliver bursts of events after an outage, so the limit is generous.
@router.post("/github")
@limiter.limit("300/minute")
async def handle_github_webhook(request: Request, handler: GithubHandlerDep):
    """Receive a GitHub webhook and hand it to the event handler.

    Args:
        request (Request): The incoming HTTP request. The event kind comes from
            the ``X-GitHub-Event`` header; the body is the JSON hook payload.
        handler (GithubWebhookHandler): Injected webhook handler.

    Raises:
        HTTPException: 400 if the event header is missing or repeated, or if
            the body is not a JSON object.

    Returns:
        dict: ``{"ok": True, "message": ..., "handled": ...}``
    """
    event_kinds = request.headers.getlist(EVENT_HEADER)
    if len(event_kinds) != 1 or not event_kinds[0]:
        logger.warning("github_event_header_invalid", count=len(event_kinds))
        raise HTTPException(
            status_code=400, detail=f"Expected exactly one {EVENT_HEADER} header"
        )
    event_kind = event_kinds[0]

    raw_body = await request.body()
    try:
        payload = json.loads(raw_body) if raw_body else {}
    except json.JSONDecodeError as e:
        logger.error("payload_validation_error", error=str(e), github_event=event_kind)
        raise HTTPException(status_code=400, detail="Invalid JSON body") from e

    if not isinstance(payload, dict):
        logger.error(
            "payload_validation_error",
            error="body is not a JSON object",
            github_event=event_kind,
        )
        raise HTTPException(status_code=400, detail="Invalid JSON body")

    with bind_request_context(
        correlation_id=request.headers.get(DELIVERY_HEADER),
        request_path=request.url.path,
        request_method=request.method,
        github_event=event_kind,
    ):
        # BLOCK overflow policy may wait on the queue; keep it off the event loop
        result = await run_in_threadpool(handler.dispatch, event_kind, payload)

    return {"ok": True, "message": result.message, "handled": result.handled}

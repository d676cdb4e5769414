"""Analytics event, pageview and registration logging routes."""

import logging

import orjson
from fastapi import APIRouter, Depends, Request
from fastapi.responses import ORJSONResponse

from app.api.deps import client_ip, get_event_logs
from app.storage import EventLog, registration_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics")


def _error(status_code: int, message: str) -> ORJSONResponse:
    return ORJSONResponse(status_code=status_code, content={"error": message})


async def _append(request: Request, log: EventLog, kind: str):
    try:
        body = orjson.loads(await request.body())
    except orjson.JSONDecodeError:
        return _error(400, f"Invalid {kind} payload")
    if not isinstance(body, dict):
        return _error(400, f"Invalid {kind} payload")

    try:
        record = await log.append(body, ip_address=client_ip(request))
    except OSError as e:
        logger.error("Failed to log %s: %s", kind, e)
        return _error(500, f"Failed to log {kind}")
    return {"success": True, "id": record["id"]}


async def _tail(log: EventLog, kind: str):
    try:
        return await log.tail()
    except OSError as e:
        logger.error("Failed to read %s log: %s", kind, e)
        return _error(500, f"Failed to read {kind} log")


@router.post("/event")
async def log_event(request: Request, logs: dict[str, EventLog] = Depends(get_event_logs)):
    """Append an analytics event."""
    return await _append(request, logs["events"], "event")


@router.get("/event")
async def list_events(logs: dict[str, EventLog] = Depends(get_event_logs)):
    """Last 100 events."""
    return await _tail(logs["events"], "event")


@router.post("/pageview")
async def log_pageview(request: Request, logs: dict[str, EventLog] = Depends(get_event_logs)):
    """Append a pageview."""
    return await _append(request, logs["pageviews"], "pageview")


@router.get("/pageview")
async def list_pageviews(logs: dict[str, EventLog] = Depends(get_event_logs)):
    """Last 100 pageviews."""
    return await _tail(logs["pageviews"], "pageview")


@router.post("/registration")
async def log_registration(request: Request, logs: dict[str, EventLog] = Depends(get_event_logs)):
    """Append a user registration."""
    return await _append(request, logs["registrations"], "registration")


@router.get("/registration")
async def summarize_registrations(logs: dict[str, EventLog] = Depends(get_event_logs)):
    """Registration totals by window, source and tier."""
    try:
        records = await logs["registrations"].read_all()
    except OSError as e:
        logger.error("Failed to read registration log: %s", e)
        return _error(500, "Failed to read registration log")
    return registration_summary(records)

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Error report ingestion and error management routes."""

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from avalon_auth import ServiceIdentity

from ..dependencies import get_context, guard_error_routes, require_service_identity
from ..errors import PayloadTooLarge, ValidationFailed
from ..models import ErrorReport

router = APIRouter(tags=["errors"])


def describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


async def read_report(request: Request, max_bytes: int) -> ErrorReport:
    """Read and validate a report body without buffering more than ``max_bytes``.

    An empty body counts as an empty report.

    Raises:
        PayloadTooLarge: Body exceeds ``max_bytes``
        ValidationFailed: Body is not a JSON object or has wrongly typed fields
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLarge(f"Payload exceeds {max_bytes} bytes")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise PayloadTooLarge(f"Payload exceeds {max_bytes} bytes")

    if not body.strip():
        data: Any = {}
    else:
        try:
            data = json.loads(bytes(body))
        except ValueError:
            raise ValidationFailed("Request body is not valid JSON") from None

    if not isinstance(data, dict):
        raise ValidationFailed("Report must be a JSON object")

    try:
        return ErrorReport.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed(describe_validation_error(e)) from None


@router.post("/report", status_code=201)
async def report_error(
    request: Request,
    identity: ServiceIdentity = Depends(require_service_identity),
) -> Dict[str, Any]:
    """Ingest an error report for the service bound to the API key."""
    context = get_context(request)
    report = await read_report(request, context.config.max_body_bytes)
    event = await context.ingestion.ingest(report, identity)
    return {"status": "ok", "id": event.id}


@router.get("/errors", dependencies=[Depends(guard_error_routes)])
async def list_errors(
    request: Request,
    take: Optional[int] = Query(default=None, ge=0),
    skip: int = Query(default=0, ge=0),
) -> Dict[str, Any]:
    """Newest events first. ``take`` is capped at the configured page maximum."""
    config = get_context(request).config
    page_size = min(config.default_errors_per_page if take is None else take, config.max_errors_per_page)
    events = await get_context(request).events.list(take=page_size, skip=skip)
    return {"status": "ok", "items": [event.to_dict() for event in events]}


@router.delete("/errors/service/{service}", dependencies=[Depends(guard_error_routes)])
async def delete_errors_for_service(service: str, request: Request) -> Dict[str, Any]:
    count = await get_context(request).events.delete_by_service(service)
    return {"status": "ok", "message": f"{count} error(s) deleted for service {service}", "count": count}


@router.delete("/errors/{event_id}", dependencies=[Depends(guard_error_routes)])
async def delete_error(event_id: str, request: Request) -> Dict[str, Any]:
    await get_context(request).events.delete(event_id)
    return {"status": "ok", "message": "Error deleted successfully"}


@router.delete("/errors", dependencies=[Depends(guard_error_routes)])
async def delete_all_errors(request: Request) -> Dict[str, Any]:
    count = await get_context(request).events.delete_all()
    return {"status": "ok", "message": f"{count} error(s) deleted successfully", "count": count}

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Sample event routes for trying the pipeline without a client.

Mounted only when ``ENABLE_TEST_ROUTES`` is on.
"""

from typing import Any, Dict

from fastapi import APIRouter, Request

from ..dependencies import get_context
from ..errors import NotFound
from ..samples import SAMPLE_IDENTITY, SAMPLE_REPORTS

router = APIRouter(prefix="/test", tags=["samples"])


@router.get("/all")
async def send_all_samples(request: Request) -> Dict[str, Any]:
    ingestion = get_context(request).ingestion
    results = []
    for report in SAMPLE_REPORTS.values():
        event = await ingestion.ingest(report, SAMPLE_IDENTITY)
        results.append({"level": event.level, "id": event.id, "message": event.message})
    return {"status": "ok", "message": "All test errors have been sent", "results": results}


@router.get("/{level}", status_code=201)
async def send_sample(level: str, request: Request) -> Dict[str, Any]:
    report = SAMPLE_REPORTS.get(level)
    if report is None:
        raise NotFound(f"No sample for level {level}")
    event = await get_context(request).ingestion.ingest(report, SAMPLE_IDENTITY)
    return {"status": "ok", "id": event.id, "message": f"Test {level} error sent successfully"}

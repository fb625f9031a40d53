# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Canned error reports used to exercise the pipeline end to end."""

from avalon_auth import ServiceIdentity

from .models import ErrorDetails, ErrorReport

SAMPLE_SERVICE = "test-service"

# Identity used when injecting samples; no API key record backs it
SAMPLE_IDENTITY = ServiceIdentity(service=SAMPLE_SERVICE, key_id="sample", key_name="Sample events")

SAMPLE_REPORTS = {
    "critical": ErrorReport(
        level="critical",
        error=ErrorDetails(
            message="Critical system failure - Database unavailable",
            stack="Error: Connection refused\n  at Database.connect (db.ts:45)\n  at Server.init (server.ts:12)",
            path="/api/database",
            method="GET",
        ),
    ),
    "fatal": ErrorReport(
        level="fatal",
        error=ErrorDetails(
            message="Fatal error - Application crashed",
            stack="FatalError: Out of memory\n  at Process.allocate (process.ts:89)\n  at Worker.run (worker.ts:234)",
            path="/api/worker",
            method="POST",
        ),
    ),
    "error": ErrorReport(
        level="error",
        error=ErrorDetails(
            message="Payment processing failed",
            stack="Error: Transaction timeout\n  at PaymentGateway.charge (payment.ts:156)\n  at OrderService.process (order.ts:78)",
            path="/api/checkout",
            method="POST",
        ),
    ),
    "warning": ErrorReport(
        level="warning",
        error=ErrorDetails(message="High memory usage detected - 85% utilization", path="/health", method="GET"),
    ),
    "info": ErrorReport(
        level="info",
        error=ErrorDetails(message="User authentication successful", path="/api/login", method="POST"),
    ),
    "debug": ErrorReport(
        level="debug",
        error=ErrorDetails(message="Debug: Request processed in 234ms", path="/api/users", method="GET"),
    ),
}

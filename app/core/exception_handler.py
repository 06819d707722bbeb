"""
DRF exception handler for domain errors.

Renders core.exceptions with their own status code and error body and
defers everything else to DRF's default handler.

Configured in settings:
    REST_FRAMEWORK["EXCEPTION_HANDLER"] = (
        "core.exception_handler.application_exception_handler"
    )
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError, StorageError

logger = logging.getLogger(__name__)


def application_exception_handler(exc, context):
    """Convert BaseApplicationError into a JSON response."""
    if isinstance(exc, BaseApplicationError):
        if isinstance(exc, StorageError):
            view = context.get("view")
            logger.error(f"Storage failure in {view.__class__.__name__}: {exc}")
        return Response(exc.to_dict(), status=exc.status_code)

    return exception_handler(exc, context)

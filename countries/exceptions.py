import logging

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .errors import NotFound, SourceError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    Map app errors onto JSON responses.

    Database and other unexpected error text is only shown when DEBUG is on.
    """
    if isinstance(exc, SourceError):
        logger.warning("Refresh aborted (%s): %s", exc.kind.value, exc)
        return Response(
            {"error": "External data source unavailable", "details": exc.message},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if isinstance(exc, NotFound):
        return Response({"error": "Country not found"}, status=status.HTTP_404_NOT_FOUND)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    logger.error("Internal server error", exc_info=exc)
    body = {"error": "Internal server error"}
    if settings.DEBUG:
        body["details"] = str(exc)
    return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

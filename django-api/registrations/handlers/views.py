"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import hmac
import logging

from django.conf import settings
from django.db import OperationalError
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from registrations import services
from registrations.domain.errors import DomainError, ErrorCode
from registrations.handlers.serializers import CleanupResultSerializer, RegistrationSerializer

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 1

ERROR_STATUS = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.SOLD_OUT: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_PUBLISHED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.REGISTRATION_PAUSED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.REGISTRATION_NOT_OPEN: status.HTTP_400_BAD_REQUEST,
    ErrorCode.REGISTRATION_CLOSED: status.HTTP_400_BAD_REQUEST,
}


def domain_error_response(error: DomainError) -> Response:
    return Response(
        {"code": error.code.value, "message": error.message},
        status=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


class StartRegistrationView(APIView):
    """Handler for POST /api/distances/{distance_id}/registrations"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request, distance_id: str) -> Response:
        try:
            result = services.start_registration(str(request.user.pk), distance_id)
        except DomainError as exc:
            return domain_error_response(exc)
        except OperationalError:
            logger.warning("Database unavailable while starting registration", exc_info=True)
            return Response(
                {"code": "UNAVAILABLE", "message": "Please try again"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
                headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
            )

        return Response(
            RegistrationSerializer(result.registration).data,
            status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )


def _cron_authorized(request: Request) -> bool:
    secret = settings.CRON_SECRET
    if not secret:
        return settings.DEBUG
    header = request.headers.get("Authorization", "")
    return hmac.compare_digest(header.encode(), f"Bearer {secret}".encode())


class CleanupExpiredRegistrationsView(APIView):
    """Handler for GET /api/cron/cleanup-expired-registrations"""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        if not _cron_authorized(request):
            return Response({"error": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            cancelled_count = services.cleanup_expired_registrations()
        except Exception:
            logger.exception("Expired registration cleanup failed")
            return Response(
                {"error": "Cleanup failed"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        serializer = CleanupResultSerializer({"success": True, "cancelled_count": cancelled_count})
        return Response(serializer.data)

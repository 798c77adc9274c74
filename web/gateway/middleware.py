"""Middleware for request identifiers and API payload limits.

``RequestIdMiddleware`` gives every incoming HTTP request an identifier.
The identifier is read from the incoming ``X-Request-Id`` header when the
client provides one, or generated server-side otherwise. It is stored on
the ``request`` object and in a context variable so code running
downstream (log filters, the payment provider client) can read it without
passing it explicitly. Each handled request is logged once.

Behavior contract:
- If the incoming request contains the ``X-Request-Id`` header, that value
  is reused as the request id.
- Otherwise a new UUIDv4 is generated.
- The response will include the same id in the ``X-Request-ID`` header.

``ApiSizeLimitMiddleware`` rejects ``/api/`` requests whose declared body
is larger than ``settings.API_MAX_BYTES`` with HTTP 413.
"""

import contextvars
import logging
import uuid

from django.conf import settings
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")

logger = logging.getLogger("gateway")


class RequestIdMiddleware(MiddlewareMixin):
    """Django middleware that sets and returns a per-request identifier.

    Attributes:
        HEADER (str): The name of the incoming HTTP header (in Django's
            ``request.META`` casing) that may contain a client-provided id.
        RESPONSE_HEADER (str): The name of the header returned on responses.
    """

    HEADER = "HTTP_X_REQUEST_ID"       # incoming header as found in request.META
    RESPONSE_HEADER = "X-Request-ID"   # header to add to outgoing responses

    def process_request(self, request):
        """Populate the request with a request id and set the context var.

        Args:
            request: Django HttpRequest instance.
        """
        rid = request.META.get(self.HEADER)
        if not rid:
            rid = str(uuid.uuid4())
        request.request_id = rid
        REQUEST_ID_CTX.set(rid)

    def process_response(self, request, response):
        """Set the request id header on the response and log the request.

        Args:
            request: Django HttpRequest.
            response: Django HttpResponse to modify.

        Returns:
            The same HttpResponse instance with the ``X-Request-ID`` header set.
        """
        rid = getattr(request, "request_id", REQUEST_ID_CTX.get())
        response[self.RESPONSE_HEADER] = rid
        logger.info(
            "request handled",
            extra={"path": request.path, "method": request.method, "status_code": response.status_code},
        )
        return response


class ApiSizeLimitMiddleware(MiddlewareMixin):
    """Reject oversized API payloads before the view parses them.

    Only the declared ``Content-Length`` is checked; requests outside
    ``/api/`` pass through untouched.
    """

    def process_request(self, request):
        """Short-circuit with 413 when the body exceeds ``API_MAX_BYTES``.

        Args:
            request: Django HttpRequest instance.

        Returns:
            A ``JsonResponse`` with ``{"detail": "PAYLOAD_TOO_LARGE"}`` when
            the limit is exceeded, otherwise None to continue processing.
        """
        if request.path.startswith("/api/"):
            limit = getattr(settings, "API_MAX_BYTES", 1024 * 1024)
            clen = request.META.get("CONTENT_LENGTH")
            if clen and clen.isdigit() and int(clen) > limit:
                return JsonResponse({"detail": "PAYLOAD_TOO_LARGE"}, status=413)

"""Logging filters for enriching log records with request context.

Adding ``RequestIdFilter`` to a handler attaches the current request id
(from the ContextVar set by the gateway middleware) to every record, so
JSON log lines from views, the domain service and the payment client can
be correlated without changing individual log statements.
"""

from logging import Filter, LogRecord

from .middleware import REQUEST_ID_CTX


class RequestIdFilter(Filter):
    """Attach a ``request_id`` attribute to log records.

    Records logged outside a request get ``"-"`` so formatters can always
    reference ``%(request_id)s``. A ``request_id`` passed explicitly via
    ``extra`` is left untouched.
    """

    def filter(self, record: LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = REQUEST_ID_CTX.get()
        return True

import logging

from django.conf import settings
from django.db import connections
from django.db.utils import InterfaceError, OperationalError

logger = logging.getLogger(__name__)
READ_ONLY_METHODS = frozenset({'GET', 'HEAD', 'OPTIONS'})


class RetryDatabaseConnectionMiddleware:
    """Re-run read-only requests when the database connection drops underneath them.

    Writes are never replayed: a dropped connection during a submit or an
    upsert surfaces as a 500 and the client decides whether to retry.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.max_retries = int(getattr(settings, 'DB_CONNECTION_RETRIES', 1))

    def __call__(self, request):
        attempt = 0
        while True:
            try:
                return self.get_response(request)
            except (OperationalError, InterfaceError) as exc:
                if request.method not in READ_ONLY_METHODS or attempt >= self.max_retries:
                    raise
                attempt += 1
                logger.warning(
                    'Lost database connection on %s %s (retry %s of %s)',
                    request.method,
                    request.path,
                    attempt,
                    self.max_retries,
                    exc_info=exc,
                )
                for connection in connections.all():
                    connection.close_if_unusable_or_obsolete()

from unittest import mock

from django.db.utils import OperationalError
from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase, override_settings
from rest_framework.exceptions import NotAuthenticated

from .exceptions import Conflict, exception_handler
from .middleware import RetryDatabaseConnectionMiddleware


@override_settings(DB_CONNECTION_RETRIES=1)
class RetryDatabaseConnectionMiddlewareTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_read_is_retried_once(self):
        get_response = mock.Mock(side_effect=[OperationalError('gone'), HttpResponse('ok')])
        middleware = RetryDatabaseConnectionMiddleware(get_response)
        with mock.patch('coursehub.middleware.connections') as connections:
            connections.all.return_value = []
            response = middleware(self.factory.get('/api/tests/'))
        self.assertEqual(response.content, b'ok')
        self.assertEqual(get_response.call_count, 2)

    def test_write_is_not_replayed(self):
        get_response = mock.Mock(side_effect=OperationalError('gone'))
        middleware = RetryDatabaseConnectionMiddleware(get_response)
        with self.assertRaises(OperationalError):
            middleware(self.factory.post('/api/assignments/'))
        self.assertEqual(get_response.call_count, 1)


class ExceptionHandlerTests(SimpleTestCase):
    def test_domain_error_body(self):
        response = exception_handler(Conflict('ALREADY_SUBMITTED', 'Already submitted.'), {})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data, {'error': 'ALREADY_SUBMITTED', 'detail': 'Already submitted.'})

    def test_auth_errors_read_as_forbidden(self):
        response = exception_handler(NotAuthenticated(), {})
        self.assertEqual(response.data['error'], 'FORBIDDEN')

import mock

from raygun.exceptions import APIError, InvalidApiKey, RateLimited
from raygun.transport.http import HTTPTransport
from raygun.utils.testutils import TestCase


def make_response(status_code=202, text='', headers=None):
    response = mock.Mock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    return response


class HTTPTransportTest(TestCase):
    def setUp(self):
        self.transport = HTTPTransport({'api_key': 'key'})

    def test_default_url(self):
        assert self.transport.get_url() == 'https://api.raygun.com:443/entries'

    def test_plain_http_url(self):
        transport = HTTPTransport({'host': 'localhost', 'use_ssl': False,
                                   'api_key': 'key'})
        assert transport.get_url() == 'http://localhost:80/entries'

    def test_custom_port(self):
        transport = HTTPTransport({'host': 'localhost', 'port': 8080,
                                   'api_key': 'key'})
        assert transport.get_url('/entries/bulk') == \
            'https://localhost:8080/entries/bulk'

    def test_headers(self):
        assert self.transport.get_headers() == {
            'Content-Type': 'application/json',
            'X-ApiKey': 'key',
        }

    @mock.patch('raygun.transport.http.requests.post')
    def test_post(self, post):
        post.return_value = make_response(202)

        response = self.transport.post('{"a": 1}')

        assert response is post.return_value
        post.assert_called_once_with(
            'https://api.raygun.com:443/entries',
            data=b'{"a": 1}',
            headers={'Content-Type': 'application/json', 'X-ApiKey': 'key'},
            timeout=10,
        )

    @mock.patch('raygun.transport.http.requests.post')
    def test_send_sync_success(self, post):
        post.return_value = make_response(202)
        callback = mock.Mock()

        self.transport.send_sync('{}', callback)

        callback.assert_called_once_with(None, post.return_value)

    @mock.patch('raygun.transport.http.requests.post')
    def test_send_sync_invalid_api_key(self, post):
        post.return_value = make_response(403)
        callback = mock.Mock()

        self.transport.send_sync('{}', callback)

        error, response = callback.call_args[0]
        assert isinstance(error, InvalidApiKey)
        assert error.code == 403
        assert response is None

    @mock.patch('raygun.transport.http.requests.post')
    def test_send_sync_rate_limited(self, post):
        post.return_value = make_response(429, headers={'Retry-After': '30'})
        callback = mock.Mock()

        self.transport.send_sync('{}', callback)

        error = callback.call_args[0][0]
        assert isinstance(error, RateLimited)
        assert error.retry_after == 30

    @mock.patch('raygun.transport.http.requests.post')
    def test_send_sync_rate_limited_with_date(self, post):
        post.return_value = make_response(429, headers={
            'Retry-After': 'Wed, 21 Oct 2015 07:28:00 GMT'})
        callback = mock.Mock()

        self.transport.send_sync('{}', callback)

        error = callback.call_args[0][0]
        assert isinstance(error, RateLimited)
        assert error.retry_after == 0

    @mock.patch('raygun.transport.http.requests.post')
    def test_send_sync_rate_limited_without_retry_after(self, post):
        post.return_value = make_response(429)
        callback = mock.Mock()

        self.transport.send_sync('{}', callback)

        error = callback.call_args[0][0]
        assert isinstance(error, RateLimited)
        assert error.retry_after == 0

    @mock.patch('raygun.transport.http.requests.post')
    def test_send_sync_server_error(self, post):
        post.return_value = make_response(500, text='oops')
        callback = mock.Mock()

        self.transport.send_sync('{}', callback)

        error = callback.call_args[0][0]
        assert isinstance(error, APIError)
        assert error.code == 500

    @mock.patch('raygun.transport.http.requests.post')
    def test_send_sync_connection_error(self, post):
        post.side_effect = IOError('unreachable')
        callback = mock.Mock()

        self.transport.send_sync('{}', callback)

        callback.assert_called_once_with(post.side_effect, None)

    def test_send_queues_on_worker(self):
        worker = mock.Mock()
        self.transport._worker = worker
        callback = mock.Mock()

        assert self.transport.send('{}', callback) is None

        worker.queue.assert_called_once_with(
            self.transport.send_sync, '{}', callback)

    @mock.patch('raygun.transport.http.requests.post')
    def test_send_without_api_key(self, post):
        transport = HTTPTransport({})

        assert transport.send('{"a": 1}') == '{"a": 1}'
        assert not post.called
        assert not hasattr(transport, '_worker')

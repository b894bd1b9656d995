import os
import shutil
import tempfile

import mock
import pytest

from raygun.base import Client
from raygun.offline import OfflineStorage
from raygun.transport.http import HTTPTransport
from raygun.utils.testutils import InMemoryTransport, TestCase


class InMemoryClient(Client):
    """
    A client whose direct transport keeps messages in memory.
    """
    def init(self, **options):
        super(InMemoryClient, self).init(**options)
        self._transport = InMemoryTransport()
        return self

    @property
    def events(self):
        return self._transport.events


class ClientInitTest(TestCase):
    def tearDown(self):
        if hasattr(self, 'client'):
            self.client.stop()

    def test_init_returns_client(self):
        client = Client()
        assert client.init(api_key='key') is client

    def test_use_ssl_defaults_to_true(self):
        self.client = Client(api_key='key')
        assert self.client.get_http_options()['use_ssl'] is True

    def test_use_ssl_false(self):
        self.client = Client(api_key='key', use_ssl=False)
        assert self.client.get_http_options()['use_ssl'] is False

    def test_use_ssl_true(self):
        self.client = Client(api_key='key', use_ssl=True)
        assert self.client.get_http_options()['use_ssl'] is True

    def test_defaults(self):
        self.client = Client().init(api_key='key')
        assert self.client._use_human_string_for_object is True
        assert self.client._inner_error_field_name == 'cause'
        assert isinstance(self.client._offline_storage, OfflineStorage)
        assert self.client.is_offline is False
        assert self.client._batch_transport is None

    def test_explicit_formatting_options(self):
        self.client = Client(api_key='key', use_human_string_for_object=False,
                             inner_error_field_name='inner',
                             report_column_numbers=True)
        assert self.client._use_human_string_for_object is False
        assert self.client._inner_error_field_name == 'inner'
        assert self.client._report_column_numbers is True

    def test_api_key_from_environment(self):
        with mock.patch.dict(os.environ, {'RAYGUN_APIKEY': 'env-key'}):
            self.client = Client().init()
        assert self.client.get_http_options()['api_key'] == 'env-key'

    @mock.patch('raygun.base.BatchTransport')
    def test_batch_transport_is_started(self, BatchTransport):
        self.client = Client(api_key='key', host='example.com', port=8080,
                             batch=True)

        BatchTransport.assert_called_once_with(
            interval=1000,
            http_options={
                'host': 'example.com',
                'port': 8080,
                'use_ssl': True,
                'api_key': 'key',
            },
        )
        BatchTransport.return_value.start_processing.assert_called_once_with()
        assert self.client.transport() is BatchTransport.return_value

    @mock.patch('raygun.base.BatchTransport')
    def test_batch_frequency(self, BatchTransport):
        self.client = Client(api_key='key', batch=True, batch_frequency=250)
        assert BatchTransport.call_args[1]['interval'] == 250

    @mock.patch('raygun.base.BatchTransport')
    def test_batch_requires_api_key(self, BatchTransport):
        self.client = Client().init(batch=True)
        assert not BatchTransport.called
        assert isinstance(self.client.transport(), HTTPTransport)

    @mock.patch('raygun.base.BatchTransport')
    def test_reinit_stops_previous_batch_transport(self, BatchTransport):
        first, second = mock.Mock(), mock.Mock()
        BatchTransport.side_effect = [first, second]

        self.client = Client(api_key='key', batch=True)
        self.client.init(api_key='key', batch=True)

        first.stop_processing.assert_called_once_with()
        assert self.client.transport() is second

    @mock.patch('raygun.base.BatchTransport')
    def test_offline_at_init_uses_direct_transport(self, BatchTransport):
        storage = mock.Mock()
        options = {'cache_path': '/tmp/raygun'}

        self.client = Client(api_key='key', batch=True, is_offline=True,
                             offline_storage=storage,
                             offline_storage_options=options)

        storage.init.assert_called_once_with(
            options, self.client.direct_transport())
        assert self.client.direct_transport() is not BatchTransport.return_value

    def test_offline_storage_not_initialized_when_online(self):
        storage = mock.Mock()
        self.client = Client(api_key='key', offline_storage=storage)
        assert not storage.init.called


class ClientSendTest(TestCase):
    def setUp(self):
        self.client = InMemoryClient(api_key='key')

    def raise_error(self):
        try:
            raise ValueError('bad value')
        except ValueError as e:
            return e

    def test_send_delivers_serialized_message(self):
        callback = mock.Mock()
        message = self.client.send(self.raise_error(), {'order': 1}, callback)

        assert len(self.client.events) == 1
        event = self.client.events[0]
        assert event['details']['error']['className'] == 'ValueError'
        assert event['details']['userCustomData'] == {'order': 1}
        assert event == message
        callback.assert_called_once_with(None, None)

    def test_send_returns_message(self):
        message = self.client.send(self.raise_error())
        assert message['details']['error']['message'] == 'ValueError: bad value'

    def test_tags_are_concatenated(self):
        self.client.set_tags(['a'])
        message = self.client.send(self.raise_error(), {}, None, tags=['b', 'a'])
        assert message['details']['tags'] == ['a', 'b', 'a']

    def test_tags_from_init(self):
        self.client.init(api_key='key', tags=['web'])
        message = self.client.send(self.raise_error(), tags=['checkout'])
        assert message['details']['tags'] == ['web', 'checkout']

    def test_no_tags(self):
        message = self.client.send(self.raise_error())
        assert message['details']['tags'] == []

    def test_set_tags_does_not_alias_call_tags(self):
        process_tags = ['a']
        self.client.set_tags(process_tags)
        self.client.send(self.raise_error(), tags=['b'])
        assert process_tags == ['a']

    def test_grouping_key(self):
        exc = self.raise_error()
        hook = mock.Mock(return_value='group-1')
        self.client.grouping_key(hook)

        message = self.client.send(exc, {'a': 1}, None, tags=['t'])

        assert message['details']['groupingKey'] == 'group-1'
        assert self.client.events[0]['details']['groupingKey'] == 'group-1'
        args = hook.call_args[0]
        assert args[1] is exc
        assert args[2] == {'a': 1}
        assert args[3] is None
        assert args[4] == ['t']

    def test_no_grouping_key(self):
        message = self.client.send(self.raise_error())
        assert 'groupingKey' not in message['details']

    def test_grouping_key_not_callable(self):
        self.client.grouping_key('not a function')
        message = self.client.send(self.raise_error())
        assert message['details']['groupingKey'] is None

    def test_on_before_send_replaces_message(self):
        self.client.on_before_send(lambda message, *args: {'replaced': True})

        message = self.client.send(self.raise_error())

        assert message == {'replaced': True}
        assert self.client.events == [{'replaced': True}]

    def test_on_before_send_can_modify_message(self):
        def hook(message, exception, custom_data, request, tags):
            message['details']['version'] = 'patched'
            return message

        self.client.on_before_send(hook)
        self.client.send(self.raise_error())

        assert self.client.events[0]['details']['version'] == 'patched'

    def test_on_before_send_not_callable(self):
        self.client.on_before_send(42)
        message = self.client.send(self.raise_error())
        assert message['details']['error']['className'] == 'ValueError'
        assert len(self.client.events) == 1

    def test_grouping_key_runs_before_on_before_send(self):
        seen = []

        def hook(message, *args):
            seen.append(message['details'].get('groupingKey'))
            return message

        self.client.grouping_key(lambda *args: 'group')
        self.client.on_before_send(hook)
        self.client.send(self.raise_error())

        assert seen == ['group']

    def test_hook_errors_propagate(self):
        def hook(*args):
            raise KeyError('boom')

        self.client.on_before_send(hook)

        with pytest.raises(KeyError):
            self.client.send(self.raise_error())
        assert self.client.events == []

    def test_hooks_are_fluent(self):
        client = self.client
        assert client.grouping_key(None) is client
        assert client.on_before_send(None) is client
        assert client.set_version('1.0') is client
        assert client.set_user('bob') is client
        assert client.set_tags([]) is client

    def test_version(self):
        self.client.set_version('2.3.1')
        message = self.client.send(self.raise_error())
        assert message['details']['version'] == '2.3.1'

    def test_default_user(self):
        self.client.set_user('bob@example.com')
        message = self.client.send(self.raise_error(), request={
            'REQUEST_METHOD': 'GET', 'SERVER_NAME': 'localhost',
            'SERVER_PORT': '80', 'wsgi.url_scheme': 'http',
        })
        assert message['details']['user'] == {'identifier': 'bob@example.com'}

    def test_request_user_wins_over_default_user(self):
        self.client.set_user('bob@example.com')
        self.client.user = lambda request: {'identifier': 'alice'}

        message = self.client.send(self.raise_error(), request={'url': '/'})

        assert message['details']['user'] == {'identifier': 'alice'}

    def test_failing_request_user_falls_back_to_default(self):
        def user(request):
            raise AttributeError('no session')

        self.client.set_user('bob')
        self.client.user = user

        message = self.client.send(self.raise_error(), request={'url': '/'})

        assert message['details']['user'] == {'identifier': 'bob'}

    def test_filters(self):
        self.client.init(api_key='key', filters=['password'])
        message = self.client.send(self.raise_error(),
                                   {'password': 'hunter2', 'name': 'bob'})
        assert message['details']['userCustomData'] == {
            'password': '[removed]',
            'name': 'bob',
        }

    def test_send_string(self):
        message = self.client.send('something went wrong')
        assert message['details']['error']['message'] == 'something went wrong'


class ClientDeliveryModeTest(TestCase):
    def setUp(self):
        self.cache_path = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.cache_path, ignore_errors=True)

    def make_client(self, **options):
        options.setdefault('offline_storage_options',
                           {'cache_path': self.cache_path})
        return InMemoryClient(**options)

    @mock.patch('raygun.base.BatchTransport', InMemoryTransport)
    def test_batch_routes_to_batch_transport(self):
        client = self.make_client(api_key='key', batch=True)

        client.send(ValueError('a'))
        client.send(ValueError('b'))

        assert len(client._batch_transport.events) == 2
        assert client.events == []

    @mock.patch('raygun.base.BatchTransport', InMemoryTransport)
    def test_offline_wins_over_batch(self):
        client = self.make_client(api_key='key', batch=True, is_offline=True)

        client.send(ValueError('a'))

        assert client._batch_transport.events == []
        assert client.events == []
        assert len(os.listdir(self.cache_path)) == 1

    def test_offline_saves_with_callback(self):
        client = self.make_client(api_key='key').offline()
        callback = mock.Mock()

        client.send(ValueError('a'), {}, callback)

        callback.assert_called_once_with(None)
        assert client.events == []
        assert len(os.listdir(self.cache_path)) == 1

    def test_offline_is_idempotent(self):
        client = self.make_client(api_key='key')
        client.offline()
        client.offline()
        assert client.is_offline is True

    def test_online_replays_stored_messages(self):
        client = self.make_client(api_key='key').offline()
        client.send(ValueError('a'))
        client.send(ValueError('b'))
        callback = mock.Mock()

        client.online(callback)

        assert client.is_offline is False
        assert callback.call_count == 1
        error, items = callback.call_args[0]
        assert error is None
        assert len(items) == 2
        assert [e['details']['error']['message'] for e in client.events] == [
            'ValueError: a', 'ValueError: b']
        assert os.listdir(self.cache_path) == []

    def test_online_drains_storage_once(self):
        storage = mock.Mock()
        client = self.make_client(api_key='key', offline_storage=storage)
        client.offline()
        callback = mock.Mock()

        client.online(callback)

        storage.send.assert_called_once_with(callback)

    def test_send_after_online_uses_transport(self):
        client = self.make_client(api_key='key').offline()
        client.online()

        client.send(ValueError('a'))

        assert len(client.events) == 1

    def test_offline_storage_is_recreated(self):
        client = self.make_client(api_key='key')
        client._offline_storage = None

        storage = client.offline_storage()

        assert isinstance(storage, OfflineStorage)
        assert client.offline_storage() is storage

    def test_stop_halts_batch_transport(self):
        client = self.make_client(api_key='key')
        client._batch_transport = mock.Mock()

        client.stop()

        client._batch_transport.stop_processing.assert_called_once_with()

    def test_stop_without_batch_transport(self):
        client = self.make_client(api_key='key')
        client.stop()


class ClientWithoutApiKeyTest(TestCase):
    @mock.patch('raygun.transport.http.requests.post')
    def test_send_does_not_reach_network(self, post):
        client = Client().init()
        callback = mock.Mock()

        message = client.send(ValueError('a'), {}, callback)

        assert message['details']['error']['className'] == 'ValueError'
        assert not post.called
        assert not hasattr(client.direct_transport(), '_worker')
        assert not callback.called

    def test_missing_api_key_is_logged(self):
        client = Client().init()
        with mock.patch('raygun.transport.http.logger') as logger:
            client.send(ValueError('a'))
        assert logger.error.call_count == 1


class ErrorHandlerTest(TestCase):
    def setUp(self):
        self.client = InMemoryClient(api_key='key')
        self.request = {
            'REQUEST_METHOD': 'POST',
            'PATH_INFO': '/orders',
            'SERVER_NAME': 'localhost',
            'SERVER_PORT': '80',
            'wsgi.url_scheme': 'http',
        }

    def test_sends_and_continues(self):
        next_ = mock.Mock()

        self.client.error_handler(ValueError('a'), self.request, None, next_)

        next_.assert_called_once_with()
        event = self.client.events[0]
        assert event['details']['tags'] == ['UnhandledException']
        assert event['details']['userCustomData'] == {}
        assert event['details']['request']['url'] == 'http://localhost/orders'

    def test_custom_data_override(self):
        self.client.express_custom_data = lambda err, request: {
            'method': request['REQUEST_METHOD']}

        self.client.error_handler(ValueError('a'), self.request, None,
                                  mock.Mock())

        assert self.client.events[0]['details']['userCustomData'] == {
            'method': 'POST'}

    def test_custom_data_value(self):
        self.client.express_custom_data = {'static': True}

        self.client.error_handler(ValueError('a'), self.request, None,
                                  mock.Mock())

        assert self.client.events[0]['details']['userCustomData'] == {
            'static': True}

    def test_process_tags_come_first(self):
        self.client.set_tags(['web'])

        self.client.error_handler(ValueError('a'), self.request, None,
                                  mock.Mock())

        assert self.client.events[0]['details']['tags'] == [
            'web', 'UnhandledException']

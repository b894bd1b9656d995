"""
raygun.base
~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import logging

from raygun.conf import defaults, get_api_key, setup_logging
from raygun.messages import MessageBuilder
from raygun.offline import OfflineStorage
from raygun.transport.batch import BatchTransport
from raygun.transport.http import HTTPTransport
from raygun.utils import json, noop

__all__ = ('Client',)

UNHANDLED_EXCEPTION_TAG = 'UnhandledException'


class Client(object):
    """
    The Raygun client: builds a report for every exception it is given and
    delivers it straight away, in batches, or through the offline cache.

    Will read the api key from the environment variable ``RAYGUN_APIKEY``
    if none is passed.

    >>> from raygun import Client

    >>> client = Client(api_key='my-api-key', tags=['web'])

    >>> # Record an exception
    >>> try:
    >>>     1/0
    >>> except ZeroDivisionError as exc:
    >>>     client.send(exc, {'order': 42}, callback)

    Where messages go is decided on every ``send``:

    - offline (``is_offline`` or ``offline()``): the offline storage,
      whether or not batching is enabled
    - batched (``batch=True`` with an api key at ``init``): the batch
      transport
    - otherwise: a direct HTTP request
    """
    logger = logging.getLogger('raygun')

    def __init__(self, **options):
        self.configure_logging()

        cls = self.__class__
        self.logger = logging.getLogger(
            '%s.%s' % (cls.__module__, cls.__name__))
        self.error_logger = logging.getLogger('raygun.errors')

        self._api_key = None
        self._filters = []
        self._user = None
        self._version = ''
        self._host = None
        self._port = None
        self._use_ssl = True
        self._on_before_send = None
        self._offline_storage = None
        self._offline_storage_options = None
        self._is_offline = False
        self._grouping_key = None
        self._tags = None
        self._use_human_string_for_object = True
        self._report_column_numbers = False
        self._inner_error_field_name = defaults.INNER_ERROR_FIELD_NAME
        self._batch = False
        self._batch_transport = None
        self._transport = None

        if options:
            self.init(**options)

    def configure_logging(self):
        setup_logging()

    def init(self, api_key=None, filters=None, host=None, port=None,
             use_ssl=None, on_before_send=None, offline_storage=None,
             offline_storage_options=None, is_offline=False,
             grouping_key=None, tags=None, use_human_string_for_object=None,
             report_column_numbers=False, inner_error_field_name=None,
             batch=False, batch_frequency=None):
        """
        (Re)configures the client. Every option not given falls back to its
        default, so calling ``init`` twice does not merge configurations.

        >>> client = Client().init(api_key='key', batch=True,
        >>>                        batch_frequency=5000)
        """
        self._api_key = get_api_key(api_key)
        self._filters = list(filters or [])
        self._host = host
        self._port = port
        self._use_ssl = use_ssl is not False
        self._on_before_send = on_before_send
        self._offline_storage = offline_storage or OfflineStorage()
        self._offline_storage_options = offline_storage_options
        self._is_offline = bool(is_offline)
        self._grouping_key = grouping_key
        self._tags = tags
        if use_human_string_for_object is None:
            self._use_human_string_for_object = True
        else:
            self._use_human_string_for_object = use_human_string_for_object
        self._report_column_numbers = bool(report_column_numbers)
        self._inner_error_field_name = (inner_error_field_name or
                                        defaults.INNER_ERROR_FIELD_NAME)

        self._transport = HTTPTransport(self.get_http_options())

        # a previous init may have left a flush loop running
        if self._batch_transport is not None:
            self._batch_transport.stop_processing()
        self._batch = False
        self._batch_transport = None

        if batch and self._api_key:
            self._batch = True
            self._batch_transport = BatchTransport(
                interval=batch_frequency or defaults.BATCH_FREQUENCY,
                http_options=self.get_http_options(),
            )
            self._batch_transport.start_processing()

        if not self._api_key:
            self.logger.info(
                'Raygun is not configured (no api key). Please see the '
                'documentation for more information.')

        if self._is_offline:
            self._offline_storage.init(self._offline_storage_options,
                                       self._transport)

        return self

    def get_http_options(self):
        return {
            'host': self._host,
            'port': self._port,
            'use_ssl': bool(self._use_ssl),
            'api_key': self._api_key,
        }

    @property
    def is_offline(self):
        return self._is_offline

    def user(self, request):
        """
        Returns the user affected by ``request``. Override this to report
        the user of your framework's session; it wins over ``set_user``.
        """
        return None

    def set_user(self, user):
        self._user = user
        return self

    def express_custom_data(self, error, request):
        """
        Returns the custom data reported by ``error_handler``. Override
        this, or assign a plain value to it.
        """
        return {}

    def set_version(self, version):
        self._version = version
        return self

    def on_before_send(self, on_before_send):
        self._on_before_send = on_before_send
        return self

    def grouping_key(self, grouping_key):
        self._grouping_key = grouping_key
        return self

    def set_tags(self, tags):
        self._tags = tags
        return self

    def offline(self):
        self.offline_storage().init(self._offline_storage_options,
                                    self.direct_transport())
        self._is_offline = True
        return self

    def online(self, callback=None):
        """
        Leaves offline mode and replays everything the offline storage
        holds. ``callback(error, items)`` is invoked once the storage was
        drained.
        """
        self._is_offline = False
        self.offline_storage().send(callback)

    def offline_storage(self):
        storage = self._offline_storage
        if storage is None:
            storage = self._offline_storage = OfflineStorage()
        return storage

    def direct_transport(self):
        if self._transport is None:
            self._transport = HTTPTransport(self.get_http_options())
        return self._transport

    def transport(self):
        if self._batch and self._batch_transport:
            return self._batch_transport
        return self.direct_transport()

    def resolve_user(self, request):
        if request is None:
            return self._user
        try:
            user = self.user(request)
        except Exception:
            self.logger.debug('Unable to resolve the user of the request',
                              exc_info=True)
            user = None
        return user or self._user

    def build_message(self, exception, custom_data=None, request=None,
                      tags=None):
        builder = MessageBuilder({
            'filters': self._filters,
            'use_human_string_for_object': self._use_human_string_for_object,
            'report_column_numbers': self._report_column_numbers,
            'inner_error_field_name': self._inner_error_field_name,
        })
        return builder \
            .set_error_details(exception) \
            .set_request_details(request) \
            .set_machine_name() \
            .set_environment_details() \
            .set_user_custom_data(custom_data) \
            .set_user(self.resolve_user(request)) \
            .set_version(self._version) \
            .set_tags(tags) \
            .build()

    def send(self, exception, custom_data=None, callback=None, request=None,
             tags=None):
        """
        Reports ``exception`` and returns the message that was built for
        it. Delivery happens in the background; its outcome is passed to
        ``callback``.

        >>> try:
        >>>     process(order)
        >>> except Exception as exc:
        >>>     client.send(exc, {'order': order.id}, callback,
        >>>                 request=environ, tags=['checkout'])

        Errors raised by the ``grouping_key`` or ``on_before_send`` hooks
        are not caught.
        """
        merged_tags = []
        if self._tags:
            merged_tags.extend(self._tags)
        if tags:
            merged_tags.extend(tags)

        message = self.build_message(exception, custom_data, request,
                                     merged_tags)

        if self._grouping_key:
            if callable(self._grouping_key):
                message['details']['groupingKey'] = self._grouping_key(
                    message, exception, custom_data, request, tags)
            else:
                message['details']['groupingKey'] = None

        if self._on_before_send:
            if callable(self._on_before_send):
                message = self._on_before_send(
                    message, exception, custom_data, request, tags)

        if self._is_offline:
            self.offline_storage().save(self.encode(message), callback)
        else:
            self.transport().send(self.encode(message), callback)

        return message

    def encode(self, message):
        """
        Serializes ``message`` into a JSON string.
        """
        return json.dumps(message)

    def error_handler(self, err, request, response, next):
        """
        Reports an exception raised while handling ``request`` and hands
        control back to the framework through ``next``.
        """
        if callable(self.express_custom_data):
            custom_data = self.express_custom_data(err, request)
        else:
            custom_data = self.express_custom_data

        self.send(err, custom_data or {}, noop, request,
                  [UNHANDLED_EXCEPTION_TAG])
        next()

    def stop(self):
        if self._batch_transport:
            self._batch_transport.stop_processing()

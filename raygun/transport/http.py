"""
raygun.transport.http
~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import logging

import requests

from raygun.conf import defaults
from raygun.exceptions import (
    APIError, InvalidApiKey, PayloadTooLarge, RateLimited)
from raygun.transport.base import Transport
from raygun.transport.threaded import AsyncWorker
from raygun.utils.encoding import to_bytes

logger = logging.getLogger('raygun.errors')

ERR_NO_API_KEY = (
    'Encountered an error sending an error to Raygun. No API key is '
    'configured, please ensure .init is called with api key. See docs for '
    'more info.')


class HTTPTransport(Transport):
    """
    Delivers a single message to the entries endpoint with an HTTP POST.

    The request is issued from a background ``AsyncWorker`` so ``send``
    returns immediately.
    """

    def __init__(self, http_options=None, timeout=defaults.TIMEOUT):
        options = http_options or {}
        self.host = options.get('host') or defaults.HOST
        self.use_ssl = options.get('use_ssl', True) is not False
        self.port = options.get('port') or (443 if self.use_ssl else 80)
        self.api_key = options.get('api_key')
        self.timeout = options.get('timeout', timeout)

    def get_worker(self):
        if not hasattr(self, '_worker'):
            self._worker = AsyncWorker()
        return self._worker

    def get_url(self, path=defaults.ENTRIES_PATH):
        scheme = 'https' if self.use_ssl else 'http'
        return '%s://%s:%s%s' % (scheme, self.host, self.port, path)

    def get_headers(self):
        return {
            'Content-Type': 'application/json',
            'X-ApiKey': self.api_key,
        }

    def post(self, data, path=defaults.ENTRIES_PATH):
        """
        Sends ``data`` to the Raygun API and returns the response. Raises
        an ``APIError`` for any response the API did not accept.
        """
        response = requests.post(
            self.get_url(path),
            data=to_bytes(data),
            headers=self.get_headers(),
            timeout=self.timeout,
        )

        code = response.status_code
        if code == 403:
            raise InvalidApiKey('Invalid API key', code)
        elif code == 413:
            raise PayloadTooLarge('Request entity too large', code)
        elif code == 429:
            try:
                retry_after = int(response.headers.get('Retry-After'))
            except (ValueError, TypeError):
                retry_after = 0
            raise RateLimited('Rate limited by Raygun', retry_after)
        elif code >= 400:
            raise APIError(response.text or 'Unexpected response', code)
        return response

    def send_sync(self, message, callback=None):
        try:
            response = self.post(message)
        except Exception as e:
            logger.error('Unable to reach Raygun: %s (url: %s)', e,
                         self.get_url(), exc_info=True)
            if callback is not None:
                callback(e, None)
        else:
            logger.debug('Raygun accepted message (status %s)',
                         response.status_code)
            if callback is not None:
                callback(None, response)

    def send(self, message, callback=None):
        if not self.api_key:
            logger.error(ERR_NO_API_KEY)
            return message

        logger.debug('Sending message of length %d to %s', len(message),
                     self.get_url())
        self.get_worker().queue(self.send_sync, message, callback)

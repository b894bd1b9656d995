"""
raygun.offline
~~~~~~~~~~~~~~

Keeps serialized messages on disk while the client is offline and replays
them through a transport once it comes back online.

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import itertools
import logging
import os
import time

from raygun.conf import defaults

__all__ = ('OfflineStorage',)

logger = logging.getLogger('raygun.errors')

FILE_EXTENSION = '.json'

_sequence = itertools.count()


class OfflineStorage(object):
    """
    A directory of ``<nanoseconds>-<sequence>.json`` files, replayed oldest first.

    >>> storage = OfflineStorage()
    >>> storage.init({'cache_path': '/var/tmp/raygun', 'cache_limit': 50},
    >>>              transport)
    >>> storage.save(message, callback)
    >>> storage.send(callback)
    """

    def __init__(self):
        self.cache_path = None
        self.cache_limit = defaults.OFFLINE_CACHE_LIMIT
        self.transport = None

    def init(self, options=None, transport=None):
        options = options or {}
        self.cache_path = options.get('cache_path') or defaults.OFFLINE_CACHE_PATH
        self.cache_limit = options.get('cache_limit') or defaults.OFFLINE_CACHE_LIMIT
        self.transport = transport

        if not os.path.isdir(self.cache_path):
            os.makedirs(self.cache_path, exist_ok=True)
        return self

    def is_initialized(self):
        return self.cache_path is not None

    def _files(self):
        return sorted(name for name in os.listdir(self.cache_path)
                      if name.endswith(FILE_EXTENSION))

    def _new_filename(self):
        return '%020d-%06d%s' % (time.time_ns(), next(_sequence) % 1000000,
                                 FILE_EXTENSION)

    def save(self, message, callback=None):
        """
        Writes ``message`` to the cache. Once ``cache_limit`` files are held
        the message is dropped and the callback gets no error.
        """
        if not self.is_initialized():
            self.init()

        error = None
        try:
            count = len(self._files())
            if count >= self.cache_limit:
                logger.error('Raygun offline cache reached its limit of %d '
                             'messages, the message was not saved',
                             self.cache_limit)
            else:
                path = os.path.join(self.cache_path, self._new_filename())
                with open(path, 'w', encoding='utf-8') as fp:
                    fp.write(message)
                logger.debug('Saved message to %s', path)
        except (OSError, IOError) as e:
            logger.error('Unable to save message to the Raygun offline '
                         'cache: %s', e, exc_info=True)
            error = e

        if callback is not None:
            callback(error)

    def send(self, callback=None):
        """
        Hands every cached message to the transport, oldest first, and
        removes it from the cache. ``callback(error, names)`` is invoked
        once with the file names that were handed over.
        """
        if not self.is_initialized():
            self.init()

        if self.transport is None:
            logger.error('No transport configured to replay the Raygun '
                         'offline cache')
            if callback is not None:
                callback(None, [])
            return

        sent = []
        error = None
        try:
            names = self._files()
        except (OSError, IOError) as e:
            logger.error('Unable to read the Raygun offline cache: %s', e,
                         exc_info=True)
            names = []
            error = e

        for name in names:
            path = os.path.join(self.cache_path, name)
            try:
                with open(path, 'r', encoding='utf-8') as fp:
                    message = fp.read()
                os.remove(path)
            except (OSError, IOError) as e:
                logger.error('Unable to read cached message %s: %s', name, e,
                             exc_info=True)
                error = e
                continue

            self.transport.send(message)
            sent.append(name)

        if callback is not None:
            callback(error, sent)

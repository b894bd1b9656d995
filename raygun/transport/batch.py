"""
raygun.transport.batch
~~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import logging
import threading

from raygun.conf import defaults
from raygun.exceptions import PayloadTooLarge
from raygun.transport.base import Transport
from raygun.transport.http import HTTPTransport
from raygun.utils.encoding import to_bytes

logger = logging.getLogger('raygun.errors')


class BatchTransport(Transport):
    """
    Accumulates messages and posts them to the bulk endpoint on a fixed
    interval, independent of how many messages arrive.

    >>> transport = BatchTransport(interval=1000, http_options={
    >>>     'host': 'api.raygun.com', 'api_key': 'key'})
    >>> transport.start_processing()
    >>> transport.send(message, callback)
    >>> transport.stop_processing()
    """

    def __init__(self, interval=defaults.BATCH_FREQUENCY, http_options=None,
                 transport=None):
        # milliseconds
        self.interval = interval
        self.http = transport or HTTPTransport(http_options)
        self._lock = threading.Lock()
        self._queue = []
        self._queue_size = 0
        self._stopped = threading.Event()
        self._wake = threading.Event()
        self._thread = None

    def is_processing(self):
        return self._thread is not None and self._thread.is_alive()

    def start_processing(self):
        with self._lock:
            if self.is_processing():
                return
            self._stopped.clear()
            self._wake.clear()
            self._thread = threading.Thread(
                target=self._target, name='raygun.BatchTransport')
            self._thread.daemon = True
            self._thread.start()

    def stop_processing(self, timeout=None):
        with self._lock:
            thread, self._thread = self._thread, None
        self._stopped.set()
        self._wake.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def send(self, message, callback=None):
        size = len(to_bytes(message))
        if size > defaults.MAX_BATCH_INNER_SIZE_BYTES:
            logger.error('Error is too large to send to Raygun (%d bytes)',
                         size)
            if callback is not None:
                callback(PayloadTooLarge('Error is too large to send to '
                                         'Raygun', 413), None)
            return

        with self._lock:
            self._queue.append((message, callback, size))
            self._queue_size += size
            full = (self._queue_size >= defaults.MAX_BATCH_SIZE_BYTES or
                    len(self._queue) >= defaults.MAX_MESSAGES_IN_BATCH)

        if full:
            # flush now rather than on the next tick
            self._wake.set()

    def pending(self):
        with self._lock:
            return len(self._queue)

    def _take_batch(self):
        with self._lock:
            batch = []
            # opening and closing brackets of the JSON array
            size = 2
            for message, callback, message_size in self._queue:
                if len(batch) >= defaults.MAX_MESSAGES_IN_BATCH:
                    break
                if batch and size + message_size + 1 > defaults.MAX_BATCH_SIZE_BYTES:
                    break
                batch.append((message, callback))
                size += message_size + 1
            del self._queue[:len(batch)]
            self._queue_size = sum(s for _, _, s in self._queue)
        return batch

    def process_batch(self):
        """
        Posts one batch of queued messages and reports the outcome to the
        callback of every message in it.
        """
        batch = self._take_batch()
        if not batch:
            return

        payload = '[%s]' % ','.join(message for message, _ in batch)
        logger.debug('Sending batch of %d messages to Raygun', len(batch))

        try:
            response = self.http.post(payload, defaults.BULK_ENTRIES_PATH)
        except Exception as e:
            logger.error('Unable to send batch to Raygun: %s', e,
                         exc_info=True)
            error, response = e, None
        else:
            error = None

        for _, callback in batch:
            if callback is None:
                continue
            try:
                callback(error, response)
            except Exception:
                logger.error('Failed processing batch callback',
                             exc_info=True)

    def _target(self):
        while not self._stopped.is_set():
            self._wake.wait(self.interval / 1000.0)
            self._wake.clear()
            if self._stopped.is_set():
                break
            try:
                self.process_batch()
            except Exception:
                logger.error('Failed processing batch', exc_info=True)

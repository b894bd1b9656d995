"""
raygun.utils.testutils
~~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2013 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

from unittest import TestCase as BaseTestCase

from raygun.transport.base import Transport
from raygun.utils import json


class TestCase(BaseTestCase):
    pass


class InMemoryTransport(Transport):
    """
    Keeps every message instead of delivering it and reports success.
    """
    def __init__(self, *args, **kwargs):
        self.events = []

    def send(self, message, callback=None):
        self.events.append(json.loads(message))
        if callback is not None:
            callback(None, None)

    def start_processing(self):
        pass

    def stop_processing(self):
        pass

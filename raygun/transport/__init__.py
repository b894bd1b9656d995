"""
raygun.transport
~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

from raygun.transport.base import Transport  # NOQA
from raygun.transport.batch import BatchTransport  # NOQA
from raygun.transport.http import HTTPTransport  # NOQA
from raygun.transport.threaded import AsyncWorker  # NOQA

"""
raygun.conf.defaults
~~~~~~~~~~~~~~~~~~~~

Represents the default values for all Raygun settings.

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import os
import socket
import tempfile

# Environment variable consulted when no api key is passed to ``init``
API_KEY_ENV = 'RAYGUN_APIKEY'

# The ingestion endpoint
HOST = 'api.raygun.com'

ENTRIES_PATH = '/entries'

BULK_ENTRIES_PATH = '/entries/bulk'

# Seconds before an HTTP delivery is abandoned
TIMEOUT = 10

# Seconds the worker thread may use to deliver pending messages at exit
SHUTDOWN_TIMEOUT = 10

# Milliseconds between two flushes of the batch transport
BATCH_FREQUENCY = 1000

# Raygun accepts at most this many messages per bulk request
MAX_MESSAGES_IN_BATCH = 100

# Upper bound of the serialized bulk request
MAX_BATCH_SIZE_BYTES = 1638400

# Upper bound of a single serialized message inside a batch
MAX_BATCH_INNER_SIZE_BYTES = 128000

# Attribute followed to report chained exceptions; ``cause`` resolves to
# ``__cause__`` on standard exceptions
INNER_ERROR_FIELD_NAME = 'cause'

# Offline storage
OFFLINE_CACHE_PATH = os.path.join(tempfile.gettempdir(), 'raygun-offline-cache')

OFFLINE_CACHE_LIMIT = 100

# Replacement for filtered values
FILTERED_VALUE = '[removed]'

# Not all environments have access to socket module, for example Google App Engine
# Need to check to see if the socket module has ``gethostname``, if it doesn't we
# will set it to None.
NAME = socket.gethostname() if hasattr(socket, 'gethostname') else None

CLIENT_NAME = 'raygun-python'

CLIENT_URL = 'https://github.com/MindscapeHQ/raygun4py'

"""
raygun.middleware
~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

from raygun.utils import noop


class ClosingIterator(object):
    """
    An iterator that is implements a ``close`` method as-per
    WSGI recommendation.
    """
    def __init__(self, raygun, iterable, environ):
        self.raygun = raygun
        self.environ = environ
        self.iterable = iter(iterable)
        self.closeable = iterable

    def __iter__(self):
        return self

    def __next__(self):
        try:
            return next(self.iterable)
        except StopIteration:
            # propagate up the normal StopIteration
            raise
        except Exception as e:
            # but capture any other exception, then re-raise
            self.raygun.handle_exception(e, self.environ)
            raise

    def close(self):
        if hasattr(self.closeable, 'close') and callable(self.closeable.close):
            try:
                self.closeable.close()
            except Exception as e:
                self.raygun.handle_exception(e, self.environ)
                raise


class Raygun(object):
    """
    A WSGI middleware which will attempt to capture any
    uncaught exceptions and send them to Raygun.

    >>> from raygun.base import Client
    >>> application = Raygun(application, Client(api_key='key'))
    """
    def __init__(self, application, client=None):
        self.application = application
        if client is None:
            from raygun.base import Client
            client = Client().init()
        self.client = client

    def __call__(self, environ, start_response):
        try:
            iterable = self.application(environ, start_response)
        except Exception as e:
            self.handle_exception(e, environ)
            raise

        return ClosingIterator(self, iterable, environ)

    def handle_exception(self, exc, environ=None):
        self.client.error_handler(exc, environ, None, noop)

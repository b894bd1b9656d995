"""
raygun.transport.base
~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""


class Transport(object):
    """
    All transport implementations need to subclass this class

    The client hands every serialized message to ``send`` together with
    the caller's callback. A transport must never block the caller on
    network I/O and must report the outcome by invoking
    ``callback(error, response)`` exactly once, if a callback was given.
    """

    def send(self, message, callback=None):
        """
        You need to override this to do something with the actual
        message. Usually - this is sending to a server
        """
        raise NotImplementedError

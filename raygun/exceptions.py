"""
raygun.exceptions
~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""


class APIError(Exception):
    def __init__(self, message, code=0):
        super(APIError, self).__init__(message, code)
        self.code = code
        self.message = message

    def __str__(self):
        return "%s: %s" % (self.message, self.code)


class InvalidApiKey(APIError):
    pass


class PayloadTooLarge(APIError):
    pass


class RateLimited(APIError):
    def __init__(self, message, retry_after=0):
        self.retry_after = retry_after
        super(RateLimited, self).__init__(message, 429)

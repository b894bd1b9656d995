"""
raygun.conf
~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import logging
import os

from raygun.conf import defaults

__all__ = ('get_api_key', 'setup_logging')

logger = logging.getLogger('raygun')


def get_api_key(api_key=None):
    """
    Returns ``api_key`` or, when it is empty, the value of the
    ``RAYGUN_APIKEY`` environment variable.

    >>> import raygun.conf
    >>> api_key = raygun.conf.get_api_key()
    """
    if api_key:
        return api_key

    api_key = os.environ.get(defaults.API_KEY_ENV)
    if api_key:
        logger.debug("Configuring Raygun from environment variable '%s'",
                     defaults.API_KEY_ENV)
    return api_key


def setup_logging(names=('raygun',), level=logging.INFO):
    """
    Attaches a ``StreamHandler`` to the client loggers that have none, so
    delivery failures are visible without any logging configuration.

    Returns a boolean based on if any logger was configured.
    """
    configured = False
    for name in names:
        logger = logging.getLogger(name)
        if logger.handlers:
            continue
        logger.addHandler(logging.StreamHandler())
        logger.setLevel(level)
        configured = True
    return configured

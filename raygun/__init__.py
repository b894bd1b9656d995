"""
raygun
~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

__all__ = ('VERSION', 'Client')

VERSION = '1.0.0'

from raygun.base import *  # NOQA

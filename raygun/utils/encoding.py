"""
raygun.utils.encoding
~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""


def force_text(s, encoding='utf-8', errors='strict'):
    """
    Similar to smart_text, except that lazy instances are resolved to
    strings, rather than kept as lazy objects.

    Adapted from Django
    """
    if isinstance(s, str):
        return s
    if isinstance(s, bytes):
        return s.decode(encoding, errors)
    try:
        return str(s)
    except UnicodeEncodeError:
        if not isinstance(s, Exception):
            raise
        # If we get to here, the caller has passed in an Exception
        # subclass populated with non-ASCII data without special
        # handling to display as a string.
        return ' '.join(force_text(arg, encoding, errors) for arg in s.args)


def to_unicode(value):
    try:
        value = force_text(value)
    except (UnicodeEncodeError, UnicodeDecodeError):
        value = '(Error decoding value)'
    except Exception:  # in some cases we get a different exception
        try:
            value = str(repr(type(value)))
        except Exception:
            value = '(Error decoding value)'
    return value


def to_bytes(value):
    if isinstance(value, bytes):
        return value
    return to_unicode(value).encode('utf-8')

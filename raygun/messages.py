"""
raygun.messages
~~~~~~~~~~~~~~~

Builds the JSON-ready error report that is sent to Raygun. A report
looks like this::

    {
        'occurredOn': '2015-01-01T00:00:00.000000Z',
        'details': {
            'machineName': 'web-1',
            'error': {
                'className': 'ValueError',
                'message': 'ValueError: bad value',
                'stackTrace': [...],
                'innerError': {...},
            },
            'request': {...},
            'environment': {...},
            'userCustomData': {...},
            'user': {'identifier': 'user@example.com'},
            'version': '1.0.0',
            'tags': ['UnhandledException'],
            'client': {...},
        },
    }

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import datetime
import os
import platform
import sys
import time
from urllib.parse import parse_qsl

import raygun
from raygun.conf import defaults
from raygun.utils import varmap
from raygun.utils.encoding import to_unicode
from raygun.utils.json import dumps
from raygun.utils.stacks import get_stack_info, iter_traceback_frames
from raygun.utils.wsgi import get_client_ip, get_current_url, get_headers

__all__ = ('MessageBuilder',)

DEFAULT_ERROR_CLASS = 'Error'


def human_string(obj):
    """
    Renders a mapping or an object as ``key=value, key=value``.
    """
    if isinstance(obj, dict):
        items = obj.items()
    elif hasattr(obj, '__dict__'):
        items = vars(obj).items()
    else:
        return to_unicode(obj)
    return ', '.join('%s=%s' % (to_unicode(k), to_unicode(v))
                     for k, v in sorted(items, key=lambda i: to_unicode(i[0])))


class MessageBuilder(object):
    """
    Accumulates the parts of a report through chained setters.

    >>> message = MessageBuilder({'filters': ['password']}) \\
    >>>     .set_error_details(exc) \\
    >>>     .set_machine_name() \\
    >>>     .build()
    """

    def __init__(self, options=None):
        options = options or {}
        self.filters = [f.lower() for f in (options.get('filters') or [])]
        self.use_human_string_for_object = options.get(
            'use_human_string_for_object', True)
        self.report_column_numbers = bool(options.get('report_column_numbers'))
        self.inner_error_field_name = (options.get('inner_error_field_name')
                                       or defaults.INNER_ERROR_FIELD_NAME)
        self.message = {
            'occurredOn': datetime.datetime.now(datetime.timezone.utc)
            .strftime('%Y-%m-%dT%H:%M:%S.%fZ'),
            'details': {
                'client': {
                    'name': defaults.CLIENT_NAME,
                    'version': raygun.VERSION,
                    'clientUrl': defaults.CLIENT_URL,
                },
            },
        }

    @property
    def details(self):
        return self.message['details']

    def build(self):
        return self.message

    def filter(self, key, value):
        if not key or not self.filters:
            return value
        if isinstance(key, bytes):
            key = key.decode('utf-8', 'replace')
        if str(key).lower() in self.filters:
            return defaults.FILTERED_VALUE
        return value

    def filter_keys(self, data):
        if not data:
            return data
        return varmap(self.filter, data)

    def set_error_details(self, exception):
        if isinstance(exception, tuple) and len(exception) == 3:
            # sys.exc_info()
            exception = exception[1]

        if isinstance(exception, BaseException):
            self.details['error'] = self.get_error_details(exception, set())
        else:
            self.details['error'] = {
                'className': DEFAULT_ERROR_CLASS,
                'message': self.stringify(exception),
                'stackTrace': [],
            }
        return self

    def stringify(self, value):
        if isinstance(value, (str, bytes)):
            return to_unicode(value)
        if self.use_human_string_for_object:
            return human_string(value)
        return dumps(value)

    def get_error_details(self, exception, seen):
        seen.add(id(exception))
        class_name = type(exception).__name__
        value = to_unicode(exception)

        error = {
            'className': class_name,
            'message': '%s: %s' % (class_name, value) if value else class_name,
            'stackTrace': get_stack_info(
                iter_traceback_frames(exception.__traceback__),
                report_column_numbers=self.report_column_numbers,
            ),
        }

        inner = self.get_inner_error(exception)
        if inner is not None and id(inner) not in seen:
            error['innerError'] = self.get_error_details(inner, seen)
        return error

    def get_inner_error(self, exception):
        name = self.inner_error_field_name
        inner = getattr(exception, name, None)
        if callable(inner) and not isinstance(inner, BaseException):
            inner = inner()
        if inner is None and not name.startswith('__'):
            inner = getattr(exception, '__%s__' % name, None)
        if isinstance(inner, BaseException):
            return inner
        return None

    def set_request_details(self, request=None):
        if request is None:
            return self

        environ = getattr(request, 'environ', None)
        if environ is None and isinstance(request, dict) and (
                'REQUEST_METHOD' in request or 'wsgi.url_scheme' in request):
            environ = request

        if environ is None:
            if isinstance(request, dict):
                details = dict(request)
                for key in ('headers', 'queryString', 'form'):
                    if key in details:
                        details[key] = self.filter_keys(details[key])
                self.details['request'] = details
            return self

        form = getattr(request, 'form', None)
        if form is not None and hasattr(form, 'to_dict'):
            form = form.to_dict()

        query_string = environ.get('QUERY_STRING', '')

        self.details['request'] = {
            'hostName': environ.get('HTTP_HOST') or environ.get('SERVER_NAME'),
            'url': get_current_url(environ, strip_querystring=True),
            'httpMethod': environ.get('REQUEST_METHOD'),
            'iPAddress': get_client_ip(environ),
            'queryString': self.filter_keys(
                dict(parse_qsl(query_string, keep_blank_values=True))),
            'headers': self.filter_keys(dict(get_headers(environ))),
            'form': self.filter_keys(dict(form or {})),
        }
        return self

    def set_machine_name(self, machine_name=None):
        self.details['machineName'] = machine_name or defaults.NAME
        return self

    def set_environment_details(self):
        if time.localtime().tm_isdst and time.daylight:
            utc_offset = -time.altzone
        else:
            utc_offset = -time.timezone

        self.details['environment'] = {
            'processorCount': os.cpu_count(),
            'osVersion': platform.release(),
            'platform': platform.system(),
            'architecture': platform.machine(),
            'cpu': platform.processor(),
            'utcOffset': utc_offset // 3600,
            'pythonVersion': '.'.join(str(v) for v in sys.version_info[:3]),
        }
        return self

    def set_user_custom_data(self, custom_data=None):
        self.details['userCustomData'] = self.filter_keys(custom_data or {})
        return self

    def set_user(self, user=None):
        if not user:
            return self

        if isinstance(user, dict):
            self.details['user'] = dict(user)
        else:
            self.details['user'] = {'identifier': to_unicode(user)}
        return self

    def set_version(self, version):
        if version:
            self.details['version'] = version
        return self

    def set_tags(self, tags):
        self.details['tags'] = list(tags or [])
        return self

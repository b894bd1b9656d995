"""
raygun.contrib.flask
~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

try:
    from flask_login import current_user
except ImportError:
    has_flask_login = False
else:
    has_flask_login = True

import os

from flask import current_app, request
from flask.signals import got_request_exception

from raygun.base import Client
from raygun.middleware import Raygun as RaygunMiddleware
from raygun.utils import noop


def make_client(client_cls, app, api_key=None):
    return client_cls().init(
        api_key=api_key or app.config.get('RAYGUN_APIKEY') or
        os.environ.get('RAYGUN_APIKEY'),
        filters=app.config.get('RAYGUN_FILTERS'),
        host=app.config.get('RAYGUN_HOST'),
        port=app.config.get('RAYGUN_PORT'),
        use_ssl=app.config.get('RAYGUN_USE_SSL'),
        offline_storage_options=app.config.get('RAYGUN_OFFLINE_STORAGE_OPTIONS'),
        is_offline=app.config.get('RAYGUN_OFFLINE', False),
        tags=app.config.get('RAYGUN_TAGS'),
        batch=app.config.get('RAYGUN_BATCH', False),
        batch_frequency=app.config.get('RAYGUN_BATCH_FREQUENCY'),
        use_human_string_for_object=app.config.get(
            'RAYGUN_USE_HUMAN_STRING_FOR_OBJECT'),
        report_column_numbers=app.config.get(
            'RAYGUN_REPORT_COLUMN_NUMBERS', False),
        inner_error_field_name=app.config.get(
            'RAYGUN_INNER_ERROR_FIELD_NAME'),
    )


class FlaskClient(Client):
    """
    A client that reports the Flask-Login user of the failing request.
    """

    def user(self, request):
        """
        Requires Flask-Login (https://pypi.python.org/pypi/Flask-Login/)
        to be installed
        and setup
        """
        if not has_flask_login:
            return

        if not hasattr(current_app, 'login_manager'):
            return

        try:
            is_authenticated = current_user.is_authenticated
        except AttributeError:
            return

        if callable(is_authenticated):
            is_authenticated = is_authenticated()

        if not is_authenticated:
            return

        user_info = {
            'identifier': current_user.get_id(),
            'isAnonymous': False,
        }

        for attr in current_app.config.get('RAYGUN_USER_ATTRS', ()):
            if hasattr(current_user, attr):
                user_info[attr] = getattr(current_user, attr)

        return user_info


class Raygun(object):
    """
    Flask application for Raygun.

    Look up configuration from ``app.config['RAYGUN_APIKEY']`` or
    ``os.environ['RAYGUN_APIKEY']``::

    >>> raygun = Raygun(app)

    Pass an explicit client::

    >>> raygun = Raygun(app, client=client)

    Send an exception by hand::

    >>> try:
    >>>     1 / 0
    >>> except ZeroDivisionError as exc:
    >>>     raygun.send(exc)

    By default, the Flask integration hooks into the
    `got_request_exception` signal. Wrapping the WSGI application as
    well can be enabled by passing `wrap_wsgi=True`.
    """
    def __init__(self, app=None, client=None, client_cls=FlaskClient,
                 api_key=None, wrap_wsgi=False, register_signal=True):
        self.api_key = api_key
        self.client_cls = client_cls
        self.client = client
        self.wrap_wsgi = wrap_wsgi
        self.register_signal = register_signal

        if app:
            self.init_app(app)

    def handle_exception(self, sender, exception=None, **kwargs):
        if not self.client:
            return

        ignored_exc_type_list = current_app.config.get(
            'RAYGUN_IGNORE_EXCEPTIONS', [])

        if any((isinstance(exception, ignored_exc_type)
                for ignored_exc_type in ignored_exc_type_list)):
            return

        self.client.error_handler(exception, request, None, noop)

    def init_app(self, app, api_key=None, wrap_wsgi=None,
                 register_signal=None):
        if api_key is not None:
            self.api_key = api_key

        if wrap_wsgi is not None:
            self.wrap_wsgi = wrap_wsgi

        if register_signal is not None:
            self.register_signal = register_signal

        if not self.client:
            self.client = make_client(self.client_cls, app, self.api_key)

        if self.wrap_wsgi:
            app.wsgi_app = RaygunMiddleware(app.wsgi_app, self.client)

        if self.register_signal:
            got_request_exception.connect(self.handle_exception, sender=app)

        if not hasattr(app, 'extensions'):
            app.extensions = {}
        app.extensions['raygun'] = self

    def send(self, exception, custom_data=None, callback=None, tags=None):
        assert self.client, 'send called before application configured'
        return self.client.send(exception, custom_data, callback,
                                request=request, tags=tags)

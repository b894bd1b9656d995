"""
raygun.scripts.runner
~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import logging
import os
import sys
import threading
from optparse import OptionParser

from raygun import Client
from raygun.conf import defaults
from raygun.utils import json


def store_json(option, opt_str, value, parser):
    try:
        value = json.loads(value)
    except ValueError:
        print("Invalid JSON was used for option %s.  Received: %s" % (opt_str, value))
        sys.exit(1)
    setattr(parser.values, option.dest, value)


def get_loadavg():
    if hasattr(os, 'getloadavg'):
        return os.getloadavg()
    return None


def get_uid():
    try:
        import pwd
    except ImportError:
        return None
    return pwd.getpwuid(os.geteuid())[0]


def send_test_message(client, options):
    print("Client configuration:")
    for k, v in sorted(client.get_http_options().items()):
        print('  %-15s: %s' % (k, v))
    print()

    if not client.get_http_options()['api_key']:
        print("Error: No api key is configured!")
        sys.exit(1)

    done = threading.Event()
    result = {}

    def callback(error, response=None):
        result['error'] = error
        done.set()

    print('Sending a test message...',)

    try:
        raise RuntimeError(
            'This is a test message generated using ``raygun test``')
    except RuntimeError as exc:
        client.send(
            exc,
            options.get('data') or {
                'user': get_uid(),
                'loadavg': get_loadavg(),
            },
            callback,
            tags=options.get('tags') or ['raygun.test'],
        )

    if not done.wait(options.get('timeout') or defaults.TIMEOUT):
        print('timed out!')
        return False

    if result['error'] is not None:
        print('error! %s' % (result['error'],))
        return False

    print('success!')
    return True


def main():
    root = logging.getLogger('raygun.errors')
    root.setLevel(logging.DEBUG)

    parser = OptionParser(usage='%prog test [api_key]')
    parser.add_option("--data", action="callback", callback=store_json,
                      type="string", nargs=1, dest="data")
    parser.add_option("--tags", action="callback", callback=store_json,
                      type="string", nargs=1, dest="tags")
    parser.add_option("--host", dest="host")
    parser.add_option("--port", dest="port", type="int")
    parser.add_option("--timeout", dest="timeout", type="int")
    (opts, args) = parser.parse_args()

    if not args or args[0] != 'test':
        parser.print_usage()
        sys.exit(1)

    api_key = ' '.join(args[1:]) or os.environ.get(defaults.API_KEY_ENV)
    if not api_key:
        print("Error: No configuration detected!")
        print("You must either pass an api key to the command, or set the "
              "%s environment variable." % defaults.API_KEY_ENV)
        sys.exit(1)

    client = Client(api_key=api_key, host=opts.host, port=opts.port)
    if not send_test_message(client, opts.__dict__):
        sys.exit(1)

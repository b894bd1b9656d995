"""
raygun.utils.stacks
~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""

import itertools


def _getitem_from_frame(f_locals, key, default=None):
    """
    f_locals is not guaranteed to have .get(), but it will always
    support __getitem__. Even if it doesnt, we return ``default``.
    """
    try:
        return f_locals[key]
    except Exception:
        return default


def iter_traceback_frames(tb):
    """
    Given a traceback object, it will iterate over all
    frames that do not contain the ``__traceback_hide__``
    local variable.
    """
    while tb:
        # support for __traceback_hide__ which is used by a few libraries
        # to hide internal frames.
        f_locals = getattr(tb.tb_frame, 'f_locals', {})
        if not _getitem_from_frame(f_locals, '__traceback_hide__'):
            yield tb.tb_frame, getattr(tb, 'tb_lineno', None), getattr(tb, 'tb_lasti', -1)
        tb = tb.tb_next


def get_column_number(code, lasti):
    """
    Returns the 1-based column of the instruction at ``lasti`` or None when
    the interpreter does not track positions.
    """
    if code is None or lasti is None or lasti < 0:
        return None
    positions = getattr(code, 'co_positions', None)
    if positions is None:
        return None
    try:
        position = next(itertools.islice(positions(), lasti // 2, None))
    except (StopIteration, ValueError):
        return None
    col = position[2]
    if col is None:
        return None
    return col + 1


def get_stack_info(frames, report_column_numbers=False):
    """
    Given a list of ``(frame, lineno, lasti)`` tuples, returns a list of
    stack frame dictionaries, innermost call first, in the shape the
    Raygun API expects.
    """
    __traceback_hide__ = True  # NOQA

    results = []
    for frame, lineno, lasti in frames:
        f_globals = getattr(frame, 'f_globals', {})

        f_code = getattr(frame, 'f_code', None)
        if f_code:
            abs_path = f_code.co_filename
            function = f_code.co_name
        else:
            abs_path = None
            function = None

        module_name = _getitem_from_frame(f_globals, '__name__')

        frame_result = {
            'lineNumber': lineno,
            'className': module_name or '<unknown module>',
            'fileName': abs_path,
            'methodName': function or '<unknown function>',
        }
        if report_column_numbers:
            frame_result['columnNumber'] = get_column_number(f_code, lasti)
        results.append(frame_result)

    results.reverse()
    return results

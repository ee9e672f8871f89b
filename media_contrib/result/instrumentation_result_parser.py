#!/usr/bin/env python3
#
#   Copyright 2024 - The Android Open Source Project
#
#   Licensed under the Apache License, Version 2.0 (the 'License');
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an 'AS IS' BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

import logging
import re
import time

from media_contrib.result.listener import TestIdentifier

INCOMPLETE_RUN_MESSAGE = ('Test run failed to complete. Expected an '
                          'INSTRUMENTATION_CODE line but none was received.')


class _Markers(object):
    """Markers used to delimit sections in `am instrument -r` output.
    Standard instrumentation output follows the format::

        INSTRUMENTATION_STATUS: <key>=<value>
        INSTRUMENTATION_STATUS: <key>=<value>
        INSTRUMENTATION_STATUS_CODE: <code>
        ...
        INSTRUMENTATION_RESULT: <key>=<value>
        INSTRUMENTATION_CODE: <code>

    The parts marked as <value> can span several lines, this normally happens
    for the stack trace of a failed test and for INSTRUMENTATION_RESULT.
    """
    STATUS = 'INSTRUMENTATION_STATUS:'
    STATUS_CODE = 'INSTRUMENTATION_STATUS_CODE:'
    RESULT = 'INSTRUMENTATION_RESULT:'
    CODE = 'INSTRUMENTATION_CODE:'
    FAILED = 'INSTRUMENTATION_FAILED:'


class StatusCodes(object):
    """Values of INSTRUMENTATION_STATUS_CODE reported per test."""
    START = 1
    IN_PROGRESS = 2
    OK = 0
    ERROR = -1
    FAILURE = -2
    IGNORED = -3
    ASSUMPTION_FAILURE = -4


class StatusKeys(object):
    TEST = 'test'
    CLASS = 'class'
    STACK = 'stack'
    NUMTESTS = 'numtests'
    SHORTMSG = 'shortMsg'


def _remove_prefix(line, marker):
    match = re.match('(\\S*%s).*' % marker, line)
    prefix = match.group(1)
    return line[len(prefix):].lstrip()


def _extract_key_value(line, marker):
    key_value = _remove_prefix(line, marker)
    if '=' not in key_value:
        return key_value, ''
    return key_value.split('=', 1)


def _extract_status_code(line, marker):
    return int(_remove_prefix(line, marker))


def _is_marked(line, marker):
    return re.match('\\S*%s.*' % marker, line) is not None


class InstrumentationResultParser(object):
    """Translates raw `am instrument -r` output into listener events.

    Lines are fed one at a time with add_line() as the instrumentation runs,
    and done() must be called once the process exits.
    """

    def __init__(self, run_name, listener):
        """
        Args:
            run_name: Name the test run is reported under.
            listener: TestInvocationListener receiving the events.
        """
        self._run_name = run_name
        self._listener = listener
        self._status_values = {}
        self._session_values = {}
        self._value_lines = []
        self._open_key = None
        self._open_bundle = None
        self._run_started = False
        self._run_ended = False
        self._current_test = None
        self._start_time = time.time()
        self.session_code = None
        self.run_failure_message = None

    @property
    def is_complete(self):
        """Whether the session reported its final INSTRUMENTATION_CODE."""
        return self.session_code is not None

    @property
    def succeeded(self):
        return self.is_complete and self.run_failure_message is None

    def _close_open_entry(self):
        """If a marker is found, an open multi-line value can be wrapped."""
        if self._open_key is None:
            return
        self._open_bundle[self._open_key] = '\n'.join(self._value_lines)
        self._value_lines = []
        self._open_key = None
        self._open_bundle = None

    def _open_entry(self, bundle, key, value):
        self._close_open_entry()
        self._open_key = key
        self._open_bundle = bundle
        self._value_lines.append(value)

    def _add_unmarked_line(self, line):
        """An unmarked line is the continuation of an open value."""
        if self._open_key is not None:
            self._value_lines.append(line)
        elif line:
            logging.debug('Ignoring unmarked instrumentation line: %s', line)

    def _ensure_run_started(self, test_count=0):
        if not self._run_started:
            self._run_started = True
            self._listener.test_run_started(self._run_name, test_count)

    def _report_test_status(self, code):
        self._close_open_entry()
        values = self._status_values
        self._status_values = {}
        if code == StatusCodes.IN_PROGRESS:
            return

        try:
            test_count = int(values.get(StatusKeys.NUMTESTS, 0))
        except ValueError:
            test_count = 0
        self._ensure_run_started(test_count)

        test = TestIdentifier(values.get(StatusKeys.CLASS, ''),
                              values.get(StatusKeys.TEST, ''))
        if code == StatusCodes.START:
            self._current_test = test
            self._listener.test_started(test)
            return

        if self._current_test != test:
            logging.warning('Got status %d for %s#%s without a start status.',
                            code, test.class_name, test.test_name)
            self._listener.test_started(test)
        stack = values.get(StatusKeys.STACK, '')
        if code in (StatusCodes.FAILURE, StatusCodes.ERROR):
            self._listener.test_failed(test, stack)
        elif code == StatusCodes.IGNORED:
            self._listener.test_ignored(test)
        elif code == StatusCodes.ASSUMPTION_FAILURE:
            self._listener.test_assumption_failure(test, stack)
        elif code != StatusCodes.OK:
            logging.warning('Unknown instrumentation status code %d for '
                            '%s#%s', code, test.class_name, test.test_name)
        self._listener.test_ended(test, {})
        self._current_test = None

    def _report_run_failure(self, message):
        if self.run_failure_message is not None:
            return
        self.run_failure_message = message
        self._ensure_run_started()
        if self._current_test is not None:
            self._listener.test_failed(self._current_test, message)
            self._listener.test_ended(self._current_test, {})
            self._current_test = None
        self._listener.test_run_failed(message)

    def _end_run(self):
        if self._run_ended:
            return
        self._run_ended = True
        self._ensure_run_started()
        elapsed_ms = int((time.time() - self._start_time) * 1000)
        self._listener.test_run_ended(elapsed_ms, {})

    def _report_session_code(self, code):
        self._close_open_entry()
        self.session_code = code
        if StatusKeys.SHORTMSG in self._session_values:
            self._report_run_failure(self._session_values[StatusKeys.SHORTMSG])
        self._end_run()

    def _report_code(self, line, marker, report_fn):
        try:
            code = _extract_status_code(line, marker)
        except ValueError:
            logging.error('Malformed instrumentation code line: %s', line)
            self._close_open_entry()
            if marker == _Markers.STATUS_CODE:
                self._status_values = {}
            self._report_run_failure(
                'Malformed instrumentation code line: %s' % line)
            return
        report_fn(code)

    def add_line(self, line):
        if isinstance(line, bytes):
            line = line.decode('utf-8', errors='replace')
        line = line.rstrip('\r\n')
        if _is_marked(line, _Markers.STATUS_CODE):
            self._report_code(line, _Markers.STATUS_CODE,
                              self._report_test_status)
        elif _is_marked(line, _Markers.STATUS):
            (key, value) = _extract_key_value(line, _Markers.STATUS)
            self._open_entry(self._status_values, key, value)
        elif _is_marked(line, _Markers.CODE):
            self._report_code(line, _Markers.CODE, self._report_session_code)
        elif _is_marked(line, _Markers.RESULT):
            (key, value) = _extract_key_value(line, _Markers.RESULT)
            self._open_entry(self._session_values, key, value)
        elif _is_marked(line, _Markers.FAILED):
            self._close_open_entry()
            self._report_run_failure(
                'Instrumentation failed: %s'
                % _remove_prefix(line, _Markers.FAILED))
        else:
            self._add_unmarked_line(line)

    def add_lines(self, lines):
        for line in lines:
            self.add_line(line)

    def done(self):
        """Finishes the run. Reports a run failure if the session never
        completed.
        """
        self._close_open_entry()
        if not self.is_complete:
            self._report_run_failure(INCOMPLETE_RUN_MESSAGE)
        self._end_run()

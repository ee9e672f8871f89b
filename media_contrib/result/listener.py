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
"""Result reporting surface used by test cases to publish runs, metrics and
log artifacts to the harness.
"""

import collections
import enum
import logging
import os

TestIdentifier = collections.namedtuple('TestIdentifier',
                                        ['class_name', 'test_name'])


class LogDataType(enum.Enum):
    """Kinds of log artifacts a test can attach."""
    BUGREPORT = 'bugreport'
    TEXT = 'txt'
    ZIP = 'zip'
    UNKNOWN = 'dat'


class TestStatus(enum.Enum):
    INCOMPLETE = 'incomplete'
    PASSED = 'passed'
    FAILURE = 'failure'
    ASSUMPTION_FAILURE = 'assumption_failure'
    IGNORED = 'ignored'


class FileInputStreamSource(object):
    """A log artifact backed by a file on the host.

    The file is owned by this object and removed by cancel().
    """

    def __init__(self, path):
        self.path = path

    def create_input_stream(self):
        """Opens the artifact for reading. Caller must close the stream."""
        return open(self.path, 'rb')

    def size(self):
        return os.path.getsize(self.path)

    def cancel(self):
        """Releases the backing file. Safe to call more than once."""
        if self.path and os.path.exists(self.path):
            os.remove(self.path)
            logging.debug('Released log artifact %s', self.path)
        self.path = None


class TestInvocationListener(object):
    """Receives test run lifecycle events. All callbacks are no-ops.

    A run is reported as:
        test_run_started
        (test_started, [test_failed | test_assumption_failure |
         test_ignored], test_ended)*
        [test_run_failed]
        test_run_ended
    test_log may be called at any point.
    """

    def test_run_started(self, run_name, test_count):
        pass

    def test_started(self, test):
        pass

    def test_failed(self, test, trace):
        pass

    def test_assumption_failure(self, test, trace):
        pass

    def test_ignored(self, test):
        pass

    def test_ended(self, test, test_metrics):
        pass

    def test_run_failed(self, error_message):
        pass

    def test_run_ended(self, elapsed_time, run_metrics):
        pass

    def test_log(self, data_name, data_type, data_stream):
        pass


class TestRunResult(object):
    """Results of a single reported test run."""

    def __init__(self, run_name, test_count):
        self.name = run_name
        self.expected_test_count = test_count
        self.test_results = collections.OrderedDict()
        self.metrics = {}
        self.elapsed_time = None
        self.run_failure_message = None
        self.is_complete = False

    @property
    def is_run_failure(self):
        return self.run_failure_message is not None

    def num_tests_in_state(self, status):
        return len([s for s in self.test_results.values() if s == status])


class CollectingTestListener(TestInvocationListener):
    """A listener that keeps every reported event for later inspection."""

    def __init__(self):
        self.run_results = []
        self.logs = []
        self._current_run = None

    @property
    def current_run_results(self):
        return self._current_run

    def test_run_started(self, run_name, test_count):
        self._current_run = TestRunResult(run_name, test_count)
        self.run_results.append(self._current_run)

    def test_started(self, test):
        self._current_run.test_results[test] = TestStatus.INCOMPLETE

    def test_failed(self, test, trace):
        self._current_run.test_results[test] = TestStatus.FAILURE

    def test_assumption_failure(self, test, trace):
        self._current_run.test_results[test] = TestStatus.ASSUMPTION_FAILURE

    def test_ignored(self, test):
        self._current_run.test_results[test] = TestStatus.IGNORED

    def test_ended(self, test, test_metrics):
        if self._current_run.test_results.get(test) == TestStatus.INCOMPLETE:
            self._current_run.test_results[test] = TestStatus.PASSED

    def test_run_failed(self, error_message):
        self._current_run.run_failure_message = error_message

    def test_run_ended(self, elapsed_time, run_metrics):
        self._current_run.elapsed_time = elapsed_time
        self._current_run.metrics = dict(run_metrics)
        self._current_run.is_complete = True

    def test_log(self, data_name, data_type, data_stream):
        self.logs.append((data_name, data_type, data_stream))

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

import enum
import logging

from media_contrib.result.listener import LogDataType


class Predicate(enum.Enum):
    """Points in a test run after which a bugreport is captured."""
    AFTER_FAILED_TESTCASES = 'after_failed_testcases'
    AFTER_FAILED_TESTRUNS = 'after_failed_testruns'
    AT_END_OF_RUN = 'at_end_of_run'


AFTER_FAILED_TESTCASES = Predicate.AFTER_FAILED_TESTCASES
AFTER_FAILED_TESTRUNS = Predicate.AFTER_FAILED_TESTRUNS
AT_END_OF_RUN = Predicate.AT_END_OF_RUN


class BugreportCollector(object):
    """Forwards run events to a listener and attaches a device bugreport
    whenever one of the registered predicates fires.
    """

    def __init__(self, listener, device):
        """
        Args:
            listener: The TestInvocationListener events are forwarded to.
            device: The TestDevice bugreports are captured from.
        """
        self._listener = listener
        self._device = device
        self._predicates = set()
        self._descriptive_name = None
        self._test_failed = False
        self._run_failed = False
        self._bugreport_count = 0

    def add_predicate(self, predicate):
        self._predicates.add(predicate)

    def set_descriptive_name(self, name):
        """Sets the prefix used to name the captured bugreport logs."""
        self._descriptive_name = name

    @property
    def bugreport_count(self):
        return self._bugreport_count

    def _capture_bugreport(self, reason):
        self._bugreport_count += 1
        name = '%s_bugreport_%d' % (self._descriptive_name or 'test',
                                    self._bugreport_count)
        logging.info('Capturing bugreport %s (%s)', name, reason)
        bugreport = self._device.get_bugreport()
        if bugreport is None:
            logging.warning('No bugreport was captured for %s', name)
            return
        try:
            self._listener.test_log(name, LogDataType.BUGREPORT, bugreport)
        finally:
            bugreport.cancel()

    def test_run_started(self, run_name, test_count):
        self._run_failed = False
        self._listener.test_run_started(run_name, test_count)

    def test_started(self, test):
        self._test_failed = False
        self._listener.test_started(test)

    def test_failed(self, test, trace):
        self._test_failed = True
        self._listener.test_failed(test, trace)

    def test_assumption_failure(self, test, trace):
        self._listener.test_assumption_failure(test, trace)

    def test_ignored(self, test):
        self._listener.test_ignored(test)

    def test_ended(self, test, test_metrics):
        self._listener.test_ended(test, test_metrics)
        if self._test_failed and AFTER_FAILED_TESTCASES in self._predicates:
            self._capture_bugreport('%s#%s failed' % test)
        self._test_failed = False

    def test_run_failed(self, error_message):
        self._run_failed = True
        self._listener.test_run_failed(error_message)

    def test_run_ended(self, elapsed_time, run_metrics):
        self._listener.test_run_ended(elapsed_time, run_metrics)
        if self._run_failed and AFTER_FAILED_TESTRUNS in self._predicates:
            self._capture_bugreport('test run failed')
        elif AT_END_OF_RUN in self._predicates:
            self._capture_bugreport('end of run')

    def test_log(self, data_name, data_type, data_stream):
        self._listener.test_log(data_name, data_type, data_stream)

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

import unittest

import mock

from media_contrib.result import bugreport_collector
from media_contrib.result.listener import LogDataType
from media_contrib.result import listener as listener_lib

MOCK_TEST = listener_lib.TestIdentifier('com.foo.Bar', 'testBaz')


class BugreportCollectorTest(unittest.TestCase):

    def setUp(self):
        self.listener = mock.Mock()
        self.device = mock.Mock()
        self.bugreport = mock.Mock()
        self.device.get_bugreport.return_value = self.bugreport
        self.collector = bugreport_collector.BugreportCollector(
            self.listener, self.device)
        self.collector.set_descriptive_name('MyTest')

    def _run_single_test(self, failed):
        self.collector.test_run_started('run', 1)
        self.collector.test_started(MOCK_TEST)
        if failed:
            self.collector.test_failed(MOCK_TEST, 'trace')
        self.collector.test_ended(MOCK_TEST, {})
        self.collector.test_run_ended(10, {})

    def test_events_are_forwarded(self):
        self._run_single_test(failed=True)

        self.listener.test_run_started.assert_called_once_with('run', 1)
        self.listener.test_started.assert_called_once_with(MOCK_TEST)
        self.listener.test_failed.assert_called_once_with(MOCK_TEST, 'trace')
        self.listener.test_ended.assert_called_once_with(MOCK_TEST, {})
        self.listener.test_run_ended.assert_called_once_with(10, {})

    def test_no_bugreport_without_predicates(self):
        self._run_single_test(failed=True)

        self.device.get_bugreport.assert_not_called()
        self.listener.test_log.assert_not_called()

    def test_bugreport_after_failed_testcase(self):
        self.collector.add_predicate(
            bugreport_collector.AFTER_FAILED_TESTCASES)

        self._run_single_test(failed=True)

        self.listener.test_log.assert_called_once_with(
            'MyTest_bugreport_1', LogDataType.BUGREPORT, self.bugreport)
        self.bugreport.cancel.assert_called_once_with()
        self.assertEqual(self.collector.bugreport_count, 1)

    def test_no_bugreport_after_passing_testcase(self):
        self.collector.add_predicate(
            bugreport_collector.AFTER_FAILED_TESTCASES)

        self._run_single_test(failed=False)

        self.device.get_bugreport.assert_not_called()

    def test_bugreport_after_failed_run(self):
        self.collector.add_predicate(
            bugreport_collector.AFTER_FAILED_TESTRUNS)

        self.collector.test_run_started('run', 0)
        self.collector.test_run_failed('crashed')
        self.collector.test_run_ended(0, {})

        self.listener.test_run_failed.assert_called_once_with('crashed')
        self.assertEqual(self.listener.test_log.call_count, 1)

    def test_bugreport_at_end_of_run(self):
        self.collector.add_predicate(bugreport_collector.AT_END_OF_RUN)

        self._run_single_test(failed=False)

        self.assertEqual(self.listener.test_log.call_count, 1)

    def test_missing_bugreport_is_not_logged(self):
        self.device.get_bugreport.return_value = None
        self.collector.add_predicate(
            bugreport_collector.AFTER_FAILED_TESTCASES)

        self._run_single_test(failed=True)

        self.listener.test_log.assert_not_called()


if __name__ == '__main__':
    unittest.main()

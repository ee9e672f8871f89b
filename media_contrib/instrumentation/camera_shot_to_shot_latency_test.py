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
import os

from mobly import asserts

from media_contrib.device.instrumentation_runner import RemoteInstrumentationRunner
from media_contrib.device.test_device import MountPoint
from media_contrib.instrumentation import shot_to_shot_output_parser
from media_contrib.result import bugreport_collector
from media_contrib.result.bugreport_collector import BugreportCollector
from media_contrib.result.listener import LogDataType

TEST_CLASS_NAME = 'com.android.camera.stress.ShotToShotLatency'
TEST_PACKAGE_NAME = 'com.google.android.camera.tests'
TEST_RUNNER_NAME = 'android.test.InstrumentationTestRunner'

TEST_RUN_NAME = 'CameraLatency'
OUTPUT_FILE_NAME = 'mediaStressOut.txt'


class CameraShotToShotLatencyTest(object):
    """Runs the camera shot to shot latency instrumentation and reports the
    mean and standard deviation it measured.
    """

    def __init__(self, device=None):
        """
        Args:
            device: The TestDevice to run on. May also be bound later through
                the device property.
        """
        self._device = device

    @property
    def device(self):
        return self._device

    @device.setter
    def device(self, device):
        self._device = device

    def run(self, listener):
        """Runs the test and reports the latency metrics.

        Args:
            listener: TestInvocationListener receiving results.

        Raises:
            signals.TestFailure: No device is bound, or the instrumentation
                run did not complete successfully.
            DeviceNotAvailableError: The device stopped responding.
        """
        asserts.assert_true(self._device is not None,
                            'No device bound to %s' % self.__class__.__name__)

        runner = RemoteInstrumentationRunner(TEST_PACKAGE_NAME,
                                             TEST_RUNNER_NAME,
                                             class_name=TEST_CLASS_NAME)
        bug_listener = BugreportCollector(listener, self._device)
        bug_listener.add_predicate(bugreport_collector.AFTER_FAILED_TESTCASES)
        bug_listener.set_descriptive_name(
            '%s.%s' % (type(self).__module__, type(self).__name__))
        asserts.assert_true(
            self._device.run_instrumentation_tests(runner, bug_listener),
            'Instrumentation %s did not complete successfully' % runner)

        metrics = self._parse_output_file()
        self._report_metrics(bug_listener, TEST_RUN_NAME, metrics)
        self._cleanup_device()

    def _cleanup_device(self):
        """Wipes the device's external storage of test collateral from prior
        runs. Note that all photos on the test device will be removed.
        """
        ext_store = self._device.get_mount_point(MountPoint.EXTERNAL_STORAGE)
        self._device.execute_shell_command('rm -r %s/DCIM' % ext_store)
        self._device.execute_shell_command(
            'rm %s/%s' % (ext_store, OUTPUT_FILE_NAME))

    def _parse_output_file(self):
        """Pulls the instrumentation's result file and parses the metrics.

        Returns: dict of metrics; missing entries were not found in the file.
        """
        output_file = self._device.pull_file_from_external(OUTPUT_FILE_NAME)
        if output_file is None:
            self._device.log.error('Unable to pull %s from the device',
                                   OUTPUT_FILE_NAME)
            return {}
        try:
            return shot_to_shot_output_parser.parse_output_file(output_file)
        finally:
            os.remove(output_file)

    def _report_metrics(self, listener, run_name, metrics):
        """Reports metrics in an empty test run created to hold them.

        Args:
            listener: TestInvocationListener receiving results.
            run_name: The name of the test run.
            metrics: dict of metrics for the run.
        """
        bugreport = self._device.get_bugreport()
        if bugreport is not None:
            try:
                listener.test_log('bugreport', LogDataType.BUGREPORT,
                                  bugreport)
            finally:
                bugreport.cancel()

        logging.debug('About to report metrics: %s', metrics)
        listener.test_run_started(run_name, 0)
        listener.test_run_ended(0, metrics)

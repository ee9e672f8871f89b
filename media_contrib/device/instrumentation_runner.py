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

DEFAULT_RUNNER = 'android.test.InstrumentationTestRunner'


class RemoteInstrumentationRunner(object):
    """Identifies an on-device instrumentation to run: the test package, its
    runner and optionally a single test class or method.
    """

    def __init__(self, package_name, runner_name=DEFAULT_RUNNER,
                 class_name=None, method_name=None):
        if not package_name:
            raise ValueError('An instrumentation package name is required.')
        if method_name and not class_name:
            raise ValueError('A test method requires a test class.')
        self.package_name = package_name
        self.runner_name = runner_name
        self.class_name = class_name
        self.method_name = method_name

    @property
    def run_name(self):
        """Name under which the test run is reported."""
        return self.package_name

    def get_options(self):
        """Returns the `-e` options passed to `am instrument`."""
        options = {}
        if self.class_name:
            target = self.class_name
            if self.method_name:
                target = '%s#%s' % (target, self.method_name)
            options['class'] = target
        return options

    def __repr__(self):
        return '<RemoteInstrumentationRunner %s/%s %s>' % (
            self.package_name, self.runner_name, self.get_options())

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
"""Errors raised by media_contrib test cases and preparers."""

from mobly import signals


class MediaContribError(signals.TestError):
    """Base error for media_contrib. Reported as a test error by the runner."""


class DeviceNotAvailableError(MediaContribError):
    """Raised when the device under test stops responding.

    This is always fatal for the current operation and must be propagated.
    """


class TargetSetupError(MediaContribError):
    """Raised when a target preparer fails to set up the device."""

    def __init__(self, message, device_descriptor=None):
        if device_descriptor:
            message = '%s [device: %s]' % (message, device_descriptor)
        super().__init__(message)
        self.device_descriptor = device_descriptor

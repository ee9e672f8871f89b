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

import collections
import enum
import logging
import os
import tempfile

from media_contrib.error import TargetSetupError

CONFIG_ALIAS = 'write-restore-file'
FILE_NAME_OPTION = 'file-name'
CONTENTS_OPTION = 'contents'

# existed_before decides the teardown action. saved_content holds the original
# file bytes when existed_before is True, and is None otherwise.
BackupState = collections.namedtuple('BackupState',
                                     ['existed_before', 'saved_content'])


class PreparerState(enum.Enum):
    NOT_SET_UP = 'not_set_up'
    SETUP_DONE = 'setup_done'
    TORN_DOWN = 'torn_down'


class WriteAndRestoreFileTargetPreparer(object):
    """Overwrites a file on the device for the duration of a test run.

    set_up() saves the current file, if any, and writes the new contents.
    tear_down() puts the original file back, or removes the file if it did not
    exist before set_up().
    """

    def __init__(self, file_name, contents):
        """
        Args:
            file_name: Path of the file on the device.
            contents: String written to the file during the test run.
        """
        self.file_name = file_name
        self.contents = contents
        self.state = PreparerState.NOT_SET_UP
        self._backup = None

    @classmethod
    def from_config(cls, config):
        """Creates a preparer from the write-restore-file section of an
        options ConfigWrapper.
        """
        section = config.get_config(CONFIG_ALIAS)
        return cls(section.get_str(FILE_NAME_OPTION),
                   section.get_str(CONTENTS_OPTION))

    @property
    def backup(self):
        return self._backup

    def _back_up(self, device):
        if not device.does_file_exist(self.file_name):
            return BackupState(existed_before=False, saved_content=None)
        local_copy = device.pull_file(self.file_name)
        if local_copy is None:
            raise TargetSetupError(
                'Failed to back up %s before overwriting it' % self.file_name,
                device.device_descriptor)
        try:
            with open(local_copy, 'rb') as f:
                return BackupState(existed_before=True,
                                   saved_content=f.read())
        finally:
            os.remove(local_copy)

    def set_up(self, device):
        """Saves the current file and writes the new contents.

        Args:
            device: The TestDevice to prepare.

        Raises:
            TargetSetupError: The file could not be backed up or written.
            DeviceNotAvailableError: The device stopped responding.
        """
        self._backup = self._back_up(device)
        self.state = PreparerState.SETUP_DONE
        logging.debug('Backed up %s (existed before: %s)', self.file_name,
                      self._backup.existed_before)
        if not device.push_string(self.contents, self.file_name):
            raise TargetSetupError('Failed to push string to file',
                                   device.device_descriptor)

    def tear_down(self, device, exception=None):
        """Restores the file saved by set_up().

        Args:
            device: The TestDevice to restore.
            exception: The error that ended the test run, if any. Unused; the
                file is restored the same way regardless.

        Raises:
            DeviceNotAvailableError: The device stopped responding.
        """
        if self.state != PreparerState.SETUP_DONE:
            logging.info('Skipping restore of %s, preparer is %s',
                         self.file_name, self.state.value)
            return
        if not self._backup.existed_before:
            device.execute_shell_command('rm -f %s' % self.file_name)
        else:
            with tempfile.NamedTemporaryFile(delete=False) as f:
                f.write(self._backup.saved_content)
                local_copy = f.name
            try:
                if not device.push_file(local_copy, self.file_name):
                    device.log.error('Failed to restore %s', self.file_name)
            finally:
                os.remove(local_copy)
        self._backup = None
        self.state = PreparerState.TORN_DOWN

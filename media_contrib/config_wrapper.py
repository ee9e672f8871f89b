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
import copy
import logging
import os

import yaml


class InvalidParamError(Exception):
    pass


def _is_dict(o):
    return isinstance(o, dict) or isinstance(o, collections.UserDict)


class ConfigWrapper(collections.UserDict):
    """Options for a test case or target preparer.

    Nested dicts are wrapped recursively, so a preparer can pull its own
    section out of a shared options file by alias:

        write-restore-file:
          file-name: /data/local/tmp/flag.txt
          contents: enabled
    """

    def __init__(self, config=None):
        """Initialize a ConfigWrapper

        Args:
            config: A dict representing the preparer/test options
        """
        if config is None:
            config = {}
        super().__init__(
            {
                key: (ConfigWrapper(copy.deepcopy(val))
                      if _is_dict(val) else val)
                for key, val in config.items()
            }
        )

    def get(self, param_name, default=None, verify_fn=lambda _: True,
            failure_msg=''):
        """Get an option, verifying that the value is valid with verify_fn.

        Args:
            param_name: Name of the option to fetch
            default: Value returned when the option is missing.
            verify_fn: Callable to verify the value. If it returns False,
                an InvalidParamError is raised.
            failure_msg: Exception message upon verify_fn failure.
        """
        result = self.data.get(param_name, default)
        if not verify_fn(result):
            raise InvalidParamError('Invalid value "%s" for param %s. %s'
                                    % (result, param_name, failure_msg))
        return result

    def get_config(self, param_name):
        """Get a sub-config. Returns an empty ConfigWrapper if no such
        sub-config is found.
        """
        return ConfigWrapper(copy.deepcopy(self.get(param_name, default={})))

    def get_str(self, param_name, default=None):
        """Get string option. Raises if the value is missing or not a str."""
        return self.get(param_name, default=default,
                        verify_fn=lambda val: isinstance(val, str),
                        failure_msg='Param must be of type str.')


def load_config(path):
    """Loads a YAML options file into a ConfigWrapper.

    Args:
        path: Path to the options file on the host.

    Returns: The loaded options as a ConfigWrapper.
    """
    if not os.path.exists(path):
        raise InvalidParamError('Options file %s does not exist' % path)
    try:
        with open(path, mode='r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise InvalidParamError(
            'Cannot open or parse options file %s. Error: %s' % (path, e))
    if config_dict is None:
        config_dict = {}
    if not _is_dict(config_dict):
        raise InvalidParamError(
            'Options file %s must contain a mapping at the top level.' % path)
    logging.debug('Loaded options from %s: %s', path, config_dict)
    return ConfigWrapper(config_dict)

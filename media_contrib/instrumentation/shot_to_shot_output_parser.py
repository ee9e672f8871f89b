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
"""Parser for the result file written by the ShotToShotLatency camera
instrumentation. The file holds exactly two lines:

    Shot to shot latency - mean: 1234.5678901
    Shot to shot latency - standard deviation: 123.45678901

Values are reported exactly as written on the device.
"""

import logging
import re

LATENCY_KEY_MEAN = 'Shot2ShotLatencyMean'
LATENCY_KEY_SD = 'Shot2ShotLatencySD'

MEAN_PATTERN = re.compile(
    r'(Shot to shot latency - mean:)(\s*)(\d+\.\d*)', re.ASCII)
STANDARD_DEVIATION_PATTERN = re.compile(
    r'(Shot to shot latency - standard deviation:)(\s*)(\d+\.\d*)', re.ASCII)


def _match_value(pattern, line):
    """Returns the numeric text captured from line, or None."""
    match = pattern.fullmatch(line)
    if match is None:
        return None
    return match.group(3)


def parse_output_lines(lines):
    """Parses the mean and standard deviation out of the result lines.

    Args:
        lines: An iterable over the lines of the result file.

    Returns: dict mapping metric key to its value as a string. A key is
        omitted if its line is missing or malformed.
    """
    metrics = {}
    lines = iter(lines)
    line_mean = next(lines, None)
    line_sd = next(lines, None)
    if line_mean is not None:
        line_mean = line_mean.rstrip('\r\n')
    if line_sd is not None:
        line_sd = line_sd.rstrip('\r\n')

    if line_mean is None or line_sd is None:
        logging.error('Unable to find output data; hit EOF: \nmean:%s\nsd:%s',
                      line_mean, line_sd)
        return metrics

    mean = _match_value(MEAN_PATTERN, line_mean)
    if mean is not None:
        metrics[LATENCY_KEY_MEAN] = mean
    else:
        logging.error('Unable to find mean: %s', line_mean)

    sd = _match_value(STANDARD_DEVIATION_PATTERN, line_sd)
    if sd is not None:
        metrics[LATENCY_KEY_SD] = sd
    else:
        logging.error('Unable to find standard deviation: %s', line_sd)
    return metrics


def parse_output_file(path):
    """Parses the result file pulled from the device.

    Read errors are logged and produce an empty result.

    Args:
        path: Path to the result file on the host.

    Returns: dict mapping metric key to its value as a string.
    """
    try:
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            return parse_output_lines(f)
    except OSError as e:
        logging.error('Error reading from file %s: %s', path, e)
        return {}

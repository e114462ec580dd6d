#-------------------------------------------------------------------------
# Copyright (c) Microsoft.  All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#--------------------------------------------------------------------------
import re

_ERROR_NAME_EMPTY = \
    'Invalid {0} name. The name may not be null, empty, or whitespace only.'
_ERROR_NAME_RESERVED = 'Invalid {0} name. This name is reserved.'
_ERROR_NAME_INVALID = \
    'Invalid {0} name. Check MSDN for more information about valid naming.'
_ERROR_NAME_LENGTH = \
    'Invalid {0} name length. The name must be between {1} and {2} characters long.'

SHARE_NAME_MIN_LENGTH = 3
SHARE_NAME_MAX_LENGTH = 63
FILE_NAME_MIN_LENGTH = 1
FILE_NAME_MAX_LENGTH = 255

_SHARE_NAME_PATTERN = re.compile(r'^[a-z0-9](?:[a-z0-9]|-(?=[a-z0-9]))*$')
_FILE_NAME_ILLEGAL_CHARS = re.compile(r'["\\/:|<>*?\x00-\x1f\x7f]')

_RESERVED_FILE_NAMES = frozenset(
    ['.', '..', 'CLOCK$', 'CON', 'PRN', 'AUX', 'NUL'] +
    ['COM{}'.format(i) for i in range(1, 10)] +
    ['LPT{}'.format(i) for i in range(1, 10)]
)


def validate_share_name(share_name):
    '''
    Checks that a share name is 3 to 63 characters of lowercase letters,
    digits and single dashes, starting and ending with a letter or digit.

    :param str share_name: The name to check.
    :raises ValueError: if the name is not a valid share name.
    '''
    if _is_null_or_whitespace(share_name):
        raise ValueError(_ERROR_NAME_EMPTY.format('share'))

    if not SHARE_NAME_MIN_LENGTH <= len(share_name) <= SHARE_NAME_MAX_LENGTH:
        raise ValueError(_ERROR_NAME_LENGTH.format(
            'share', SHARE_NAME_MIN_LENGTH, SHARE_NAME_MAX_LENGTH))

    if not _SHARE_NAME_PATTERN.match(share_name):
        raise ValueError(_ERROR_NAME_INVALID.format('share'))


def validate_directory_name(directory_name):
    '''
    Checks a single directory name. The same rules as for file names apply.

    :param str directory_name: The name to check.
    :raises ValueError: if the name is not a valid directory name.
    '''
    _validate_file_or_directory_name(directory_name, 'directory')


def validate_file_name(file_name):
    '''
    Checks that a file name is 1 to 255 characters long, contains none of
    ``" \\ / : | < > * ?`` or control characters and is not a reserved
    device name.

    :param str file_name: The name to check.
    :raises ValueError: if the name is not a valid file name.
    '''
    _validate_file_or_directory_name(file_name, 'file')


def _validate_file_or_directory_name(name, kind):
    if _is_null_or_whitespace(name):
        raise ValueError(_ERROR_NAME_EMPTY.format(kind))

    if not FILE_NAME_MIN_LENGTH <= len(name) <= FILE_NAME_MAX_LENGTH:
        raise ValueError(_ERROR_NAME_LENGTH.format(
            kind, FILE_NAME_MIN_LENGTH, FILE_NAME_MAX_LENGTH))

    if _FILE_NAME_ILLEGAL_CHARS.search(name):
        raise ValueError(_ERROR_NAME_INVALID.format(kind))

    if name.upper() in _RESERVED_FILE_NAMES:
        raise ValueError(_ERROR_NAME_RESERVED.format(kind))


def _is_null_or_whitespace(name):
    return name is None or not name.strip()

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
from xml.etree import ElementTree as ETree

from azure.common import (
    AzureException,
    AzureHttpError,
    AzureMissingResourceHttpError,
    AzureConflictHttpError,
)

_ERROR_STORAGE_MISSING_INFO = \
    'You need to provide an account name and either a SAS token or a custom domain'
_ERROR_EMULATOR_DOES_NOT_SUPPORT_FILES = \
    'The emulator does not support the file service.'
_ERROR_VALUE_NONE = '{0} should not be None.'
_ERROR_VALUE_NEGATIVE = '{0} should not be negative.'
_ERROR_VALUE_SHOULD_BE_BYTES = '{0} should be of type bytes.'
_ERROR_VALUE_SHOULD_BE_INT = '{0} should be an integer.'
_ERROR_VALUE_SHOULD_BE_STREAM = '{0} should be a file-like object with a read method.'
_ERROR_START_END_NEEDED_FOR_MD5 = \
    'Both end_range and start_range need to be specified ' + \
    'for getting content MD5.'
_ERROR_RANGE_TOO_LARGE_FOR_MD5 = \
    'Getting content MD5 for a range greater than 4MB ' + \
    'is not supported.'
_ERROR_INVALID_FILE_SIZE = \
    'The file size must be between 0 and {0} bytes.'
_ERROR_INVALID_RANGE_LENGTH = 'length must be greater than 0.'
_ERROR_RANGE_EXCEEDS_FILE = \
    'The range [{0}, {1}) exceeds the file length {2}. ' + \
    'Resize the file before writing past its end.'
_ERROR_RANGE_PAST_END = \
    'The range [{0}, {1}) extends past the end of the file ({2} bytes).'
_ERROR_NOT_ENOUGH_DATA = \
    'The source supplied {0} bytes but {1} bytes were requested.'
_ERROR_ZERO_LENGTH_RANGE = \
    'A ranged download may not request zero bytes; omit the length to read to the end of the file.'
_ERROR_BUFFER_OFFSET = 'buffer_offset must be within the bounds of the buffer.'
_ERROR_BUFFER_TOO_SMALL = \
    'The buffer has {0} bytes available at offset {1} but {2} bytes are required.'
_ERROR_MD5_MISMATCH = \
    'MD5 mismatch. Expected value is \'{0}\', computed value is \'{1}\'.'
_ERROR_STREAM_CLOSED = 'I/O operation on a closed stream.'
_ERROR_STREAM_NOT_MARKED = 'The stream has not been marked.'
_ERROR_MARK_EXPIRED = \
    'More than {0} bytes were read since the mark was set; the mark is no longer valid.'
_ERROR_PARALLEL_NOT_SEEKABLE = 'Parallel operations require a seekable stream.'


class RangeOutOfBoundsError(AzureException, IndexError):
    '''
    Raised when a range request is well formed but falls outside of the
    bounds of the file, or asks for zero bytes.
    '''


class FileIntegrityError(AzureException):
    '''
    Raised when the MD5 of transferred content does not match the expected
    value.
    '''


class AzurePreconditionFailedHttpError(AzureHttpError):
    '''
    The conditional headers of a request did not match the resource (412).
    '''


class AzureRangeNotSatisfiableHttpError(AzureHttpError, RangeOutOfBoundsError):
    '''
    The service could not satisfy the requested range (416).
    '''


class AzureMd5MismatchHttpError(AzureHttpError, FileIntegrityError):
    '''
    The service rejected a body whose Content-MD5 did not match (400).
    '''


_STATUS_ERRORS = {
    404: AzureMissingResourceHttpError,
    409: AzureConflictHttpError,
    412: AzurePreconditionFailedHttpError,
    416: AzureRangeNotSatisfiableHttpError,
}

_CODE_ERRORS = {
    'Md5Mismatch': AzureMd5MismatchHttpError,
    'InvalidRange': AzureRangeNotSatisfiableHttpError,
    'ConditionNotMet': AzurePreconditionFailedHttpError,
}


def _dont_fail_on_exist(error):
    ''' don't throw exception if the resource exists.
    This is called by create_* APIs with fail_on_exist=False'''
    if isinstance(error, AzureConflictHttpError):
        return False
    else:
        raise error


def _dont_fail_not_exist(error):
    ''' don't throw exception if the resource doesn't exist.
    This is called by delete_* APIs with fail_not_exist=False'''
    if isinstance(error, AzureMissingResourceHttpError):
        return False
    else:
        raise error


def _parse_error_body(body):
    if not body:
        return None, None
    try:
        error = ETree.fromstring(body)
    except ETree.ParseError:
        return None, None
    return error.findtext('Code'), error.findtext('Message')


def _http_error_handler(http_error):
    ''' Simple error handler for azure.'''
    code, detail = _parse_error_body(http_error.respbody)
    code = http_error.respheader.get('x-ms-error-code') or code

    message = str(http_error)
    if detail:
        message += '\n' + detail

    error_class = _CODE_ERRORS.get(code) or _STATUS_ERRORS.get(http_error.status, AzureHttpError)
    error = error_class(message, http_error.status)
    error.error_code = code
    raise error


def _validate_not_none(param_name, param):
    if param is None:
        raise ValueError(_ERROR_VALUE_NONE.format(param_name))


def _validate_type_int(param_name, param):
    if isinstance(param, bool) or not isinstance(param, int):
        raise TypeError(_ERROR_VALUE_SHOULD_BE_INT.format(param_name))

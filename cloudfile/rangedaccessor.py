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
import logging
from io import BytesIO

from azure.common import AzureHttpError

from ._chunking import (
    _download_file_chunks,
    _upload_file_chunks,
)
from ._constants import MAX_FILE_SIZE
from ._error import (
    RangeOutOfBoundsError,
    AzureRangeNotSatisfiableHttpError,
    _dont_fail_not_exist,
    _validate_not_none,
    _validate_type_int,
    _ERROR_BUFFER_OFFSET,
    _ERROR_BUFFER_TOO_SMALL,
    _ERROR_INVALID_FILE_SIZE,
    _ERROR_INVALID_RANGE_LENGTH,
    _ERROR_NOT_ENOUGH_DATA,
    _ERROR_PARALLEL_NOT_SEEKABLE,
    _ERROR_RANGE_EXCEEDS_FILE,
    _ERROR_RANGE_PAST_END,
    _ERROR_VALUE_NEGATIVE,
    _ERROR_VALUE_SHOULD_BE_STREAM,
    _ERROR_ZERO_LENGTH_RANGE,
)
from ._serialization import _len_plus

logger = logging.getLogger(__name__)


class RangedFileAccessor(object):

    '''
    Translates reads, writes and clears at arbitrary offsets and lengths into
    the range operations the File service accepts, and keeps a file handle's
    length, etag and last modified time in step with the service.

    Arguments are validated before any request is sent. Writes and clears
    are split into ranges of at most ``file_service.MAX_RANGE_SIZE`` bytes.
    Downloads fetch ``MAX_SINGLE_GET_SIZE`` bytes first and the remainder in
    ``MAX_CHUNK_GET_SIZE`` chunks pinned to the etag of the first response.

    A handle is any object exposing ``share_name``, ``directory_name``,
    ``name``, ``properties`` (:class:`~cloudfile.models.FileProperties`) and
    ``metadata``; usually a :class:`~cloudfile.cloudfile.CloudFile`.

    :ivar ~cloudfile.fileservice.FileService file_service:
        The transport client requests are sent through.
    '''

    def __init__(self, file_service):
        _validate_not_none('file_service', file_service)
        self.file_service = file_service

    def create(self, handle, length, timeout=None):
        '''
        Creates the file, or replaces an existing one, with the given length.
        The handle's content settings and metadata are sent with the request.
        '''
        _validate_file_size(length)
        logger.debug('Creating file %s with length %s', handle.name, length)

        properties = self.file_service.create_file(
            handle.share_name,
            handle.directory_name,
            handle.name,
            length,
            content_settings=handle.properties.content_settings,
            metadata=handle.metadata,
            timeout=timeout)

        handle.properties.content_length = length
        _update_etag_and_last_modified(handle, properties)

    def resize(self, handle, new_length, timeout=None):
        '''
        Sets the length of the file. Growing the file exposes zeros; shrinking
        it discards the tail. Content settings are left untouched.
        '''
        _validate_file_size(new_length)
        logger.debug('Resizing file %s from %s to %s',
                     handle.name, handle.properties.content_length, new_length)

        properties = self.file_service.resize_file(
            handle.share_name,
            handle.directory_name,
            handle.name,
            new_length,
            timeout=timeout)

        handle.properties.content_length = new_length
        _update_etag_and_last_modified(handle, properties)

    def delete(self, handle, timeout=None):
        self.file_service.delete_file(
            handle.share_name,
            handle.directory_name,
            handle.name,
            timeout=timeout)

    def delete_if_exists(self, handle, timeout=None):
        '''
        Deletes the file if it exists.

        :return: True if the file was deleted, False if it did not exist.
        :rtype: bool
        '''
        try:
            self.delete(handle, timeout=timeout)
            return True
        except AzureHttpError as ex:
            _dont_fail_not_exist(ex)
            return False

    def exists(self, handle, timeout=None):
        '''
        Checks whether the file exists, refreshing the handle's properties and
        metadata when it does.

        :rtype: bool
        '''
        try:
            self.download_attributes(handle, timeout=timeout)
            return True
        except AzureHttpError as ex:
            _dont_fail_not_exist(ex)
            return False

    def download_attributes(self, handle, timeout=None):
        '''
        Replaces the handle's properties and metadata with the service's.
        Properties the service does not return become None.
        '''
        file = self.file_service.get_file_properties(
            handle.share_name,
            handle.directory_name,
            handle.name,
            timeout=timeout)

        handle.properties = file.properties
        handle.metadata = file.metadata

    def upload_properties(self, handle, timeout=None):
        '''
        Replaces all content settings of the file with the handle's.
        '''
        properties = self.file_service.set_file_properties(
            handle.share_name,
            handle.directory_name,
            handle.name,
            handle.properties.content_settings,
            timeout=timeout)

        _update_etag_and_last_modified(handle, properties)

    def upload_metadata(self, handle, timeout=None):
        '''
        Replaces all metadata of the file with the handle's.
        '''
        properties = self.file_service.set_file_metadata(
            handle.share_name,
            handle.directory_name,
            handle.name,
            metadata=handle.metadata,
            timeout=timeout)

        _update_etag_and_last_modified(handle, properties)

    def list_ranges(self, handle, start_range=None, end_range=None, timeout=None):
        '''
        :return: the written ranges of the file, ascending and disjoint.
        :rtype: list(:class:`~cloudfile.models.FileRange`)
        '''
        return self.file_service.list_ranges(
            handle.share_name,
            handle.directory_name,
            handle.name,
            start_range=start_range,
            end_range=end_range,
            timeout=timeout)

    def upload_range(self, handle, offset, length, data, validate_content=False,
                     max_connections=1, progress_callback=None, timeout=None):
        '''
        Writes length bytes of data into the file at offset. The file is never
        grown by a write; resize it first.

        :param handle: The file to write to.
        :param int offset: Byte offset to start writing at.
        :param int length: Number of bytes to write. Must be greater than 0.
        :param data: bytes-like object or readable stream with at least
            length bytes.
        :param bool validate_content:
            Send the MD5 of each range so the service can reject corrupted
            bodies.
        :param int max_connections:
            Number of ranges to upload in parallel.
        :param progress_callback:
            Callback with signature function(current, total).
        :param int timeout:
            The timeout parameter is expressed in seconds, per request.
        :raises ValueError:
            if the range is invalid or, when the handle's length is known,
            extends past the end of the file.
        :raises ~cloudfile._error.AzureRangeNotSatisfiableHttpError:
            if the handle's length is unknown (None) and the range extends
            past the end of the remote file. Call :meth:`download_attributes`
            first to have such writes rejected locally.
        '''
        _validate_write_range(handle, offset, length)
        _validate_not_none('data', data)

        if isinstance(data, (bytes, bytearray, memoryview)):
            if len(data) < length:
                raise ValueError(_ERROR_NOT_ENOUGH_DATA.format(len(data), length))
            stream = BytesIO(bytes(data[:length]))
        elif hasattr(data, 'read'):
            available = _len_plus(data)
            if available is not None and available < length:
                raise ValueError(_ERROR_NOT_ENOUGH_DATA.format(available, length))
            stream = data
        else:
            raise TypeError(_ERROR_VALUE_SHOULD_BE_STREAM.format('data'))

        logger.debug('Uploading range [%s, %s) of file %s in ranges of %s bytes',
                     offset, offset + length, handle.name,
                     self.file_service.MAX_RANGE_SIZE)

        properties = _upload_file_chunks(
            self.file_service,
            handle.share_name,
            handle.directory_name,
            handle.name,
            offset,
            length,
            self.file_service.MAX_RANGE_SIZE,
            stream,
            max_connections,
            progress_callback,
            validate_content,
            timeout)

        _update_etag_and_last_modified(handle, properties)

    def clear_range(self, handle, offset, length, timeout=None):
        '''
        Zeroes length bytes starting at offset and removes them from the
        written ranges. The file length is unchanged.
        As with :meth:`upload_range`, a range past the end of the file is
        only rejected locally when the handle's length is known; otherwise
        the service rejects it with
        :class:`~cloudfile._error.AzureRangeNotSatisfiableHttpError`.
        '''
        _validate_write_range(handle, offset, length)

        end = offset + length
        range_size = self.file_service.MAX_RANGE_SIZE
        logger.debug('Clearing range [%s, %s) of file %s in ranges of %s bytes',
                     offset, end, handle.name, range_size)

        for start in range(offset, end, range_size):
            properties = self.file_service.clear_range(
                handle.share_name,
                handle.directory_name,
                handle.name,
                start,
                min(start + range_size, end) - 1,
                timeout=timeout)

            _update_etag_and_last_modified(handle, properties)

    def download_range(self, handle, offset, length, stream, validate_content=False,
                       max_connections=1, progress_callback=None, if_match=None,
                       timeout=None):
        '''
        Writes length bytes of the file starting at offset to stream, in
        offset order. Unwritten regions read as zeros.

        :param handle: The file to read.
        :param int offset: Byte offset to start reading at.
        :param int length:
            Number of bytes to read, or None to read to the end of the file.
            Zero is rejected.
        :param stream: Opened file/stream to write to.
        :param bool validate_content:
            Have the service return the MD5 of each range and verify it.
        :param int max_connections:
            Set to 2 or greater to fetch the chunks after the first get in
            parallel. The stream must then be seekable.
        :param progress_callback:
            Callback with signature function(current, total).
        :param str if_match:
            Only read if the file's etag matches this value.
        :param int timeout:
            The timeout parameter is expressed in seconds, per request.
        :return: the file's properties and metadata as of the first response.
        :rtype: :class:`~cloudfile.models.File`
        :raises RangeOutOfBoundsError:
            if the range is empty or falls outside of the file.
        '''
        _validate_read_range(offset, length)
        _validate_not_none('stream', stream)
        if max_connections > 1 and not _is_seekable(stream):
            raise ValueError(_ERROR_PARALLEL_NOT_SEEKABLE)

        return self._download(handle, offset, length, lambda size: stream,
                              validate_content, max_connections,
                              progress_callback, if_match, timeout)

    def download_range_to_bytes(self, handle, offset, length, buffer, buffer_offset=0,
                                validate_content=False, max_connections=1,
                                progress_callback=None, if_match=None, timeout=None):
        '''
        Reads length bytes of the file starting at offset into buffer at
        buffer_offset. The buffer is not touched if the content does not fit.
        buffer_offset may equal len(buffer) only when nothing is to be
        written, as when reading an empty file to its end.

        :param bytearray buffer: The caller-owned buffer to fill.
        :param int buffer_offset: Index in buffer to start writing at.
        :return: the number of bytes written to buffer.
        :rtype: int
        '''
        _validate_read_range(offset, length)
        _validate_not_none('buffer', buffer)
        if not isinstance(buffer, (bytearray, memoryview)):
            raise TypeError('buffer should be a bytearray.')
        _validate_type_int('buffer_offset', buffer_offset)
        if buffer_offset < 0 or buffer_offset > len(buffer):
            raise ValueError(_ERROR_BUFFER_OFFSET)
        if length is not None and buffer_offset + length > len(buffer):
            raise ValueError(_ERROR_BUFFER_TOO_SMALL.format(
                len(buffer) - buffer_offset, buffer_offset, length))

        writer = _BufferWriter(buffer, buffer_offset)

        def open_target(download_size):
            if buffer_offset + download_size > len(buffer):
                raise ValueError(_ERROR_BUFFER_TOO_SMALL.format(
                    len(buffer) - buffer_offset, buffer_offset, download_size))
            return writer

        self._download(handle, offset, length, open_target,
                       validate_content, max_connections,
                       progress_callback, if_match, timeout)

        return writer.written

    def _download(self, handle, offset, length, open_target, validate_content,
                  max_connections, progress_callback, if_match, timeout):
        service = self.file_service

        # The service only returns a range MD5 for ranges of at most 4MB
        first_get_size = service.MAX_SINGLE_GET_SIZE if not validate_content \
            else service.MAX_CHUNK_GET_SIZE
        if length is not None:
            first_get_size = min(first_get_size, length)

        try:
            file = service._get_file(
                handle.share_name,
                handle.directory_name,
                handle.name,
                start_range=offset,
                end_range=offset + first_get_size - 1,
                validate_content=validate_content,
                if_match=if_match,
                timeout=timeout)
        except AzureRangeNotSatisfiableHttpError:
            # An empty file has no satisfiable range, so a whole-file read
            # falls back to an unranged get.
            if offset != 0 or length is not None:
                raise
            file = service._get_file(
                handle.share_name,
                handle.directory_name,
                handle.name,
                if_match=if_match,
                timeout=timeout)

        content = file.content or b''
        file.content = None

        file_size = file.properties.content_length
        if file_size is None:
            file_size = len(content)
        download_end = file_size if length is None else offset + length
        if download_end > file_size:
            raise RangeOutOfBoundsError(
                _ERROR_RANGE_PAST_END.format(offset, download_end, file_size))

        download_size = download_end - offset

        logger.debug('Downloading range [%s, %s) of file %s: first get %s bytes, '
                     'then chunks of %s bytes',
                     offset, download_end, handle.name, len(content),
                     service.MAX_CHUNK_GET_SIZE)

        stream = open_target(download_size)
        stream.write(content)
        if progress_callback:
            progress_callback(len(content), download_size)

        if offset + len(content) < download_end:
            _download_file_chunks(
                service,
                handle.share_name,
                handle.directory_name,
                handle.name,
                offset + len(content),
                download_end,
                service.MAX_CHUNK_GET_SIZE,
                stream,
                max_connections,
                len(content),
                progress_callback,
                validate_content,
                file.properties.etag,
                timeout)

        file.properties.content_length = file_size
        if offset == 0 and length is None:
            # A whole-file read returns every attribute of the file
            handle.properties = file.properties
            handle.metadata = file.metadata
        else:
            handle.properties.content_length = file_size
            _update_etag_and_last_modified(handle, file.properties)
        return file


class _BufferWriter(object):
    '''
    Minimal seekable writer over a caller-owned bytearray, positions relative
    to the start offset.
    '''

    def __init__(self, buffer, start):
        self.buffer = buffer
        self.start = start
        self.position = 0
        self.written = 0

    def write(self, data):
        begin = self.start + self.position
        self.buffer[begin:begin + len(data)] = data
        self.position += len(data)
        self.written = max(self.written, self.position)
        return len(data)

    def seek(self, offset, whence=0):
        self.position = offset
        return offset

    def tell(self):
        return self.position

    def seekable(self):
        return True


def _update_etag_and_last_modified(handle, properties):
    if properties is not None:
        handle.properties.etag = properties.etag
        handle.properties.last_modified = properties.last_modified


def _is_seekable(stream):
    try:
        return stream.seekable()
    except AttributeError:
        return hasattr(stream, 'seek') and hasattr(stream, 'tell')


def _validate_file_size(length):
    _validate_type_int('length', length)
    if not 0 <= length <= MAX_FILE_SIZE:
        raise ValueError(_ERROR_INVALID_FILE_SIZE.format(MAX_FILE_SIZE))


def _validate_write_range(handle, offset, length):
    _validate_type_int('offset', offset)
    _validate_type_int('length', length)
    if offset < 0:
        raise ValueError(_ERROR_VALUE_NEGATIVE.format('offset'))
    if length <= 0:
        raise ValueError(_ERROR_INVALID_RANGE_LENGTH)

    file_length = handle.properties.content_length
    if file_length is not None and offset + length > file_length:
        raise ValueError(_ERROR_RANGE_EXCEEDS_FILE.format(offset, offset + length, file_length))


def _validate_read_range(offset, length):
    _validate_type_int('offset', offset)
    if offset < 0:
        raise ValueError(_ERROR_VALUE_NEGATIVE.format('offset'))
    if length is not None:
        _validate_type_int('length', length)
        if length < 0:
            raise ValueError(_ERROR_VALUE_NEGATIVE.format('length'))
        if length == 0:
            raise RangeOutOfBoundsError(_ERROR_ZERO_LENGTH_RANGE)

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
import hashlib
import logging
import os
from io import BytesIO

from ._common_conversion import _encode_base64
from ._deserialization import _validate_content_match
from ._error import (
    _validate_not_none,
    _validate_type_int,
    _ERROR_BUFFER_OFFSET,
    _ERROR_NOT_ENOUGH_DATA,
)
from .filestream import (
    FileReadStream,
    FileWriteStream,
)
from .models import FileProperties
from .namevalidator import (
    validate_directory_name,
    validate_file_name,
    validate_share_name,
)
from .rangedaccessor import RangedFileAccessor

logger = logging.getLogger(__name__)


class CloudFile(object):

    '''
    A local view of one file in a share. The name, properties and metadata
    held here are only sent to or refreshed from the service by explicit
    method calls; two handles on the same file see each other's changes after
    :meth:`download_attributes`.

    :ivar str share_name:
        Name of the share holding the file.
    :ivar str directory_name:
        Path of the directory holding the file, or None for the share root.
    :ivar str name:
        Name of the file.
    :ivar ~cloudfile.models.FileProperties properties:
        The length, etag, last modified time and content settings of the file
        as last seen or set locally.
    :ivar dict metadata:
        Name-value pairs associated with the file as metadata.
    :ivar int stream_min_read_size:
        Number of bytes a :class:`~cloudfile.filestream.FileReadStream`
        fetches per request. Defaults to 4MB.
    :ivar int stream_write_size:
        Number of bytes a :class:`~cloudfile.filestream.FileWriteStream`
        buffers before uploading a range. Defaults to 4MB.
    '''

    def __init__(self, file_service, share_name, directory_name, file_name):
        '''
        :param ~cloudfile.fileservice.FileService file_service:
            The client requests are sent through.
        :param str share_name:
            Name of the share.
        :param str directory_name:
            The path to the directory, segments separated by '/', or None.
        :param str file_name:
            Name of the file.
        '''
        _validate_not_none('file_service', file_service)
        validate_share_name(share_name)
        if directory_name:
            for segment in directory_name.strip('/').split('/'):
                validate_directory_name(segment)
        validate_file_name(file_name)

        self.file_service = file_service
        self.share_name = share_name
        self.directory_name = directory_name or None
        self.name = file_name
        self.properties = FileProperties()
        self.metadata = {}
        self.stream_min_read_size = 4 * 1024 * 1024
        self.stream_write_size = file_service.MAX_RANGE_SIZE
        self._accessor = RangedFileAccessor(file_service)

    @property
    def url(self):
        '''
        The url of the file, without any SAS token.
        '''
        return self.file_service.make_file_url(
            self.share_name, self.directory_name, self.name)

    def __repr__(self):
        return 'CloudFile({!r})'.format(self.url)

    def create(self, length, timeout=None):
        '''
        Creates the file with the given length, replacing any existing file.
        The local content settings and metadata are sent along.

        :param int length: The length in bytes, between 0 and 1TB.
        '''
        self._accessor.create(self, length, timeout=timeout)

    def resize(self, length, timeout=None):
        '''
        Resizes the file. Growing exposes zeros; shrinking discards the tail.

        :param int length: The new length in bytes, between 0 and 1TB.
        '''
        self._accessor.resize(self, length, timeout=timeout)

    def delete(self, timeout=None):
        self._accessor.delete(self, timeout=timeout)

    def delete_if_exists(self, timeout=None):
        '''
        :return: True if the file was deleted, False if it did not exist.
        :rtype: bool
        '''
        return self._accessor.delete_if_exists(self, timeout=timeout)

    def exists(self, timeout=None):
        '''
        :return: whether the file exists. If so, its attributes are refreshed.
        :rtype: bool
        '''
        return self._accessor.exists(self, timeout=timeout)

    def download_attributes(self, timeout=None):
        self._accessor.download_attributes(self, timeout=timeout)

    def upload_properties(self, timeout=None):
        self._accessor.upload_properties(self, timeout=timeout)

    def upload_metadata(self, timeout=None):
        self._accessor.upload_metadata(self, timeout=timeout)

    def list_ranges(self, start_range=None, end_range=None, timeout=None):
        return self._accessor.list_ranges(
            self, start_range=start_range, end_range=end_range, timeout=timeout)

    def upload_range(self, offset, length, data, validate_content=False,
                     max_connections=1, progress_callback=None, timeout=None):
        '''
        Writes length bytes of data at offset. Ranges past the end of the file
        raise ValueError once the length is known locally (after create,
        resize or :meth:`download_attributes`); on a fresh handle the service
        rejects them with
        :class:`~cloudfile._error.AzureRangeNotSatisfiableHttpError`.
        '''
        self._accessor.upload_range(
            self, offset, length, data,
            validate_content=validate_content,
            max_connections=max_connections,
            progress_callback=progress_callback,
            timeout=timeout)

    def clear_range(self, offset, length, timeout=None):
        '''
        Zeroes length bytes at offset. Bounds are checked as for
        :meth:`upload_range`.
        '''
        self._accessor.clear_range(self, offset, length, timeout=timeout)

    def download_range(self, offset, length, stream, validate_content=False,
                       max_connections=1, progress_callback=None, timeout=None):
        return self._accessor.download_range(
            self, offset, length, stream,
            validate_content=validate_content,
            max_connections=max_connections,
            progress_callback=progress_callback,
            timeout=timeout)

    def download_range_to_bytes(self, offset, length, buffer, buffer_offset=0,
                                validate_content=False, max_connections=1,
                                progress_callback=None, timeout=None):
        return self._accessor.download_range_to_bytes(
            self, offset, length, buffer,
            buffer_offset=buffer_offset,
            validate_content=validate_content,
            max_connections=max_connections,
            progress_callback=progress_callback,
            timeout=timeout)

    def upload(self, stream, length, validate_content=False, max_connections=1,
               progress_callback=None, timeout=None):
        '''
        Creates the file with the given length and fills it from stream.

        :param io.IOBase stream:
            Opened file/stream to upload as the file content.
        :param int length:
            Number of bytes to read from the stream.
        :param bool validate_content:
            Send the MD5 of each range so the service can reject corrupted
            bodies.
        :param int max_connections:
            Number of ranges to upload in parallel.
        :param progress_callback:
            Callback with signature function(current, total).
        :param int timeout:
            The timeout parameter is expressed in seconds, per request.
        '''
        _validate_not_none('stream', stream)
        self.create(length, timeout=timeout)
        if length > 0:
            self.upload_range(
                0, length, stream,
                validate_content=validate_content,
                max_connections=max_connections,
                progress_callback=progress_callback,
                timeout=timeout)

    def upload_from_bytes(self, buffer, index=0, count=None, **kwargs):
        '''
        Creates the file from count bytes of buffer starting at index. count
        defaults to the rest of the buffer.
        '''
        _validate_not_none('buffer', buffer)
        _validate_type_int('index', index)
        if index < 0 or index > len(buffer):
            raise ValueError(_ERROR_BUFFER_OFFSET)

        if count is None:
            count = len(buffer) - index
        _validate_type_int('count', count)
        if count < 0 or index + count > len(buffer):
            raise ValueError(_ERROR_NOT_ENOUGH_DATA.format(len(buffer) - index, count))

        stream = BytesIO(bytes(buffer[index:index + count]))
        self.upload(stream, count, **kwargs)

    def upload_text(self, text, encoding='utf-8', **kwargs):
        _validate_not_none('text', text)
        self.upload_from_bytes(text.encode(encoding), **kwargs)

    def upload_from_path(self, file_path, **kwargs):
        '''
        Creates the file from the content of a local file.
        '''
        _validate_not_none('file_path', file_path)
        length = os.path.getsize(file_path)
        with open(file_path, 'rb') as stream:
            self.upload(stream, length, **kwargs)

    def download(self, stream, validate_content=False, max_connections=1,
                 progress_callback=None, timeout=None):
        '''
        Downloads the whole file to stream.

        :param bool validate_content:
            Verify the MD5 of each range and, for a sequential download of a
            file with a stored content MD5, the MD5 of the whole content.
        :return: the file's properties and metadata.
        :rtype: :class:`~cloudfile.models.File`
        :raises ~cloudfile._error.FileIntegrityError:
            if the content does not match its MD5.
        '''
        _validate_not_none('stream', stream)

        target = stream
        if validate_content and max_connections == 1:
            target = _HashingWriter(stream)

        file = self._accessor.download_range(
            self, 0, None, target,
            validate_content=validate_content,
            max_connections=max_connections,
            progress_callback=progress_callback,
            timeout=timeout)

        stored_md5 = file.properties.content_settings.content_md5
        if target is not stream and stored_md5 is not None:
            _validate_content_match(stored_md5, target.content_md5)

        return file

    def download_to_bytes(self, buffer, buffer_offset=0, **kwargs):
        '''
        Downloads the whole file into buffer at buffer_offset.

        :return: the number of bytes written.
        :rtype: int
        '''
        return self.download_range_to_bytes(0, None, buffer, buffer_offset, **kwargs)

    def download_text(self, encoding='utf-8', **kwargs):
        stream = BytesIO()
        self.download(stream, **kwargs)
        return stream.getvalue().decode(encoding)

    def download_to_path(self, file_path, open_mode='wb', **kwargs):
        '''
        Downloads the whole file to a local path. If the download fails the
        local file is removed.
        '''
        _validate_not_none('file_path', file_path)
        try:
            with open(file_path, open_mode) as stream:
                return self.download(stream, **kwargs)
        except Exception:
            if os.path.isfile(file_path):
                logger.debug('Removing %s after a failed download', file_path)
                os.remove(file_path)
            raise

    def open_read(self, validate_content=False, timeout=None):
        '''
        Refreshes the file's attributes and opens a stream over its content
        as of now.

        :rtype: :class:`~cloudfile.filestream.FileReadStream`
        '''
        self.download_attributes(timeout=timeout)
        return FileReadStream(self, self._accessor, self.stream_min_read_size,
                              validate_content=validate_content, timeout=timeout)

    def open_write_new(self, length, store_content_md5=False,
                       validate_content=False, timeout=None):
        '''
        Creates the file with the given length and opens a stream writing from
        its start.

        :rtype: :class:`~cloudfile.filestream.FileWriteStream`
        '''
        self.create(length, timeout=timeout)
        return FileWriteStream(self, self._accessor, self.stream_write_size,
                               store_content_md5=store_content_md5,
                               validate_content=validate_content,
                               timeout=timeout)

    def open_write_existing(self, store_content_md5=False,
                            validate_content=False, timeout=None):
        '''
        Opens a stream writing from the start of an existing file. The file's
        attributes are refreshed first.

        :rtype: :class:`~cloudfile.filestream.FileWriteStream`
        :raises ~azure.common.AzureMissingResourceHttpError:
            if the file does not exist.
        '''
        self.download_attributes(timeout=timeout)
        return FileWriteStream(self, self._accessor, self.stream_write_size,
                               store_content_md5=store_content_md5,
                               validate_content=validate_content,
                               timeout=timeout)


class _HashingWriter(object):
    def __init__(self, stream):
        self.stream = stream
        self.md5 = hashlib.md5()

    def write(self, data):
        self.md5.update(data)
        return self.stream.write(data)

    @property
    def content_md5(self):
        return _encode_base64(self.md5.digest())

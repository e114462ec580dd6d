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
import io
import logging

from ._common_conversion import _encode_base64
from ._error import (
    _ERROR_MARK_EXPIRED,
    _ERROR_RANGE_EXCEEDS_FILE,
    _ERROR_STREAM_CLOSED,
    _ERROR_STREAM_NOT_MARKED,
)

logger = logging.getLogger(__name__)


class FileReadStream(io.RawIOBase):

    '''
    A read-only stream over the content of a file, as of the moment the
    stream was opened. Content is fetched in ranges of ``read_size`` bytes,
    each pinned with If-Match to the etag the file had at open, so a file
    that changes underneath the stream fails with
    :class:`~cloudfile._error.AzurePreconditionFailedHttpError` rather than
    returning mixed content.

    :meth:`mark` and :meth:`reset` allow re-reading up to ``read_limit``
    bytes without another request.

    A reset only notices a change made through the stream's own handle,
    by comparing the handle's etag with the one captured at open. A change
    made through another handle, or by another client, goes unseen until
    the stream next has to fetch from the service: the retained bytes are
    replayed as they were read, and only the first read past them raises
    the precondition error.
    '''

    def __init__(self, cloud_file, accessor, read_size, validate_content=False,
                 timeout=None):
        super(FileReadStream, self).__init__()
        self._file = cloud_file
        self._accessor = accessor
        self._read_size = read_size
        self._validate_content = validate_content
        self._timeout = timeout

        self._etag = cloud_file.properties.etag
        self._length = cloud_file.properties.content_length or 0
        self._position = 0

        self._buffer = b''
        self._buffer_start = 0

        self._mark = None
        self._read_limit = 0
        self._retained = bytearray()
        self._mark_expired = False

    @property
    def length(self):
        return self._length

    def readable(self):
        return True

    def tell(self):
        self._check_open()
        return self._position

    def readinto(self, b):
        self._check_open()
        count = 0
        while count < len(b) and self._position < self._length:
            buffer_end = self._buffer_start + len(self._buffer)
            if not self._buffer_start <= self._position < buffer_end:
                self._fill()

            start = self._position - self._buffer_start
            data = self._buffer[start:start + len(b) - count]
            b[count:count + len(data)] = data

            self._retain(data)
            self._position += len(data)
            count += len(data)

        return count

    def mark(self, read_limit):
        '''
        Remembers the current position. Up to read_limit bytes read after this
        call can be replayed by :meth:`reset`.
        '''
        self._check_open()
        self._mark = self._position
        self._read_limit = read_limit
        self._retained = bytearray()
        self._mark_expired = False

    def reset(self):
        '''
        Returns to the marked position. The retained bytes are replayed unless
        the file was changed through its handle since the stream was opened,
        in which case the next read goes back to the service.
        '''
        self._check_open()
        if self._mark is None:
            if self._mark_expired:
                raise OSError(_ERROR_MARK_EXPIRED.format(self._read_limit))
            raise OSError(_ERROR_STREAM_NOT_MARKED)

        self._position = self._mark
        if self._file.properties.etag != self._etag:
            logger.debug('File %s changed since the stream was opened; '
                         'discarding %s retained bytes',
                         self._file.name, len(self._retained))
            self._buffer = b''
            self._retained = bytearray()
        else:
            self._buffer = bytes(self._retained)
        self._buffer_start = self._mark

    def _fill(self):
        size = min(self._read_size, self._length - self._position)
        buffer = bytearray(size)
        self._accessor.download_range_to_bytes(
            self._file,
            self._position,
            size,
            buffer,
            validate_content=self._validate_content,
            if_match=self._etag,
            timeout=self._timeout)

        self._buffer = bytes(buffer)
        self._buffer_start = self._position

    def _retain(self, data):
        if self._mark is None:
            return

        # Bytes already retained are replayed after a reset; only keep new ones
        retained_end = self._mark + len(self._retained)
        skip = retained_end - self._position
        if skip >= len(data):
            return

        self._retained += data[max(skip, 0):]
        if len(self._retained) > self._read_limit:
            self._mark = None
            self._retained = bytearray()
            self._mark_expired = True

    def _check_open(self):
        if self.closed:
            raise ValueError(_ERROR_STREAM_CLOSED)


class FileWriteStream(io.RawIOBase):

    '''
    A write-only stream that writes sequentially from the start of an
    existing file. Writes are buffered and uploaded ``write_size`` bytes at a
    time; :meth:`flush` and :meth:`close` upload the remainder. The file is
    never grown: writing past its length raises ValueError.

    When ``store_content_md5`` is set, the MD5 of everything written is
    stored as the file's content MD5 on close.
    '''

    def __init__(self, cloud_file, accessor, write_size, store_content_md5=False,
                 validate_content=False, timeout=None):
        super(FileWriteStream, self).__init__()
        self._file = cloud_file
        self._accessor = accessor
        self._write_size = write_size
        self._validate_content = validate_content
        self._timeout = timeout

        self._length = cloud_file.properties.content_length or 0
        self._offset = 0
        self._buffer = bytearray()
        self._md5 = hashlib.md5() if store_content_md5 else None

    def writable(self):
        return True

    def tell(self):
        self._check_open()
        return self._offset + len(self._buffer)

    def write(self, b):
        self._check_open()
        data = bytes(b)
        start = self.tell()
        if start + len(data) > self._length:
            raise ValueError(_ERROR_RANGE_EXCEEDS_FILE.format(
                start, start + len(data), self._length))

        self._buffer += data
        if self._md5 is not None:
            self._md5.update(data)

        while len(self._buffer) >= self._write_size:
            self._upload(self._write_size)

        return len(data)

    def flush(self):
        self._check_open()
        if self._buffer:
            self._upload(len(self._buffer))

    def close(self):
        if self.closed:
            return

        try:
            self.flush()
            if self._md5 is not None:
                self._file.properties.content_settings.content_md5 = \
                    _encode_base64(self._md5.digest())
                self._accessor.upload_properties(self._file, timeout=self._timeout)
        finally:
            super(FileWriteStream, self).close()

    def _upload(self, size):
        chunk = bytes(self._buffer[:size])
        self._accessor.upload_range(
            self._file,
            self._offset,
            size,
            chunk,
            validate_content=self._validate_content,
            timeout=self._timeout)
        del self._buffer[:size]
        self._offset += size

    def _check_open(self):
        if self.closed:
            raise ValueError(_ERROR_STREAM_CLOSED)

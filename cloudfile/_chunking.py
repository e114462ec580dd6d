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
import concurrent.futures
import threading
from io import BytesIO

from ._error import (
    _ERROR_NOT_ENOUGH_DATA,
)
from ._serialization import _get_data_bytes_only


def _upload_file_chunks(file_service, share_name, directory_name, file_name,
                        offset, length, chunk_size, stream, max_connections,
                        progress_callback, validate_content, timeout):
    '''
    Writes length bytes read from stream into the file starting at offset,
    one put range request per chunk. Returns the ResourceProperties of the
    last range written.
    '''
    uploader = _FileChunkUploader(
        file_service,
        share_name,
        directory_name,
        file_name,
        offset,
        length,
        chunk_size,
        stream,
        max_connections > 1,
        progress_callback,
        validate_content,
        timeout
    )

    if progress_callback is not None:
        progress_callback(0, length)

    if max_connections > 1:
        with concurrent.futures.ThreadPoolExecutor(max_connections) as executor:
            list(executor.map(uploader.process_chunk, uploader.get_chunk_streams()))
    else:
        for chunk in uploader.get_chunk_streams():
            uploader.process_chunk(chunk)

    return uploader.last_properties


def _download_file_chunks(file_service, share_name, directory_name, file_name,
                          download_start, download_end, chunk_size, stream,
                          max_connections, progress, progress_callback,
                          validate_content, if_match, timeout):
    '''
    Downloads [download_start, download_end) in chunks and writes them to
    stream in offset order. Every request carries if_match so a file that
    changes mid-download fails with a precondition error.
    '''
    downloader = _FileChunkDownloader(
        file_service,
        share_name,
        directory_name,
        file_name,
        download_start,
        download_end,
        chunk_size,
        stream,
        max_connections > 1,
        progress,
        progress_callback,
        validate_content,
        if_match,
        timeout
    )

    if max_connections > 1:
        with concurrent.futures.ThreadPoolExecutor(max_connections) as executor:
            list(executor.map(downloader.process_chunk, downloader.get_chunk_offsets()))
    else:
        for chunk in downloader.get_chunk_offsets():
            downloader.process_chunk(chunk)


class _FileChunkUploader(object):
    def __init__(self, file_service, share_name, directory_name, file_name,
                 offset, length, chunk_size, stream, parallel,
                 progress_callback, validate_content, timeout):
        self.file_service = file_service
        self.share_name = share_name
        self.directory_name = directory_name
        self.file_name = file_name
        self.offset = offset
        self.length = length
        self.chunk_size = chunk_size
        self.stream = stream
        self.parallel = parallel
        self.progress_callback = progress_callback
        self.progress_total = 0
        self.progress_lock = threading.Lock() if parallel else None
        self.validate_content = validate_content
        self.timeout = timeout
        self.last_properties = None

    def get_chunk_streams(self):
        index = 0
        while index < self.length:
            data = b''
            read_size = min(self.chunk_size, self.length - index)

            # Buffer until we either reach the end of the stream or get a whole chunk.
            while len(data) < read_size:
                temp = self.stream.read(read_size - len(data))
                temp = _get_data_bytes_only('temp', temp)
                if temp == b'':
                    raise ValueError(_ERROR_NOT_ENOUGH_DATA.format(index + len(data), self.length))
                data += temp

            yield index, BytesIO(data)
            index += len(data)

    def process_chunk(self, chunk_data):
        chunk_bytes = chunk_data[1].read()
        chunk_offset = chunk_data[0]
        return self._upload_chunk_with_progress(chunk_offset, chunk_bytes)

    def _update_progress(self, length):
        if self.progress_callback is not None:
            if self.progress_lock is not None:
                with self.progress_lock:
                    self.progress_total += length
                    total = self.progress_total
            else:
                self.progress_total += length
                total = self.progress_total
            self.progress_callback(total, self.length)

    def _upload_chunk_with_progress(self, chunk_offset, chunk_data):
        properties = self._upload_chunk(chunk_offset, chunk_data)
        self._update_progress(len(chunk_data))
        return properties

    def _upload_chunk(self, chunk_offset, chunk_data):
        chunk_start = self.offset + chunk_offset
        chunk_end = chunk_start + len(chunk_data) - 1
        properties = self.file_service.update_range(
            self.share_name,
            self.directory_name,
            self.file_name,
            chunk_data,
            chunk_start,
            chunk_end,
            validate_content=self.validate_content,
            timeout=self.timeout
        )

        if self.progress_lock is not None:
            with self.progress_lock:
                self.last_properties = properties
        else:
            self.last_properties = properties

        return properties


class _FileChunkDownloader(object):
    def __init__(self, file_service, share_name, directory_name, file_name,
                 download_start, download_end, chunk_size, stream, parallel,
                 progress, progress_callback, validate_content, if_match,
                 timeout):
        self.file_service = file_service
        self.share_name = share_name
        self.directory_name = directory_name
        self.file_name = file_name
        self.chunk_size = chunk_size

        self.download_start = download_start
        self.download_end = download_end
        self.total_size = progress + download_end - download_start

        self.stream = stream
        self.stream_start = stream.tell() if parallel else None
        self.stream_lock = threading.Lock() if parallel else None
        self.progress_callback = progress_callback
        self.progress_total = progress
        self.progress_lock = threading.Lock() if parallel else None
        self.validate_content = validate_content
        self.if_match = if_match
        self.timeout = timeout

    def get_chunk_offsets(self):
        index = self.download_start
        while index < self.download_end:
            yield index
            index += self.chunk_size

    def process_chunk(self, chunk_start):
        chunk_end = min(chunk_start + self.chunk_size, self.download_end)
        chunk_data = self._download_chunk(chunk_start, chunk_end - 1)
        length = chunk_end - chunk_start
        if length > 0:
            self._write_to_stream(chunk_data, chunk_start)
            self._update_progress(length)

    def _update_progress(self, length):
        if self.progress_callback is not None:
            if self.progress_lock is not None:
                with self.progress_lock:
                    self.progress_total += length
                    total = self.progress_total
            else:
                self.progress_total += length
                total = self.progress_total
            self.progress_callback(total, self.total_size)

    def _write_to_stream(self, chunk_data, chunk_start):
        if self.stream_lock is not None:
            with self.stream_lock:
                self.stream.seek(self.stream_start + (chunk_start - self.download_start))
                self.stream.write(chunk_data)
        else:
            self.stream.write(chunk_data)

    def _download_chunk(self, chunk_start, chunk_end):
        response = self.file_service._get_file(
            self.share_name,
            self.directory_name,
            self.file_name,
            start_range=chunk_start,
            end_range=chunk_end,
            validate_content=self.validate_content,
            if_match=self.if_match,
            timeout=self.timeout
        )

        return response.content

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
import base64
import hashlib
import os
import unittest
from io import BytesIO

from azure.common import AzureMissingResourceHttpError

from cloudfile import (
    AzurePreconditionFailedHttpError,
    AzureRangeNotSatisfiableHttpError,
    CloudFile,
    ContentSettings,
    FileIntegrityError,
    FileRange,
    FileService,
    RangeOutOfBoundsError,
)
from cloudfile._constants import MAX_FILE_SIZE
from tests.testcase import (
    StorageTestCase,
    record,
)

#------------------------------------------------------------------------------
TEST_FILE_PREFIX = 'file'
FILE_PATH = 'file_output.temp.dat'
#------------------------------------------------------------------------------


class StorageCloudFileTest(StorageTestCase):

    def setUp(self):
        super(StorageCloudFileTest, self).setUp()

        self.fs = self._create_storage_service(FileService, self.settings)
        self.share_name = self.get_resource_name('utshare')

        # test chunking functionality by reducing the threshold
        # for chunking and the size of each chunk, otherwise
        # the tests would take too long to execute
        self.fs.MAX_SINGLE_GET_SIZE = 32 * 1024
        self.fs.MAX_CHUNK_GET_SIZE = 4 * 1024
        self.fs.MAX_RANGE_SIZE = 4 * 1024

    def tearDown(self):
        if not self.is_mock():
            self.fs.delete_share(self.share_name)
        if os.path.isfile(FILE_PATH):
            try:
                os.remove(FILE_PATH)
            except OSError:
                pass

        return super(StorageCloudFileTest, self).tearDown()

    #--Helpers-----------------------------------------------------------------
    def _create_share(self):
        self.fs.create_share(self.share_name)

    def _get_file_reference(self, name=None, directory_name=None):
        return CloudFile(self.fs, self.share_name, directory_name,
                         name or self.get_resource_name(TEST_FILE_PREFIX))

    def _create_file_with_data(self, data, name=None):
        file = self._get_file_reference(name)
        file.upload_from_bytes(data)
        return file

    def _download(self, file, offset=0, length=None):
        stream = BytesIO()
        file.download_range(offset, length, stream)
        return stream.getvalue()

    def _full_download(self, file):
        stream = BytesIO()
        file.download(stream)
        return stream.getvalue()

    #--Test cases for lifecycle ------------------------------------------------
    @record
    def test_create_delete_file(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()

        # Act
        file.create(512)
        exists_after_create = file.exists()
        file.delete()
        exists_after_delete = file.exists()

        # Assert
        self.assertTrue(exists_after_create)
        self.assertFalse(exists_after_delete)

    def test_file_constructor_and_url(self):
        # Arrange
        fs = FileService('storagename')

        # Act
        file1 = CloudFile(fs, 'share', 'dir', 'file.txt')
        file2 = CloudFile(fs, 'share', 'dir', 'file.txt')

        # Assert
        self.assertEqual(file1.name, file2.name)
        self.assertEqual(file1.url, file2.url)
        self.assertEqual(file1.url, 'https://storagename.file.core.windows.net/share/dir/file.txt')
        self.assertIn(file1.url, repr(file1))
        self.assertEqual(file1.metadata, {})
        self.assertIsNone(file1.properties.content_length)

    @record
    def test_resize_keeps_content_settings(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file2 = self._get_file_reference()

        # Act
        file.create(1024)
        self.assertEqual(file.properties.content_length, 1024)

        file2.download_attributes()
        self.assertEqual(file2.properties.content_length, 1024)
        file2.properties.content_settings.content_type = 'text/plain'
        file2.upload_properties()

        file.resize(2048)
        self.assertEqual(file.properties.content_length, 2048)

        file.download_attributes()

        # Assert
        self.assertEqual(file.properties.content_length, 2048)
        self.assertEqual(file.properties.content_settings.content_type, 'text/plain')

        file2.download_attributes()
        self.assertEqual(file2.properties.content_length, 2048)

    @record
    def test_resize_shrink_then_grow_reads_zeros(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(8 * 512)
        file = self._create_file_with_data(data)

        # Act
        file.resize(1024)
        file.resize(8 * 512)
        content = self._full_download(file)

        # Assert
        self.assertEqual(len(content), 8 * 512)
        self.assertEqual(content[:1024], data[:1024])
        self.assertEqual(content[1024:], b'\x00' * (8 * 512 - 1024))
        self.assertEqual(file.list_ranges(), [FileRange(0, 1023)])

    @record
    def test_resize_grow_reads_zeros(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(1024)
        file = self._create_file_with_data(data)

        # Act
        file.resize(3072)
        tail = self._download(file, 1024, 2048)

        # Assert
        self.assertEqual(tail, b'\x00' * 2048)
        self.assertEqual(file.list_ranges(), [FileRange(0, 1023)])

    @record
    def test_create_invalid_size(self):
        # Arrange
        file = self._get_file_reference()

        # Act
        with self.assertNoRequests():
            with self.assertRaises(ValueError):
                file.create(-1)
            with self.assertRaises(ValueError):
                file.create(MAX_FILE_SIZE + 1)
            with self.assertRaises(ValueError):
                file.resize(-1)
            with self.assertRaises(ValueError):
                file.resize(MAX_FILE_SIZE + 1)

        # Assert

    @record
    def test_create_max_size(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()

        # Act
        file.create(MAX_FILE_SIZE)
        file.download_attributes()

        # Assert
        self.assertEqual(file.properties.content_length, MAX_FILE_SIZE)
        self.assertEqual(file.list_ranges(), [])

    @record
    def test_delete_if_exists(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()

        # Act
        deleted_missing = file.delete_if_exists()
        file.create(0)
        deleted_existing = file.delete_if_exists()
        deleted_again = file.delete_if_exists()

        # Assert
        self.assertFalse(deleted_missing)
        self.assertTrue(deleted_existing)
        self.assertFalse(deleted_again)

    @record
    def test_delete_missing_file_error_code(self):
        # Arrange
        self._create_share()
        self.fs.create_directory(self.share_name, 'dir')
        file = self._get_file_reference(directory_name='dir')
        orphan = self._get_file_reference(directory_name='nodir')

        # Act
        with self.assertRaises(AzureMissingResourceHttpError) as e:
            file.delete()
        with self.assertRaises(AzureMissingResourceHttpError) as e_parent:
            orphan.delete()

        # Assert
        self.assertEqual(e.exception.error_code, 'ResourceNotFound')
        self.assertEqual(e_parent.exception.error_code, 'ParentNotFound')
        self.assertFalse(file.delete_if_exists())
        self.assertFalse(orphan.delete_if_exists())

    @record
    def test_delete_if_exists_when_deleted_concurrently(self):
        # Arrange
        self._create_share()
        self.fs.create_directory(self.share_name, 'dir')
        file = self._get_file_reference(directory_name='dir')
        other = self._get_file_reference(directory_name='dir')
        file.create(512)

        raced = []

        def callback(request):
            if request.method == 'DELETE' and not raced:
                raced.append(True)
                other.delete()

        self.fs.request_callback = callback

        # Act
        deleted = file.delete_if_exists()
        self.fs.request_callback = None

        # Assert
        self.assertTrue(raced)
        self.assertFalse(deleted)
        self.assertFalse(file.exists())

    @record
    def test_operations_on_missing_file_raise_not_found(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()

        # Act
        with self.assertRaises(AzureMissingResourceHttpError):
            file.download_attributes()
        with self.assertRaises(AzureMissingResourceHttpError):
            file.resize(512)
        with self.assertRaises(AzureMissingResourceHttpError):
            file.download_range(0, None, BytesIO())
        with self.assertRaises(AzureMissingResourceHttpError):
            file.upload_properties()
        with self.assertRaises(AzureMissingResourceHttpError):
            file.delete()

        # Assert
        self.assertFalse(file.exists())

    #--Test cases for properties and metadata ---------------------------------
    @record
    def test_exists_refreshes_attributes(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.properties.content_settings.content_language = 'en-US'
        file.metadata = {'hello': 'world'}
        file.create(512)
        file2 = self._get_file_reference()

        # Act
        exists = file2.exists()

        # Assert
        self.assertTrue(exists)
        self.assertEqual(file2.properties.content_length, 512)
        self.assertEqual(file2.properties.content_settings.content_language, 'en-US')
        self.assertEqual(file2.metadata, {'hello': 'world'})
        self.assertEqual(file2.properties.etag, file.properties.etag)

    @record
    def test_download_attributes(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(1024)
        file2 = self._get_file_reference()

        # Act
        file2.download_attributes()

        # Assert
        self.assertIsNone(file.properties.content_settings.content_type)
        self.assertEqual(file2.properties.content_settings.content_type, 'application/octet-stream')
        self.assertEqual(file2.properties.content_length, 1024)
        self.assertIsNone(file2.properties.content_settings.content_md5)
        self.assertIsNone(file2.properties.content_settings.content_encoding)
        self.assertIsNone(file2.properties.content_settings.cache_control)
        self.assertEqual(file2.properties.etag, file.properties.etag)
        self.assertEqual(file2.properties.last_modified, file.properties.last_modified)

    @record
    def test_download_attributes_clears_stale_properties(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(1024)
        file.properties.content_settings.cache_control = 'no-cache'
        file.metadata = {'stale': 'value'}

        # Act
        file.download_attributes()

        # Assert
        self.assertIsNone(file.properties.content_settings.cache_control)
        self.assertEqual(file.metadata, {})

    @record
    def test_upload_properties(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(512)
        settings = ContentSettings(
            content_type='text/html',
            content_encoding='gzip',
            content_language='fr',
            content_disposition='attachment',
            cache_control='no-transform')

        # Act
        file.properties.content_settings = settings
        file.upload_properties()
        etag1 = file.properties.etag
        last_modified1 = file.properties.last_modified

        self.sleep(1)
        file.upload_properties()
        etag2 = file.properties.etag
        last_modified2 = file.properties.last_modified

        file2 = self._get_file_reference()
        file2.download_attributes()

        # Assert
        self.assertNotEqual(etag1, etag2)
        self.assertLessEqual(last_modified1, last_modified2)
        self.assertEqual(file2.properties.content_settings, settings)

    @record
    def test_upload_properties_replaces_all_settings(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.properties.content_settings = ContentSettings(
            content_type='text/plain', cache_control='no-cache')
        file.create(512)

        # Act
        file.properties.content_settings = ContentSettings(content_language='de')
        file.upload_properties()
        file.download_attributes()

        # Assert
        self.assertIsNone(file.properties.content_settings.cache_control)
        self.assertEqual(file.properties.content_settings.content_language, 'de')

    @record
    def test_create_with_metadata_and_clear(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.metadata = {'key1': 'value1', 'key2': 'value2'}

        # Act
        file.create(1024)
        file2 = self._get_file_reference()
        file2.download_attributes()
        metadata_after_create = file2.metadata

        file.metadata = {}
        file.upload_metadata()
        file2.download_attributes()

        # Assert
        self.assertEqual(metadata_after_create, {'key1': 'value1', 'key2': 'value2'})
        self.assertEqual(file2.metadata, {})

    @record
    def test_upload_download_file_properties(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(512)
        file = self._get_file_reference()
        file.properties.content_settings = ContentSettings(
            content_type='text/plain',
            content_language='en',
            content_disposition='inline',
            cache_control='max-age=60')
        file.metadata = {'origin': 'upload'}

        # Act
        file.upload_from_bytes(data)
        file2 = self._get_file_reference()
        file2.download(BytesIO())

        # Assert
        self.assertEqual(file2.properties.content_settings, file.properties.content_settings)
        self.assertEqual(file2.properties.content_length, 512)
        self.assertEqual(file2.properties.etag, file.properties.etag)
        self.assertEqual(file2.metadata, {'origin': 'upload'})

    @record
    def test_ranged_download_leaves_local_settings(self):
        # Arrange
        self._create_share()
        file = self._create_file_with_data(self.get_random_bytes(1024))
        file.properties.content_settings.content_type = 'local/only'

        # Act
        self._download(file, 0, 512)

        # Assert
        self.assertEqual(file.properties.content_settings.content_type, 'local/only')
        self.assertEqual(file.properties.content_length, 1024)

    #--Test cases for upload and download -------------------------------------
    @record
    def test_upload_from_stream(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(2 * 1024)
        file = self._get_file_reference()

        # Act
        file.upload(BytesIO(data), len(data))

        # Assert
        self.assertEqual(file.properties.content_length, len(data))
        self.assertEqual(self._full_download(file), data)
        self.assertEqual(file.list_ranges(), [FileRange(0, len(data) - 1)])

    @record
    def test_upload_from_stream_chunked(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(self.fs.MAX_SINGLE_GET_SIZE + 5 * 1024 + 3)
        file = self._get_file_reference()

        # Act
        file.upload(BytesIO(data), len(data))

        # Assert
        self.assertEqual(self._full_download(file), data)

    @record
    def test_upload_from_stream_partial(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(3 * 1024)
        file = self._get_file_reference()

        # Act
        file.upload(BytesIO(data), 1024)

        # Assert
        self.assertEqual(file.properties.content_length, 1024)
        self.assertEqual(self._full_download(file), data[:1024])

    @record
    def test_upload_from_stream_not_enough_data(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(1024)
        file = self._get_file_reference()

        # Act
        with self.assertRaises(ValueError):
            file.upload(BytesIO(data), 2048)

        # Assert

    @record
    def test_upload_empty_file(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()

        # Act
        file.upload(BytesIO(), 0)
        content = self._full_download(file)

        # Assert
        self.assertEqual(content, b'')
        self.assertEqual(file.properties.content_length, 0)
        self.assertEqual(file.download_text(), u'')

    @record
    def test_upload_from_bytes_with_index_and_count(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(4 * 512)
        file = self._get_file_reference()

        # Act
        file.upload_from_bytes(data, 512, 1024)

        # Assert
        self.assertEqual(file.properties.content_length, 1024)
        self.assertEqual(self._full_download(file), data[512:1536])

    @record
    def test_upload_from_bytes_invalid_arguments(self):
        # Arrange
        file = self._get_file_reference()
        data = self.get_random_bytes(1024)

        # Act
        with self.assertNoRequests():
            with self.assertRaises(ValueError):
                file.upload_from_bytes(data, -1)
            with self.assertRaises(ValueError):
                file.upload_from_bytes(data, 1025)
            with self.assertRaises(ValueError):
                file.upload_from_bytes(data, 512, 1024)
            with self.assertRaises(ValueError):
                file.upload_from_bytes(None)

        # Assert

    @record
    def test_upload_download_text(self):
        # Arrange
        self._create_share()
        text = self.get_random_text_data(2 * 1024)
        file = self._get_file_reference()

        # Act
        file.upload_text(text)
        downloaded = file.download_text()

        # Assert
        self.assertEqual(downloaded, text)
        self.assertEqual(file.properties.content_length, len(text.encode('utf-8')))

    @record
    def test_upload_download_text_with_encoding(self):
        # Arrange
        self._create_share()
        text = u'hello 啊齄丂狛狜 world'
        file = self._get_file_reference()

        # Act
        file.upload_text(text, encoding='utf-16')
        downloaded = file.download_text(encoding='utf-16')

        # Assert
        self.assertEqual(downloaded, text)

    @record
    def test_upload_download_path(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(6 * 1024 + 17)
        with open(FILE_PATH, 'wb') as stream:
            stream.write(data)
        file = self._get_file_reference()

        # Act
        file.upload_from_path(FILE_PATH)
        os.remove(FILE_PATH)
        file.download_to_path(FILE_PATH)

        # Assert
        with open(FILE_PATH, 'rb') as stream:
            actual = stream.read()
        self.assertEqual(actual, data)

    @record
    def test_download_missing_file_to_path_leaves_no_file(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()

        # Act
        with self.assertRaises(AzureMissingResourceHttpError):
            file.download_to_path(FILE_PATH)

        # Assert
        self.assertFalse(os.path.isfile(FILE_PATH))

    @record
    def test_download_to_bytes(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(2 * 1024)
        file = self._create_file_with_data(data)
        buffer = bytearray(3 * 1024)

        # Act
        written = file.download_to_bytes(buffer, 1024)

        # Assert
        self.assertEqual(written, len(data))
        self.assertEqual(bytes(buffer[:1024]), b'\x00' * 1024)
        self.assertEqual(bytes(buffer[1024:]), data)

    @record
    def test_download_empty_file_to_empty_buffer(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(0)

        # Act
        written = file.download_to_bytes(bytearray())

        # Assert
        self.assertEqual(written, 0)
        self.assertEqual(file.properties.content_length, 0)

    @record
    def test_upload_range_past_end_through_fresh_handle(self):
        # Arrange
        self._create_share()
        self._create_file_with_data(self.get_random_bytes(100))
        fresh = self._get_file_reference()
        data = self.get_random_bytes(100)

        # Act
        with self.assertRaises(AzureRangeNotSatisfiableHttpError):
            fresh.upload_range(50, 100, data)

        fresh.download_attributes()
        with self.assertNoRequests():
            with self.assertRaises(ValueError):
                fresh.upload_range(50, 100, data)
            with self.assertRaises(ValueError):
                fresh.clear_range(50, 100)

        # Assert
        self.assertEqual(fresh.list_ranges(), [FileRange(0, 99)])

    @record
    def test_download_to_bytes_too_small(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(2 * 1024)
        file = self._create_file_with_data(data)
        buffer = bytearray(2 * 1024)

        # Act
        with self.assertRaises(ValueError):
            file.download_to_bytes(buffer, 1)

        # Assert
        self.assertEqual(buffer, bytearray(2 * 1024))

    #--Test cases for ranged download -----------------------------------------
    @record
    def test_download_range(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(5 * 1024)
        file = self._create_file_with_data(data)

        # Act
        first = self._download(file, 0, 100)
        middle = self._download(file, 1000, 2000)
        tail = self._download(file, 4000)

        # Assert
        self.assertEqual(first, data[:100])
        self.assertEqual(middle, data[1000:3000])
        self.assertEqual(tail, data[4000:])

    @record
    def test_download_range_length_zero(self):
        # Arrange
        self._create_share()
        file = self._create_file_with_data(self.get_random_bytes(1024))

        # Act
        with self.assertNoRequests():
            with self.assertRaises(RangeOutOfBoundsError):
                file.download_range(0, 0, BytesIO())

        # Assert

    @record
    def test_download_range_out_of_bounds(self):
        # Arrange
        self._create_share()
        file = self._create_file_with_data(self.get_random_bytes(1024))

        # Act
        with self.assertRaises(RangeOutOfBoundsError):
            file.download_range(1024, None, BytesIO())
        with self.assertRaises(RangeOutOfBoundsError):
            file.download_range(2048, 10, BytesIO())
        with self.assertRaises(RangeOutOfBoundsError):
            file.download_range(1000, 100, BytesIO())

        # Assert

    @record
    def test_download_range_invalid_arguments(self):
        # Arrange
        file = self._get_file_reference()

        # Act
        with self.assertNoRequests():
            with self.assertRaises(ValueError):
                file.download_range(-1, 10, BytesIO())
            with self.assertRaises(ValueError):
                file.download_range(0, -10, BytesIO())
            with self.assertRaises(ValueError):
                file.download_range(0, 10, None)

        # Assert

    @record
    def test_download_range_to_bytes(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(8 * 512)
        file = self._create_file_with_data(data)

        # Act
        buffer = bytearray(8 * 512)
        written = file.download_range_to_bytes(512, 1024, buffer, 100)

        # Assert
        self.assertEqual(written, 1024)
        self.assertEqual(bytes(buffer[100:1124]), data[512:1536])
        self.assertEqual(bytes(buffer[:100]), b'\x00' * 100)
        self.assertEqual(bytes(buffer[1124:]), b'\x00' * (len(buffer) - 1124))

    @record
    def test_download_range_to_bytes_edge_cases(self):
        # Arrange
        self._create_share()
        length = 8 * 512
        data = self.get_random_bytes(length)
        file = self._create_file_with_data(data)

        # Act
        last_byte = bytearray(1)
        written_last = file.download_range_to_bytes(length - 1, 1, last_byte)

        whole = bytearray(length)
        written_whole = file.download_range_to_bytes(0, length, whole)

        rest = bytearray(length)
        written_rest = file.download_range_to_bytes(1024, None, rest, 10)

        # Assert
        self.assertEqual(written_last, 1)
        self.assertEqual(bytes(last_byte), data[-1:])
        self.assertEqual(written_whole, length)
        self.assertEqual(bytes(whole), data)
        self.assertEqual(written_rest, length - 1024)
        self.assertEqual(bytes(rest[10:10 + length - 1024]), data[1024:])

    @record
    def test_download_range_to_bytes_negative_cases(self):
        # Arrange
        self._create_share()
        file = self._create_file_with_data(self.get_random_bytes(1024))
        buffer = bytearray(1024)

        # Act
        with self.assertNoRequests():
            with self.assertRaises(ValueError):
                file.download_range_to_bytes(0, 10, buffer, -1)
            with self.assertRaises(ValueError):
                file.download_range_to_bytes(0, 10, buffer, 1024)
            with self.assertRaises(ValueError):
                file.download_range_to_bytes(0, 1024, buffer, 1)
            with self.assertRaises(ValueError):
                file.download_range_to_bytes(-1, 10, buffer)
            with self.assertRaises(RangeOutOfBoundsError):
                file.download_range_to_bytes(0, 0, buffer)
            with self.assertRaises(TypeError):
                file.download_range_to_bytes(0, 10, b'immutable')

        with self.assertRaises(ValueError):
            file.download_range_to_bytes(10, None, buffer, 100)

        # Assert
        self.assertEqual(buffer, bytearray(1024))

    @record
    def test_download_with_content_validation(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(self.fs.MAX_SINGLE_GET_SIZE + 1024)
        file = self._get_file_reference()
        file.properties.content_settings.content_md5 = \
            base64.b64encode(hashlib.md5(data).digest()).decode('utf-8')
        file.upload(BytesIO(data), len(data), validate_content=True)

        # Act
        stream = BytesIO()
        file.download(stream, validate_content=True)

        # Assert
        self.assertEqual(stream.getvalue(), data)

    @record
    def test_download_with_bad_stored_md5(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(2 * 1024)
        file = self._create_file_with_data(data)
        file.properties.content_settings.content_md5 = \
            base64.b64encode(hashlib.md5(b'something else').digest()).decode('utf-8')
        file.upload_properties()

        # Act
        with self.assertRaises(FileIntegrityError):
            file.download(BytesIO(), validate_content=True)

        # Assert
        content = self._full_download(file)
        self.assertEqual(content, data)

    #--Test cases for ranges ---------------------------------------------------
    @record
    def test_upload_clear_list_ranges(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(8 * 512)
        data = self.get_random_bytes(2048)

        # Act
        file.upload_range(0, 512, data)
        file.upload_range(1024, 1536, data[512:])
        ranges = file.list_ranges()
        content = self._full_download(file)

        # Assert
        self.assertEqual(ranges, [FileRange(0, 511), FileRange(1024, 2559)])
        self.assertEqual(content[:512], data[:512])
        self.assertEqual(content[512:1024], b'\x00' * 512)
        self.assertEqual(content[1024:2560], data[512:])
        self.assertEqual(content[2560:], b'\x00' * (8 * 512 - 2560))

    @record
    def test_adjacent_ranges_coalesce(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(8 * 512)
        data = self.get_random_bytes(1024)

        # Act
        file.upload_range(0, 512, data)
        file.upload_range(512, 512, data[512:])

        # Assert
        self.assertEqual(file.list_ranges(), [FileRange(0, 1023)])

    @record
    def test_clear_range(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(8 * 512)
        file = self._create_file_with_data(data)

        # Act
        file.clear_range(512, 1024)
        once = self._full_download(file)
        file.clear_range(512, 1024)
        twice = self._full_download(file)

        # Assert
        self.assertEqual(once, twice)
        self.assertEqual(once[:512], data[:512])
        self.assertEqual(once[512:1536], b'\x00' * 1024)
        self.assertEqual(once[1536:], data[1536:])
        self.assertEqual(file.list_ranges(), [FileRange(0, 511), FileRange(1536, 8 * 512 - 1)])
        self.assertEqual(file.properties.content_length, 8 * 512)

    @record
    def test_upload_range_round_trip(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(10 * 1024)
        data = self.get_random_bytes(5 * 1024 + 7)

        # Act
        file.upload_range(1000, len(data), data)
        content = self._download(file, 1000, len(data))

        # Assert
        self.assertEqual(content, data)

    @record
    def test_upload_range_with_validate_content(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(9 * 1024)
        data = self.get_random_bytes(9 * 1024)

        # Act
        file.upload_range(0, len(data), data, validate_content=True)

        # Assert
        self.assertEqual(self._full_download(file), data)

    @record
    def test_upload_range_invalid_arguments(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()
        file.create(1024)
        data = self.get_random_bytes(2048)

        # Act
        with self.assertNoRequests():
            with self.assertRaises(ValueError):
                file.upload_range(-1, 10, data)
            with self.assertRaises(ValueError):
                file.upload_range(0, 0, data)
            with self.assertRaises(ValueError):
                file.upload_range(0, -10, data)
            with self.assertRaises(ValueError):
                file.upload_range(512, 1024, data)
            with self.assertRaises(ValueError):
                file.upload_range(0, 1024, data[:100])
            with self.assertRaises(ValueError):
                file.clear_range(1000, 100)
            with self.assertRaises(ValueError):
                file.clear_range(0, 0)
            with self.assertRaises(TypeError):
                file.upload_range(0, 10, 12345)

        # Assert
        self.assertEqual(file.list_ranges(), [])

    @record
    def test_resize_clips_ranges(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(8 * 512)
        file = self._get_file_reference()
        file.create(8 * 512)
        file.upload_range(1024, 2048, data)

        # Act
        file.resize(2048)
        file.resize(8 * 512)
        content = self._full_download(file)

        # Assert
        self.assertEqual(file.list_ranges(), [FileRange(1024, 2047)])
        self.assertEqual(content[1024:2048], data[:1024])
        self.assertEqual(content[2048:], b'\x00' * (8 * 512 - 2048))

    #--Test cases for streams --------------------------------------------------
    @record
    def test_open_read_byte_by_byte(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(2 * 1024)
        file = self._create_file_with_data(data)
        file.stream_min_read_size = 512

        # Act
        stream = file.open_read()
        read = bytearray()
        while True:
            byte = stream.read(1)
            if not byte:
                break
            read += byte
        stream.close()

        # Assert
        self.assertEqual(bytes(read), data)

    @record
    def test_open_read_mark_reset_after_mutation(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(2 * 1024)
        file = self._create_file_with_data(data)
        file.stream_min_read_size = 512

        # Act
        stream = file.open_read()
        stream.mark(1024)
        first = stream.read(100)

        file.metadata = {'changed': 'yes'}
        file.upload_metadata()
        stream.reset()

        # Assert
        self.assertEqual(first, data[:100])
        with self.assertRaises(AzurePreconditionFailedHttpError):
            stream.read(100)

    @record
    def test_open_write_new(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(9 * 1024 + 11)
        file = self._get_file_reference()

        # Act
        with file.open_write_new(len(data)) as stream:
            stream.write(data[:100])
            stream.write(data[100:])

        # Assert
        self.assertEqual(self._full_download(file), data)

    @record
    def test_open_write_new_store_content_md5(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(5 * 1024)
        file = self._get_file_reference()

        # Act
        with file.open_write_new(len(data), store_content_md5=True) as stream:
            stream.write(data)

        file2 = self._get_file_reference()
        file2.download_attributes()

        # Assert
        self.assertEqual(file2.properties.content_settings.content_md5,
                         base64.b64encode(hashlib.md5(data).digest()).decode('utf-8'))
        file2.download(BytesIO(), validate_content=True)

    @record
    def test_open_write_existing(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(2 * 1024)
        file = self._create_file_with_data(data)
        patch = self.get_random_bytes(512)
        file2 = self._get_file_reference()

        # Act
        with file2.open_write_existing() as stream:
            stream.write(patch)

        # Assert
        self.assertEqual(self._full_download(file), patch + data[512:])

    @record
    def test_open_write_existing_missing_file(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()

        # Act
        with self.assertRaises(AzureMissingResourceHttpError):
            file.open_write_existing()

        # Assert

    @record
    def test_open_write_past_end(self):
        # Arrange
        self._create_share()
        file = self._get_file_reference()

        # Act
        stream = file.open_write_new(512)
        stream.write(self.get_random_bytes(500))
        with self.assertRaises(ValueError):
            stream.write(self.get_random_bytes(13))
        stream.close()

        # Assert
        self.assertEqual(file.list_ranges(), [FileRange(0, 499)])

    #--Test cases for parallel transfers and progress -------------------------
    @record
    def test_upload_download_parallel(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(self.fs.MAX_SINGLE_GET_SIZE + 13 * 1024 + 5)
        file = self._get_file_reference()

        # Act
        file.upload(BytesIO(data), len(data), max_connections=4)
        stream = BytesIO()
        file.download(stream, max_connections=4)

        # Assert
        self.assertEqual(stream.getvalue(), data)

    @record
    def test_download_to_bytes_parallel(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(self.fs.MAX_SINGLE_GET_SIZE + 9 * 1024)
        file = self._create_file_with_data(data)
        buffer = bytearray(len(data) + 100)

        # Act
        written = file.download_to_bytes(buffer, 100, max_connections=3)

        # Assert
        self.assertEqual(written, len(data))
        self.assertEqual(bytes(buffer[100:]), data)

    @record
    def test_upload_with_progress(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(10 * 1024 + 3)
        file = self._get_file_reference()

        progress = []

        def callback(current, total):
            progress.append((current, total))

        # Act
        file.upload(BytesIO(data), len(data), progress_callback=callback)

        # Assert
        self.assert_upload_progress(len(data), self.fs.MAX_RANGE_SIZE, progress)

    @record
    def test_download_with_progress(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(self.fs.MAX_SINGLE_GET_SIZE + 6 * 1024)
        file = self._create_file_with_data(data)

        progress = []

        def callback(current, total):
            progress.append((current, total))

        # Act
        file.download(BytesIO(), progress_callback=callback)

        # Assert
        self.assert_download_progress(
            len(data), self.fs.MAX_CHUNK_GET_SIZE, self.fs.MAX_SINGLE_GET_SIZE, progress)

    #--Test cases for ranged consistency --------------------------------------
    @record
    def test_any_range_matches_full_download(self):
        # Arrange
        self._create_share()
        length = 8 * 1024
        file = self._get_file_reference()
        file.create(length)
        data = self.get_random_bytes(3 * 1024)
        file.upload_range(100, 1000, data)
        file.upload_range(5000, 2000, data[1000:])
        full = self._full_download(file)

        # Act
        for offset, count in [(0, 1), (99, 2), (100, 1000), (1050, 4000),
                              (4999, 2002), (length - 1, 1), (0, length)]:
            # Assert
            self.assertEqual(self._download(file, offset, count), full[offset:offset + count])

    @record
    def test_second_handle_sees_changes(self):
        # Arrange
        self._create_share()
        data = self.get_random_bytes(3 * 1024)
        file_a = self._get_file_reference()
        file_b = self._get_file_reference()

        # Act
        file_a.upload_from_bytes(data)
        file_b.download_attributes()

        # Assert
        self.assertEqual(file_b.properties.content_length, file_a.properties.content_length)
        self.assertEqual(file_b.properties.etag, file_a.properties.etag)
        self.assertEqual(self._full_download(file_b), data)


#------------------------------------------------------------------------------
if __name__ == '__main__':
    unittest.main()

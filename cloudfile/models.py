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
from ._common_conversion import _str_or_none


class Share(object):

    ''' File share class. '''

    def __init__(self, name=None, props=None, metadata=None):
        self.name = name
        self.properties = props or ShareProperties()
        self.metadata = metadata


class ShareProperties(object):

    ''' File share's properties class. '''

    def __init__(self):
        self.last_modified = None
        self.etag = None
        self.quota = None


class File(object):

    '''
    File class.

    :ivar str name:
        Name of the file.
    :ivar content:
        File content, or None when the content was written to a stream.
    :vartype content: bytes
    :ivar FileProperties properties:
        System properties for the file.
    :ivar dict metadata:
        Name-value pairs associated with the file as metadata.
    '''

    def __init__(self, name=None, content=None, props=None, metadata=None):
        self.name = name
        self.content = content
        self.properties = props or FileProperties()
        self.metadata = metadata


class FileProperties(object):

    '''
    File Properties.

    :ivar datetime last_modified:
        A datetime object representing the last time the file was modified.
    :ivar str etag:
        The ETag contains a value that you can use to perform operations
        conditionally.
    :ivar int content_length:
        The length of the file in bytes. For a ranged get this is the length
        of the whole file, not of the returned range.
    :ivar ~cloudfile.models.ContentSettings content_settings:
        Stores all the content settings for the file.
    '''

    def __init__(self):
        self.last_modified = None
        self.etag = None
        self.content_length = None
        self.content_range = None
        self.content_settings = ContentSettings()


class ContentSettings(object):

    '''
    Used to store the content settings of a file.

    :ivar str content_type:
        The content type specified for the file. If no content type was
        specified, the default content type is application/octet-stream.
    :ivar str content_encoding:
        If content_encoding has previously been set
        for the file, that value is stored.
    :ivar str content_language:
        If content_language has previously been set
        for the file, that value is stored.
    :ivar str content_disposition:
        content_disposition conveys additional information about how to
        process the response payload, and also can be used to attach
        additional metadata. If content_disposition has previously been set
        for the file, that value is stored.
    :ivar str cache_control:
        If cache_control has previously been set for
        the file, that value is stored.
    :ivar str content_md5:
        If the content_md5 has been set for the file, this response
        header is stored so that the client can check for message content
        integrity.
    '''

    def __init__(
            self, content_type=None, content_encoding=None,
            content_language=None, content_disposition=None,
            cache_control=None, content_md5=None):
        self.content_type = content_type
        self.content_encoding = content_encoding
        self.content_language = content_language
        self.content_disposition = content_disposition
        self.cache_control = cache_control
        self.content_md5 = content_md5

    def _to_headers(self):
        return {
            'x-ms-cache-control': _str_or_none(self.cache_control),
            'x-ms-content-type': _str_or_none(self.content_type),
            'x-ms-content-disposition': _str_or_none(self.content_disposition),
            'x-ms-content-md5': _str_or_none(self.content_md5),
            'x-ms-content-encoding': _str_or_none(self.content_encoding),
            'x-ms-content-language': _str_or_none(self.content_language),
        }

    def __eq__(self, other):
        if not isinstance(other, ContentSettings):
            return NotImplemented
        return vars(self) == vars(other)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self):
        return 'ContentSettings({})'.format(
            ', '.join('{}={!r}'.format(k, v) for k, v in sorted(vars(self).items())))


class FileRange(object):

    '''
    File Range.

    :ivar int start:
        Byte index for start of file range.
    :ivar int end:
        Byte index for end of file range, inclusive.
    '''

    def __init__(self, start=None, end=None):
        self.start = start
        self.end = end

    @property
    def length(self):
        return self.end - self.start + 1

    def __eq__(self, other):
        if not isinstance(other, FileRange):
            return NotImplemented
        return (self.start, self.end) == (other.start, other.end)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return 'FileRange(start={}, end={})'.format(self.start, self.end)


class ResourceProperties(object):

    '''
    Returned by operations that change a resource but return no body.

    :ivar str etag:
        The new ETag of the resource.
    :ivar datetime last_modified:
        The new last modified time of the resource.
    '''

    def __init__(self):
        self.last_modified = None
        self.etag = None

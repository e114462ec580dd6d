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

from dateutil import parser

from ._common_conversion import (
    _int_or_none,
    _str_or_none,
    _get_content_md5,
)
from ._error import (
    FileIntegrityError,
    _ERROR_MD5_MISMATCH,
)
from .models import (
    File,
    FileProperties,
    FileRange,
    ResourceProperties,
    Share,
    ShareProperties,
)

GET_PROPERTIES_ATTRIBUTE_MAP = {
    'last-modified': (None, 'last_modified', parser.parse),
    'etag': (None, 'etag', _str_or_none),
    'content-length': (None, 'content_length', _int_or_none),
    'content-range': (None, 'content_range', _str_or_none),
    'x-ms-share-quota': (None, 'quota', _int_or_none),
    'content-type': ('content_settings', 'content_type', _str_or_none),
    'cache-control': ('content_settings', 'cache_control', _str_or_none),
    'content-encoding': ('content_settings', 'content_encoding', _str_or_none),
    'content-disposition': ('content_settings', 'content_disposition', _str_or_none),
    'content-language': ('content_settings', 'content_language', _str_or_none),
    'content-md5': ('content_settings', 'content_md5', _str_or_none),
}


def _parse_metadata(response):
    '''
    Extracts out resource metadata information.
    '''

    if response is None or response.headers is None:
        return None

    metadata = {}
    for key, value in response.headers.items():
        if key.startswith('x-ms-meta-'):
            metadata[key[10:]] = _str_or_none(value)

    return metadata


def _parse_properties(response, result_class):
    '''
    Extracts out resource properties and metadata information.
    Ignores the standard http headers.
    '''

    if response is None or response.headers is None:
        return None

    props = result_class()
    for key, value in response.headers.items():
        info = GET_PROPERTIES_ATTRIBUTE_MAP.get(key)
        if info and hasattr(props, info[0] or info[1]):
            if info[0] is None:
                setattr(props, info[1], info[2](value))
            else:
                attr = getattr(props, info[0])
                setattr(attr, info[1], info[2](value))

    return props


def _parse_length_from_content_range(content_range):
    '''
    Parses the file length from the content range header: bytes 1-3/65537
    '''
    if content_range is None:
        return None

    # First, split in space and take the second half: '1-3/65537'
    # Next, split on slash and take the second half: '65537'
    # Finally, convert to an int: 65537
    return int(content_range.split(' ', 1)[1].split('/', 1)[1])


def _parse_file(name, response, validate_content=False):
    if response is None:
        return None

    props = _parse_properties(response, FileProperties)
    metadata = _parse_metadata(response)

    # For range gets, only look at 'x-ms-content-md5' for overall MD5
    # and 'content-length' holds the length of the returned range only
    if props.content_range is not None:
        props.content_length = _parse_length_from_content_range(props.content_range)
        range_md5 = props.content_settings.content_md5
        props.content_settings.content_md5 = response.headers.get('x-ms-content-md5')

        if validate_content and response.body is not None:
            _validate_content_match(range_md5, _get_content_md5(response.body))

    return File(name, response.body, props, metadata)


def _parse_share(name, response):
    if response is None:
        return None

    props = _parse_properties(response, ShareProperties)
    metadata = _parse_metadata(response)
    return Share(name, props, metadata)


def _parse_base_properties(response):
    '''
    Extracts the etag and last modified time returned by a write operation.
    '''
    resource_properties = ResourceProperties()
    resource_properties.last_modified = parser.parse(response.headers.get('last-modified'))
    resource_properties.etag = response.headers.get('etag')

    return resource_properties


def _validate_content_match(server_md5, computed_md5):
    if server_md5 != computed_md5:
        raise FileIntegrityError(_ERROR_MD5_MISMATCH.format(server_md5, computed_md5))


def _convert_xml_to_ranges(response):
    '''
    <?xml version="1.0" encoding="utf-8"?>
    <Ranges>
      <Range>
        <Start>Start Byte</Start>
        <End>End Byte</End>
      </Range>
      <Range>
        <Start>Start Byte</Start>
        <End>End Byte</End>
      </Range>
    </Ranges>
    '''
    if response is None or not response.body:
        return []

    ranges = list()
    ranges_element = ETree.fromstring(response.body)

    for range_element in ranges_element.findall('Range'):
        # Parse range
        range = FileRange()
        range.start = int(range_element.findtext('Start'))
        range.end = int(range_element.findtext('End'))

        # Add range to list
        ranges.append(range)

    return ranges

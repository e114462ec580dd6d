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
from urllib.parse import quote as url_quote


def _int_or_none(value):
    return value if value is None else int(value)


def _str(value):
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)


def _str_or_none(value):
    if value is None:
        return None

    return _str(value)


def _encode_base64(data):
    if isinstance(data, str):
        data = data.encode('utf-8')
    encoded = base64.b64encode(data)
    return encoded.decode('utf-8')


def _get_content_md5(data):
    md5 = hashlib.md5()
    if isinstance(data, (bytes, bytearray, memoryview)):
        md5.update(data)
    elif hasattr(data, 'read'):
        pos = data.tell()
        for chunk in iter(lambda: data.read(4096), b''):
            md5.update(chunk)
        data.seek(pos)
    else:
        raise ValueError('Data should be bytes or a seekable file-like object.')

    return base64.b64encode(md5.digest()).decode('utf-8')


def _quote_path(path):
    return url_quote(path, '/()$=\',~')

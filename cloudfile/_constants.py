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
import platform

__author__ = 'Microsoft Corp. <ptvshelp@microsoft.com>'
__version__ = '0.1.0'

# x-ms-version for storage service.
X_MS_VERSION = '2016-05-31'

# UserAgent string sample: 'Azure-Storage/0.1.0 (Python CPython 3.11.7; Linux 6.1)'
_USER_AGENT_STRING = 'Azure-Storage/{} (Python {} {}; {} {})'.format(
    __version__, platform.python_implementation(), platform.python_version(),
    platform.system(), platform.release())

# Live ServiceClient URLs
SERVICE_HOST_BASE = 'core.windows.net'
DEFAULT_PROTOCOL = 'https'

# Development ServiceClient URLs
DEV_ACCOUNT_NAME = 'devstoreaccount1'

# Socket timeout in seconds
DEFAULT_SOCKET_TIMEOUT = 20

# The service refuses files larger than 1 TiB
MAX_FILE_SIZE = 1024 * 1024 * 1024 * 1024

# A single put range or range get with content MD5 may not exceed 4 MiB
MAX_RANGE_SIZE = 4 * 1024 * 1024

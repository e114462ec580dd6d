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
from logging import NullHandler

from ._constants import (
    __author__,
    __version__,
    X_MS_VERSION,
)
from ._error import (
    AzureMd5MismatchHttpError,
    AzurePreconditionFailedHttpError,
    AzureRangeNotSatisfiableHttpError,
    FileIntegrityError,
    RangeOutOfBoundsError,
)
from .cloudfile import CloudFile
from .filestream import (
    FileReadStream,
    FileWriteStream,
)
from .fileservice import FileService
from .models import (
    ContentSettings,
    File,
    FileProperties,
    FileRange,
    ResourceProperties,
    Share,
    ShareProperties,
)
from .namevalidator import (
    validate_directory_name,
    validate_file_name,
    validate_share_name,
)
from .rangedaccessor import RangedFileAccessor
from .retry import (
    RetryContext,
    no_retry,
)

# Set default logging handler
logging.getLogger(__name__).addHandler(NullHandler())

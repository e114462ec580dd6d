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


class RetryContext(object):
    '''
    Passed to a retry policy after a failed request.

    :ivar HTTPRequest request:
        The request sent to the storage service.
    :ivar HTTPResponse response:
        The response returned by the storage service, or None if the request
        failed before a response was received.
    :ivar Exception exception:
        The error raised for the failed request.
    :ivar int count:
        The number of retries already performed.
    '''

    def __init__(self):
        self.request = None
        self.response = None
        self.exception = None
        self.count = 0


def no_retry(context):
    '''
    Specifies never to retry.

    :param RetryContext context:
        The retry context. This contains the request, response, and other data
        which can be used to determine whether or not to retry.
    :return:
        Always returns None to indicate never to retry.
    :rtype: None
    '''
    return None

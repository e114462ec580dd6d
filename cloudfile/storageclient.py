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
from time import sleep

import requests
from azure.common import (
    AzureException,
)

from ._constants import (
    _USER_AGENT_STRING,
    DEFAULT_SOCKET_TIMEOUT,
    X_MS_VERSION,
)
from ._error import (
    _http_error_handler,
)
from ._http import HTTPError
from ._http.httpclient import _HTTPClient
from ._serialization import (
    _update_request,
    _add_date_header,
)
from .retry import (
    RetryContext,
    no_retry,
)

logger = logging.getLogger(__name__)


class StorageClient(object):

    '''
    This is the base class for service objects. Service objects are used to do 
    all requests to Storage. This class cannot be instantiated directly.

    :ivar str account_name:
        The storage account name. This is used to construct the storage
        endpoint. It is required unless a connection string or a custom
        domain is given.
    :ivar str sas_token:
        A shared access signature token to use to authenticate requests. If
        not specified, anonymous access will be used.
    :ivar str primary_endpoint:
        The endpoint to send storage requests to.
    :ivar function(context) retry:
        A function which determines whether to retry. Takes as a parameter a
        :class:`~cloudfile.retry.RetryContext` object. Returns the number of
        seconds to wait before retrying the request, or None to indicate not
        to retry. Retrying is delegated entirely to this hook.
    :ivar function(request) request_callback:
        A function called immediately before each request is sent. This function 
        takes as a parameter the request object and returns nothing. It may be 
        used to added custom headers or log request data.
    :ivar function(response) response_callback:
        A function called immediately after each response is received. This 
        function takes as a parameter the response object and returns nothing. 
        It may be used to log response data.
    '''

    def __init__(self, connection_params):
        '''
        :param obj connection_params: The parameters to use to construct the client.
        '''
        self.account_name = connection_params.account_name
        self.sas_token = connection_params.sas_token

        self.primary_endpoint = connection_params.primary_endpoint

        protocol = connection_params.protocol
        request_session = connection_params.request_session or requests.Session()
        self._httpclient = _HTTPClient(
            protocol=protocol,
            session=request_session,
            timeout=DEFAULT_SOCKET_TIMEOUT,
        )

        self.retry = no_retry
        self.request_callback = None
        self.response_callback = None
        self.authentication = None
        self.x_ms_version = X_MS_VERSION

    @property
    def socket_timeout(self):
        return self._httpclient.timeout

    @socket_timeout.setter
    def socket_timeout(self, value):
        self._httpclient.timeout = value

    @property
    def protocol(self):
        return self._httpclient.protocol

    @protocol.setter
    def protocol(self, value):
        self._httpclient.protocol = value

    @property
    def request_session(self):
        return self._httpclient.session

    @request_session.setter
    def request_session(self, value):
        self._httpclient.session = value

    def set_proxy(self, host, port, user=None, password=None):
        '''
        Sets the proxy server host and port for the HTTP CONNECT Tunnelling.

        :param str host: Address of the proxy. Ex: '192.168.0.100'
        :param int port: Port of the proxy. Ex: 6000
        :param str user: User for proxy authorization.
        :param str password: Password for proxy authorization.
        '''
        self._httpclient.set_proxy(host, port, user, password)

    def _get_host(self):
        return self.primary_endpoint

    def _perform_request(self, request):
        '''
        Sends the request and return response. Catches HTTPError and hands it
        to error handler
        '''
        _update_request(request, self.x_ms_version, _USER_AGENT_STRING)
        retry_context = RetryContext()

        while True:
            retry_context.response = None
            try:
                try:
                    # Execute the request callback
                    if self.request_callback:
                        self.request_callback(request)

                    # Add date and auth after the callback so date doesn't get too old and
                    # authentication is still correct if signed headers are added in the request
                    # callback
                    _add_date_header(request)
                    self.authentication.sign_request(request)

                    retry_context.request = request
                    logger.debug('Outgoing request: method=%s path=%s query=%s',
                                 request.method, request.path,
                                 sorted(name for name in request.query if name != 'sig'))

                    response = self._httpclient.perform_request(request)

                    # Execute the response callback
                    if self.response_callback:
                        self.response_callback(response)

                    retry_context.response = response
                    logger.debug('Receiving response: status=%s method=%s path=%s',
                                 response.status, request.method, request.path)

                    # Parse and wrap HTTP errors in AzureHttpError which inherits from AzureException
                    if response.status >= 300:
                        # This exception will be caught by the general error handler
                        # and raised as an azure http exception
                        _http_error_handler(
                            HTTPError(response.status, response.message, response.headers, response.body))

                    return response
                except AzureException:
                    raise
                except Exception as ex:
                    logger.warning('Request to %s failed: %s: %s',
                                   request.path, ex.__class__.__name__, ex)
                    raise AzureException('{}: {}'.format(ex.__class__.__name__, ex)) from ex
            except AzureException as ex:
                retry_context.exception = ex

                # Determine whether a retry should be performed and if so, how
                # long to wait before performing retry.
                retry_interval = self.retry(retry_context)
                if retry_interval is None:
                    raise

                retry_context.count += 1
                logger.info('Retrying %s %s in %s seconds (attempt %s): %s',
                            request.method, request.path, retry_interval,
                            retry_context.count, ex)
                sleep(retry_interval)

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
from urllib.parse import urlparse

from ._constants import (
    SERVICE_HOST_BASE,
    DEFAULT_PROTOCOL,
    DEV_ACCOUNT_NAME,
)
from ._error import (
    _ERROR_STORAGE_MISSING_INFO,
    _ERROR_EMULATOR_DOES_NOT_SUPPORT_FILES,
)

_CONNECTION_ENDPOINTS = {'file': 'FileEndpoint'}


class _ServiceParameters(object):
    def __init__(self, service, account_name=None, sas_token=None,
                 protocol=DEFAULT_PROTOCOL, endpoint_suffix=SERVICE_HOST_BASE,
                 custom_domain=None, request_session=None):

        self.account_name = account_name
        self.sas_token = sas_token
        self.protocol = protocol or DEFAULT_PROTOCOL
        self.request_session = request_session

        if self.account_name == DEV_ACCOUNT_NAME:
            raise ValueError(_ERROR_EMULATOR_DOES_NOT_SUPPORT_FILES)

        if custom_domain:
            parsed_url = urlparse(custom_domain)

            # Trim any trailing slashes from the path
            path = parsed_url.path.rstrip('/')

            self.primary_endpoint = parsed_url.netloc + path
            self.protocol = self.protocol if parsed_url.scheme == '' else parsed_url.scheme
        else:
            if not self.account_name:
                raise ValueError(_ERROR_STORAGE_MISSING_INFO)
            self.primary_endpoint = '{}.{}.{}'.format(self.account_name, service, endpoint_suffix)

    @staticmethod
    def get_service_parameters(service, account_name=None, sas_token=None,
                               protocol=None, endpoint_suffix=None, custom_domain=None,
                               request_session=None, connection_string=None):
        if connection_string:
            params = _ServiceParameters._from_connection_string(connection_string, service)
        else:
            params = _ServiceParameters(service,
                                        account_name=account_name,
                                        sas_token=sas_token,
                                        protocol=protocol,
                                        endpoint_suffix=endpoint_suffix or SERVICE_HOST_BASE,
                                        custom_domain=custom_domain)

        params.request_session = request_session
        return params

    @staticmethod
    def _from_connection_string(connection_string, service):
        # Split into key=value pairs removing empties, then split the pairs into a dict
        config = dict(s.split('=', 1) for s in connection_string.split(';') if s)

        # Authentication
        account_name = config.get('AccountName')
        sas_token = config.get('SharedAccessSignature')

        # Basic URL Configuration
        protocol = config.get('DefaultEndpointsProtocol')
        endpoint_suffix = config.get('EndpointSuffix')
        custom_domain = config.get(_CONNECTION_ENDPOINTS[service])

        return _ServiceParameters(service,
                                  account_name=account_name,
                                  sas_token=sas_token,
                                  protocol=protocol,
                                  endpoint_suffix=endpoint_suffix or SERVICE_HOST_BASE,
                                  custom_domain=custom_domain)

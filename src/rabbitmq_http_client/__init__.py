# Copyright 2026 Boris
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""RabbitMQ HTTP management API client."""

from .client import EXCHANGE_DEFAULTS, Client, connect
from .config import ClientConfig, connect_from_config, load_client_config
from .connection import Connection, Endpoint, parse_endpoint, resolve_credentials
from .errors import (
    ClientError,
    ConfigError,
    NotFoundError,
    ResponseDecodingError,
    ResponseError,
    ServerError,
)
from .health_checks import TIME_UNITS, HealthChecks
from .request_helper import encode_uri_path_segment
from .response_helper import Resource

__all__ = [
    'Client',
    'ClientConfig',
    'ClientError',
    'ConfigError',
    'Connection',
    'EXCHANGE_DEFAULTS',
    'Endpoint',
    'HealthChecks',
    'NotFoundError',
    'Resource',
    'ResponseDecodingError',
    'ResponseError',
    'ServerError',
    'TIME_UNITS',
    'connect',
    'connect_from_config',
    'encode_uri_path_segment',
    'load_client_config',
    'parse_endpoint',
    'resolve_credentials',
]

__version__ = '0.1.0'

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

"""
Exceptions raised by the management API client.

HTTP status errors subclass :class:`requests.HTTPError`, so callers that
already handle ``requests.exceptions.RequestException`` keep working.
Network-level failures (connection refused, timeouts, too many redirects)
are raised by ``requests`` itself and are not wrapped.
"""

from typing import Optional

import requests

# Longest body excerpt included in an error message.
MAX_BODY_EXCERPT = 800


class ResponseError(requests.HTTPError):
    """The management API answered with a 4xx or 5xx status."""

    def __init__(self, response: requests.Response):
        self.status = response.status_code
        self.body = _response_text(response)
        method = getattr(response.request, 'method', None) or '?'
        message = f'{method} {response.url} -> HTTP {self.status}'
        if self.body:
            message += f': {self.body[:MAX_BODY_EXCERPT]}'
        super().__init__(message, response=response)


class ClientError(ResponseError):
    """4xx response."""


class NotFoundError(ClientError):
    """404 response: the addressed resource does not exist."""


class ServerError(ResponseError):
    """5xx response."""


class ResponseDecodingError(RuntimeError):
    """Response body does not have the shape the endpoint promises."""


class ConfigError(Exception):
    """Raised when a connection profile fails validation."""
    pass


def error_for_response(response: requests.Response) -> Optional[ResponseError]:
    """Map an error status to its exception, or return None for 1xx-3xx."""
    status = response.status_code
    if status == 404:
        return NotFoundError(response)
    if 400 <= status < 500:
        return ClientError(response)
    if 500 <= status < 600:
        return ServerError(response)
    return None


def _response_text(response: requests.Response) -> str:
    try:
        return response.text or ''
    except (UnicodeDecodeError, LookupError):
        return ''

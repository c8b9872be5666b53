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
Request-side helpers: path segment encoding and query serialization.
"""

from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote


def encode_uri_path_segment(segment: Any) -> str:
    """
    Percent-encode a single URI path segment.

    Everything outside the unreserved set (letters, digits, ``-_.~``) is
    escaped, slashes and spaces included, so a vhost named ``/`` or a queue
    named ``a b/c`` stays one segment. Non-ASCII characters are UTF-8 encoded
    first.
    """
    return quote(str(segment), safe='')


def serialize_query(query: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Copy a caller query mapping for ``requests``.

    Values are passed through, except booleans which the management API
    expects as ``true``/``false``.
    """
    if not query:
        return None
    params: Dict[str, Any] = {}
    for key, value in query.items():
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        params[key] = value
    return params

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
Response decoding.

The management API's JSON shapes differ between broker versions and enabled
plugins, so responses are not mapped onto per-resource classes. Objects are
decoded into :class:`Resource`, a ``dict`` whose keys can also be read as
attributes, and collections into lists of them.
"""

import re
from typing import Any, List, Mapping, Optional

import requests

from .errors import ResponseDecodingError

# Matched against the media type only (parameters such as charset stripped).
JSON_CONTENT_TYPE = re.compile(r'\bjson$')


class Resource(dict):
    """
    JSON object with attribute access to its keys.

    Nested objects, including objects inside arrays, are converted to
    ``Resource`` as well. Keys that collide with ``dict`` methods
    (``items``, ``keys``, ``values``, ...) are only reachable with item
    access, e.g. ``page['items']``.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__()
        self.update(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f"'Resource' object has no attribute '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setitem__(self, key: str, value: Any) -> None:
        super().__setitem__(key, _convert(value))

    def __dir__(self):
        return list(super().__dir__()) + [k for k in self if isinstance(k, str)]

    def __repr__(self) -> str:
        return f'Resource({dict.__repr__(self)})'

    def update(self, *args: Any, **kwargs: Any) -> None:
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    def setdefault(self, key: str, default: Any = None) -> Any:
        if key not in self:
            self[key] = default
        return self[key]

    def copy(self) -> 'Resource':
        return Resource(self)


def _convert(value: Any) -> Any:
    if isinstance(value, Resource):
        return value
    if isinstance(value, Mapping):
        return Resource(value)
    if isinstance(value, list):
        return [_convert(v) for v in value]
    return value


def is_json_response(response: requests.Response) -> bool:
    content_type = response.headers.get('Content-Type') or ''
    media_type = content_type.split(';', 1)[0].strip().lower()
    return bool(JSON_CONTENT_TYPE.search(media_type))


def parse_body(response: requests.Response) -> Any:
    """
    Return the parsed JSON body, the raw text for other content types, or
    None when the body is empty (e.g. ``204 No Content``).
    """
    if not response.content:
        return None
    if not is_json_response(response):
        return response.text
    try:
        return response.json()
    except ValueError as e:
        raise ResponseDecodingError(f'Invalid JSON in response from {response.url}: {e}') from e


def decode_response_body(body: Any) -> Resource:
    """Decode an already parsed body; empty bodies become an empty Resource."""
    if not body:
        return Resource()
    if isinstance(body, Mapping):
        return Resource(body)
    raise ResponseDecodingError(
        f'Unexpected response body type {type(body).__name__} (expected object)'
    )


def decode_resource(response: Optional[requests.Response]) -> Resource:
    if response is None:
        return Resource()
    return decode_response_body(parse_body(response))


def decode_resource_collection(response: requests.Response) -> List[Resource]:
    """
    Decode a collection response.

    The API returns either a bare JSON array or, for paginated requests,
    an object whose ``items`` field holds the page. An object without
    ``items`` is a contract violation and raises ResponseDecodingError.
    """
    body = parse_body(response)
    if isinstance(body, list):
        collection = body
    elif isinstance(body, Mapping):
        if 'items' not in body:
            raise ResponseDecodingError(
                f"Collection response from {response.url} has no 'items' field"
            )
        collection = body['items']
        if not isinstance(collection, list):
            raise ResponseDecodingError(
                f"Unexpected 'items' type {type(collection).__name__} (expected list)"
            )
    else:
        raise ResponseDecodingError(
            f'Unexpected collection response type {type(body).__name__} '
            '(expected list or object with items)'
        )

    out: List[Resource] = []
    for item in collection:
        # An empty element keeps its slot so indexes match the server output.
        if item == []:
            out.append(Resource())
        elif isinstance(item, Mapping):
            out.append(Resource(item))
        else:
            raise ResponseDecodingError(
                f'Unexpected collection element type {type(item).__name__} (expected object)'
            )
    return out


def normalize_user_tags(user: Resource) -> Resource:
    """
    Make ``user.tags`` a list of strings.

    RabbitMQ 3.9 and later return tags as an array; earlier versions return
    one comma-separated string.
    """
    tags = user.get('tags')
    if tags is None:
        user['tags'] = []
    elif isinstance(tags, str):
        user['tags'] = tags.split(',') if tags else []
    return user

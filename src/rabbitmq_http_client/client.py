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
RabbitMQ HTTP management API client.

One method per REST endpoint. Identifiers are percent-encoded as single path
segments, request attributes are sent as JSON, and responses are decoded into
:class:`~rabbitmq_http_client.response_helper.Resource` records.

Example::

    client = connect('http://127.0.0.1:15672', username='guest', password='guest')
    client.declare_queue('/', 'orders', {'durable': True})
    for q in client.list_queues('/'):
        print(q.name, q.get('messages'))
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from .connection import Connection
from .health_checks import HealthChecks
from .request_helper import encode_uri_path_segment as _e
from .response_helper import (
    Resource,
    decode_resource,
    decode_resource_collection,
    normalize_user_tags,
)

Query = Optional[Mapping[str, Any]]

EXCHANGE_DEFAULTS: Dict[str, Any] = {
    'type': 'direct',
    'auto_delete': False,
    'durable': True,
    'arguments': {},
}


def connect(endpoint: str, username: Optional[str] = None, password: Optional[str] = None,
            **options: Any) -> 'Client':
    """Create a Client; see :class:`~rabbitmq_http_client.connection.Connection` for options."""
    return Client(endpoint, username=username, password=password, **options)


class Client:
    """Typed-by-convention wrapper over the management API."""

    def __init__(self, endpoint: str, username: Optional[str] = None,
                 password: Optional[str] = None, **options: Any):
        self.endpoint = endpoint
        self.connection = Connection(endpoint, username=username, password=password, **options)
        self.health = HealthChecks(self.connection)

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> 'Client':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # -------- overview --------

    def overview(self) -> Resource:
        return decode_resource(self.connection.get('overview'))

    def enabled_protocols(self) -> List[str]:
        """
        Messaging protocols the node (or cluster) listens on.

        Common values are ``amqp``, ``amqp/ssl``, ``mqtt`` and ``stomp``;
        the exact set depends on configuration and enabled plugins.
        """
        protocols: List[str] = []
        for listener in self.overview().get('listeners') or []:
            if listener.protocol not in protocols:
                protocols.append(listener.protocol)
        return protocols

    def protocol_ports(self) -> Dict[str, int]:
        """Protocol to port map. A protocol with several listeners keeps the last port."""
        ports: Dict[str, int] = {}
        for listener in self.overview().get('listeners') or []:
            ports[listener.protocol] = listener.port
        return ports

    # -------- nodes, extensions, definitions --------

    def list_nodes(self, query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get('nodes', query))

    def node_info(self, name: str) -> Resource:
        return decode_resource(self.connection.get(f'nodes/{_e(name)}'))

    def list_extensions(self, query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get('extensions', query))

    def list_definitions(self) -> Resource:
        return decode_resource(self.connection.get('definitions'))

    def upload_definitions(self, defs: Union[str, bytes]) -> bool:
        """
        Import a definitions document.

        ``defs`` must already be serialized JSON in the export format
        (as returned by ``GET /api/definitions``).
        """
        return self.connection.post_document('definitions', defs).ok

    # -------- connections and channels --------

    def list_connections(self, query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get('connections', query))

    def connection_info(self, name: str) -> Resource:
        return decode_resource(self.connection.get(f'connections/{_e(name)}'))

    def close_connection(self, name: str) -> Resource:
        return decode_resource(self.connection.delete(f'connections/{_e(name)}'))

    def list_channels(self, query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get('channels', query))

    def channel_info(self, name: str) -> Resource:
        return decode_resource(self.connection.get(f'channels/{_e(name)}'))

    # -------- exchanges --------

    def list_exchanges(self, vhost: Optional[str] = None, query: Query = None) -> List[Resource]:
        path = 'exchanges' if vhost is None else f'exchanges/{_e(vhost)}'
        return decode_resource_collection(self.connection.get(path, query))

    def declare_exchange(self, vhost: str, name: str,
                         attributes: Optional[Mapping[str, Any]] = None) -> Resource:
        """Declare an exchange; ``attributes`` override EXCHANGE_DEFAULTS key by key."""
        opts = dict(EXCHANGE_DEFAULTS, arguments={})
        opts.update(attributes or {})
        return decode_resource(
            self.connection.put_json(f'exchanges/{_e(vhost)}/{_e(name)}', opts)
        )

    def delete_exchange(self, vhost: str, name: str, if_unused: bool = False) -> Resource:
        params = {'if-unused': True} if if_unused else None
        return decode_resource(
            self.connection.delete(f'exchanges/{_e(vhost)}/{_e(name)}', params)
        )

    def exchange_info(self, vhost: str, name: str) -> Resource:
        return decode_resource(self.connection.get(f'exchanges/{_e(vhost)}/{_e(name)}'))

    def list_bindings_by_source(self, vhost: str, exchange: str,
                                query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get(
            f'exchanges/{_e(vhost)}/{_e(exchange)}/bindings/source', query
        ))

    def list_bindings_by_destination(self, vhost: str, exchange: str,
                                     query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get(
            f'exchanges/{_e(vhost)}/{_e(exchange)}/bindings/destination', query
        ))

    # -------- queues --------

    def list_queues(self, vhost: Optional[str] = None, query: Query = None) -> List[Resource]:
        path = 'queues' if vhost is None else f'queues/{_e(vhost)}'
        return decode_resource_collection(self.connection.get(path, query))

    def queue_info(self, vhost: str, name: str) -> Resource:
        return decode_resource(self.connection.get(f'queues/{_e(vhost)}/{_e(name)}'))

    def declare_queue(self, vhost: str, name: str, attributes: Mapping[str, Any]) -> Resource:
        return decode_resource(
            self.connection.put_json(f'queues/{_e(vhost)}/{_e(name)}', dict(attributes))
        )

    def delete_queue(self, vhost: str, name: str, if_unused: bool = False,
                     if_empty: bool = False) -> Resource:
        params: Dict[str, Any] = {}
        if if_unused:
            params['if-unused'] = True
        if if_empty:
            params['if-empty'] = True
        return decode_resource(
            self.connection.delete(f'queues/{_e(vhost)}/{_e(name)}', params)
        )

    def list_queue_bindings(self, vhost: str, queue: str, query: Query = None) -> List[Resource]:
        return decode_resource_collection(
            self.connection.get(f'queues/{_e(vhost)}/{_e(queue)}/bindings', query)
        )

    def purge_queue(self, vhost: str, name: str) -> Resource:
        self.connection.delete(f'queues/{_e(vhost)}/{_e(name)}/contents')
        return Resource()

    def get_messages(self, vhost: str, name: str, options: Mapping[str, Any]) -> List[Resource]:
        """
        Fetch messages from a queue.

        This is a POST because it can consume messages, depending on
        ``options['ackmode']`` (e.g. ``{'count': 5, 'ackmode':
        'ack_requeue_true', 'encoding': 'auto'}``). Each envelope carries
        ``payload``, ``payload_encoding`` and ``properties``.
        """
        return decode_resource_collection(
            self.connection.post_json(f'queues/{_e(vhost)}/{_e(name)}/get', dict(options))
        )

    # -------- bindings --------

    def list_bindings(self, vhost: Optional[str] = None, query: Query = None) -> List[Resource]:
        path = 'bindings' if vhost is None else f'bindings/{_e(vhost)}'
        return decode_resource_collection(self.connection.get(path, query))

    def list_bindings_between_queue_and_exchange(self, vhost: str, queue: str, exchange: str,
                                                 query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get(
            f'bindings/{_e(vhost)}/e/{_e(exchange)}/q/{_e(queue)}', query
        ))

    def queue_binding_info(self, vhost: str, queue: str, exchange: str,
                           properties_key: str) -> Resource:
        return decode_resource(self.connection.get(
            f'bindings/{_e(vhost)}/e/{_e(exchange)}/q/{_e(queue)}/{_e(properties_key)}'
        ))

    def bind_queue(self, vhost: str, queue: str, exchange: str, routing_key: str,
                   arguments: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        """Bind a queue to an exchange and return the new binding's ``Location``."""
        res = self.connection.post_json(
            f'bindings/{_e(vhost)}/e/{_e(exchange)}/q/{_e(queue)}',
            {'routing_key': routing_key, 'arguments': dict(arguments or {})},
        )
        return res.headers.get('Location')

    def delete_queue_binding(self, vhost: str, queue: str, exchange: str,
                             properties_key: str) -> bool:
        res = self.connection.delete(
            f'bindings/{_e(vhost)}/e/{_e(exchange)}/q/{_e(queue)}/{_e(properties_key)}'
        )
        return res.ok

    def list_bindings_between_exchanges(self, vhost: str, destination_exchange: str,
                                        source_exchange: str,
                                        query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get(
            f'bindings/{_e(vhost)}/e/{_e(source_exchange)}/e/{_e(destination_exchange)}', query
        ))

    def exchange_binding_info(self, vhost: str, destination_exchange: str, source_exchange: str,
                              properties_key: str) -> Resource:
        return decode_resource(self.connection.get(
            f'bindings/{_e(vhost)}/e/{_e(source_exchange)}/e/{_e(destination_exchange)}'
            f'/{_e(properties_key)}'
        ))

    def bind_exchange(self, vhost: str, destination_exchange: str, source_exchange: str,
                      routing_key: str,
                      arguments: Optional[Mapping[str, Any]] = None) -> Optional[str]:
        """Bind two exchanges and return the new binding's ``Location``."""
        res = self.connection.post_json(
            f'bindings/{_e(vhost)}/e/{_e(source_exchange)}/e/{_e(destination_exchange)}',
            {'routing_key': routing_key, 'arguments': dict(arguments or {})},
        )
        return res.headers.get('Location')

    def delete_exchange_binding(self, vhost: str, destination_exchange: str,
                                source_exchange: str, properties_key: str) -> bool:
        res = self.connection.delete(
            f'bindings/{_e(vhost)}/e/{_e(source_exchange)}/e/{_e(destination_exchange)}'
            f'/{_e(properties_key)}'
        )
        return res.ok

    # -------- vhosts --------

    def list_vhosts(self, query: Query = None) -> List[Resource]:
        return decode_resource_collection(self.connection.get('vhosts', query))

    def vhost_info(self, name: str) -> Resource:
        return decode_resource(self.connection.get(f'vhosts/{_e(name)}'))

    def create_vhost(self, name: str) -> Resource:
        return decode_resource(self.connection.put_json(f'vhosts/{_e(name)}'))

    def delete_vhost(self, name: str) -> Resource:
        return decode_resource(self.connection.delete(f'vhosts/{_e(name)}'))

    # -------- permissions --------

    def list_permissions(self, vhost: Optional[str] = None, query: Query = None) -> List[Resource]:
        path = 'permissions' if vhost is None else f'vhosts/{_e(vhost)}/permissions'
        return decode_resource_collection(self.connection.get(path, query))

    def list_permissions_of(self, vhost: str, user: str) -> Resource:
        return decode_resource(self.connection.get(f'permissions/{_e(vhost)}/{_e(user)}'))

    def update_permissions_of(self, vhost: str, user: str,
                              attributes: Mapping[str, Any]) -> Resource:
        return decode_resource(self.connection.put_json(
            f'permissions/{_e(vhost)}/{_e(user)}', dict(attributes)
        ))

    def clear_permissions_of(self, vhost: str, user: str) -> Resource:
        return decode_resource(self.connection.delete(f'permissions/{_e(vhost)}/{_e(user)}'))

    def list_topic_permissions(self, vhost: Optional[str] = None,
                               query: Query = None) -> List[Resource]:
        path = 'topic-permissions' if vhost is None else f'vhosts/{_e(vhost)}/topic-permissions'
        return decode_resource_collection(self.connection.get(path, query))

    def list_topic_permissions_of(self, vhost: str, user: str) -> List[Resource]:
        return decode_resource_collection(
            self.connection.get(f'topic-permissions/{_e(vhost)}/{_e(user)}')
        )

    def update_topic_permissions_of(self, vhost: str, user: str,
                                    attributes: Mapping[str, Any]) -> None:
        self.connection.put_json(f'topic-permissions/{_e(vhost)}/{_e(user)}', dict(attributes))

    def delete_topic_permissions_of(self, vhost: str, user: str) -> Resource:
        return decode_resource(
            self.connection.delete(f'topic-permissions/{_e(vhost)}/{_e(user)}')
        )

    # -------- users --------

    def list_users(self, query: Query = None) -> List[Resource]:
        users = decode_resource_collection(self.connection.get('users', query))
        return [normalize_user_tags(u) for u in users]

    def user_info(self, name: str) -> Resource:
        return normalize_user_tags(decode_resource(self.connection.get(f'users/{_e(name)}')))

    def update_user(self, name: str, attributes: Mapping[str, Any]) -> Resource:
        return self._put_user(name, attributes)

    def create_user(self, name: str, attributes: Mapping[str, Any]) -> Resource:
        return self._put_user(name, attributes)

    def _put_user(self, name: str, attributes: Mapping[str, Any]) -> Resource:
        payload = dict(attributes)
        # Older brokers require the field; no tags is an empty string.
        if payload.get('tags') is None:
            payload['tags'] = ''
        return decode_resource(self.connection.put_json(f'users/{_e(name)}', payload))

    def delete_user(self, name: str) -> Resource:
        return decode_resource(self.connection.delete(f'users/{_e(name)}'))

    def user_permissions(self, name: str, query: Query = None) -> List[Resource]:
        return decode_resource_collection(
            self.connection.get(f'users/{_e(name)}/permissions', query)
        )

    def whoami(self) -> Resource:
        return decode_resource(self.connection.get('whoami'))

    # -------- policies --------

    def list_policies(self, vhost: Optional[str] = None, query: Query = None) -> List[Resource]:
        path = 'policies' if vhost is None else f'policies/{_e(vhost)}'
        return decode_resource_collection(self.connection.get(path, query))

    def list_policies_of(self, vhost: str, name: Optional[str] = None,
                         query: Query = None) -> List[Resource]:
        """Policies of one vhost, or the named policy as a one-element list."""
        if name is None:
            return decode_resource_collection(self.connection.get(f'policies/{_e(vhost)}', query))
        return [decode_resource(self.connection.get(f'policies/{_e(vhost)}/{_e(name)}', query))]

    def update_policies_of(self, vhost: str, name: str,
                           attributes: Mapping[str, Any]) -> Resource:
        return decode_resource(self.connection.put_json(
            f'policies/{_e(vhost)}/{_e(name)}', dict(attributes)
        ))

    def clear_policies_of(self, vhost: str, name: str) -> Resource:
        return decode_resource(self.connection.delete(f'policies/{_e(vhost)}/{_e(name)}'))

    # -------- parameters --------

    def list_parameters(self, component: Optional[str] = None,
                        query: Query = None) -> List[Resource]:
        path = 'parameters' if component is None else f'parameters/{_e(component)}'
        return decode_resource_collection(self.connection.get(path, query))

    def list_parameters_of(self, component: str, vhost: str, name: Optional[str] = None,
                           query: Query = None) -> List[Resource]:
        path = f'parameters/{_e(component)}/{_e(vhost)}'
        if name is None:
            return decode_resource_collection(self.connection.get(path, query))
        # A named parameter is returned as a single object.
        return [decode_resource(self.connection.get(f'{path}/{_e(name)}', query))]

    def update_parameters_of(self, component: str, vhost: str, name: str,
                             attributes: Mapping[str, Any]) -> Resource:
        return decode_resource(self.connection.put_json(
            f'parameters/{_e(component)}/{_e(vhost)}/{_e(name)}', dict(attributes)
        ))

    def clear_parameters_of(self, component: str, vhost: str, name: str) -> Resource:
        return decode_resource(self.connection.delete(
            f'parameters/{_e(component)}/{_e(vhost)}/{_e(name)}'
        ))

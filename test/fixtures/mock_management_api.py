#!/usr/bin/env python3

"""
Mock RabbitMQ management API for testing

Provides an in-process HTTP server that keeps a small in-memory broker model
(vhosts, exchanges, queues, bindings, users, permissions) and answers the
subset of the management API the client tests exercise.
"""

import base64
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, quote, unquote


class MockBroker:
    """In-memory state behind the mock API."""

    def __init__(self, username='guest', password='guest', tags_as_string=False):
        self.username = username
        self.password = password
        self.tags_as_string = tags_as_string
        self.lock = threading.Lock()

        self.vhosts = {'/': {'name': '/', 'tracing': False}}
        self.exchanges = {}
        self.queues = {}
        self.messages = {}
        self.bindings = []
        self.users = {username: {'name': username, 'tags': ['administrator']}}
        self.permissions = {}
        self.topic_permissions = {}
        self.policies = {}
        self.parameters = {}
        self.definitions = None
        self.listeners = [
            {'node': 'rabbit@localhost', 'protocol': 'amqp', 'ip_address': '::', 'port': 5672},
            {'node': 'rabbit@localhost', 'protocol': 'clustering', 'ip_address': '::', 'port': 25672},
            {'node': 'rabbit@localhost', 'protocol': 'http', 'ip_address': '::', 'port': 15672},
        ]
        # check name -> (status, body)
        self.failing_checks = {}
        self.requests = []

        for name, ex_type in (('', 'direct'), ('amq.direct', 'direct'),
                              ('amq.fanout', 'fanout'), ('amq.topic', 'topic')):
            self.exchanges[('/', name)] = {
                'name': name, 'vhost': '/', 'type': ex_type,
                'durable': True, 'auto_delete': False, 'internal': False, 'arguments': {},
            }

    def publish(self, vhost, queue, payload, content_type=None):
        """Enqueue a message directly, bypassing AMQP."""
        with self.lock:
            self.messages[(vhost, queue)].append({
                'payload': payload,
                'payload_bytes': len(payload.encode('utf-8')),
                'payload_encoding': 'string',
                'redelivered': False,
                'exchange': '',
                'routing_key': queue,
                'properties': {'content_type': content_type} if content_type else {},
            })

    def user_view(self, user):
        view = dict(user)
        if self.tags_as_string:
            view['tags'] = ','.join(user['tags'])
        return view


class MockManagementApiHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the mock management API"""

    broker = None
    base_path = '/api'

    def do_GET(self):
        self._dispatch('GET')

    def do_PUT(self):
        self._dispatch('PUT')

    def do_POST(self):
        self._dispatch('POST')

    def do_DELETE(self):
        self._dispatch('DELETE')

    def log_message(self, format, *args):
        """Suppress log messages"""
        pass

    # -------- plumbing --------

    def _dispatch(self, method):
        raw_path, _, raw_query = self.path.partition('?')
        length = int(self.headers.get('Content-Length') or 0)
        raw_body = self.rfile.read(length) if length else b''

        self.broker.requests.append({
            'method': method,
            'path': raw_path,
            'query': parse_qs(raw_query),
            'headers': dict(self.headers),
            'body': raw_body,
        })

        # Redirects: /moved/... -> base path, /loop/... -> itself
        if raw_path.startswith('/moved/'):
            self._send(307, headers={'Location': self.base_path + raw_path[len('/moved'):]})
            return
        if raw_path.startswith('/loop/'):
            self._send(302, headers={'Location': raw_path})
            return

        if not self._authorized():
            self._send(401, {'error': 'not_authorised', 'reason': 'Login failed'})
            return

        if not raw_path.startswith(self.base_path + '/'):
            self._send(404, {'error': 'Object Not Found', 'reason': 'Not Found'})
            return

        segments = [unquote(s) for s in raw_path[len(self.base_path) + 1:].split('/')]
        query = {k: v[-1] for k, v in parse_qs(raw_query).items()}
        body = None
        if raw_body:
            try:
                body = json.loads(raw_body.decode('utf-8'))
            except ValueError:
                self._send(400, {'error': 'bad_request', 'reason': 'invalid JSON'})
                return

        with self.broker.lock:
            status, payload, headers = _route(self.broker, method, segments, query, body)
        self._send(status, payload, headers)

    def _authorized(self):
        header = self.headers.get('Authorization', '')
        if not header.startswith('Basic '):
            return False
        decoded = base64.b64decode(header[len('Basic '):]).decode('utf-8')
        return decoded == f'{self.broker.username}:{self.broker.password}'

    def _send(self, status, payload=None, headers=None):
        self.send_response(status)
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        if payload is None:
            self.send_header('Content-Length', '0')
            self.end_headers()
            return
        data = json.dumps(payload).encode('utf-8')
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(data)))
        self.end_headers()
        self.wfile.write(data)


NOT_FOUND = (404, {'error': 'Object Not Found', 'reason': 'Not Found'}, None)
NO_CONTENT = (204, None, None)
CREATED = (201, None, None)


def _listing(items, query):
    """Return a bare list, or a pagination envelope when ``page`` is given."""
    if 'page' not in query:
        return 200, items, None
    page = int(query['page'])
    page_size = int(query.get('page_size', 100))
    start = (page - 1) * page_size
    chunk = items[start:start + page_size]
    return 200, {
        'filtered_count': len(items),
        'item_count': len(chunk),
        'items': chunk,
        'page': page,
        'page_count': max(1, -(-len(items) // page_size)),
        'page_size': page_size,
        'total_count': len(items),
    }, None


def _scoped(table, vhost):
    return [v for (vh, _), v in sorted(table.items()) if vhost is None or vh == vhost]


def _props_key(routing_key, arguments):
    if not arguments:
        return routing_key or '~'
    return f'{routing_key}~{abs(hash(json.dumps(arguments, sort_keys=True))) % 100000}'


def _route(b, method, seg, query, body):
    head = seg[0]
    n = len(seg)

    if head == 'overview' and method == 'GET':
        return 200, {
            'management_version': '3.12.0',
            'rabbitmq_version': '3.12.0',
            'erlang_version': '26.0',
            'cluster_name': 'rabbit@localhost',
            'exchange_types': [{'name': t} for t in ('direct', 'fanout', 'headers', 'topic')],
            'listeners': b.listeners,
        }, None

    if head == 'whoami' and method == 'GET':
        return 200, {'name': b.username, 'tags': ['administrator']}, None

    if head == 'definitions':
        if method == 'GET':
            return 200, b.definitions or {'vhosts': list(b.vhosts.values()), 'users': []}, None
        if method == 'POST':
            b.definitions = body
            return NO_CONTENT

    if head == 'vhosts':
        if n == 1 and method == 'GET':
            return _listing(list(b.vhosts.values()), query)
        if n == 2:
            name = seg[1]
            if method == 'GET':
                return (200, b.vhosts[name], None) if name in b.vhosts else NOT_FOUND
            if method == 'PUT':
                existed = name in b.vhosts
                b.vhosts.setdefault(name, {'name': name, 'tracing': False})
                return NO_CONTENT if existed else CREATED
            if method == 'DELETE':
                if b.vhosts.pop(name, None) is None:
                    return NOT_FOUND
                return NO_CONTENT
        if n == 3 and seg[2] == 'permissions' and method == 'GET':
            return _listing(_scoped(b.permissions, seg[1]), query)
        if n == 3 and seg[2] == 'topic-permissions' and method == 'GET':
            return _listing(_scoped(b.topic_permissions, seg[1]), query)

    if head == 'exchanges':
        if n <= 2 and method == 'GET':
            vhost = seg[1] if n == 2 else None
            if vhost is not None and vhost not in b.vhosts:
                return NOT_FOUND
            return _listing(_scoped(b.exchanges, vhost), query)
        if n >= 3:
            key = (seg[1], seg[2])
            if key[0] not in b.vhosts:
                return NOT_FOUND
            if n == 3 and method == 'PUT':
                b.exchanges[key] = dict(body or {}, name=key[1], vhost=key[0])
                return CREATED
            if key not in b.exchanges:
                return NOT_FOUND
            if n == 3 and method == 'GET':
                return 200, b.exchanges[key], None
            if n == 3 and method == 'DELETE':
                in_use = any(x['vhost'] == key[0] and x['source'] == key[1] for x in b.bindings)
                if query.get('if-unused') == 'true' and in_use:
                    return 400, {'error': 'bad_request', 'reason': 'exchange in use'}, None
                del b.exchanges[key]
                return NO_CONTENT
            if n == 5 and seg[3] == 'bindings' and method == 'GET':
                field = 'source' if seg[4] == 'source' else 'destination'
                found = [x for x in b.bindings if x['vhost'] == key[0] and x[field] == key[1]]
                return _listing(found, query)

    if head == 'queues':
        if n <= 2 and method == 'GET':
            vhost = seg[1] if n == 2 else None
            items = []
            for q in _scoped(b.queues, vhost):
                items.append(dict(q, messages=len(b.messages[(q['vhost'], q['name'])])))
            return _listing(items, query)
        if n >= 3:
            key = (seg[1], seg[2])
            if key[0] not in b.vhosts:
                return NOT_FOUND
            if n == 3 and method == 'PUT':
                b.queues[key] = dict(body or {}, name=key[1], vhost=key[0])
                b.messages.setdefault(key, [])
                return CREATED
            if key not in b.queues:
                return NOT_FOUND
            if n == 3 and method == 'GET':
                return 200, dict(b.queues[key], messages=len(b.messages[key])), None
            if n == 3 and method == 'DELETE':
                if query.get('if-empty') == 'true' and b.messages[key]:
                    return 400, {'error': 'bad_request', 'reason': 'queue not empty'}, None
                del b.queues[key]
                del b.messages[key]
                return NO_CONTENT
            if n == 4 and seg[3] == 'contents' and method == 'DELETE':
                b.messages[key] = []
                return NO_CONTENT
            if n == 4 and seg[3] == 'get' and method == 'POST':
                count = int((body or {}).get('count', 1))
                taken = b.messages[key][:count]
                if (body or {}).get('ackmode', '').startswith('ack_requeue_false'):
                    b.messages[key] = b.messages[key][count:]
                remaining = len(b.messages[key])
                return 200, [dict(m, message_count=remaining) for m in taken], None
            if n == 4 and seg[3] == 'bindings' and method == 'GET':
                found = [x for x in b.bindings if x['vhost'] == key[0]
                         and x['destination_type'] == 'queue' and x['destination'] == key[1]]
                return _listing(found, query)

    if head == 'bindings':
        if n <= 2 and method == 'GET':
            vhost = seg[1] if n == 2 else None
            return _listing([x for x in b.bindings if vhost is None or x['vhost'] == vhost], query)
        if n >= 6 and seg[2] == 'e' and seg[4] in ('q', 'e'):
            vhost, source, dest = seg[1], seg[3], seg[5]
            dest_type = 'queue' if seg[4] == 'q' else 'exchange'
            matching = [x for x in b.bindings if x['vhost'] == vhost and x['source'] == source
                        and x['destination'] == dest and x['destination_type'] == dest_type]
            if n == 6 and method == 'GET':
                return _listing(matching, query)
            if n == 6 and method == 'POST':
                routing_key = (body or {}).get('routing_key', '')
                arguments = (body or {}).get('arguments') or {}
                props = _props_key(routing_key, arguments)
                b.bindings.append({
                    'source': source, 'vhost': vhost, 'destination': dest,
                    'destination_type': dest_type, 'routing_key': routing_key,
                    'arguments': arguments, 'properties_key': props,
                })
                return 201, None, {'Location': f'{dest}/{props}'}
            if n == 7:
                found = [x for x in matching if x['properties_key'] == seg[6]]
                if not found:
                    return NOT_FOUND
                if method == 'GET':
                    return 200, found[0], None
                if method == 'DELETE':
                    b.bindings.remove(found[0])
                    return NO_CONTENT

    if head == 'users':
        if n == 1:
            if method != 'GET':
                return NOT_FOUND
            return _listing([b.user_view(u) for u in b.users.values()], query)
        name = seg[1]
        if n == 2 and method == 'PUT':
            if 'tags' not in (body or {}):
                return 400, {'error': 'bad_request', 'reason': 'tags missing'}, None
            tags = body['tags']
            if isinstance(tags, str):
                tags = [t.strip() for t in tags.split(',') if t.strip()]
            b.users[name] = {'name': name, 'tags': tags}
            return CREATED
        if name not in b.users:
            return NOT_FOUND
        if n == 2 and method == 'GET':
            return 200, b.user_view(b.users[name]), None
        if n == 2 and method == 'DELETE':
            del b.users[name]
            return NO_CONTENT
        if n == 3 and seg[2] == 'permissions' and method == 'GET':
            return _listing([p for (_, u), p in sorted(b.permissions.items()) if u == name], query)

    if head in ('permissions', 'topic-permissions'):
        table = b.permissions if head == 'permissions' else b.topic_permissions
        if n == 1 and method == 'GET':
            return _listing(_scoped(table, None), query)
        if n != 3:
            return NOT_FOUND
        key = (seg[1], seg[2])
        if method == 'PUT':
            if key[0] not in b.vhosts:
                return NOT_FOUND
            table[key] = dict(body or {}, vhost=key[0], user=key[1])
            return CREATED
        if key not in table:
            return NOT_FOUND
        if method == 'GET':
            return (200, table[key], None) if head == 'permissions' else (200, [table[key]], None)
        if method == 'DELETE':
            del table[key]
            return NO_CONTENT

    if head in ('policies', 'parameters'):
        table = b.policies if head == 'policies' else b.parameters
        scope = tuple(seg[1:])
        if method == 'GET':
            exact = table.get(scope)
            if exact is not None:
                return 200, exact, None
            found = [v for k, v in sorted(table.items()) if k[:len(scope)] == scope]
            return _listing(found, query)
        if method == 'PUT':
            table[scope] = dict(body or {}, name=scope[-1], vhost=scope[-2])
            return CREATED
        if method == 'DELETE':
            if table.pop(scope, None) is None:
                return NOT_FOUND
            return NO_CONTENT

    if head == 'health' and n >= 3 and seg[1] == 'checks' and method == 'GET':
        check = '/'.join(seg[2:])
        if check in b.failing_checks:
            status, payload = b.failing_checks[check]
            return status, payload, None
        return 200, {'status': 'ok'}, None

    if head in ('nodes', 'connections', 'channels', 'extensions') and method == 'GET':
        if n == 1:
            return _listing([], query)
        return NOT_FOUND

    return NOT_FOUND


class MockManagementApi:
    """Mock management API HTTP server on an ephemeral localhost port"""

    def __init__(self, broker=None):
        self.broker = broker or MockBroker()
        self.server = None
        self.thread = None

    @property
    def port(self):
        return self.server.server_address[1]

    @property
    def url(self):
        return f'http://127.0.0.1:{self.port}'

    def start(self):
        """Start the mock server"""
        handler = type('BoundHandler', (MockManagementApiHandler,), {'broker': self.broker})
        self.server = ThreadingHTTPServer(('127.0.0.1', 0), handler)
        self.server.daemon_threads = True

        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()

    def stop(self):
        """Stop the mock server"""
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            if self.thread:
                self.thread.join(timeout=1.0)


def encoded(segment):
    """Percent-encode like the client, for asserting on recorded raw paths."""
    return quote(segment, safe='')

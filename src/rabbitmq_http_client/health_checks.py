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
Health check endpoints.

These endpoints report a failed check with HTTP 503 and a JSON body such as
``{"status": "failed", "reason": "..."}``. That status is turned into a
``(False, details)`` result; every other error status propagates.
"""

import logging
from typing import TYPE_CHECKING, Optional, Tuple

from .errors import ResponseDecodingError, ServerError
from .request_helper import encode_uri_path_segment
from .response_helper import Resource, decode_resource

if TYPE_CHECKING:
    from .connection import Connection

logger = logging.getLogger(__name__)

HealthCheckResult = Tuple[bool, Optional[Resource]]

TIME_UNITS = ('days', 'weeks', 'months', 'years')


class HealthChecks:
    """Health check sub-client, available as ``Client.health``."""

    def __init__(self, connection: 'Connection'):
        self._connection = connection

    def check_alarms(self) -> HealthCheckResult:
        return self.health_check_for('health/checks/alarms')

    def check_local_alarms(self) -> HealthCheckResult:
        return self.health_check_for('health/checks/local-alarms')

    def check_virtual_hosts(self) -> HealthCheckResult:
        return self.health_check_for('health/checks/virtual-hosts')

    def check_if_node_is_quorum_critical(self) -> HealthCheckResult:
        return self.health_check_for('health/checks/node-is-quorum-critical')

    def check_if_node_is_mirror_sync_critical(self) -> HealthCheckResult:
        return self.health_check_for('health/checks/node-is-mirror-sync-critical')

    def check_port_listener(self, port: int) -> HealthCheckResult:
        return self.health_check_for(
            f'health/checks/port-listener/{encode_uri_path_segment(port)}'
        )

    def check_protocol_listener(self, proto: str) -> HealthCheckResult:
        return self.health_check_for(
            f'health/checks/protocol-listener/{encode_uri_path_segment(proto)}'
        )

    def check_certificate_expiration(self, within: int, unit: str) -> HealthCheckResult:
        """
        Check that no certificate expires within ``within`` ``unit``s.

        Raises ValueError, without issuing a request, for an unsupported unit
        or a non-positive ``within``.
        """
        if unit not in TIME_UNITS:
            raise ValueError(
                f"supported time units are {', '.join(TIME_UNITS)}, given: {unit}"
            )
        if isinstance(within, bool) or not isinstance(within, int) or within <= 0:
            raise ValueError('the number of time units must be a positive integer')

        return self.health_check_for(
            'health/checks/certificate-expiration/'
            f'{encode_uri_path_segment(within)}/{encode_uri_path_segment(unit)}'
        )

    def health_check_for(self, path: str) -> HealthCheckResult:
        try:
            decode_resource(self._connection.get(path))
        except ServerError as e:
            if e.status != 503:
                raise
            try:
                details = decode_resource(e.response)
            except ResponseDecodingError:
                # Non-JSON 503 page, e.g. from a reverse proxy.
                details = Resource(status='failed', reason=e.body)
            logger.warning(f'Health check {path} failed: {details.get("reason", e.body)}')
            return False, details
        return True, None

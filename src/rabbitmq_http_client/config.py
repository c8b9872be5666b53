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
Connection profile loader.

Loads and validates YAML files describing how to reach a management API.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .client import Client
from .errors import ConfigError

SCHEMA_NAME = 'rabbitmq-http-client'

# Supported schema version
SUPPORTED_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class ClientConfig:
    """Settings for one management API endpoint."""
    endpoint: str
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: Optional[float] = None
    verify: bool = True

    def connect(self) -> Client:
        return Client(
            self.endpoint,
            username=self.username,
            password=self.password,
            timeout=self.timeout,
            verify=self.verify,
        )


def load_client_config(config_path: str) -> ClientConfig:
    """
    Load and validate a connection profile from a YAML file.

    Args:
        config_path: Path to the YAML profile

    Returns:
        Validated ClientConfig

    Raises:
        ConfigError: If schema validation fails
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Client config file not found: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    if not config:
        raise ConfigError("Client config file is empty")

    return parse_client_config(config)


def parse_client_config(config: Dict[str, Any]) -> ClientConfig:
    """
    Validate an already loaded profile.

    Raises:
        ConfigError: If validation fails
    """
    if not isinstance(config, dict):
        raise ConfigError(f"Client config must be a mapping, got: {type(config).__name__}")

    validate_schema(config)

    section = config.get('management_api')
    if not isinstance(section, dict):
        raise ConfigError("Missing 'management_api' section in client config")

    endpoint = section.get('endpoint')
    if not isinstance(endpoint, str) or not endpoint.strip():
        raise ConfigError("Missing 'management_api.endpoint' in client config")

    for key in ('username', 'password'):
        value = section.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"'management_api.{key}' must be a string")

    timeout = section.get('timeout')
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(f"'management_api.timeout' must be a positive number, got: {timeout!r}")
        timeout = float(timeout)

    verify = section.get('verify', True)
    if not isinstance(verify, bool):
        raise ConfigError(f"'management_api.verify' must be a boolean, got: {verify!r}")

    return ClientConfig(
        endpoint=endpoint.strip(),
        username=section.get('username'),
        password=section.get('password'),
        timeout=timeout,
        verify=verify,
    )


def validate_schema(config: Dict[str, Any]) -> None:
    """
    Validate the profile's schema header.

    Raises:
        ConfigError: If validation fails
    """
    schema = config.get('schema')
    if not isinstance(schema, dict):
        raise ConfigError("Missing 'schema' section in client config")

    if schema.get('name') != SCHEMA_NAME:
        raise ConfigError(
            f"Unexpected schema name: {schema.get('name')}. Expected: '{SCHEMA_NAME}'"
        )

    version = schema.get('version')
    if isinstance(version, bool) or not isinstance(version, int):
        raise ConfigError(f"Schema version must be integer, got: {type(version).__name__}")

    if version != SUPPORTED_SCHEMA_VERSION:
        raise ConfigError(
            f"Unsupported schema version: {version}. Supported version: {SUPPORTED_SCHEMA_VERSION}"
        )


def connect_from_config(config_path: str) -> Client:
    """Load a profile and return a Client for it."""
    return load_client_config(config_path).connect()

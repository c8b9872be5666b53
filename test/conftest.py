"""Shared fixtures: an in-process mock management API and a client bound to it."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'fixtures'))

from mock_management_api import MockBroker, MockManagementApi  # noqa: E402
from rabbitmq_http_client import connect  # noqa: E402


@pytest.fixture
def broker():
    return MockBroker()


@pytest.fixture
def management_api(broker):
    api = MockManagementApi(broker)
    api.start()
    yield api
    api.stop()


@pytest.fixture
def client(management_api):
    c = connect(management_api.url, username='guest', password='guest', timeout=5.0)
    yield c
    c.close()

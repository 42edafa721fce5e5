import contextlib
from unittest import mock

import moto
import pytest

from dynamo_sandbox.clients import DynamoClient, FixtureHandle
from dynamo_sandbox.config import StoreConfig
from dynamo_sandbox.schema import load_table_definition


class StubSandbox:
    "Stands in for DockerSandbox: hands out handles with no endpoint, so boto3 goes to (mocked) AWS"

    def __init__(self):
        self.handles = []

    def __enter__(self):
        return self

    def __exit__(self, et, ev, tb):
        pass

    @contextlib.contextmanager
    def fixture(self, **kwargs):
        handle = FixtureHandle(mock.Mock(short_id='c0ffee'), None)
        self.handles.append(handle)
        try:
            yield handle
        finally:
            handle.teardown()


@pytest.fixture
def store_config():
    yield StoreConfig(endpoint_override=None, region='us-west-2', access_key_id='testing', secret_access_key='testing')


@pytest.fixture
def table_definition():
    yield load_table_definition()


@pytest.fixture
def aws():
    with moto.mock_aws():
        yield


@pytest.fixture
def dynamo_client(aws, store_config, table_definition):
    client = DynamoClient.for_table_definition('testtable', table_definition, config=store_config)
    client.create_table(table_definition)
    yield client


@pytest.fixture
def stub_sandbox():
    yield StubSandbox()

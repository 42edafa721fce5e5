import json

import pytest

from dynamo_sandbox.exceptions import EnvironmentFatal, SchemaMalformed, SchemaUnreadable
from dynamo_sandbox.schema import DEFAULT_SCHEMA_PATH, load_table_definition, parse_table_definition

valid_schema = {
    'KeySchema': [
        {'AttributeName': 'PK', 'KeyType': 'HASH'},
        {'AttributeName': 'SK', 'KeyType': 'RANGE'},
    ],
    'AttributeDefinitions': [
        {'AttributeName': 'PK', 'AttributeType': 'S'},
        {'AttributeName': 'SK', 'AttributeType': 'S'},
    ],
    'BillingMode': 'PAY_PER_REQUEST',
}


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / 'schema.json'
    path.write_text(json.dumps(valid_schema))
    yield str(path)


def test_load_default_schema():
    table_definition = load_table_definition()
    assert table_definition.source == DEFAULT_SCHEMA_PATH
    assert table_definition.partition_key == 'PK'
    assert table_definition.sort_key == 'SK'
    assert table_definition.billing_mode == 'PAY_PER_REQUEST'
    assert table_definition.key_schema == valid_schema['KeySchema']
    assert table_definition.attribute_definitions == valid_schema['AttributeDefinitions']


def test_load_is_idempotent(schema_path):
    assert load_table_definition(schema_path) == load_table_definition(schema_path)
    assert load_table_definition(schema_path) == load_table_definition()


def test_create_table_kwargs(schema_path):
    table_definition = load_table_definition(schema_path)
    kwargs = table_definition.create_table_kwargs('testtable')
    assert kwargs == {**valid_schema, 'TableName': 'testtable'}

    # the definition is not affected by what callers do with the request
    kwargs['KeySchema'].pop()
    kwargs['BillingMode'] = 'PROVISIONED'
    assert table_definition.create_table_kwargs('other') == {**valid_schema, 'TableName': 'other'}

    with pytest.raises(AssertionError):
        table_definition.create_table_kwargs('')


def test_table_name_in_file_is_replaced(tmp_path):
    path = tmp_path / 'schema.json'
    path.write_text(json.dumps({**valid_schema, 'TableName': 'from-file'}))
    table_definition = load_table_definition(str(path))
    assert table_definition.create_table_kwargs('testtable')['TableName'] == 'testtable'


def test_hash_only_schema_is_rejected():
    # every record is addressed by a (partition key, sort key) pair
    with pytest.raises(SchemaMalformed, match='exactly one RANGE key'):
        parse_table_definition(
            {
                'KeySchema': [{'AttributeName': 'id', 'KeyType': 'HASH'}],
                'AttributeDefinitions': [{'AttributeName': 'id', 'AttributeType': 'N'}],
                'ProvisionedThroughput': {'ReadCapacityUnits': 1, 'WriteCapacityUnits': 1},
            }
        )


def test_provisioned_schema():
    table_definition = parse_table_definition(
        {
            **valid_schema,
            'BillingMode': 'PROVISIONED',
            'ProvisionedThroughput': {'ReadCapacityUnits': 1, 'WriteCapacityUnits': 1},
        }
    )
    assert table_definition.billing_mode == 'PROVISIONED'
    assert table_definition.sort_key == 'SK'


def test_unreadable(tmp_path):
    path = str(tmp_path / 'missing.json')
    with pytest.raises(SchemaUnreadable) as error_info:
        load_table_definition(path)
    assert error_info.value.path == path
    assert isinstance(error_info.value.cause, FileNotFoundError)
    assert isinstance(error_info.value, EnvironmentFatal)


def test_invalid_json(tmp_path):
    path = tmp_path / 'schema.json'
    path.write_text('{"KeySchema": [')
    with pytest.raises(SchemaMalformed, match='invalid json'):
        load_table_definition(str(path))


@pytest.mark.parametrize('data, reason', (
    ([], 'top level must be an object'),
    ({**valid_schema, 'KeySchema': []}, '`KeySchema` must be a non-empty list'),
    ({k: v for k, v in valid_schema.items() if k != 'KeySchema'}, '`KeySchema` must be a non-empty list'),
    ({**valid_schema, 'KeySchema': [{'AttributeName': 'PK', 'KeyType': 'PRIMARY'}]}, 'invalid key schema element'),
    ({**valid_schema, 'KeySchema': [{'AttributeName': 'SK', 'KeyType': 'RANGE'}]}, 'exactly one HASH key'),
    (
        {**valid_schema, 'KeySchema': valid_schema['KeySchema'] + [{'AttributeName': 'PK', 'KeyType': 'HASH'}]},
        'exactly one HASH key',
    ),
    (
        {**valid_schema, 'KeySchema': valid_schema['KeySchema'] + [{'AttributeName': 'X', 'KeyType': 'RANGE'}]},
        'exactly one RANGE key',
    ),
    ({k: v for k, v in valid_schema.items() if k != 'AttributeDefinitions'}, '`AttributeDefinitions` must be a list'),
    (
        {**valid_schema, 'AttributeDefinitions': [{'AttributeName': 'PK', 'AttributeType': 'S'}]},
        'key attribute `SK` is not declared',
    ),
    (
        {**valid_schema, 'AttributeDefinitions': [{'AttributeName': 'PK', 'AttributeType': 'STRING'}]},
        'invalid attribute definition',
    ),
    ({**valid_schema, 'BillingMode': 'FREE'}, 'unknown billing mode'),
    ({**valid_schema, 'BillingMode': 'PROVISIONED'}, 'require `ProvisionedThroughput`'),
))
def test_malformed(data, reason):
    with pytest.raises(SchemaMalformed) as error_info:
        parse_table_definition(data, source='test.json')
    assert reason in error_info.value.reason
    assert error_info.value.path == 'test.json'

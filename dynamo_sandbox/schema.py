import copy
import json
import logging
from os import path

from .exceptions import SchemaMalformed, SchemaUnreadable

DEFAULT_SCHEMA_PATH = path.join(path.dirname(__file__), 'schema.json')

ATTRIBUTE_TYPES = ('S', 'N', 'B')
BILLING_MODES = ('PAY_PER_REQUEST', 'PROVISIONED')

logger = logging.getLogger()


class TableDefinition:
    """
    A parsed CreateTable request, minus the table name.
    Read-only: every accessor hands out a copy so nothing downstream can mutate it.
    """

    def __init__(self, request, source=None):
        self._request = copy.deepcopy(request)
        self.source = source

    def __eq__(self, other):
        return isinstance(other, TableDefinition) and self._request == other._request

    def __repr__(self):
        return f'TableDefinition(source={self.source!r}, partition_key={self.partition_key!r})'

    @property
    def key_schema(self):
        return copy.deepcopy(self._request['KeySchema'])

    @property
    def attribute_definitions(self):
        return copy.deepcopy(self._request['AttributeDefinitions'])

    @property
    def billing_mode(self):
        return self._request.get('BillingMode', 'PROVISIONED')

    @property
    def partition_key(self):
        return next(k['AttributeName'] for k in self._request['KeySchema'] if k['KeyType'] == 'HASH')

    @property
    def sort_key(self):
        return next(k['AttributeName'] for k in self._request['KeySchema'] if k['KeyType'] == 'RANGE')

    def create_table_kwargs(self, table_name):
        "Return a fresh CreateTable request bound to `table_name`"
        assert table_name, 'Table name is required'
        return {**copy.deepcopy(self._request), 'TableName': table_name}


def load_table_definition(schema_path=DEFAULT_SCHEMA_PATH):
    "Read and parse the table definition at `schema_path`"
    try:
        with open(schema_path, 'rb') as fh:
            raw = fh.read()
    except OSError as err:
        raise SchemaUnreadable(schema_path, err) from err

    try:
        data = json.loads(raw)
    except ValueError as err:
        raise SchemaMalformed(schema_path, f'invalid json ({err})') from err

    definition = parse_table_definition(data, source=schema_path)
    logger.debug(f'Loaded table definition from `{schema_path}`')
    return definition


def parse_table_definition(data, source='<memory>'):
    "Validate a CreateTable-shaped mapping and wrap it as a TableDefinition"
    if not isinstance(data, dict):
        raise SchemaMalformed(source, 'top level must be an object')

    key_schema = data.get('KeySchema')
    if not isinstance(key_schema, list) or not key_schema:
        raise SchemaMalformed(source, '`KeySchema` must be a non-empty list')
    for key in key_schema:
        if not isinstance(key, dict) or not key.get('AttributeName') or key.get('KeyType') not in ('HASH', 'RANGE'):
            raise SchemaMalformed(source, f'invalid key schema element {key!r}')
    key_types = [k['KeyType'] for k in key_schema]
    if key_types.count('HASH') != 1:
        raise SchemaMalformed(source, 'exactly one HASH key is required')
    if key_types.count('RANGE') != 1:
        raise SchemaMalformed(source, 'exactly one RANGE key is required')

    attribute_definitions = data.get('AttributeDefinitions')
    if not isinstance(attribute_definitions, list):
        raise SchemaMalformed(source, '`AttributeDefinitions` must be a list')
    declared = {}
    for attr in attribute_definitions:
        if not isinstance(attr, dict) or attr.get('AttributeType') not in ATTRIBUTE_TYPES:
            raise SchemaMalformed(source, f'invalid attribute definition {attr!r}')
        declared[attr.get('AttributeName')] = attr['AttributeType']
    for key in key_schema:
        if key['AttributeName'] not in declared:
            raise SchemaMalformed(source, f'key attribute `{key["AttributeName"]}` is not declared')

    billing_mode = data.get('BillingMode', 'PROVISIONED')
    if billing_mode not in BILLING_MODES:
        raise SchemaMalformed(source, f'unknown billing mode `{billing_mode}`')
    if billing_mode == 'PROVISIONED' and 'ProvisionedThroughput' not in data:
        raise SchemaMalformed(source, 'provisioned tables require `ProvisionedThroughput`')

    # the runtime table name is always bound at provisioning time
    request = {k: v for k, v in data.items() if k != 'TableName'}
    return TableDefinition(request, source=source)

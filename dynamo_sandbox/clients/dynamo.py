import logging

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StoreConfig
from ..exceptions import StoreError
from ..models import StoreRecord, WriteOutcome

logger = logging.getLogger()


def store_error(operation, err):
    "Wrap an SDK error with the name of the store operation that raised it"
    if isinstance(err, ClientError):
        error = err.response.get('Error', {})
        return StoreError(operation, error.get('Message') or str(err), code=error.get('Code'), cause=err)
    return StoreError(operation, str(err), code=type(err).__name__, cause=err)


class DynamoClient:
    def __init__(self, table_name, config=None, partition_key='PK', sort_key='SK'):
        assert table_name, 'Table name is required'
        self.table_name = table_name
        self.config = config or StoreConfig()
        self.partition_key = partition_key
        self.sort_key = sort_key

        session = boto3.session.Session(
            aws_access_key_id=self.config.access_key_id,
            aws_secret_access_key=self.config.secret_access_key,
            region_name=self.config.region,
        )
        self.boto3_resource = session.resource(
            'dynamodb', endpoint_url=self.config.endpoint_override, config=self.config.botocore_config(),
        )
        self.table = self.boto3_resource.Table(table_name)

        # share the resource's client so its modeled exceptions are the ones we catch
        self.boto3_client = self.boto3_resource.meta.client
        self.exceptions = self.boto3_client.exceptions

    @classmethod
    def for_table_definition(cls, table_name, table_definition, config=None):
        "A client whose key attribute names follow `table_definition`"
        return cls(
            table_name,
            config=config,
            partition_key=table_definition.partition_key,
            sort_key=table_definition.sort_key,
        )

    @property
    def endpoint(self):
        return self.boto3_client.meta.endpoint_url

    def create_table(self, table_definition):
        "Send a single CreateTable request for this client's table"
        kwargs = table_definition.create_table_kwargs(self.table_name)
        try:
            return self.boto3_client.create_table(**kwargs)['TableDescription']
        except (BotoCoreError, ClientError) as err:
            raise store_error('CreateTable', err) from err

    def wait_until_exists(self, delay=1, max_attempts=20):
        waiter = self.boto3_client.get_waiter('table_exists')
        try:
            waiter.wait(TableName=self.table_name, WaiterConfig={'Delay': delay, 'MaxAttempts': max_attempts})
        except (BotoCoreError, ClientError) as err:
            raise store_error('DescribeTable', err) from err

    def put_if_absent(self, record):
        """
        Put the record only if nothing is stored under its composite key.
        The condition and the write are evaluated by the store as one atomic operation.
        Returns a WriteOutcome, raises StoreError for anything other than a failed condition.
        """
        kwargs = {
            'Item': record.item(self.partition_key, self.sort_key),
            'ConditionExpression': Attr(self.partition_key).not_exists(),
        }
        try:
            self.table.put_item(**kwargs)
        except self.exceptions.ConditionalCheckFailedException:
            logger.debug(f'Record {record.composite_key} already exists', extra={'table': self.table_name})
            return WriteOutcome.CONDITION_FAILED
        except (BotoCoreError, ClientError, TypeError) as err:
            # TypeError: the item holds values boto3 cannot serialize, e.g. floats
            raise store_error('PutItem', err) from err
        return WriteOutcome.CREATED

    def get_item(self, partition_key, sort_key, **kwargs):
        "Get a record by its composite key, or None"
        key = {self.partition_key: partition_key, self.sort_key: sort_key}
        try:
            item = self.table.get_item(Key=key, ConsistentRead=True, **kwargs).get('Item')
        except (BotoCoreError, ClientError) as err:
            raise store_error('GetItem', err) from err
        return StoreRecord.from_item(item, self.partition_key, self.sort_key) if item else None

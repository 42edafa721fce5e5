import contextlib
import logging

import pendulum

from .clients import DynamoClient
from .clients.docker import DYNAMODB_LOCAL_IMAGE, DYNAMODB_LOCAL_PORT
from .config import StoreConfig
from .logging import LogLevelContext
from .models import StoreRecord, WriteOutcome
from .provision import provision
from .retry import ExponentialBackoff, retry

DEFAULT_TABLE_NAME = 'testtable'

# same partition key throughout: V1 and V2 are distinct records, the repeat of V1 must be refused
SCENARIO = (
    (StoreRecord('HELLO', 'V1'), WriteOutcome.CREATED),
    (StoreRecord('HELLO', 'V2'), WriteOutcome.CREATED),
    (StoreRecord('HELLO', 'V1'), WriteOutcome.CONDITION_FAILED),
)

logger = logging.getLogger()


@contextlib.contextmanager
def bootstrap(
    sandbox,
    table_definition,
    table_name=DEFAULT_TABLE_NAME,
    config=None,
    image=DYNAMODB_LOCAL_IMAGE,
    exposed_port=DYNAMODB_LOCAL_PORT,
    host_port=None,
    max_attempts=10,
    backoff=None,
    timeout=None,
    sleep=None,
):
    """
    Start a store fixture, provision `table_name` on it once it answers, and yield
    `(handle, dynamo_client)`. The fixture is torn down when the block exits, whether
    it exits normally, by exception, or because provisioning never succeeded.
    `timeout` (seconds) bounds the whole readiness wait.
    """
    deadline = pendulum.now('utc') + pendulum.duration(seconds=timeout) if timeout else None
    retry_kwargs = {'sleep': sleep} if sleep else {}

    with sandbox.fixture(image=image, exposed_port=exposed_port, host_port=host_port) as handle:
        dynamo_client = DynamoClient.for_table_definition(
            table_name, table_definition, config=(config or StoreConfig()).with_endpoint(handle.endpoint),
        )
        # connection refused is expected while the store boots, don't let botocore shout about it
        with LogLevelContext(logging.getLogger('botocore'), logging.CRITICAL):
            retry(
                lambda: provision(dynamo_client, table_definition),
                max_attempts=max_attempts,
                backoff=backoff or ExponentialBackoff(),
                deadline=deadline,
                name='provision',
                **retry_kwargs,
            )
        yield handle, dynamo_client


def run_scenario(dynamo_client, steps=SCENARIO):
    "Apply each conditional write in order, return a list of (record, expected, actual)"
    results = []
    extra = {'table': dynamo_client.table_name}
    for number, (record, expected) in enumerate(steps, start=1):
        outcome = dynamo_client.put_if_absent(record)
        if outcome == WriteOutcome.CREATED:
            logger.info(f'Item {number} {record.composite_key} added successfully.', extra=extra)
        else:
            logger.info(f'Item {number} {record.composite_key} already exists.', extra=extra)
        if outcome != expected:
            logger.error(f'Item {number} {record.composite_key}: expected {expected}, got {outcome}')
        results.append((record, expected, outcome))
    return results

#!/usr/bin/env python

import argparse
import logging
import sys

import dotenv

from .clients import DockerSandbox
from .clients.docker import DYNAMODB_LOCAL_IMAGE, DYNAMODB_LOCAL_PORT
from .config import StoreConfig
from .exceptions import SandboxException
from .logging import cli_logging, configure_logging
from .retry import ExponentialBackoff
from .scenario import DEFAULT_TABLE_NAME, bootstrap, run_scenario
from .schema import DEFAULT_SCHEMA_PATH, load_table_definition

logger = logging.getLogger()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='dynamo_sandbox', description='Check put-if-absent semantics against a throwaway DynamoDB Local',
    )
    parser.add_argument('--schema', default=DEFAULT_SCHEMA_PATH, help='CreateTable json to provision the table from')
    parser.add_argument('--table', default=DEFAULT_TABLE_NAME, help='name of the table to create')
    parser.add_argument('--image', default=DYNAMODB_LOCAL_IMAGE, help='store image to run')
    parser.add_argument('--port', type=int, default=DYNAMODB_LOCAL_PORT, help='store port inside the container')
    parser.add_argument('--host-port', type=int, default=None, help='host port to publish on (default: random)')
    parser.add_argument('--max-attempts', type=int, default=10, help='table creation attempts before giving up')
    parser.add_argument('--timeout', type=float, default=60, help='seconds to wait for the store to come up')
    parser.add_argument('-v', '--verbose', action='store_true', help='log debug output')
    return parser.parse_args(argv)


@cli_logging
def main(argv=None):
    dotenv.load_dotenv()
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        table_definition = load_table_definition(args.schema)
        with DockerSandbox() as sandbox:
            with bootstrap(
                sandbox,
                table_definition,
                table_name=args.table,
                config=StoreConfig(),
                image=args.image,
                exposed_port=args.port,
                host_port=args.host_port,
                max_attempts=args.max_attempts,
                backoff=ExponentialBackoff(),
                timeout=args.timeout,
            ) as (_, dynamo_client):
                results = run_scenario(dynamo_client)
    except SandboxException as err:
        logger.error(str(err))
        return 1

    return 0 if all(expected == actual for _, expected, actual in results) else 1


if __name__ == '__main__':
    sys.exit(main())

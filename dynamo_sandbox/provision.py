import logging

logger = logging.getLogger()


def provision(dynamo_client, table_definition, table_name=None):
    """
    Create `table_name` (default: the client's table) from `table_definition`.

    Errors are not classified here: a store that is still booting and a genuinely bad
    request both surface as StoreError, and the readiness gate decides what to do with them.
    """
    if table_name is not None and table_name != dynamo_client.table_name:
        raise ValueError(f'Client is bound to table `{dynamo_client.table_name}`, not `{table_name}`')
    description = dynamo_client.create_table(table_definition)
    logger.info(
        f'Created table `{dynamo_client.table_name}`',
        extra={'table': dynamo_client.table_name, 'endpoint': dynamo_client.endpoint},
    )
    return description

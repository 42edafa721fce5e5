import os

import botocore.config

ENDPOINT_OVERRIDE = os.environ.get('DYNAMO_SANDBOX_ENDPOINT')
REGION = os.environ.get('DYNAMO_SANDBOX_REGION', 'us-west-2')
# dynamodb-local accepts any credentials, but botocore refuses to sign without some
ACCESS_KEY_ID = os.environ.get('DYNAMO_SANDBOX_ACCESS_KEY_ID', 'dummy')
SECRET_ACCESS_KEY = os.environ.get('DYNAMO_SANDBOX_SECRET_ACCESS_KEY', 'dummy')
CONNECT_TIMEOUT = float(os.environ.get('DYNAMO_SANDBOX_CONNECT_TIMEOUT', '2'))
READ_TIMEOUT = float(os.environ.get('DYNAMO_SANDBOX_READ_TIMEOUT', '10'))


class StoreConfig:
    """
    Everything needed to reach a store. `endpoint_override` replaces the endpoint the
    SDK would otherwise resolve from the region, leave it as None to talk to AWS proper.
    `max_sdk_retries` defaults to zero so store errors reach the caller on first failure.
    """

    def __init__(
        self,
        endpoint_override=ENDPOINT_OVERRIDE,
        region=REGION,
        access_key_id=ACCESS_KEY_ID,
        secret_access_key=SECRET_ACCESS_KEY,
        connect_timeout=CONNECT_TIMEOUT,
        read_timeout=READ_TIMEOUT,
        max_sdk_retries=0,
    ):
        assert region, 'Region is required'
        self.endpoint_override = endpoint_override
        self.region = region
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.max_sdk_retries = max_sdk_retries

    def with_endpoint(self, endpoint):
        "Return a copy of this config pointed at `endpoint`"
        return StoreConfig(
            endpoint_override=endpoint,
            region=self.region,
            access_key_id=self.access_key_id,
            secret_access_key=self.secret_access_key,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            max_sdk_retries=self.max_sdk_retries,
        )

    def botocore_config(self):
        return botocore.config.Config(
            region_name=self.region,
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            retries={'total_max_attempts': self.max_sdk_retries + 1, 'mode': 'standard'},
        )

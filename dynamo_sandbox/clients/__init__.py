__all__ = [
    'DockerSandbox',
    'DynamoClient',
    'FixtureHandle',
]
from .docker import DockerSandbox, FixtureHandle
from .dynamo import DynamoClient

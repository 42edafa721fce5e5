import contextlib
import logging
import os
from urllib.parse import urlparse

import docker
import requests
from docker.errors import APIError, DockerException, NotFound

from ..exceptions import EnvironmentFatal, SandboxStartFailed, SandboxUnavailable

DYNAMODB_LOCAL_IMAGE = 'amazon/dynamodb-local:latest'
DYNAMODB_LOCAL_PORT = 8000
# -sharedDb so the tables can be inspected with NoSQL Workbench regardless of credentials/region
DYNAMODB_LOCAL_COMMAND = ['-jar', 'DynamoDBLocal.jar', '-sharedDb']
SANDBOX_LABEL = 'dynamo-sandbox'

logger = logging.getLogger()


def endpoint_host(docker_host=None):
    "The host on which published container ports are reachable"
    docker_host = docker_host if docker_host is not None else os.environ.get('DOCKER_HOST', '')
    if docker_host.startswith('tcp://'):
        return urlparse(docker_host).hostname or 'localhost'
    return 'localhost'


class FixtureHandle:
    """
    One running, disposable store container.
    `endpoint` is fixed when the handle is created. `teardown` may be called any number
    of times but only purges the container once.
    """

    def __init__(self, container, endpoint, on_teardown=None):
        self.container = container
        self.endpoint = endpoint
        self.on_teardown = on_teardown
        self.torn_down = False

    def __repr__(self):
        return f'FixtureHandle({self.container.short_id!r}, {self.endpoint!r})'

    def teardown(self):
        if self.torn_down:
            return
        self.torn_down = True
        try:
            self.container.remove(force=True, v=True)
        except NotFound:
            # auto_remove got there first
            pass
        except APIError as err:
            # 409: removal already in progress
            if err.status_code != 409:
                raise EnvironmentFatal(f'Could not purge container `{self.container.short_id}`', cause=err) from err
        finally:
            if self.on_teardown:
                self.on_teardown(self)
        logger.info(f'Purged container `{self.container.short_id}`', extra={'endpoint': self.endpoint})


class DockerSandbox:
    """
    Owns a connection to the docker engine and every fixture started through it.
    Use as a context manager, or call open() and close() explicitly. Closing tears down
    any fixture that is still running.
    """

    def __init__(self, client=None, host=None):
        self.client = client
        self.host = host
        self.handles = []
        self.is_open = False

    def __enter__(self):
        return self.open()

    def __exit__(self, et, ev, tb):
        self.close()

    def open(self):
        if self.is_open:
            return self
        try:
            if self.client is None:
                self.client = docker.from_env()
            self.client.ping()
        except (DockerException, requests.exceptions.RequestException) as err:
            raise SandboxUnavailable('Could not connect to docker', cause=err) from err
        if self.host is None:
            self.host = endpoint_host()
        self.is_open = True
        logger.debug('Connected to docker')
        return self

    def close(self):
        if not self.is_open:
            return
        errors = []
        try:
            # a failed purge must not leave the remaining containers running
            for handle in list(self.handles):
                try:
                    handle.teardown()
                except Exception as err:
                    logger.error(str(err), extra={'endpoint': handle.endpoint})
                    errors.append(err)
        finally:
            self.client.close()
            self.is_open = False
        if errors:
            raise errors[0]

    def start(self, image=DYNAMODB_LOCAL_IMAGE, exposed_port=DYNAMODB_LOCAL_PORT, command=None, host_port=None):
        """
        Run `image` detached and auto-removed, publishing `exposed_port` on `host_port`
        (a random free port if None). Returns a FixtureHandle once the container exists,
        which says nothing about whether the service inside is accepting connections yet.
        """
        assert self.is_open, 'Sandbox must be opened before starting fixtures'
        container_port = f'{exposed_port}/tcp'
        try:
            container = self.client.containers.run(
                image,
                command=command if command is not None else DYNAMODB_LOCAL_COMMAND,
                detach=True,
                auto_remove=True,
                ports={container_port: host_port},
                labels={SANDBOX_LABEL: 'true'},
            )
        except (DockerException, requests.exceptions.RequestException) as err:
            raise SandboxStartFailed(f'Could not start `{image}`', cause=err) from err

        handle = FixtureHandle(container, None, on_teardown=self.handles.remove)
        self.handles.append(handle)
        try:
            handle.endpoint = f'http://{self.host}:{self.resolve_host_port(container, container_port)}'
        except BaseException:
            handle.teardown()
            raise
        logger.info(f'Started `{image}` as `{container.short_id}`', extra={'endpoint': handle.endpoint})
        return handle

    @contextlib.contextmanager
    def fixture(self, *args, **kwargs):
        "Start a fixture and guarantee it is torn down however the block exits"
        handle = self.start(*args, **kwargs)
        try:
            yield handle
        finally:
            handle.teardown()

    def resolve_host_port(self, container, container_port):
        try:
            container.reload()
        except (DockerException, requests.exceptions.RequestException) as err:
            raise SandboxStartFailed(f'Could not inspect container `{container.short_id}`', cause=err) from err
        bindings = (container.ports or {}).get(container_port) or []
        for binding in bindings:
            if binding.get('HostPort'):
                return binding['HostPort']
        raise SandboxStartFailed(f'Container `{container.short_id}` did not publish `{container_port}`')

class SandboxException(Exception):
    pass


class EnvironmentFatal(SandboxException):
    "The environment the scenario runs in is unusable. Never retried."

    def __init__(self, message, cause=None):
        self.message = message
        self.cause = cause
        super().__init__()

    def __str__(self):
        return self.message if self.cause is None else f'{self.message}: {self.cause}'


class SandboxUnavailable(EnvironmentFatal):
    pass


class SandboxStartFailed(EnvironmentFatal):
    pass


class SchemaUnreadable(EnvironmentFatal):

    def __init__(self, path, cause):
        self.path = path
        super().__init__(f'Could not read table schema `{path}`', cause=cause)


class SchemaMalformed(EnvironmentFatal):

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f'Table schema `{path}` is malformed: {reason}')


class ExhaustedError(EnvironmentFatal):

    def __init__(self, operation, attempts, last_error):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f'Operation `{operation}` did not succeed after {attempts} attempts', cause=last_error)


class DeadlineExceeded(ExhaustedError):

    def __init__(self, operation, attempts, last_error):
        super().__init__(operation, attempts, last_error)
        self.message = f'Operation `{operation}` ran past its deadline after {attempts} attempts'


class StoreError(SandboxException):
    "Any store-reported or transport failure other than a failed write condition"

    def __init__(self, operation, message, code=None, cause=None):
        self.operation = operation
        self.message = message
        self.code = code
        self.cause = cause
        super().__init__()

    def __str__(self):
        code = f' ({self.code})' if self.code else ''
        return f'{self.operation} failed{code}: {self.message}'

import logging
import random
import time

import pendulum

from .exceptions import DeadlineExceeded, ExhaustedError

logger = logging.getLogger()


class ExponentialBackoff:
    "Delays, in seconds, between attempts: initial, initial * multiplier, ... capped at maximum"

    def __init__(self, initial=0.5, multiplier=1.5, maximum=10, jitter=0):
        assert initial >= 0, 'Initial delay must not be negative'
        assert multiplier >= 1, 'Multiplier must be at least one'
        assert 0 <= jitter < 1, 'Jitter must be a fraction'
        self.initial = initial
        self.multiplier = multiplier
        self.maximum = maximum
        self.jitter = jitter

    def __iter__(self):
        delay = self.initial
        while True:
            spread = delay * self.jitter
            yield min(self.maximum, delay + random.uniform(-spread, spread)) if spread else min(self.maximum, delay)
            delay = delay * self.multiplier


def retry(operation, max_attempts=10, backoff=None, deadline=None, retry_on=None, name=None, sleep=time.sleep):
    """
    Call `operation` until it returns without raising, and return its result.

    Every exception is treated as transient unless `retry_on` is given, in which case errors
    it rejects propagate immediately. After `max_attempts` failures the last error is wrapped
    in ExhaustedError. If `deadline` (a pendulum DateTime) passes while waiting between
    attempts, DeadlineExceeded is raised instead.
    """
    assert max_attempts >= 1, 'At least one attempt is required'
    name = name or getattr(operation, '__name__', repr(operation))
    delays = iter(backoff or ExponentialBackoff())
    last_error = None

    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except Exception as err:
            if retry_on is not None and not retry_on(err):
                raise
            last_error = err
            logger.info(f'Attempt {attempt} of {max_attempts} failed: {err}', extra={'operation': name})

        if attempt == max_attempts:
            break

        delay = next(delays)
        if deadline is not None:
            remaining = (deadline - pendulum.now('utc')).total_seconds()
            if remaining <= 0:
                raise DeadlineExceeded(name, attempt, last_error) from last_error
            delay = min(delay, remaining)
        sleep(delay)

    raise ExhaustedError(name, max_attempts, last_error) from last_error

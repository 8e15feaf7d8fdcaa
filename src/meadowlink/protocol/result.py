"""
The outcome of an operation that waits for a reply from the device.

Each result carries a value. For TimedOut and Failed, the value is the fallback the caller can use
in place of a reply (False for a write, an empty string for device info, the previous file list),
so the failure mode stays visible without forcing callers to special-case it.
"""
from abc import abstractmethod

from meadowlink.support.mixins import CommonEqualityMixin, StringerMixin


class Result(CommonEqualityMixin, StringerMixin):
    ok = False
    timed_out = False
    failed = False

    def __init__(self, value=None):
        self.value = value

    def __bool__(self):
        return self.ok

    @abstractmethod
    def fold(self, fn, fallback=None):
        """
        Converts this result to a result of the same kind with a new value.
        :param fn: computes the new value from the value of a successful result.
        :param fallback: the value of the converted result when this result is not successful.
        """
        raise NotImplementedError()


class Ok(Result):
    ok = True

    def fold(self, fn, fallback=None):
        return Ok(fn(self.value))


class TimedOut(Result):
    """ No matching reply arrived in time. This is an expected outcome, not a fault. """
    timed_out = True

    def fold(self, fn, fallback=None):
        return TimedOut(fallback)


class Failed(Result):
    """ The operation could not complete, e.g. the transport write failed or the session was closed. """
    failed = True

    def __init__(self, reason, value=None):
        super().__init__(value)
        self.reason = reason

    def fold(self, fn, fallback=None):
        return Failed(self.reason, fallback)

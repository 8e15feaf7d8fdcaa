"""
Correlates commands sent to the device with the replies that answer them.

Replies carry no request identifier, only a message kind (and sometimes a well-known payload), so a
command is paired with its reply by registering a predicate before the command is sent. Each inbound
message satisfies at most one pending correlation: the earliest registered one whose predicate
matches. A correlation leaves the registry the moment it is resolved, times out or is discarded, so
it can never claim a message meant for a later request.
"""
import logging
import threading
import time
from concurrent.futures import CancelledError, Future, TimeoutError as FutureTimeoutError

from meadowlink.protocol.result import Failed, Ok, TimedOut
from meadowlink.support.events import EventSource

logger = logging.getLogger(__name__)


class CorrelationFailed(Exception):
    """ Set on pending correlations that can no longer be answered, e.g. because the session closed. """


class FutureValue(Future):
    """ describes a value that may have not yet been computed. Callers can check if the value has arrived, or chose to
        wait until the value has arrived.
        If an exception is encountered computing the value, it is set."""

    def set_result_or_exception(self, value):
        if isinstance(value, BaseException):
            self.set_exception(value)
        else:
            self.set_result(value)

    def value(self, timeout=None):
        value = self.result(timeout)
        if isinstance(value, BaseException):
            raise value
        return value


class PendingCorrelation(FutureValue):
    """ A registered wait for the first message matching a predicate. """

    def __init__(self, predicate, timeout=None):
        super().__init__()
        self.predicate = predicate
        self.deadline = None if timeout is None else time.monotonic() + timeout

    def remaining(self):
        """ the time left until the deadline, None when there is no deadline. """
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def matches(self, message):
        try:
            return bool(self.predicate(message))
        except Exception as e:
            logger.exception("predicate failed for message %r: %s" % (message, e))
            return False


class ResponseCorrelator:
    """
    Binds outstanding requests to replies arriving on a broadcast message source.

    Messages that no pending correlation claims are fired on `unmatched`. Every message is also
    seen by any other subscriber of the source, whether or not it was claimed here.
    """

    def __init__(self, source: EventSource):
        self._pending = []
        self._lock = threading.RLock()
        self.unmatched = EventSource()
        self._subscription = source.subscribe(self.process_message)

    @property
    def pending(self):
        with self._lock:
            return len(self._pending)

    def expect(self, predicate, timeout=None) -> PendingCorrelation:
        """
        Registers interest in the next message matching the predicate.
        Register before sending the command, so that a fast reply is not missed.
        """
        pending = PendingCorrelation(predicate, timeout)
        with self._lock:
            self._pending.append(pending)
        return pending

    def discard(self, pending: PendingCorrelation) -> bool:
        """
        Removes a registration.
        :return: True if the registration was still waiting, False if it had already been resolved or removed.
        """
        with self._lock:
            if pending in self._pending:
                self._pending.remove(pending)
                return True
        return False

    def process_message(self, message):
        """
        Resolves the earliest pending correlation that matches the message.
        :return: the correlation that claimed the message, or None.
        """
        with self._lock:
            claimant = next((p for p in self._pending if p.matches(message)), None)
            if claimant is not None:
                self._pending.remove(claimant)
                claimant.set_result(message)
        if claimant is None:
            self.unmatched.fire(message)
        return claimant

    def wait(self, pending: PendingCorrelation, timeout=None):
        """
        Waits for the correlation to be resolved. The registration is removed before returning.
        :param timeout: seconds to wait. When None, the deadline given to expect() applies.
        :return: Ok(message), TimedOut() or Failed(reason)
        """
        if timeout is None:
            timeout = pending.remaining()
        try:
            return self._outcome(pending, timeout)
        except FutureTimeoutError:
            if self.discard(pending):
                pending.cancel()
                return TimedOut()
            # resolved or failed while the timeout was being handled
            return self._outcome(pending)
        finally:
            self.discard(pending)

    @staticmethod
    def _outcome(pending, timeout=None):
        try:
            return Ok(pending.result(timeout))
        except CorrelationFailed as e:
            return Failed(str(e))
        except CancelledError:
            return Failed("cancelled")

    def await_message(self, predicate, timeout, action=None):
        """
        Registers for the first message matching the predicate, runs the action and waits.
        :param timeout: seconds to wait for the reply, counted from when the action returns.
        :param action: a callable that sends the request. An IOError raised by the action is reported
            as Failed. Any other exception propagates once the registration has been removed.
        :return: Ok(message), TimedOut() or Failed(reason)
        """
        pending = self.expect(predicate)
        try:
            if action is not None:
                action()
        except IOError as e:
            self.discard(pending)
            logger.error("request failed: %s" % e)
            return Failed(str(e))
        except BaseException:
            self.discard(pending)
            raise
        return self.wait(pending, timeout)

    def fail_all(self, reason):
        """ fails every pending correlation, e.g. when the session is closed. """
        with self._lock:
            pending, self._pending = self._pending, []
            for p in pending:
                p.set_exception(CorrelationFailed(reason))
        return len(pending)

    def close(self, reason="closed"):
        self._subscription.cancel()
        self.fail_all(reason)

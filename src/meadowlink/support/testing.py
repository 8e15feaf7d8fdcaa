"""
Test doubles shared by the test modules.
"""
import sys
from queue import Empty, Queue


def debug_timeout(value):
    """
    Replaces the timeout value with a very large one if the tests are running under a debugger.
    This prevents the main thread from throwing an exception and exiting when the test times out
    due to a breakpoint.
    """
    return value if sys.gettrace() is None else 100000


class QueueReader:
    """
    A readable stream fed from a queue of byte strings. readline() returns b'' when nothing arrives
    within the poll period, like a serial port read timing out.
    """

    def __init__(self, poll=0.01):
        self.queue = Queue()
        self.poll = poll
        self.closed = False

    def feed(self, data: bytes):
        self.queue.put(data)

    def readline(self):
        try:
            return self.queue.get(timeout=self.poll)
        except Empty:
            return b''

    def close(self):
        self.closed = True


class RecordingWriter:
    """
    A writable stream that keeps what was written and calls on_write with each write,
    so a test can play the device's side of the conversation.
    """

    def __init__(self, on_write=None):
        self.written = []
        self.on_write = on_write
        self.closed = False

    def write(self, data):
        if self.closed:
            raise ValueError("write to closed stream")
        self.written.append(bytes(data))
        if self.on_write is not None:
            self.on_write(bytes(data))
        return len(data)

    def flush(self):
        pass

    def close(self):
        self.closed = True

    def commands(self):
        """ the command names written so far """
        return [w.decode().split('|', 1)[0].rstrip('\n') for w in self.written]

"""
The background activity that pumps classified messages from the conduit to subscribers.
"""
import logging
import threading
import time
from collections.abc import Callable

from meadowlink.conduit.base import Conduit
from meadowlink.protocol.decoder import MessageDecoder
from meadowlink.support.events import EventSource

logger = logging.getLogger(__name__)


class AsyncLoop:
    """ Continually runs a given function on a background thread.
        Exceptions raised by the function are passed to exception_handler, which logs them.
        The background thread is registered as a daemon.
    """

    def __init__(self, fn: Callable = None, args=(), log=logger, name=None):
        """
        :param fn the function to run
        :param args arguments to pass to fn
        """
        self.fn = fn
        self.args = args
        self.name = name
        self.stop_event = threading.Event()
        self.background_thread = None
        self.logger = log
        self._lock = threading.Lock()

    def start(self):
        """
        Starts the background thread, unless already started.
        """
        with self._lock:
            if self.background_thread is None:
                self.stop_event.clear()
                t = threading.Thread(target=self._run, name=self.name, daemon=True)
                self.background_thread = t
                t.start()

    def exception_handler(self, e):
        self.logger.exception(e)

    def _run(self):
        """ The processing loop for the background thread.
             Invokes the callable for as long as the stop signal is not received.
        """
        self._do(self.startup)
        while self.running():
            self._do(self.loop)
        self._do(self.shutdown)
        logger.info("background thread exiting")

    def _do(self, callme):
        """ runs a function and captures any exceptions """
        try:
            callme()
        except Exception as e:
            time.sleep(0)
            self.exception_handler(e)

    def startup(self):
        """ template method called when the thread starts"""
        pass

    def loop(self):
        self.fn(*self.args)

    def shutdown(self):
        """ template method called when the thread exits """
        pass

    def running(self):
        return not self.stop_event.is_set()

    def stop(self):
        self.stop_event.set()
        with self._lock:
            thread = self.background_thread
            self.background_thread = None
        if thread and thread is not threading.current_thread():
            thread.join()


class MessageListener:
    """
    Reads messages from a conduit on a background thread and fires each one on the message source.
    Stops by itself when the conduit is closed.
    """

    def __init__(self, conduit: Conduit, decoder: MessageDecoder, source: EventSource):
        self.conduit = conduit
        self.decoder = decoder
        self.source = source
        self.async_thread = AsyncLoop(self.background_loop, name="meadowlink-listener")

    def start(self):
        self.async_thread.start()

    def stop(self):
        self.async_thread.stop()

    @property
    def running(self):
        return self.async_thread.background_thread is not None and self.async_thread.running()

    def background_loop(self):
        if not self.conduit.open:
            logger.info("conduit closed, listener stopping")
            self.async_thread.stop()
            return None
        try:
            return self.read_message()
        except IOError as e:
            logger.error("error reading from %s, listener stopping: %s" % (self.conduit.target, e))
            self.async_thread.stop()
            return None

    def read_message(self):
        """ synchronously reads the next message from the conduit and broadcasts it. """
        message = self.decoder.decode(self.conduit.input)
        if message is not None:
            logger.debug("received %r" % (message,))
            self.source.fire(message)
        return message

"""
A command/response session with a single device over a serial conduit.

The session owns the conduit, the listener that decodes messages from it, and the cached inventory of
files on the device. Operations that expect a reply register with the ResponseCorrelator before the
command is sent, and return a Result: Ok with the reply, TimedOut or Failed, each carrying a value
the caller can fall back on.
"""
import logging
import os
import sys
import threading
from collections import OrderedDict

from meadowlink.conduit.serial_conduit import detect_port, open_serial_conduit
from meadowlink.device import defaults
from meadowlink.device.artifacts import app_binary_path, list_dependencies
from meadowlink.device.dispatcher import CommandDispatcher
from meadowlink.device.inventory import FileInventoryCache, parse_file_list
from meadowlink.protocol.commands import CommandKind, LineCommandEncoder
from meadowlink.protocol.correlation import ResponseCorrelator
from meadowlink.protocol.decoder import LineMessageDecoder
from meadowlink.protocol.listener import MessageListener
from meadowlink.protocol.messages import FILE_SENT_MARKER, MessageKind, data_equals, of_kind
from meadowlink.protocol.result import Ok
from meadowlink.support.events import EventSource
from meadowlink.support.retry_strategy import retry_strategy_for

logger = logging.getLogger(__name__)


def open_device_conduit(port):
    """ opens the serial port for a device, detecting the port when given 'auto'. """
    return open_serial_conduit(detect_port(port), defaults.baudrate, defaults.read_timeout, defaults.write_timeout)


class ConsoleEcho:
    """ A passive observer that writes the application's console output to a stream. """

    kinds = (MessageKind.APP_OUTPUT, MessageKind.ERROR_OUTPUT)

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout

    def __call__(self, message):
        self.stream.write(message.payload + '\n')
        self.stream.flush()

    @property
    def predicate(self):
        return of_kind(*self.kinds)


class DeviceSession:

    def __init__(self, port, name=None, conduit_factory=open_device_conduit, decoder_factory=LineMessageDecoder,
                 encoder=None, retry_strategy=None):
        """
        :param port: the serial port the device is attached to, or 'auto'.
        :param name: the display name for the device.
        :param conduit_factory: opens the conduit for a port.
        :param decoder_factory: creates the MessageDecoder when the session starts listening.
        :param encoder: the CommandEncoder for outbound commands.
        :param retry_strategy: decides if a timed-out request is re-issued. Defaults to the configured retries.
        """
        self.port = port
        self.name = name if name and name.strip() else defaults.default_device_name
        self.model = None
        self.id = None
        self.conduit_factory = conduit_factory
        self.decoder_factory = decoder_factory
        self.retry_strategy = retry_strategy if retry_strategy is not None else retry_strategy_for(defaults.retries)
        self.messages = EventSource()
        self.correlator = ResponseCorrelator(self.messages)
        self.inventory = FileInventoryCache()
        self.dispatcher = CommandDispatcher(lambda: self._conduit, encoder or LineCommandEncoder())
        self._conduit = None
        self._listener = None
        self._lock = threading.RLock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def conduit(self):
        return self._conduit

    @property
    def initialized(self):
        conduit = self._conduit
        return conduit is not None and conduit.open

    @property
    def listening(self):
        listener = self._listener
        return listener is not None and listener.running

    def initialize(self, listen=True):
        """
        (Re)opens the transport. Any previous transport is closed before the new one is opened.
        :param listen: start listening for messages from the device.
        :raises TransportError: when the port cannot be opened.
        """
        with self._lock:
            self._release()
            self._conduit = self.conduit_factory(self.port)
            logger.info("%s: session initialized on %s" % (self.name, self.port))
            if listen:
                self.start_listening()
        return self

    def start_listening(self):
        with self._lock:
            conduit = self.dispatcher.check_open()
            if self._listener is None:
                self._listener = MessageListener(conduit, self.decoder_factory(), self.messages)
            self._listener.start()

    def stop_listening(self):
        with self._lock:
            if self._listener is not None:
                self._listener.stop()

    def close(self):
        """ closes the transport and fails any operation still waiting for a reply. """
        with self._lock:
            self._release()
        self.correlator.fail_all("session closed")

    def _release(self):
        listener, self._listener = self._listener, None
        conduit, self._conduit = self._conduit, None
        if listener is not None:
            listener.stop()
        if conduit is not None:
            conduit.close()
            logger.info("%s: closed transport on %s" % (self.name, self.port))

    def add_observer(self, handler, predicate=None):
        """
        Registers a passive observer that sees every message matching the predicate, whether or not
        it answers a request.
        :return: the Subscription; cancel it to stop observing.
        """
        return self.messages.subscribe(handler, predicate)

    def echo_console(self, stream=None):
        echo = ConsoleEcho(stream)
        return self.add_observer(echo, echo.predicate)

    def _request(self, predicate, timeout, kind, *args):
        """ sends a command and waits for the reply matching the predicate, retrying as the strategy allows. """
        self.dispatcher.check_open()
        attempts = 0
        while True:
            attempts += 1
            result = self.correlator.await_message(predicate, timeout, lambda: self.dispatcher.send(kind, *args))
            if not result.timed_out or not self.retry_strategy(attempts):
                break
            logger.info("%s: no reply to %s, retrying (attempt %d)" % (self.name, kind.name, attempts + 1))
        if result.timed_out:
            logger.warning("%s: no reply to %s within %ss" % (self.name, kind.name, timeout))
        elif result.failed:
            logger.error("%s: %s failed: %s" % (self.name, kind.name, result.reason))
        return result

    def write_file(self, filename, source_dir, timeout=None):
        """
        Writes a local file to the device's flash.
        :param filename: the name of the file, both in source_dir and on the device.
        :param timeout: seconds to wait for the device to confirm the write.
        :return: Ok(True) once the device confirms, otherwise TimedOut(False) or Failed(reason, False).
        """
        timeout = defaults.write_file_timeout if timeout is None else timeout
        source = os.path.join(source_dir, filename)
        logger.info("%s: writing %s" % (self.name, source))
        result = self._request(data_equals(FILE_SENT_MARKER), timeout, CommandKind.WRITE_FILE, source, filename)
        return result.fold(lambda message: True, False)

    def get_files_on_device(self, refresh=False, timeout=None):
        """
        Retrieves the names of the files on the device. The cached names are returned without asking the
        device unless the cache is empty or refresh is True.
        :return: Ok(names), or TimedOut/Failed carrying the names known before the call.
        """
        if not refresh and not self.inventory.empty:
            return Ok(self.inventory.snapshot)
        timeout = defaults.list_files_timeout if timeout is None else timeout
        previous = self.inventory.snapshot
        result = self._request(of_kind(MessageKind.FILE_LIST), timeout, CommandKind.LIST_FILES)
        return result.fold(lambda message: self.inventory.replace(parse_file_list(message.payload)), previous)

    def get_device_info(self, timeout=None):
        """
        :return: Ok(info), or TimedOut/Failed carrying an empty string.
        """
        timeout = defaults.device_info_timeout if timeout is None else timeout
        result = self._request(of_kind(MessageKind.DEVICE_INFO), timeout, CommandKind.DEVICE_INFO)
        return result.fold(lambda message: message.payload, '')

    def deploy_required_libs(self, dir_path, force_update=False):
        """
        Writes the required runtime libraries from dir_path, in order. Unless force_update is set, a library
        is skipped when the device's file list (cached if available) already contains it.
        :return: the write result for each library written, in the order written.
        """
        on_device = frozenset() if force_update else self.get_files_on_device().value
        results = OrderedDict()
        for lib in defaults.required_libs:
            if not force_update and lib in on_device:
                logger.info("%s: %s already on device, skipping" % (self.name, lib))
                continue
            results[lib] = self.write_file(lib, dir_path)
        return results

    def deploy_app(self, dir_path):
        """
        Writes the application binary, then every dependency in dir_path other than the required libraries.
        Every file is written, whether or not the device already has it.
        :return: the write result for each file, in the order written.
        """
        logger.info("%s: deploying %s" % (self.name, app_binary_path(dir_path, defaults.app_binary)))
        results = OrderedDict()
        results[defaults.app_binary] = self.write_file(defaults.app_binary, dir_path)
        for dependency in list_dependencies(dir_path, exclude=defaults.required_libs):
            results[dependency] = self.write_file(dependency, dir_path)
        return results

    def delete_file(self, filename):
        """ asks the device to delete a file and drops it from the cached inventory. """
        self.dispatcher.send(CommandKind.DELETE_FILE, filename)
        self.inventory.without(filename)

    def mono_enable(self):
        self.dispatcher.send(CommandKind.MONO_ENABLE)

    def mono_disable(self):
        self.dispatcher.send(CommandKind.MONO_DISABLE)

    def reset(self):
        self.dispatcher.send(CommandKind.RESET)

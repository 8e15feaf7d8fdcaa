import logging

from meadowlink.protocol.commands import CommandEncoder, CommandKind

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """ Indicates an error condition with a device session. """


class SessionNotInitializedError(SessionError):
    """ An operation needing the transport was invoked before the session was initialized. """


class CommandDispatcher:
    """
    Sends commands to the device. Sending does not wait for a reply; pair it with a
    ResponseCorrelator when a reply is expected.
    """

    def __init__(self, conduit_provider, encoder: CommandEncoder):
        """
        :param conduit_provider: a callable returning the current conduit, or None when there is none.
        :param encoder: encodes each command to bytes.
        """
        self._conduit = conduit_provider
        self.encoder = encoder

    def check_open(self):
        conduit = self._conduit()
        if conduit is None or not conduit.open:
            raise SessionNotInitializedError("the device session is not initialized")
        return conduit

    def send(self, kind: CommandKind, *args):
        conduit = self.check_open()
        data = self.encoder.encode(kind, args)
        logger.debug("sending %s (%d bytes)" % (kind.name, len(data)))
        output = conduit.output
        output.write(data)
        output.flush()

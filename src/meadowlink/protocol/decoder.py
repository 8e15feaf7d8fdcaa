"""
Turns the raw byte stream from the device into classified messages.
"""
import logging
from abc import abstractmethod

from meadowlink.protocol.messages import ClassifiedMessage, MessageKind

logger = logging.getLogger(__name__)

TAG_SEPARATOR = '|'


class MessageDecoder:
    """ Reads and classifies messages from a stream. """

    @abstractmethod
    def decode(self, input) -> ClassifiedMessage:
        """
        Reads from the stream until a complete message is available.
        :param input: the file-like input stream of the conduit.
        :return: the next message, or None if the read timed out before a message was complete.
        """
        raise NotImplementedError()


class LineMessageDecoder(MessageDecoder):
    """
    Decodes one message per line. A line is either 'Tag|payload', where Tag names a MessageKind,
    or plain text which is classified as Data.
    A line cut short by a read timeout is kept and completed by the following reads.
    """

    def __init__(self, encoding='utf-8'):
        self.encoding = encoding
        self._partial = b''

    def decode(self, input):
        chunk = input.readline()
        if not chunk:
            return None
        line = self._partial + chunk
        if not line.endswith(b'\n'):
            self._partial = line
            return None
        self._partial = b''
        return self.classify(line.decode(self.encoding, errors='replace').rstrip('\r\n'))

    def classify(self, line) -> ClassifiedMessage:
        """
        >>> LineMessageDecoder().classify('FileList|/meadow0/App.exe,/meadow0/System.dll')
        ClassifiedMessage(FILE_LIST, '/meadow0/App.exe,/meadow0/System.dll')
        >>> LineMessageDecoder().classify('Hello|world')
        ClassifiedMessage(DATA, 'Hello|world')
        """
        tag, sep, payload = line.partition(TAG_SEPARATOR)
        kind = MessageKind.from_tag(tag) if sep else None
        if kind is None:
            return ClassifiedMessage(MessageKind.DATA, line)
        return ClassifiedMessage(kind, payload)

"""
Classified messages decoded from the device stream.
"""
from collections import namedtuple
from enum import Enum

# the payload of the Data message the device sends when a file has been written to flash
FILE_SENT_MARKER = "File Sent Successfully"


class MessageKind(Enum):
    DATA = 'Data'
    APP_OUTPUT = 'AppOutput'
    ERROR_OUTPUT = 'ErrOutput'
    FILE_LIST = 'FileList'
    DEVICE_INFO = 'DeviceInfo'
    ACCEPTED = 'Accepted'

    @classmethod
    def from_tag(cls, tag, default=None):
        """
        >>> MessageKind.from_tag('FileList')
        <MessageKind.FILE_LIST: 'FileList'>
        >>> MessageKind.from_tag('nope', MessageKind.DATA)
        <MessageKind.DATA: 'Data'>
        """
        for kind in cls:
            if kind.value == tag:
                return kind
        return default


class ClassifiedMessage(namedtuple('ClassifiedMessage', ['kind', 'payload'])):
    """ An immutable message from the device, tagged with its kind. """
    __slots__ = ()

    def __new__(cls, kind: MessageKind, payload: str = ''):
        return super().__new__(cls, kind, payload)

    def __repr__(self):
        return 'ClassifiedMessage(%s, %r)' % (self.kind.name, self.payload)


def of_kind(*kinds):
    """ a predicate matching messages of any of the given kinds. """
    def predicate(message: ClassifiedMessage):
        return message.kind in kinds
    return predicate


def data_equals(marker):
    """ a predicate matching a Data message whose payload is exactly the marker. """
    def predicate(message: ClassifiedMessage):
        return message.kind is MessageKind.DATA and message.payload == marker
    return predicate

"""
Encodes commands for the device.
"""
import base64
import os
import zlib
from abc import abstractmethod
from enum import Enum

from meadowlink.protocol.decoder import TAG_SEPARATOR


class CommandKind(Enum):
    WRITE_FILE = 'WRITE_FILE_TO_FLASH'
    LIST_FILES = 'LIST_FILES'
    DEVICE_INFO = 'GET_DEVICE_INFORMATION'
    DELETE_FILE = 'DELETE_FILE_BY_NAME'
    MONO_ENABLE = 'MONO_ENABLE'
    MONO_DISABLE = 'MONO_DISABLE'
    RESET = 'RESET_PRIMARY_MCU'


class CommandEncoder:
    """ Encodes a command and its arguments to the bytes written to the transport. """

    @abstractmethod
    def encode(self, kind: CommandKind, args) -> bytes:
        raise NotImplementedError()


class LineCommandEncoder(CommandEncoder):
    """
    Encodes each command as a single line, 'COMMAND|arg|arg...'.

    WRITE_FILE takes the local source path and the name to store on the device. The file content
    follows the name as base64, then the CRC32 of the raw content in hex.
    """

    def __init__(self, encoding='utf-8'):
        self.encoding = encoding

    def encode(self, kind, args):
        fields = [kind.value]
        if kind is CommandKind.WRITE_FILE:
            fields.extend(self._file_fields(*args))
        else:
            fields.extend(str(a) for a in args)
        for f in fields[1:]:
            if TAG_SEPARATOR in f or '\n' in f:
                raise ValueError("argument %r cannot be encoded" % f)
        return (TAG_SEPARATOR.join(fields) + '\n').encode(self.encoding)

    def _file_fields(self, source_path, target_name=None):
        with open(source_path, 'rb') as f:
            content = f.read()
        return [target_name or os.path.basename(source_path),
                base64.b64encode(content).decode('ascii'),
                '%08x' % (zlib.crc32(content) & 0xffffffff)]

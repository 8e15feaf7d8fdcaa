"""
Implements a conduit over a serial port.
"""

import logging
import re

import serial
from serial.tools import list_ports

from meadowlink.conduit.base import Conduit

logger = logging.getLogger(__name__)


class TransportError(IOError):
    """ The serial port could not be found or opened. """


class SerialConduit(Conduit):
    """
    A conduit that provides comms via a serial port.
    """

    def __init__(self, ser: serial.Serial):
        self.ser = ser

    @property
    def target(self):
        return self.ser

    @property
    def input(self):
        return self.ser

    @property
    def output(self):
        return self.ser

    @property
    def open(self) -> bool:
        return self.ser.is_open

    def close(self):
        self.ser.close()


def open_serial_conduit(port, baudrate=115200, read_timeout=0.5, write_timeout=0.5):
    """
    Opens the named serial port with the framing the device expects: 8 data bits, no parity,
    one stop bit and no flow control.
    The baud rate is ignored by boards that enumerate as USB CDC/ACM.
    :raises TransportError: when the port cannot be opened. This is not retried.
    """
    try:
        ser = serial.Serial(port=port, baudrate=baudrate,
                            bytesize=serial.EIGHTBITS, parity=serial.PARITY_NONE, stopbits=serial.STOPBITS_ONE,
                            xonxoff=False, rtscts=False, dsrdtr=False,
                            timeout=read_timeout, write_timeout=write_timeout)
    except (serial.SerialException, ValueError) as e:
        logger.error("The specified port '%s' could not be found or opened: %s" % (port, e))
        raise TransportError("unable to open serial port %s" % port) from e
    logger.info("Port: %s opened" % port)
    return SerialConduit(ser)


def serial_ports():
    """
    Returns a generator for all available serial port device names.
    """
    for port in serial_port_info():
        yield port[0]


meadow_devices = {
    (r".*Meadow.*", r"USB VID:PID=2E6A:.*"): "Meadow F7 Micro",
}

known_devices = dict(meadow_devices)


def matches(text, regex):
    """
    >>> bool(matches("A", "a"))
    True
    >>> bool(matches("A", "b"))
    False
    >>> bool(matches("USB VID:PID=2E6A:0001 SER=3457 LOCATION=1-2", "USB VID:PID=2e6a:.*"))
    True
    """
    return re.match(regex, text, flags=re.IGNORECASE)


def is_recognised_device(p):
    """
    >>> is_recognised_device(("/dev/ttyACM0", "Meadow", "USB VID:PID=2E6A:0001 SER=3457"))
    True
    >>> is_recognised_device(("/dev/ttyS0", "n/a", "n/a"))
    False
    """
    port, name, desc = p
    for d in known_devices.keys():
        # under linux only desc is meaningful
        if matches(desc, d[1]):
            return True
    return False


def find_recognised_device_ports(ports):
    for p in ports:
        if is_recognised_device(p):
            yield p


def serial_port_info():
    """
    :return: a tuple of serial port info tuples (port, name, desc)
    """
    return tuple(list_ports.comports())


def detect_port(port):
    """
    attempts to detect the given serial port. If the port is not auto, it is returned as is.
    otherwise, the device name of the first recognised port is returned.
    :raises TransportError: when no recognised device is attached.
    """
    if port == "auto":
        all_ports = serial_port_info()
        ports = tuple(find_recognised_device_ports(all_ports))
        if not ports:
            raise TransportError("Could not find a compatible device in available ports. %s" % repr(all_ports))
        return ports[0][0]
    return port

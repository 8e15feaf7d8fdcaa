import unittest
from unittest.mock import Mock, patch

import serial
from hamcrest import assert_that, calling, instance_of, is_, raises

from meadowlink.conduit.serial_conduit import SerialConduit, TransportError, detect_port, \
    find_recognised_device_ports, open_serial_conduit, serial_ports

meadow_desc = "USB VID:PID=2E6A:0001 SER=345733603331"


class SerialConduitTest(unittest.TestCase):
    def test(self):
        ser = Mock()
        sut = SerialConduit(ser)

        assert_that(sut.target, is_(ser))
        assert_that(sut.input, is_(ser))
        assert_that(sut.output, is_(ser))

        ser.is_open = True
        assert_that(sut.open, is_(True))

        sut.close()
        ser.close.assert_called_once_with()

    def test_function_serial_ports(self):
        with patch('meadowlink.conduit.serial_conduit.serial_port_info') as mock:
            mock.return_value = [(1, "1"), (2, "2")]
            ports = [p for p in serial_ports()]
            assert_that(ports, is_([1, 2]))

    def test_function_find_recognised_device_ports(self):
        known = ["/dev/ttyACM0", "Meadow", meadow_desc]
        result = tuple(find_recognised_device_ports([("1", "2", "3"), known]))
        assert_that(result, is_((known,)))

    def test_function_detect_port_non_auto(self):
        assert_that(detect_port("COM3"), is_("COM3"))

    def test_function_detect_port_auto_none(self):
        with patch('meadowlink.conduit.serial_conduit.serial_port_info') as mock:
            mock.return_value = tuple()
            assert_that(calling(detect_port).with_args("auto"), raises(TransportError))

    def test_function_detect_port_auto_some(self):
        with patch('meadowlink.conduit.serial_conduit.serial_port_info') as mock:
            mock.return_value = (
                ("/dev/ttyS0", "Blah", "not me"),
                ("/dev/ttyACM0", "Meadow", meadow_desc),
                ("/dev/ttyACM1", "Meadow", meadow_desc),
            )
            assert_that(detect_port("auto"), is_("/dev/ttyACM0"))


class OpenSerialConduitTest(unittest.TestCase):

    @patch('meadowlink.conduit.serial_conduit.serial.Serial')
    def test_opens_with_fixed_framing(self, serial_class):
        conduit = open_serial_conduit("/dev/ttyACM0")
        serial_class.assert_called_once_with(
            port="/dev/ttyACM0", baudrate=115200,
            bytesize=serial.EIGHTBITS, parity=serial.PARITY_NONE, stopbits=serial.STOPBITS_ONE,
            xonxoff=False, rtscts=False, dsrdtr=False, timeout=0.5, write_timeout=0.5)
        assert_that(conduit, is_(instance_of(SerialConduit)))
        assert_that(conduit.target, is_(serial_class.return_value))

    @patch('meadowlink.conduit.serial_conduit.serial.Serial')
    def test_open_failure_is_fatal(self, serial_class):
        serial_class.side_effect = serial.SerialException("no such port")
        assert_that(calling(open_serial_conduit).with_args("/dev/none"),
                    raises(TransportError, "unable to open serial port /dev/none"))
        serial_class.assert_called_once()

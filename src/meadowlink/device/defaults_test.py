import unittest

from hamcrest import assert_that, is_, instance_of

from meadowlink.device import defaults


class DefaultsTest(unittest.TestCase):

    def test_configured_values_have_declared_types(self):
        assert_that(defaults.baudrate, is_(instance_of(int)))
        assert_that(defaults.write_file_timeout, is_(instance_of(float)))
        assert_that(defaults.retries, is_(instance_of(int)))

    def test_shipped_defaults(self):
        assert_that(defaults.required_libs, is_(['mscorlib.dll', 'System.dll', 'System.Core.dll', 'Meadow.Core.dll']))
        assert_that(defaults.app_binary, is_('App.exe'))
        assert_that(defaults.list_files_timeout, is_(10.0))
        assert_that(defaults.device_info_timeout, is_(0.5))

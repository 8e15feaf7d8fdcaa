import os
import shutil
import tempfile
import types
import unittest
from unittest.mock import Mock, patch

from configobj import ConfigObj, ConfigObjError
from hamcrest import assert_that, calling, equal_to, has_property, is_, is_not, raises

from meadowlink.config.config import apply_conf_path, config_filename, config_flavor, configure_module, \
    fetch_conf_path, load_config, load_config_file_base, map_os_name

schema = """
[sample]
[[settings]]
value1 = string(default='abc')
value2 = integer(default=4)
value3 = float(default=0.5)
names = force_list(default=list())
"""


class ConfigTestCase(unittest.TestCase):

    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.home = tempfile.mkdtemp()
        patcher = patch('meadowlink.config.config.user_config_directory', self.home)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        shutil.rmtree(self.dir)
        shutil.rmtree(self.home)

    def write(self, name, content, directory=None):
        with open(os.path.join(directory or self.dir, name), 'w') as f:
            f.write(content)

    def module(self, name='sample.settings'):
        module = types.ModuleType(name)
        module.__package__ = name.rpartition('.')[0]
        module.__file__ = os.path.join(self.dir, name.split('.')[-1] + '.py')
        module.value1 = None
        module.value2 = None
        module.value3 = None
        module.names = None
        return module

    def test_config_file_not_found(self):
        assert_that(calling(load_config_file_base).with_args(os.path.join(self.dir, 'blah.cfg')),
                    raises(IOError))

    def test_optional_config_file_not_found(self):
        assert_that(load_config_file_base(os.path.join(self.dir, 'blah.cfg'), False), is_(ConfigObj()))

    def test_config_file_invalid_syntax(self):
        self.write('broken.cfg', '[[[section]\n')
        assert_that(calling(load_config_file_base).with_args(config_filename('broken', self.dir)),
                    raises(ConfigObjError, ".*broken.cfg"))

    def test_defaults_come_from_schema(self):
        self.write('settings.schema.cfg', schema)
        conf = load_config('settings', self.dir)
        assert_that(conf['sample']['settings']['value2'], is_(4))
        assert_that(conf['sample']['settings']['value3'], is_(0.5))

    def test_invalid_value_fails_validation(self):
        self.write('settings.schema.cfg', schema)
        self.write('settings.default.cfg', '[sample]\n[[settings]]\nvalue2 = lots\n')
        assert_that(calling(load_config).with_args('settings', self.dir),
                    raises(ConfigObjError, "the config file settings failed validation"))

    def test_layers_override_in_order(self):
        self.write('settings.schema.cfg', schema)
        self.write('settings.default.cfg', '[sample]\n[[settings]]\nvalue1 = def\nvalue2 = 10\nvalue3 = 1.5\n')
        self.write('settings.cfg', '[sample]\n[[settings]]\nvalue2 = 50\n')
        self.write('settings.cfg', '[sample]\n[[settings]]\nvalue3 = 2.5\n', self.home)
        conf = load_config('settings', self.dir)['sample']['settings']
        assert_that(conf['value1'], is_('def'))
        assert_that(conf['value2'], is_(50))
        assert_that(conf['value3'], is_(2.5))

    def test_can_apply_module(self):
        self.write('settings.schema.cfg', schema)
        self.write('settings.default.cfg', '[sample]\n[[settings]]\nvalue1 = def\nnames = a.dll, b.dll\n'
                                           'missing_value = 1\n')
        module = self.module()
        configure_module(module)
        assert_that(module.value1, is_(equal_to('def')))
        assert_that(module.value2, is_(4))
        assert_that(module.names, is_(['a.dll', 'b.dll']))
        assert_that(module, is_not(has_property("missing_value")))

    def test_configure_module_with_named_config(self):
        self.write('alt.cfg', '[sample]\n[[settings]]\nvalue1 = alt\n')
        module = self.module()
        configure_module(module, 'alt')
        assert_that(module.value1, is_('alt'))

    def test_configure_module_no_package(self):
        module = Mock()
        module.__name__ = 'orphan'
        module.__package__ = None
        assert_that(calling(configure_module).with_args(module), raises(ConfigObjError, '.*no package'))

    def test_map_os_name(self):
        assert_that(map_os_name('Windows'), is_('windows'))
        assert_that(map_os_name('Darwin'), is_('osx'))
        assert_that(map_os_name('Linux'), is_('linux'))

    def test_config_flavor(self):
        assert_that(config_flavor('defaults'), is_('defaults'))
        assert_that(config_flavor('defaults', 'schema'), is_('defaults.schema'))

    def test_non_existent_config_path(self):
        assert_that(fetch_conf_path(ConfigObj(), ['abcd']), is_(None))

    def test_non_existent_apply_config_path(self):
        target = types.SimpleNamespace(abcd=1)
        apply_conf_path(ConfigObj(), ['abcd'], target)
        assert_that(target.abcd, is_(1))


if __name__ == '__main__':  # pragma no cover
    unittest.main()

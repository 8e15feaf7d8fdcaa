import os
import shutil
import tempfile
import unittest

from hamcrest import assert_that, calling, is_, raises

from meadowlink.device.artifacts import app_binary_path, list_dependencies


class ArtifactsTest(unittest.TestCase):

    def setUp(self):
        self.dir = tempfile.mkdtemp()
        for name in ("App.exe", "System.dll", "mscorlib.dll", "Meadow.Foundation.dll", "Sensors.DLL", "notes.txt"):
            open(os.path.join(self.dir, name), 'wb').close()
        os.mkdir(os.path.join(self.dir, "folder.dll"))

    def tearDown(self):
        shutil.rmtree(self.dir)

    def test_lists_dependencies_in_name_order(self):
        assert_that(list_dependencies(self.dir),
                    is_(["Meadow.Foundation.dll", "Sensors.DLL", "System.dll", "mscorlib.dll"]))

    def test_excludes_names_case_insensitively(self):
        assert_that(list_dependencies(self.dir, exclude=("system.dll", "MSCORLIB.DLL")),
                    is_(["Meadow.Foundation.dll", "Sensors.DLL"]))

    def test_missing_directory(self):
        assert_that(calling(list_dependencies).with_args(os.path.join(self.dir, "nope")),
                    raises(FileNotFoundError))

    def test_app_binary_path(self):
        assert_that(app_binary_path(self.dir, "App.exe"), is_(os.path.join(self.dir, "App.exe")))

"""
Module-level defaults for device sessions, overridable through defaults.cfg beside this module,
a platform flavor (defaults.linux.cfg, ...) or ~/.meadowlink/defaults.cfg.
"""
import sys

from meadowlink.config.config import configure_module

default_device_name = 'Meadow F7 Micro'

# serial transport
baudrate = 115200
read_timeout = 0.5
write_timeout = 0.5

# seconds to wait for each kind of reply
write_file_timeout = 200.0
list_files_timeout = 10.0
device_info_timeout = 0.5

# times a timed-out request is re-issued
retries = 0

# runtime libraries deployed ahead of the application, in deployment order
required_libs = ['mscorlib.dll', 'System.dll', 'System.Core.dll', 'Meadow.Core.dll']
app_binary = 'App.exe'

configure_module(sys.modules[__name__])

"""
Locates the local files deployed to the device.
"""
import os

dependency_extension = '.dll'


def app_binary_path(dir_path, app_binary):
    return os.path.join(dir_path, app_binary)


def list_dependencies(dir_path, exclude=()):
    """
    Lists the dependency assemblies in a directory, in name order.
    :param exclude: names to leave out, compared case-insensitively.
    :raises FileNotFoundError: if the directory does not exist.
    """
    excluded = {name.lower() for name in exclude}
    names = (entry.name for entry in os.scandir(dir_path)
             if entry.is_file() and entry.name.lower().endswith(dependency_extension))
    return sorted(n for n in names if n.lower() not in excluded)

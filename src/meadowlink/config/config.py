import os
import platform

from configobj import ConfigObj, ConfigObjError, Section, flatten_errors
from validate import Validator

# The default extension for configuration files
config_extension = '.cfg'

# per-user overrides live here, one file per configuration name
user_config_directory = os.path.join('~', '.meadowlink')


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('defaults')
    'defaults'
    >>> config_flavor('defaults', 'linux')
    'defaults.linux'
    """
    return name if not flavor else name + '.' + flavor


def config_filename(name, directory):
    return os.path.join(directory, name + config_extension)


def load_config_file_base(file, must_exist=True):
    """
    Loads a single configuration file.
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an IOError is raised.
    :return: The ConfigObj instance for the file, empty when the file is optional and missing.
    """
    try:
        return ConfigObj(file, interpolation='Template', file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def config_flavor_file(name, directory, flavor=None) -> ConfigObj:
    """
    Loads the optional flavor of a configuration, such as 'defaults.linux.cfg' for name 'defaults'
    and flavor 'linux'.
    """
    return load_config_file_base(config_filename(config_flavor(name, flavor), directory), must_exist=False)


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    if name == 'darwin':
        name = 'osx'
    return name


def os_name():
    return map_os_name(platform.system())


def user_config_file(name):
    return os.path.expanduser(config_filename(name, user_config_directory))


def load_config(name, directory):
    """
    Loads all the configuration files that relate to the given name, later files overriding earlier ones:
    - the default flavor (name.default.cfg)
    - the platform flavor (name.linux.cfg, name.windows.cfg, name.osx.cfg)
    - the user override (~/.meadowlink/name.cfg)
    - the base configuration (name.cfg)
    The merged configuration is validated against name.schema.cfg when that file exists, which also
    converts the values to their declared types.
    :raises ConfigObjError: when validation fails.
    """
    schema = config_filename(config_flavor(name, 'schema'), directory)
    config = ConfigObj(configspec=schema) if os.path.exists(schema) else ConfigObj()
    config.merge(config_flavor_file(name, directory, 'default'))
    config.merge(config_flavor_file(name, directory, os_name()))
    config.merge(load_config_file_base(user_config_file(name), must_exist=False))
    config.merge(config_flavor_file(name, directory))

    if config.configspec is not None:
        result = config.validate(Validator(), preserve_errors=True)
        if result is not True:
            failures = ['.'.join(sections + [key or '']) for sections, key, _ in flatten_errors(config, result)]
            raise ConfigObjError("the config file %s failed validation %s" % (name, failures))
    return config


def fetch_conf_path(conf: Section, path):
    """
    Retrieves the section at a path of section names, or None if any part of the path is missing.
    """
    for p in path:
        conf = conf.get(p, None)
        if conf is None:
            return None
    return conf


def apply_conf(conf: Section, target):
    """
    Sets each configured value as an attribute of the target, skipping names the target does not already define.
    """
    for k, v in conf.items():
        if hasattr(target, k):
            setattr(target, k, v)


def apply_conf_path(conf: Section, name_parts, target):
    conf = fetch_conf_path(conf, name_parts)
    if conf:
        apply_conf(conf, target)


def configure_module(module, config_name=None):
    """
    Applies configuration to the module-level values of the given module.
    The files are located beside the module's source and named after the module unless config_name is given.
    Values are read from the nested sections matching the module's dotted name, e.g.
    [meadowlink] [[device]] [[[defaults]]] for meadowlink.device.defaults.
    """
    if not module.__package__:
        raise ConfigObjError('module %s has no package defined' % module.__name__)
    fqname = module.__name__
    if not config_name:
        config_name = fqname.split('.')[-1]
    conf = load_config(config_name, os.path.dirname(module.__file__))
    apply_conf_path(conf, fqname.split('.'), module)
    return conf

'''Simple library-wide configuration management, holding the default
settings for each deconvolution algorithm in a per-user JSON file.

'''
import os
import sys
import copy
import json
import warnings

from .errors import ConfigurationError
from .deconvolution.parameters import DeconvolutionType, parameter_types


CONFIG_FILE_NAME = 'config.json'
CONFIG_DIR_ENV_VAR = 'MS_DECONVOLUTION_CONFIGDIR'


def _get_home_dir():
    """Find user's home directory if possible.
    Otherwise, returns None.
    """
    path = os.path.expanduser("~")
    if os.path.isdir(path):
        return path
    for evar in ('HOME', 'USERPROFILE', 'TMP'):
        path = os.environ.get(evar)
        if path is not None and os.path.isdir(path):
            return path
    return None


def get_config_dir():
    """Get the configuration directory path.

    Tries the following routes:
        1. The environment variable "MS_DECONVOLUTION_CONFIGDIR"
        2. If on an XDG-compliant platform (Linux, Free BSD), the environment
           variable "XDG_CONFIG_HOME"/ms_deconvolution
        3. The user's home directory/.ms_deconvolution

    If the configuration directory does not exist, it will
    be created.

    Returns
    -------
    str
    """
    FALLBACK_DIR = '.'
    configdir = os.environ.get(CONFIG_DIR_ENV_VAR)
    if configdir is not None:
        configdir = os.path.abspath(configdir)
        if not os.path.exists(configdir):
            try:
                os.makedirs(configdir)
            except OSError:
                return FALLBACK_DIR
        return configdir

    home_dir = _get_home_dir()
    if home_dir is not None:
        configdir = os.path.join(home_dir, '.ms_deconvolution')
    else:
        configdir = None
    if sys.platform.startswith(('linux', 'freebsd')):
        configdir = None
        xdg_base = os.environ.get('XDG_CONFIG_HOME')
        if xdg_base is None:
            xdg_base = home_dir
            if xdg_base is not None:
                xdg_base = os.path.join(xdg_base, '.config')
        if xdg_base is not None:
            configdir = os.path.join(xdg_base, 'ms_deconvolution')
    if configdir is not None:
        if os.path.exists(configdir):
            return configdir
        try:
            os.makedirs(configdir)
            return configdir
        except OSError:
            return FALLBACK_DIR
    return FALLBACK_DIR


_DEFAULT_CONFIG = {
    'deconvolution': {
        DeconvolutionType.classic.value: parameter_types[DeconvolutionType.classic]().to_dict(),
        DeconvolutionType.flash_deconv.value: parameter_types[DeconvolutionType.flash_deconv]().to_dict(),
        DeconvolutionType.isodec.value: parameter_types[DeconvolutionType.isodec]().to_dict(),
    },
    'schema_version': '1.0.0'
}


def get_config():
    """Load the config.json file from the configuration
    directory given by :func:`get_config_dir`.

    If the config file does not exist, a default one
    will be created.

    Returns
    -------
    dict
    """
    confdir = get_config_dir()
    path = os.path.join(confdir, CONFIG_FILE_NAME)
    if not os.path.exists(path):
        try:
            save_config(_DEFAULT_CONFIG)
        except OSError as err:
            warnings.warn("Encountered the error %r when trying to write the default configuration" % (err, ))
            return copy.deepcopy(_DEFAULT_CONFIG)
    try:
        with open(path, 'rt') as fh:
            config = json.load(fh)
    except OSError as err:
        warnings.warn(
            "Encountered the error %r when trying to read configuration" % (err, ))
        config = copy.deepcopy(_DEFAULT_CONFIG)
    if "schema_version" not in config:
        config['schema_version'] = '1.0.0'
    config.setdefault('deconvolution', {})
    return config


def save_config(config=None):
    """Save the configuration in `config` to disk in the
    configuration directory given by :func:`get_config_dir`.

    Parameters
    ----------
    config : dict, optional
        The configuration dictionary (the default is None, which will use the default config)

    """
    if config is None:
        config = copy.deepcopy(_DEFAULT_CONFIG)
    confdir = get_config_dir()
    path = os.path.join(confdir, CONFIG_FILE_NAME)
    with open(path, 'wt') as fh:
        json.dump(config, fh, indent=2, sort_keys=True)


def parameters_from_config(name, config=None, **overrides):
    """Build a :class:`~.DeconvolutionParameters` object for the algorithm `name`
    from the stored defaults, with `overrides` taking precedence.

    Parameters
    ----------
    name : str or :class:`~.DeconvolutionType`
        The algorithm to configure
    config : dict, optional
        A configuration dictionary. If omitted, :func:`get_config` is used.
    **overrides
        Keyword arguments passed to the parameter class, replacing stored values
        unless they are :const:`None`

    Returns
    -------
    :class:`~.DeconvolutionParameters`
    """
    try:
        deconvolution_type = DeconvolutionType(getattr(name, 'value', name))
    except ValueError:
        raise ConfigurationError("Unknown deconvolution algorithm %r" % (name, ))
    if config is None:
        config = get_config()
    settings = dict(config.get('deconvolution', {}).get(deconvolution_type.value, {}))
    settings.update({k: v for k, v in overrides.items() if v is not None})
    if 'mz_window' in settings:
        settings['mz_window'] = tuple(settings['mz_window'])
    parameter_type = parameter_types[deconvolution_type]
    try:
        return parameter_type(**settings)
    except TypeError as err:
        raise ConfigurationError("Invalid settings for %s: %s" % (deconvolution_type.value, err))

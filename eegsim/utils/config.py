"""The config functions."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import json
import os
import os.path as op

from ._logging import logger, warn
from .check import _validate_type

_known_config_types = {
    "EEGSIM_CACHE_DIR": (
        "str, default directory where derived artifacts (forward matrices, "
        "noise mixing matrices) are cached"
    ),
    "EEGSIM_LOGGING_LEVEL": (
        "str or int, controls the level of verbosity of any function "
        "decorated with @verbose"
    ),
    "EEGSIM_TQDM": (
        'str, either "tqdm", "tqdm.auto", or "off". Controls presence/absence '
        "of progress bars"
    ),
}


def _load_config(config_path, raise_error=False):
    """Safely load a config file."""
    with open(config_path) as fid:
        try:
            config = json.load(fid)
        except ValueError:
            # No JSON object could be decoded --> corrupt file?
            msg = (
                f"The eegsim config file ({config_path}) is not a valid JSON "
                "file and might be corrupted"
            )
            if raise_error:
                raise RuntimeError(msg)
            warn(msg)
            config = dict()
    return config


def _get_extra_data_path(home_dir=None):
    """Get path to the eegsim configuration folder."""
    if home_dir is None:
        home_dir = os.environ.get("_EEGSIM_FAKE_HOME_DIR")
    if home_dir is None:
        home_dir = op.expanduser("~")
    return op.join(home_dir, ".eegsim")


def get_config_path(home_dir=None):
    """Get path to the standard eegsim config file.

    Parameters
    ----------
    home_dir : str | None
        The folder that contains the .eegsim config folder.
        If None, it is found automatically.

    Returns
    -------
    config_path : str
        The path to the eegsim configuration file, ``~/.eegsim/eegsim.json``.
    """
    return op.join(_get_extra_data_path(home_dir=home_dir), "eegsim.json")


def get_config(key=None, default=None, raise_error=False, home_dir=None, use_env=True):
    """Read eegsim preferences from environment or config file.

    Parameters
    ----------
    key : None | str
        The preference key to look for. The os environment is searched first,
        then the eegsim config file is parsed.
        If None, all the config parameters present in environment variables or
        the path are returned. If key is an empty string, a dict of all valid
        keys (with their descriptions) is returned.
    default : str | None
        Value to return if the key is not found.
    raise_error : bool
        If True, raise an error if the key is not found (instead of returning
        default).
    home_dir : str | None
        The folder that contains the .eegsim config folder.
        If None, it is found automatically.
    use_env : bool
        If True, consider env vars, if available.

    Returns
    -------
    value : dict | str | None
        The preference key value.

    See Also
    --------
    set_config
    """
    _validate_type(key, (str, type(None)), "key", "string or None")

    if key == "":
        return _known_config_types.copy()

    if use_env and key is not None and key in os.environ:
        return os.environ[key]

    config_path = get_config_path(home_dir=home_dir)
    if not op.isfile(config_path):
        config = {}
    else:
        config = _load_config(config_path)

    if key is None:
        if use_env:
            env_keys = set(config).union(_known_config_types).intersection(os.environ)
            config.update({key: os.environ[key] for key in env_keys})
        return config
    elif raise_error is True and key not in config:
        raise KeyError(
            f'Key "{key}" not found in the environment or in the eegsim config '
            f'file ({config_path}). Try os.environ["{key}"] = VALUE for a '
            f'temporary solution, or eegsim.set_config("{key}", VALUE) for a '
            "permanent one."
        )
    else:
        return config.get(key, default)


def set_config(key, value, home_dir=None, set_env=True):
    """Set an eegsim preference key in the config file and environment.

    Parameters
    ----------
    key : str
        The preference key to set.
    value : str | None
        The value to assign to the preference key. If None, the key is
        deleted.
    home_dir : str | None
        The folder that contains the .eegsim config folder.
        If None, it is found automatically.
    set_env : bool
        If True (default), update :data:`os.environ` in addition to
        updating the eegsim config file.

    See Also
    --------
    get_config
    """
    _validate_type(key, "str", "key")
    # env values are strings, so we enforce that here
    _validate_type(value, (str, "path-like", type(None)), "value")
    if value is not None:
        value = str(value)

    if key not in _known_config_types:
        warn(f'Setting non-standard config type: "{key}"')

    config_path = get_config_path(home_dir=home_dir)
    if op.isfile(config_path):
        config = _load_config(config_path, raise_error=True)
    else:
        config = dict()
        logger.info(f"Attempting to create new eegsim configuration file:\n{config_path}")
    if value is None:
        config.pop(key, None)
        if set_env and key in os.environ:
            del os.environ[key]
    else:
        config[key] = value
        if set_env:
            os.environ[key] = value

    directory = op.dirname(config_path)
    if not op.isdir(directory):
        os.mkdir(directory)
    with open(config_path, "w") as fid:
        json.dump(config, fid, sort_keys=True, indent=0)

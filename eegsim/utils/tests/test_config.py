# Authors: The eegsim contributors.
# License: BSD-3-Clause

import os

import pytest

from eegsim.utils import get_config, get_config_path, set_config


def test_config(tmp_path, monkeypatch):
    """Test eegsim config file support."""
    tempdir = str(tmp_path)
    key = "_EEGSIM_PYTHON_CONFIG_TESTING"
    value = "123456"
    monkeypatch.setenv(key, value)
    assert get_config(key) == value
    monkeypatch.delenv(key)
    assert "EEGSIM_TQDM" in get_config("")
    with pytest.warns(RuntimeWarning, match="non-standard"):
        set_config(key, None, home_dir=tempdir, set_env=False)
    assert get_config(key, home_dir=tempdir) is None
    with pytest.raises(KeyError, match="not found"):
        get_config(key, home_dir=tempdir, raise_error=True)
    with pytest.warns(RuntimeWarning, match="non-standard"):
        set_config(key, value, home_dir=tempdir, set_env=True)
    try:
        assert key in os.environ
        assert get_config(key, home_dir=tempdir) == value
        assert get_config(key, home_dir=tempdir, use_env=False) == value
    finally:
        with pytest.warns(RuntimeWarning, match="non-standard"):
            set_config(key, None, home_dir=tempdir, set_env=True)
    assert key not in os.environ

    # environment takes precedence over the file
    set_config("EEGSIM_CACHE_DIR", "/foo", home_dir=tempdir, set_env=False)
    assert get_config(home_dir=tempdir)["EEGSIM_CACHE_DIR"] == "/foo"
    monkeypatch.setenv("EEGSIM_CACHE_DIR", "/bar")
    assert get_config(home_dir=tempdir)["EEGSIM_CACHE_DIR"] == "/bar"
    assert get_config("EEGSIM_CACHE_DIR", home_dir=tempdir, use_env=False) == "/foo"


def test_config_corrupted(tmp_path):
    """Test reading a corrupted config file."""
    tempdir = str(tmp_path)
    set_config("EEGSIM_TQDM", "off", home_dir=tempdir, set_env=False)
    with open(get_config_path(home_dir=tempdir), "w") as fid:
        fid.write("foo{}")
    with pytest.warns(RuntimeWarning, match="not a valid JSON"):
        assert "EEGSIM_TQDM" not in get_config(home_dir=tempdir, use_env=False)
    with pytest.raises(RuntimeError, match="not a valid JSON"):
        set_config("EEGSIM_TQDM", "off", home_dir=tempdir)

# Authors: The eegsim contributors.
# License: BSD-3-Clause

from pathlib import Path

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from eegsim.utils import (
    _check_fname,
    _check_option,
    _check_range,
    _check_real,
    _ensure_int,
    _soft_import,
    _validate_type,
    check_random_state,
)


def test_ensure_int():
    """Test integer checking."""
    assert _ensure_int(np.int64(3)) == 3
    assert isinstance(_ensure_int(np.int32(3)), int)
    with pytest.raises(TypeError, match="n_vertices must be an int"):
        _ensure_int(3.0, "n_vertices")
    with pytest.raises(TypeError, match="must be an int"):
        _ensure_int(True)


def test_validate_type():
    """Test type checking."""
    _validate_type(1, "int-like")
    _validate_type(1.0, "numeric")
    _validate_type(None, (str, None))
    _validate_type(Path("foo"), "path-like")
    with pytest.raises(TypeError, match="foo must be an instance of str or None"):
        _validate_type(1, (str, None), "foo")
    with pytest.raises(TypeError, match="must be an int"):
        _validate_type(1.0, "int")
    with pytest.raises(TypeError, match="callable"):
        _validate_type(1, "callable")


def test_check_option():
    """Test option checking."""
    assert _check_option("mode", "union", ("union", "intersect")) == "union"
    with pytest.raises(ValueError, match="Allowed values are 'union' and"):
        _check_option("mode", "foo", ("union", "intersect"))
    with pytest.raises(ValueError, match="Did you mean 'gaussian'"):
        _check_option("spatial_profile", "gausian", ("uniform", "gaussian"))
    with pytest.raises(ValueError, match="The only allowed value is 'coh'"):
        _check_option("mixing_type", "foo", ("coh",))


def test_check_range():
    """Test range checking."""
    _check_range(0.5, 0, 1, "x")
    _check_range(0, 0, 1, "x")
    with pytest.raises(ValueError, match="between 0 and 1 inclusive"):
        _check_range(0, 0, 1, "x", min_inclusive=False)
    with pytest.raises(ValueError, match="got 2"):
        _check_range(2, 0, 1, "x")


def test_check_real():
    """Test complex to real conversion."""
    x = np.array([1.0, 2.0])
    assert _check_real(x, "x") is x
    y = _check_real(x + 1e-12j, "x")
    assert not np.iscomplexobj(y)
    assert_array_equal(y, x)
    with pytest.raises(RuntimeError, match="non-negligible imaginary part"):
        _check_real(x + 1e-3j, "x")


def test_check_fname(tmp_path):
    """Test filename checking."""
    fname = tmp_path / "test.h5"
    assert _check_fname(fname) == fname
    with pytest.raises(FileNotFoundError, match="does not exist"):
        _check_fname(fname, must_exist=True)
    fname.write_text("")
    with pytest.raises(FileExistsError, match="overwrite=True"):
        _check_fname(fname)
    assert _check_fname(str(fname), overwrite=True) == fname
    assert _check_fname(fname, overwrite="read", must_exist=True) == fname


def test_random_state():
    """Test random state checking."""
    rng = check_random_state(0)
    assert isinstance(rng, np.random.RandomState)
    assert check_random_state(rng) is rng
    gen = np.random.default_rng(0)
    assert check_random_state(gen) is gen
    assert_array_equal(check_random_state(1).rand(3), check_random_state(1).rand(3))
    with pytest.raises(ValueError, match="cannot be used to seed"):
        check_random_state("foo")


def test_soft_import():
    """Test soft imports."""
    assert _soft_import("numpy", "testing") is np
    assert _soft_import("eegsim_nonexistent_module", "testing", strict=False) is False
    with pytest.raises(RuntimeError, match="For testing to work"):
        _soft_import("eegsim_nonexistent_module", "testing")

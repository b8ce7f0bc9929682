# Authors: The eegsim contributors.
# License: BSD-3-Clause

import os
from unittest import mock

import numpy as np
import pytest

import eegsim
from eegsim.region import Region, RegionSet
from eegsim.simulation import SpatialDecayModel
from eegsim.surface import make_mesh


def pytest_configure(config: pytest.Config):
    """Configure pytest options."""
    for marker in ("slowtest: mark a test as slow",):
        config.addinivalue_line("markers", marker)

    for fixture in ("protect_config",):
        config.addinivalue_line("usefixtures", fixture)

    if os.getenv("EEGSIM_IGNORE_WARNINGS_IN_TESTS", "") not in ("true", "1"):
        first_kind = "error"
    else:
        first_kind = "always"
    warning_lines = f"    {first_kind}::"
    warning_lines += r"""
    # tqdm (Fedora)
    ignore:.*'tqdm_asyncio' object has no attribute 'last_print_t':pytest.PytestUnraisableExceptionWarning
    # h5py <-> NumPy
    ignore:.*numpy\.ndarray size changed.*:RuntimeWarning
    """  # noqa: E501
    for warning_line in warning_lines.split("\n"):
        warning_line = warning_line.strip()
        if warning_line and not warning_line.startswith("#"):
            config.addinivalue_line("filterwarnings", warning_line)


@pytest.fixture(autouse=True)
def check_verbose(request):
    """Set to the default logging level to ensure it's tested properly."""
    starting_level = eegsim.utils.logger.level
    yield
    # ensures that no tests break the global state
    try:
        assert eegsim.utils.logger.level == starting_level
    except AssertionError:
        pytest.fail(
            ".".join([request.module.__name__, request.function.__name__])
            + " modifies logger.level"
        )


@pytest.fixture(scope="function")
def verbose_debug():
    """Run a test with debug verbosity."""
    with eegsim.utils.use_log_level("debug"):
        yield


@pytest.fixture(scope="session")
def protect_config(tmp_path_factory):
    """Protect ~/.eegsim."""
    temp = str(tmp_path_factory.mktemp("home"))
    with mock.patch.dict(os.environ, {"_EEGSIM_FAKE_HOME_DIR": temp}):
        yield


def _grid_mesh(n_side, spacing=1.0):
    """Make a flat square grid mesh of n_side x n_side vertices."""
    x, y = np.meshgrid(np.arange(n_side), np.arange(n_side), indexing="ij")
    rr = np.c_[x.ravel(), y.ravel(), np.zeros(n_side**2)] * spacing
    tris = list()
    for ii in range(n_side - 1):
        for jj in range(n_side - 1):
            v0 = ii * n_side + jj
            v1, v2, v3 = v0 + 1, v0 + n_side, v0 + n_side + 1
            tris.extend([[v0, v2, v1], [v1, v2, v3]])
    return make_mesh(rr, np.array(tris))


@pytest.fixture()
def flat_mesh():
    """Get a flat 4-vertex, 2-face mesh (unit square)."""
    rr = np.array([[0.0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]])
    tris = np.array([[0, 1, 2], [1, 3, 2]])
    return make_mesh(rr, tris)


@pytest.fixture()
def grid_mesh():
    """Get a 10 x 10 flat grid mesh with 1 mm spacing."""
    return _grid_mesh(10)


@pytest.fixture()
def decay_model():
    """Get a two-band coherence decay model."""
    return SpatialDecayModel(
        ["alpha", "beta"],
        [10.0, 20.0],
        ["exponential", "exponential"],
        [[1.0, 0.5], [1.0, 1.0]],
    )


@pytest.fixture()
def grid_regions():
    """Get two 4 x 4 regions in opposite corners of the grid mesh."""
    corner = np.array([ii * 10 + jj for ii in range(4) for jj in range(4)])
    return RegionSet(
        [
            Region(corner, "L", "V1", "wang", "subj01"),
            Region(99 - corner, "R", "V2", "wang", "subj01"),
        ],
        subject="subj01",
        atlas="wang",
    )

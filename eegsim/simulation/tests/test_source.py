# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from eegsim.simulation import compose_source_signal, generate_noise_trials


def test_compose_signal_only(flat_mesh):
    """Test that a strong signal stays in its region."""
    fwd = np.arange(12, dtype=float).reshape(3, 4)
    signal = np.ones((4, 1))
    noise = np.zeros((4, 4))
    eeg, source, roi_vertices = compose_source_signal(
        [[0, 1]], fwd, flat_mesh, signal, noise, 1e6, n_vertices=2
    )
    assert eeg.shape == (4, 3)
    assert source.shape == (4, 4)
    assert_array_equal(roi_vertices[0], [0, 1])
    power = (source**2).sum(axis=0)
    assert_allclose(power[2:], 0.0)
    assert_allclose(power[0], power[1])
    assert_allclose(np.linalg.norm(source), 1.0)
    assert_allclose(eeg, source @ fwd.T)


def test_compose_lambda(flat_mesh):
    """Test blending signal and noise."""
    fwd = np.eye(4)
    signal = np.sin(np.linspace(0, 4 * np.pi, 200))
    noise = generate_noise_trials(100.0, 200, 4, 3, random_state=0)
    _, source, _ = compose_source_signal(
        [[2, 3]], fwd, flat_mesh, signal, noise, np.inf
    )
    assert source.shape == (200, 4, 3)
    assert_allclose(source[..., 0], source[..., 2])
    assert_allclose(source[:, :2], 0.0)
    _, source, _ = compose_source_signal(
        [[2, 3]], fwd, flat_mesh, signal, noise, 0.0
    )
    assert_allclose(source, noise)
    eeg, source, _ = compose_source_signal(
        [[2, 3]], fwd, flat_mesh, signal, noise, 1.0, "active_nodes"
    )
    assert_allclose(np.linalg.norm(source, axis=(0, 1)), 1.0)
    assert_allclose(eeg, source)


def test_compose_bad(flat_mesh):
    """Test compose_source_signal with unusable inputs."""
    fwd = np.eye(4)
    signal = np.ones((10, 2))
    noise = np.zeros((10, 4))
    with pytest.warns(RuntimeWarning, match="No regions"):
        out = compose_source_signal([], fwd, flat_mesh, signal, noise, 1.0)
    assert out == (None, None, None)
    with pytest.warns(RuntimeWarning, match="does not match"):
        out = compose_source_signal([[0, 1]], fwd, flat_mesh, signal, noise, 1.0)
    assert out == (None, None, None)
    regions = [[0, 1], [2, 3]]
    with pytest.raises(ValueError, match="forward matrix must have shape"):
        compose_source_signal(regions, np.eye(3), flat_mesh, signal, noise, 1.0)
    with pytest.raises(ValueError, match="noise must have shape"):
        compose_source_signal(regions, fwd, flat_mesh, signal, noise[:5], 1.0)
    with pytest.raises(ValueError, match="lambda_ must be non-negative"):
        compose_source_signal(regions, fwd, flat_mesh, signal, noise, -1.0)

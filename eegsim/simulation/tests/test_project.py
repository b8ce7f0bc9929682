# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from eegsim.cache import ArtifactCache
from eegsim.region import Region, RegionSet
from eegsim.simulation import (
    NoiseParams,
    ProjectSimulation,
    ProjectSimulator,
    SimulationConfig,
    read_project_simulation,
)
from eegsim.simulation.project import _check_region_sets, _strip_session

n_sensors = 8


def _quadrants(subject, reverse=False):
    regions = list()
    for ri, (ii0, jj0) in enumerate(((0, 0), (0, 5), (5, 0), (5, 5))):
        vertices = [
            ii * 10 + jj for ii in range(ii0, ii0 + 5) for jj in range(jj0, jj0 + 5)
        ]
        hemi = "L" if jj0 == 0 else "R"
        regions.append(Region(vertices, hemi, f"V{ri + 1}", "wang", subject))
    if reverse:
        regions = regions[::-1]
    return RegionSet(regions, subject, "wang")


class _Providers:
    """Fake data of a project sharing one mesh."""

    def __init__(self, mesh):
        self.mesh = mesh
        self.n_forward = 0

    def forward(self, subject):
        if subject == "missing":
            raise OSError(f"No forward file for {subject}")
        self.n_forward += 1
        rng = np.random.RandomState(int(subject[-1]))
        if subject == "subj09":
            return rng.randn(n_sensors, 50)
        return rng.randn(n_sensors, self.mesh["np"])

    def get_mesh(self, subject):
        return self.mesh

    def rois(self, subject, atlas):
        if atlas == "wang":
            regions = _quadrants(subject, reverse=subject == "subj02")
            return regions[:1] if subject == "subj05" else regions
        if subject == "subj03":
            return RegionSet(subject=subject, atlas=atlas)
        return RegionSet([Region(np.arange(50), "L", "V1", atlas, subject)])


def _simulator(grid_mesh, decay_model, **kwargs):
    providers = _Providers(grid_mesh)
    config = SimulationConfig(
        alpha_atlas="benson",
        n_vertices=4,
        n_trials=2,
        noise=NoiseParams(lambda_=1.0),
        **kwargs,
    )
    simulator = ProjectSimulator(
        config,
        providers.forward,
        providers.get_mesh,
        providers.rois,
        decay_model,
        ArtifactCache(),
    )
    return simulator, providers


def test_strip_session():
    """Test removing session suffixes from subject ids."""
    assert _strip_session("subj01_ssn02") == "subj01"
    assert _strip_session("subj01") == "subj01"


def test_project_random_rois(grid_mesh, decay_model):
    """Test simulating a project with randomly drawn regions."""
    simulator, providers = _simulator(grid_mesh, decay_model)
    assert "n_vertices=4" in repr(simulator)
    subjects = ["subj01", "subj02_ssn1", "subj02_ssn2", "subj03", "missing"]
    with pytest.warns(RuntimeWarning, match="Skipping subject") as record:
        sim = simulator.run(subjects, random_state=0)
    assert len(record) == 2
    assert isinstance(sim, ProjectSimulation)
    assert list(sim) == ["subj01", "subj02", "subj03", "missing"]
    assert sim.simulated == ["subj01", "subj02"]
    assert "2/4 subjects" in repr(sim)
    assert sim["subj03"].skipped and "benson" in sim["subj03"].reason
    assert "could not be loaded" in sim["missing"].reason
    assert len(sim.region_names) == 2
    assert sim.signal.shape == (200, 2)
    assert sim.freqs.shape == (2,)
    assert np.isin(sim.freqs, [3, 4, 5, 6]).all()
    quadrants = {r.full_name: r.vertices for r in _quadrants("subj01")}
    for subject in sim.simulated:
        subj_sim = sim[subject]
        assert subj_sim.region_names == sim.region_names
        assert subj_sim.eeg.shape == (200, n_sensors, 2)
        assert subj_sim.source.shape == (200, 100, 2)
        assert_allclose(np.linalg.norm(subj_sim.source, axis=(0, 1)), 1.0)
        for name, vertices in zip(subj_sim.region_names, subj_sim.roi_vertices):
            assert len(vertices) == 4
            assert np.isin(vertices, quadrants[name]).all()
        assert "2 trials" in repr(subj_sim)
    # the same regions are used although subj02 lists them in another order
    for v1, v2 in zip(sim["subj01"].roi_vertices, sim["subj02"].roi_vertices):
        assert_array_equal(v1, v2)
    assert simulator.cache.get("subj01", "forward") is not None
    # forward matrices are cached
    n_forward = providers.n_forward
    with pytest.warns(RuntimeWarning, match="Skipping subject"):
        sim_2 = simulator.run(subjects, random_state=0)
    assert providers.n_forward == n_forward
    assert sim_2.region_names == sim.region_names
    assert_allclose(sim_2["subj02"].eeg, sim["subj02"].eeg)


def test_project_given_rois(grid_mesh, decay_model):
    """Test simulating a project with given regions."""
    simulator, _ = _simulator(grid_mesh, decay_model, keep_source=False)
    signal = np.random.RandomState(0).randn(100, 4)
    rois = [_quadrants("subj01_ssn1"), _quadrants("subj02", reverse=True)]
    sim = simulator.run(["subj01", "subj02"], signal, rois, random_state=0)
    assert sim.region_names == ["V1_L", "V2_R", "V3_L", "V4_R"]
    assert sim.freqs is None
    assert sim.simulated == ["subj01", "subj02"]
    assert sim["subj02"].region_names == sim.region_names
    assert sim["subj01"].source is None
    assert sim["subj01"].eeg.shape == (100, n_sensors, 2)
    # missing regions
    rois = dict(subj01=_quadrants("subj01"), subj02=_quadrants("subj02")[:3])
    with pytest.warns(RuntimeWarning, match="subj0[24]"):
        sim = simulator.run(["subj01", "subj02", "subj04"], signal, rois)
    assert sim.simulated == ["subj01"]
    assert sim["subj02"].skipped
    assert "no seed regions" in sim["subj04"].reason
    with pytest.raises(ValueError, match="4 seed regions but 3 seed signals"):
        simulator.run(["subj01"], signal[:, :3], dict(subj01=rois["subj01"]))
    with pytest.warns(RuntimeWarning, match="regions"):
        sim = simulator.run(["subj01"], signal, dict(subj01=RegionSet()))
    assert len(sim) == 0


def test_project_bad_forward(grid_mesh, decay_model):
    """Test skipping subjects whose forward does not match the mesh."""
    simulator, _ = _simulator(grid_mesh, decay_model)
    with pytest.warns(RuntimeWarning, match="forward matrix has shape"):
        sim = simulator.run(["subj09", "subj01"], random_state=0)
    assert sim.simulated == ["subj01"]
    with pytest.raises(TypeError, match="forward_provider must be"):
        ProjectSimulator(None, None, lambda s: None, lambda s, a: None, decay_model)


def test_check_region_sets():
    """Test making region sets consistent across subjects."""
    rois, master, removed = _check_region_sets(_quadrants("subj01_ssn3"))
    assert list(rois) == ["subj01"]
    assert len(master) == 4
    assert removed == []
    with pytest.raises(ValueError, match="has no subject"):
        _check_region_sets([RegionSet()])
    with pytest.raises(TypeError, match="rois\\[0\\] must be"):
        _check_region_sets([dict()])


def test_project_io(grid_mesh, decay_model, tmp_path):
    """Test writing and reading project simulations."""
    pytest.importorskip("h5io")
    simulator, _ = _simulator(grid_mesh, decay_model)
    with pytest.warns(RuntimeWarning, match="Skipping subject"):
        sim = simulator.run(["subj02", "subj01", "subj03"], random_state=0)
    fname = tmp_path / "sim.h5"
    sim.save(fname)
    sim_2 = read_project_simulation(fname)
    assert list(sim_2) == ["subj02", "subj01", "subj03"]
    assert sim_2.region_names == sim.region_names
    assert sim_2.sfreq == sim.sfreq
    assert_allclose(sim_2.signal, sim.signal)
    assert_array_equal(sim_2.freqs, sim.freqs)
    assert_allclose(sim_2["subj01"].eeg, sim["subj01"].eeg)
    assert_allclose(sim_2["subj02"].source, sim["subj02"].source)
    for v1, v2 in zip(sim_2["subj01"].roi_vertices, sim["subj01"].roi_vertices):
        assert_array_equal(v1, v2)
    assert sim_2["subj03"].skipped
    assert sim_2["subj03"].eeg is None
    with pytest.raises(FileExistsError):
        sim.save(fname)


def test_project_random_rois_by_name(grid_mesh, decay_model):
    """Test that drawn regions are matched by name across subjects."""
    simulator, _ = _simulator(grid_mesh, decay_model)
    with pytest.warns(RuntimeWarning, match="seed regions cannot be found"):
        sim = simulator.run(["subj01", "subj05"], random_state=0)
    assert sim.simulated == ["subj01"]
    assert sim["subj05"].skipped

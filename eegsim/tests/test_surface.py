# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from eegsim.surface import (
    DIST_SENTINEL,
    compute_distances,
    compute_source_distances,
    make_mesh,
    mesh_dist,
    mesh_edges,
    surface_area,
    surface_subsample,
)
from eegsim.utils import catch_logging


def test_make_mesh(flat_mesh):
    """Test mesh creation and validation."""
    assert flat_mesh["np"] == 4
    assert flat_mesh["ntri"] == 2
    assert_array_equal(flat_mesh["nvert_lr"], [4, 0])
    # 1-based faces are shifted
    with catch_logging(verbose=True) as log:
        mesh = make_mesh(flat_mesh["rr"], flat_mesh["tris"] + 1, nvert_lr=(2, 2))
    assert "1-based" in log.getvalue()
    assert_array_equal(mesh["tris"], flat_mesh["tris"])
    assert_array_equal(mesh["nvert_lr"], [2, 2])
    with pytest.raises(ValueError, match="Face indices must be between"):
        make_mesh(flat_mesh["rr"], [[0, 1, 5]])
    with pytest.raises(ValueError, match="nvert_lr must contain two counts"):
        make_mesh(flat_mesh["rr"], flat_mesh["tris"], nvert_lr=(1, 2))
    with pytest.raises(ValueError, match="rr must have shape"):
        make_mesh(np.zeros((4, 2)), flat_mesh["tris"])


def test_mesh_edges(grid_mesh):
    """Test adjacency matrices."""
    edges = mesh_edges(grid_mesh["tris"])
    assert edges.shape == (100, 100)
    assert (edges != edges.T).nnz == 0
    assert_array_equal(np.unique(edges.data), [1.0])
    # interior vertices have 6 neighbors
    n_neighbors = np.diff(edges.indptr)
    assert n_neighbors[55] == 6
    assert n_neighbors[0] == 2
    dist = mesh_dist(grid_mesh["tris"], grid_mesh["rr"])
    assert_allclose(dist[0, 1], 1.0)
    assert_allclose(dist[1, 10], np.sqrt(2))


def test_surface_subsample(grid_mesh):
    """Test restricting a mesh to some vertices."""
    rr, tris = grid_mesh["rr"], grid_mesh["tris"]
    vertices = [0, 1, 10, 11]
    rr_sub, tris_sub, vertices_sub, sel = surface_subsample(rr, tris, vertices)
    assert_array_equal(vertices_sub, vertices)
    assert_array_equal(rr_sub, rr[vertices])
    assert len(tris_sub) == 2
    assert_array_equal(sel, np.arange(4))
    assert tris_sub.max() < len(rr_sub)
    # union keeps the faces around the subset
    rr_sub, tris_sub, vertices_sub, sel = surface_subsample(
        rr, tris, vertices, "union"
    )
    assert len(tris_sub) > 2
    assert np.isin(vertices, vertices_sub).all()
    assert_array_equal(vertices_sub[sel], vertices)
    assert_array_equal(rr_sub[tris_sub], rr[vertices_sub[tris_sub]])
    # no face has all of its vertices in the subset
    rr_sub, tris_sub, vertices_sub, sel = surface_subsample(rr, tris, [0, 55])
    assert tris_sub.shape == (0, 3)
    assert len(sel) == 0
    assert_array_equal(vertices_sub, [0, 55])
    _, tris_sub, vertices_sub, sel = surface_subsample(rr, tris, [], "union")
    assert tris_sub.shape == (0, 3)
    assert len(vertices_sub) == 0
    with pytest.raises(ValueError, match="Invalid value for the 'mode'"):
        surface_subsample(rr, tris, vertices, "foo")


@pytest.mark.parametrize("dist_type", ("euclidean", "geodesic"))
def test_distances_symmetric(grid_mesh, dist_type):
    """Test that distance matrices are symmetric with a zero diagonal."""
    dist = compute_distances(grid_mesh["rr"], grid_mesh["tris"], dist_type=dist_type)
    assert dist.shape == (100, 100)
    assert_allclose(dist, dist.T)
    assert_array_equal(np.diag(dist), 0.0)
    assert (dist[~np.eye(100, dtype=bool)] > 0).all()


def test_geodesic_distances(grid_mesh):
    """Test shortest paths along the mesh."""
    rr, tris = grid_mesh["rr"], grid_mesh["tris"]
    euc = compute_distances(rr, tris, [0, 1, 10, 11], "euclidean")
    geo = compute_distances(rr, tris, [0, 1, 10, 11], "geodesic")
    assert_allclose(euc[0, 3], np.sqrt(2))
    # no edge between vertices 0 and 11
    assert_allclose(geo[0, 3], 2.0)
    assert_allclose(geo[1, 2], np.sqrt(2))
    assert (geo >= euc - 1e-12).all()
    with pytest.raises(ValueError, match="tris must be provided"):
        compute_distances(rr, None, dist_type="geodesic")
    with pytest.raises(ValueError, match="Invalid value for the 'dist_type'"):
        compute_distances(rr, tris, dist_type="manhattan")
    assert compute_distances(rr, tris, [], "geodesic").shape == (0, 0)


def test_disconnected_distances():
    """Test that disconnected vertices get the sentinel distance."""
    rr = np.array([[0.0, 0, 0], [1, 0, 0], [0, 1, 0], [5, 0, 0], [6, 0, 0], [5, 1, 0]])
    tris = np.array([[0, 1, 2], [3, 4, 5]])
    dist = compute_distances(rr, tris, dist_type="geodesic")
    assert np.isfinite(dist).all()
    assert_array_equal(dist[:3, 3:], DIST_SENTINEL)
    assert_allclose(dist[0, 1], 1.0)


def test_compute_source_distances(grid_mesh):
    """Test distances between all sources of a mesh."""
    with catch_logging(verbose=True) as log:
        dist = compute_source_distances(grid_mesh, "Euclidean")
    assert "euclidean distances between 100 sources" in log.getvalue()
    assert_allclose(dist[0, 99], np.sqrt(2 * 81))
    # plain dicts are converted
    dist_2 = compute_source_distances(
        dict(rr=grid_mesh["rr"], tris=grid_mesh["tris"]), "GEODESIC", verbose=False
    )
    assert_allclose(dist_2[0, 99], 18.0)


def test_surface_area(flat_mesh, grid_mesh):
    """Test surface area computation."""
    assert_allclose(surface_area(flat_mesh["rr"], flat_mesh["tris"]), 1.0)
    assert_allclose(surface_area(grid_mesh["rr"], grid_mesh["tris"]), 81.0)
    assert surface_area(flat_mesh["rr"], np.zeros((0, 3), int)) == 0.0

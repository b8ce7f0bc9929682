"""Cortical mesh geometry: subsampling, adjacency and distances."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np
from scipy.sparse import coo_array, csr_array
from scipy.sparse.csgraph import dijkstra
from scipy.spatial.distance import cdist

from .utils import (
    Bunch,
    _check_option,
    _ensure_int,
    _validate_type,
    fill_doc,
    logger,
    verbose,
    warn,
)

# Distance assigned to vertex pairs that are not connected on the mesh. It
# keeps empirical distance distributions finite.
DIST_SENTINEL = 1000.0

_DIST_TYPES = ("euclidean", "geodesic")


def make_mesh(rr, tris, nvert_lr=None):
    """Create a cortical mesh.

    Parameters
    ----------
    rr : array-like, shape (n_vertices, 3)
        The vertex positions.
    tris : array-like, shape (n_tris, 3)
        The faces. 1-based faces (as written by MATLAB tools) are detected
        when no face uses vertex 0 and one uses vertex ``n_vertices``, and
        are shifted to 0-based indices.
    nvert_lr : array-like of int, shape (2,) | None
        Number of vertices in the left and right hemispheres. The left
        hemisphere vertices come first. If None, all vertices are considered
        to belong to the left hemisphere.

    Returns
    -------
    mesh : instance of Bunch
        The mesh, with keys ``'rr'``, ``'tris'``, ``'np'``, ``'ntri'`` and
        ``'nvert_lr'``.
    """
    rr = np.array(rr, float)
    tris = np.array(tris, int).reshape(-1, 3)
    if rr.ndim != 2 or rr.shape[1] != 3:
        raise ValueError(f"rr must have shape (n_vertices, 3), got {rr.shape}")
    n_vertices = len(rr)
    if len(tris) and tris.min() == 1 and tris.max() == n_vertices:
        logger.info("    Converting 1-based faces to 0-based")
        tris = tris - 1
    if len(tris) and (tris.min() < 0 or tris.max() >= n_vertices):
        raise ValueError(
            f"Face indices must be between 0 and {n_vertices - 1}, got values "
            f"between {tris.min()} and {tris.max()}"
        )
    if nvert_lr is None:
        nvert_lr = (n_vertices, 0)
    nvert_lr = np.array([_ensure_int(n, "nvert_lr") for n in nvert_lr], int)
    if nvert_lr.shape != (2,) or nvert_lr.sum() != n_vertices:
        raise ValueError(
            f"nvert_lr must contain two counts summing to {n_vertices}, got "
            f"{list(nvert_lr)}"
        )
    return Bunch(rr=rr, tris=tris, np=n_vertices, ntri=len(tris), nvert_lr=nvert_lr)


def _check_mesh(mesh):
    _validate_type(mesh, dict, "mesh")
    for key in ("rr", "tris"):
        if key not in mesh:
            raise ValueError(f"mesh must contain the key {repr(key)}")
    if "np" not in mesh:
        mesh = make_mesh(mesh["rr"], mesh["tris"], mesh.get("nvert_lr"))
    return mesh


def _check_dist_type(dist_type):
    _validate_type(dist_type, str, "dist_type")
    return _check_option("dist_type", dist_type.lower(), _DIST_TYPES)


def surface_subsample(rr, tris, vertices, mode="intersect"):
    """Restrict a surface to a subset of its vertices.

    Parameters
    ----------
    rr : ndarray, shape (n_vertices, 3)
        The vertex positions.
    tris : ndarray, shape (n_tris, 3)
        The faces.
    vertices : array-like of int
        The vertex subset.
    mode : str
        Face inclusion criterion. ``'union'`` keeps a face if any of its
        vertices is in the subset, ``'intersect'`` keeps a face only if all
        of its vertices are in the subset.

    Returns
    -------
    rr_sub : ndarray, shape (n_sub, 3)
        Positions of the output vertices. With ``'union'`` these are the
        vertices touched by the kept faces, with ``'intersect'`` the
        (sorted) requested subset.
    tris_sub : ndarray, shape (n_tris_sub, 3)
        The kept faces, indexing into ``rr_sub``.
    vertices_sub : ndarray, shape (n_sub,)
        For each row of ``rr_sub``, the index into ``rr``.
    sel : ndarray of int
        Positions in ``rr_sub`` of the requested vertices that lie on at
        least one kept face.
    """
    _check_option("mode", mode, ("union", "intersect"))
    rr = np.asarray(rr, float)
    tris = np.asarray(tris, int).reshape(-1, 3)
    vertices = np.unique(np.asarray(vertices, int))
    in_sub = np.isin(tris, vertices)
    keep = in_sub.any(axis=1) if mode == "union" else in_sub.all(axis=1)
    kept = tris[keep]
    on_faces = np.unique(kept)
    if mode == "union":
        vertices_sub = on_faces
    else:
        vertices_sub = vertices
    # faces are re-indexed through a lookup table of the output vertices
    lut = np.full(max(len(rr), 1), -1, int)
    lut[vertices_sub] = np.arange(len(vertices_sub))
    tris_sub = lut[kept]
    assert (tris_sub >= 0).all()
    sel = lut[np.intersect1d(vertices, on_faces)]
    if len(kept) == 0:
        logger.debug(f"    No faces left when subsampling with mode={repr(mode)}")
    return rr[vertices_sub], tris_sub, vertices_sub, sel


def mesh_edges(tris, n_vertices=None):
    """Return sparse matrix with edges as an adjacency matrix.

    Parameters
    ----------
    tris : array of shape [n_triangles x 3]
        The triangles.
    n_vertices : int | None
        The number of vertices. If None, ``tris.max() + 1`` is used.

    Returns
    -------
    edges : scipy.sparse.csr_array
        The adjacency matrix.
    """
    tris = np.asarray(tris, int).reshape(-1, 3)
    if n_vertices is None:
        n_vertices = tris.max() + 1 if len(tris) else 0
    ones_ntris = np.ones(3 * len(tris))
    a, b, c = tris.T
    x = np.concatenate((a, b, c))
    y = np.concatenate((b, c, a))
    edges = coo_array((ones_ntris, (x, y)), shape=(n_vertices, n_vertices))
    edges = edges.tocsr()
    edges = edges + edges.T
    edges.data[:] = 1.0
    return edges


def mesh_dist(tris, vert):
    """Compute adjacency matrix weighted by distances.

    It generates an adjacency matrix where the entries are the distances
    between neighboring vertices.

    Parameters
    ----------
    tris : array (n_tris x 3)
        Mesh triangulation.
    vert : array (n_vert x 3)
        Vertex locations.

    Returns
    -------
    dist_matrix : scipy.sparse.csr_array
        Sparse matrix with distances between adjacent vertices.
    """
    edges = mesh_edges(tris, len(vert)).tocoo()
    dist = np.linalg.norm(vert[edges.row, :] - vert[edges.col, :], axis=1)
    return csr_array((dist, (edges.row, edges.col)), shape=edges.shape)


@fill_doc
def compute_distances(rr, tris=None, vertices=None, dist_type="euclidean"):
    """Compute pairwise distances between mesh vertices.

    Parameters
    ----------
    rr : ndarray, shape (n_vertices, 3)
        The vertex positions.
    tris : ndarray, shape (n_tris, 3) | None
        The faces. Required for geodesic distances.
    vertices : array-like of int | None
        The vertices to compute distances between. If None, all vertices are
        used.
    %(dist_type)s

    Returns
    -------
    dist : ndarray, shape (n_sel, n_sel)
        Symmetric distance matrix with a zero diagonal. Pairs that are not
        connected on the mesh are set to ``DIST_SENTINEL``.
    """
    dist_type = _check_dist_type(dist_type)
    rr = np.asarray(rr, float)
    if vertices is None:
        vertices = np.arange(len(rr))
    vertices = np.asarray(vertices, int)
    if len(vertices) == 0:
        return np.zeros((0, 0))
    if dist_type == "euclidean":
        dist = cdist(rr[vertices], rr[vertices])
    else:
        if tris is None:
            raise ValueError("tris must be provided to compute geodesic distances")
        adjacency = mesh_dist(tris, rr)
        dist = dijkstra(adjacency, directed=False, indices=vertices)[:, vertices]
        n_inf = np.isinf(dist).sum()
        if n_inf:
            logger.debug(
                f"    {n_inf} disconnected vertex pairs set to {DIST_SENTINEL}"
            )
        dist[np.isinf(dist)] = DIST_SENTINEL
        # shortest paths are symmetric up to floating-point error
        dist = (dist + dist.T) / 2.0
    np.fill_diagonal(dist, 0.0)
    return dist


@verbose
def compute_source_distances(mesh, dist_type="euclidean", *, verbose=None):
    """Compute the distance matrix between all sources of a mesh.

    Parameters
    ----------
    %(mesh)s
    %(dist_type)s
    %(verbose)s

    Returns
    -------
    %(distances)s
    """
    mesh = _check_mesh(mesh)
    dist_type = _check_dist_type(dist_type)
    logger.info(
        f"Computing {dist_type} distances between {mesh['np']} sources ..."
    )
    return compute_distances(mesh["rr"], mesh["tris"], dist_type=dist_type)


def surface_area(rr, tris):
    """Compute the area of a triangulated surface.

    Parameters
    ----------
    rr : ndarray, shape (n_vertices, 3)
        The vertex positions.
    tris : ndarray, shape (n_tris, 3)
        The faces.

    Returns
    -------
    area : float
        The total area, in squared units of ``rr``.
    """
    tris = np.asarray(tris, int).reshape(-1, 3)
    if len(tris) == 0:
        return 0.0
    rr = np.asarray(rr, float)
    a = rr[tris[:, 1]] - rr[tris[:, 0]]
    b = rr[tris[:, 2]] - rr[tris[:, 0]]
    return 0.5 * np.linalg.norm(np.cross(a, b), axis=1).sum()


def _check_region_vertices(vertices, n_vertices, name):
    """Check region vertices against the mesh size, warning on bad ones."""
    vertices = np.unique(np.asarray(vertices, int))
    bad = (vertices < 0) | (vertices >= n_vertices)
    if bad.any():
        warn(
            f"Region {name} has {bad.sum()} vertex indices outside the mesh "
            f"(0-{n_vertices - 1}), they are ignored"
        )
        vertices = vertices[~bad]
    return vertices

"""Regions of interest on a cortical mesh and their resizing."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np

from .surface import (
    DIST_SENTINEL,
    _check_dist_type,
    _check_mesh,
    _check_region_vertices,
    compute_distances,
    surface_area,
    surface_subsample,
)
from .utils import (
    Bunch,
    _check_option,
    _ensure_int,
    _validate_type,
    fill_doc,
    logger,
    warn,
)

_HEMIS = ("L", "R", "B")

# accepted atlas names and the canonical name they map to
_ATLAS_ALIASES = {
    "func": "functional",
    "functional": "functional",
    "wang": "wang",
    "wangatlas": "wang",
    "glass": "glass",
    "glasser": "glass",
    "kgs": "kgs",
    "kalanit": "kgs",
    "benson": "benson",
    "main": "main",
}


def _check_atlas(atlas):
    """Return the canonical atlas name."""
    _validate_type(atlas, str, "atlas")
    _check_option("atlas", atlas.lower(), _ATLAS_ALIASES)
    return _ATLAS_ALIASES[atlas.lower()]


class Region:
    """A region of interest defined as a set of mesh vertices.

    Parameters
    ----------
    vertices : array-like of int
        Vertex indices (0 based) in the subject's mesh. Duplicates are
        removed and the indices are sorted.
    hemi : 'L' | 'R' | 'B'
        Hemisphere the region belongs to (``'B'`` for both).
    name : str | None
        The region name.
    atlas : str | None
        The atlas the region comes from.
    subject : str | None
        The subject the region is defined for.

    Attributes
    ----------
    vertices : ndarray of int
        Sorted unique vertex indices.
    hemi : str
        Hemisphere.
    name : str | None
        The region name.
    atlas : str | None
        The canonical atlas name.
    subject : str | None
        The region subject.
    """

    def __init__(self, vertices=(), hemi="B", name=None, atlas=None, subject=None):
        _check_option("hemi", hemi, _HEMIS)
        vertices = np.unique(np.asarray(vertices, int).ravel())
        if len(vertices) and vertices[0] < 0:
            raise ValueError("Vertex indices must be non-negative.")
        self.vertices = vertices
        self.hemi = hemi
        self.name = name
        self.atlas = None if atlas is None else _check_atlas(atlas)
        self.subject = subject

    def __repr__(self):  # noqa: D105
        name = "unknown, " if self.subject is None else self.subject + ", "
        name += repr(self.name) if self.name is not None else "unnamed"
        return f"<Region | {name}, {self.hemi} : {len(self)} vertices>"

    def __len__(self):
        """Return the number of vertices."""
        return len(self.vertices)

    @property
    def full_name(self):
        """The name used to match regions across subjects."""
        return f"{self.name}_{self.hemi}"

    def copy(self):
        """Copy the region.

        Returns
        -------
        region : instance of Region
            The copied region.
        """
        return Region(
            self.vertices.copy(), self.hemi, self.name, self.atlas, self.subject
        )

    @fill_doc
    def resize(self, mesh, n_vertices, dist_type="geodesic"):
        """Shrink the region around its center.

        Parameters
        ----------
        %(mesh)s
        n_vertices : int
            The target number of vertices.
        %(dist_type)s

        Returns
        -------
        region : instance of Region
            A new region with at most ``n_vertices`` vertices.
        """
        mesh = _check_mesh(mesh)
        resized = _resize_on_mesh(
            mesh, self.vertices, n_vertices, dist_type, self.full_name
        )
        return Region(
            resized.vertices, self.hemi, self.name, self.atlas, self.subject
        )


class RegionSet:
    """The ordered regions of one atlas for one subject.

    Parameters
    ----------
    regions : list of Region
        The regions.
    subject : str | None
        The subject the regions belong to.
    atlas : str | None
        The atlas name.
    """

    def __init__(self, regions=(), subject=None, atlas=None):
        regions = list(regions)
        for ri, region in enumerate(regions):
            _validate_type(region, Region, f"regions[{ri}]")
        self.regions = regions
        self.subject = subject
        self.atlas = None if atlas is None else _check_atlas(atlas)

    def __repr__(self):  # noqa: D105
        subject = "unknown" if self.subject is None else self.subject
        atlas = "mixed" if self.atlas is None else self.atlas
        return f"<RegionSet | {subject}, {atlas} : {self.n_regions} regions>"

    def __len__(self):
        return len(self.regions)

    def __iter__(self):
        return iter(self.regions)

    def __getitem__(self, idx):
        if isinstance(idx, slice):
            return self.select(np.arange(len(self))[idx])
        return self.regions[idx]

    @property
    def n_regions(self):
        """The number of regions."""
        return len(self.regions)

    @property
    def full_names(self):
        """The full names (``name_hemi``) of the regions."""
        return [region.full_name for region in self.regions]

    @property
    def vertices(self):
        """The union of the vertices of all regions."""
        if not self.regions:
            return np.zeros(0, int)
        return np.unique(np.concatenate([r.vertices for r in self.regions]))

    def select(self, indices):
        """Select regions by position.

        Parameters
        ----------
        indices : array-like of int
            Positions of the regions to keep, in the output order.

        Returns
        -------
        regions : instance of RegionSet
            The selected regions.
        """
        indices = [_ensure_int(ii, "indices") for ii in np.atleast_1d(indices)]
        return RegionSet(
            [self.regions[ii] for ii in indices], self.subject, self.atlas
        )

    def reorder(self, full_names):
        """Order regions to match a list of full names.

        Parameters
        ----------
        full_names : list of str
            The requested order. Names that are missing from this set are
            skipped (case-insensitive matching).

        Returns
        -------
        regions : instance of RegionSet
            The reordered regions.
        """
        lookup = {name.lower(): ri for ri, name in enumerate(self.full_names)}
        missing = [name for name in full_names if name.lower() not in lookup]
        if missing:
            logger.info(
                f"    {len(missing)} region(s) missing for subject "
                f"{self.subject}: {', '.join(missing)}"
            )
        return self.select(
            [lookup[name.lower()] for name in full_names if name.lower() in lookup]
        )

    def get_atlas(self, atlas):
        """Get the regions of one atlas.

        Parameters
        ----------
        atlas : str
            The atlas name (aliases such as ``'wangatlas'`` are accepted).

        Returns
        -------
        regions : instance of RegionSet
            The regions belonging to ``atlas``.
        """
        atlas = _check_atlas(atlas)
        return RegionSet(
            [r for r in self.regions if r.atlas == atlas], self.subject, atlas
        )

    def to_matrix(self, n_sources):
        """Convert the regions to an indicator matrix.

        Parameters
        ----------
        n_sources : int
            The number of sources in the mesh.

        Returns
        -------
        mat : ndarray, shape (n_sources, n_regions)
            One column per region with ones at the region vertices.
        """
        n_sources = _ensure_int(n_sources, "n_sources")
        mat = np.zeros((n_sources, self.n_regions))
        for ri, region in enumerate(self.regions):
            vertices = _check_region_vertices(
                region.vertices, n_sources, region.full_name
            )
            mat[vertices, ri] = 1.0
        return mat


@fill_doc
def resize_region(rr, tris, vertices, n_vertices=None, dist_type="geodesic", center=None):
    """Resize a region to a number of vertices around its center.

    The center of the region is the vertex with the smallest summed
    distance to all other region vertices. The region is then restricted to
    the ``n_vertices`` vertices closest to the center, so the resize radius
    is the inverse empirical distribution of center distances evaluated at
    ``n_vertices``.

    Parameters
    ----------
    rr : ndarray, shape (n_vertices_mesh, 3)
        The vertex positions of the (local) mesh.
    tris : ndarray, shape (n_tris, 3)
        The faces of the (local) mesh.
    vertices : array-like of int
        The region vertices, indexing ``rr``.
    n_vertices : int | None
        The target size. If None or larger than the region, the whole region
        is kept (with a warning in the latter case).
    %(dist_type)s
    center : int | None
        The center vertex (indexing ``rr``, must belong to the region). If
        None it is computed.

    Returns
    -------
    resized : instance of Bunch
        With keys ``'rr'`` and ``'tris'`` (the resized patch, faces indexing
        its own vertices), ``'vertices'`` (selected vertices, indexing the
        input ``rr``), ``'center'``, ``'dist'`` (distance of each selected
        vertex from the center), ``'radius'`` and ``'area'``.
    """
    dist_type = _check_dist_type(dist_type)
    rr = np.asarray(rr, float)
    tris = np.asarray(tris, int).reshape(-1, 3)
    vertices = np.unique(np.asarray(vertices, int))
    out = Bunch(
        rr=np.zeros((0, 3)),
        tris=np.zeros((0, 3), int),
        vertices=np.zeros(0, int),
        center=None,
        dist=np.zeros(0),
        radius=0.0,
        area=0.0,
    )
    if len(vertices) == 0:
        warn("There are no vertices in this region, it cannot be resized")
        return out
    if n_vertices is None:
        n_vertices = len(vertices)
    n_vertices = _ensure_int(n_vertices, "n_vertices")
    if n_vertices < 1:
        raise ValueError(f"n_vertices must be at least 1, got {n_vertices}")
    if n_vertices > len(vertices):
        warn(
            f"The requested region size ({n_vertices}) is bigger than the number "
            f"of vertices in this region ({len(vertices)}), using the full region"
        )
        n_vertices = len(vertices)
    if len(tris) == 0:
        out.update(
            rr=rr[vertices], vertices=vertices, dist=np.zeros(len(vertices))
        )
        return out

    dist = compute_distances(rr, tris, vertices, dist_type)
    if center is None:
        c_idx = int(np.argmin(dist.sum(axis=0)))
    else:
        c_idx = np.searchsorted(vertices, _ensure_int(center, "center"))
        if c_idx >= len(vertices) or vertices[c_idx] != center:
            raise ValueError(f"center ({center}) must be one of the region vertices")
    center_dist = dist[c_idx]
    order = np.argsort(center_dist, kind="stable")
    chosen = np.sort(order[:n_vertices])
    radius = center_dist[order[n_vertices - 1]]
    if radius >= DIST_SENTINEL:
        # disconnected patches, fall back to the largest reachable distance
        radius = center_dist[center_dist < DIST_SENTINEL].max()
    sel_vertices = vertices[chosen]
    rr_sub, tris_sub, _, _ = surface_subsample(rr, tris, sel_vertices, "intersect")
    out.update(
        rr=rr_sub,
        tris=tris_sub,
        vertices=sel_vertices,
        center=int(vertices[c_idx]),
        dist=center_dist[chosen],
        radius=float(radius),
        area=surface_area(rr_sub, tris_sub),
    )
    return out


def _resize_on_mesh(mesh, vertices, n_vertices, dist_type, name):
    """Resize a region given in global mesh indices.

    Distances are computed on the part of the mesh touching the region,
    so geodesic paths may run along faces on the region border.
    """
    vertices = _check_region_vertices(vertices, mesh["np"], name)
    rr_sub, tris_sub, vertices_sub, sel = surface_subsample(
        mesh["rr"], mesh["tris"], vertices, "union"
    )
    if len(sel) < len(vertices):
        logger.debug(
            f"    {len(vertices) - len(sel)} vertices of region {name} are not "
            "on any face and are dropped"
        )
    resized = resize_region(rr_sub, tris_sub, sel, n_vertices, dist_type)
    resized["vertices"] = vertices_sub[resized["vertices"]]
    if resized["center"] is not None:
        resized["center"] = int(vertices_sub[resized["center"]])
    return resized


def _check_regions(regions):
    """Return a list of Region from a RegionSet, list of Region or arrays."""
    if regions is None:
        return []
    if isinstance(regions, Region):
        return [regions]
    out = list(regions)
    for ri, region in enumerate(out):
        if not isinstance(region, Region):
            _validate_type(region, "array-like", f"regions[{ri}]")
            out[ri] = Region(region, name=f"region{ri}")
    return out

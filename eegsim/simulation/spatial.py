# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np

from ..region import _check_regions, _resize_on_mesh
from ..surface import _check_dist_type, _check_mesh
from ..utils import _check_option, _pl, logger, verbose, warn

_SPATIAL_PROFILES = ("uniform", "gaussian")


def _profile_weights(dist, radius, spatial_profile):
    if spatial_profile == "uniform" or radius == 0:
        return np.ones(len(dist))
    # the standard deviation is half the region radius
    sigma = radius / 2.0
    return np.exp(-(dist**2) / (2 * sigma**2))


@verbose
def compute_spatial_weights(
    regions,
    mesh,
    n_vertices=None,
    spatial_profile="uniform",
    dist_type="geodesic",
    *,
    verbose=None,
):
    """Compute the spatial weights spreading seed signals over regions.

    Each region is resized around its center to ``n_vertices`` vertices and
    its vertices are weighted according to ``spatial_profile``.

    Parameters
    ----------
    %(regions)s
    %(mesh)s
    %(n_vertices_roi)s
    %(spatial_profile)s
    %(dist_type)s
        Used to find the region center and to compute the gaussian profile.
    %(verbose)s

    Returns
    -------
    weights : ndarray, shape (n_sources, n_regions)
        The weight of each source for each region. Sources outside a region
        have a weight of zero.
    roi_vertices : list of ndarray
        The vertices (0-based source indices) of each resized region.
    """
    _check_option("spatial_profile", spatial_profile, _SPATIAL_PROFILES)
    dist_type = _check_dist_type(dist_type)
    mesh = _check_mesh(mesh)
    regions = _check_regions(regions)
    weights = np.zeros((mesh["np"], len(regions)))
    roi_vertices = list()
    logger.info(
        f"Computing {spatial_profile} weights for {len(regions)} "
        f"region{_pl(regions)} ..."
    )
    for ri, region in enumerate(regions):
        resized = _resize_on_mesh(
            mesh, region.vertices, n_vertices, dist_type, region.full_name
        )
        vertices = resized["vertices"]
        if len(vertices) == 0:
            warn(
                f"Region {region.full_name} has no vertices on the mesh, its "
                "seed signal will not contribute to the sources"
            )
        else:
            weights[vertices, ri] = _profile_weights(
                resized["dist"], resized["radius"], spatial_profile
            )
            logger.debug(
                f"    {region.full_name}: {len(vertices)} vertices, "
                f"radius {resized['radius']:0.2f}"
            )
        roi_vertices.append(vertices)
    return weights, roi_vertices

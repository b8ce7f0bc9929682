"""Configuration of project simulations."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

from ..region import _check_atlas
from ..surface import _check_dist_type
from ..utils import (
    _check_option,
    _ensure_int,
    _validate_type,
    fill_doc,
    get_config,
)
from .mixing import _DECOMPOSITIONS
from .noise import _NORMALIZATIONS
from .spatial import _SPATIAL_PROFILES


@fill_doc
class NoiseParams:
    """Parameters of the background noise and of the signal-to-noise ratio.

    Parameters
    ----------
    %(mu)s
    lambda_ : float | None
        The signal-to-noise ratio used to blend signal and noise. If None,
        ``1 / n_samples / 2`` is used.
    %(spatial_normalization)s
    dist_type : str
        The distance used for the coherence model (``'Euclidean'`` or
        ``'geodesic'``, case-insensitive).
    mixing_type : str
        How pink noise is spatially mixed. Only ``'coh'`` (coherent mixing
        with the spatial decay model) is supported.
    alpha_nodes : str
        Which sources of the alpha atlas carry alpha noise. Only ``'all'``
        is supported.
    decomposition : str
        How mixing matrices are computed, ``'cholesky'`` or ``'eigenvalue'``.
    """

    def __init__(
        self,
        mu=1.0,
        lambda_=None,
        spatial_normalization="all_nodes",
        dist_type="Euclidean",
        mixing_type="coh",
        alpha_nodes="all",
        decomposition="cholesky",
    ):
        _validate_type(mu, "numeric", "mu")
        if mu < 0:
            raise ValueError(f"mu must be non-negative, got {mu}")
        _validate_type(lambda_, ("numeric", None), "lambda_")
        if lambda_ is not None and lambda_ < 0:
            raise ValueError(f"lambda_ must be non-negative, got {lambda_}")
        _check_option(
            "spatial_normalization", spatial_normalization, _NORMALIZATIONS
        )
        _check_option("mixing_type", mixing_type, ("coh",))
        _check_option("alpha_nodes", alpha_nodes, ("all",))
        _validate_type(decomposition, str, "decomposition")
        if decomposition.lower() not in _DECOMPOSITIONS:
            raise NotImplementedError(
                f"Decomposition method {repr(decomposition)} is not implemented, "
                f"use one of {_DECOMPOSITIONS}"
            )
        self.mu = float(mu)
        self.lambda_ = None if lambda_ is None else float(lambda_)
        self.spatial_normalization = spatial_normalization
        self.dist_type = _check_dist_type(dist_type)
        self.mixing_type = mixing_type
        self.alpha_nodes = alpha_nodes
        self.decomposition = decomposition.lower()

    def __repr__(self):  # noqa: D105
        lambda_ = "auto" if self.lambda_ is None else f"{self.lambda_:g}"
        return (
            f"<NoiseParams | mu={self.mu:g}, lambda={lambda_}, "
            f"{self.spatial_normalization}, {self.dist_type}, "
            f"{self.decomposition}>"
        )

    def get_lambda(self, n_samples):
        """Get the signal-to-noise ratio for a number of samples.

        Parameters
        ----------
        n_samples : int
            The number of time samples of the seed signals.

        Returns
        -------
        lambda_ : float
            The signal-to-noise ratio.
        """
        if self.lambda_ is not None:
            return self.lambda_
        return 1.0 / _ensure_int(n_samples, "n_samples") / 2.0


@fill_doc
class SimulationConfig:
    """Options of a project simulation.

    Parameters
    ----------
    atlas : str
        The atlas seed regions are drawn from when none are given.
    alpha_atlas : str
        The atlas whose regions carry alpha noise.
    n_vertices : int | None
        The number of vertices each seed region is resized to. None keeps
        the regions unchanged.
    %(spatial_profile)s
    resize_dist_type : str
        The distance used to resize regions.
    n_trials : int
        The number of noise trials.
    %(sfreq)s
        Only used for default seed signals.
    noise : instance of NoiseParams | None
        The noise parameters. None uses the defaults.
    cache_dir : path-like | None
        Where derived artifacts are cached. If None, the ``EEGSIM_CACHE_DIR``
        config value is used, and if that is not set artifacts are only
        cached in memory.
    keep_source : bool
        Whether source-space activity is stored in the results.
    """

    def __init__(
        self,
        atlas="wang",
        alpha_atlas="wang",
        n_vertices=200,
        spatial_profile="uniform",
        resize_dist_type="geodesic",
        n_trials=1,
        sfreq=100.0,
        noise=None,
        cache_dir=None,
        keep_source=True,
    ):
        self.atlas = _check_atlas(atlas)
        self.alpha_atlas = _check_atlas(alpha_atlas)
        if n_vertices is not None:
            n_vertices = _ensure_int(n_vertices, "n_vertices")
            if n_vertices < 1:
                raise ValueError(f"n_vertices must be at least 1, got {n_vertices}")
        self.n_vertices = n_vertices
        self.spatial_profile = _check_option(
            "spatial_profile", spatial_profile, _SPATIAL_PROFILES
        )
        self.resize_dist_type = _check_dist_type(resize_dist_type)
        self.n_trials = _ensure_int(n_trials, "n_trials")
        if self.n_trials < 1:
            raise ValueError(f"n_trials must be at least 1, got {self.n_trials}")
        _validate_type(sfreq, "numeric", "sfreq")
        if sfreq <= 0:
            raise ValueError(f"sfreq must be positive, got {sfreq}")
        self.sfreq = float(sfreq)
        _validate_type(noise, (NoiseParams, None), "noise")
        self.noise = NoiseParams() if noise is None else noise
        _validate_type(cache_dir, ("path-like", None), "cache_dir")
        if cache_dir is None:
            cache_dir = get_config("EEGSIM_CACHE_DIR")
        self.cache_dir = cache_dir
        _validate_type(keep_source, bool, "keep_source")
        self.keep_source = keep_source

    def __repr__(self):  # noqa: D105
        return (
            f"<SimulationConfig | atlas={self.atlas}, n_vertices="
            f"{self.n_vertices}, {self.spatial_profile}, "
            f"{self.n_trials} trial(s), {self.noise}>"
        )

"""Spatial coherence models and noise mixing matrices."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

from copy import deepcopy

import numpy as np
from scipy.linalg import LinAlgError

from ..utils import (
    ProgressBar,
    _check_fname,
    _check_option,
    _check_real,
    _import_h5io_funcs,
    _validate_type,
    cholesky_upper,
    eigh,
    logger,
    object_hash,
    verbose,
)

_DECOMPOSITIONS = ("cholesky", "eigenvalue")
_ALPHA_FREQ = 10.0


def _exponential(params, dist):
    return params[0] * np.exp(-params[1] * dist)


def _exponential_offset(params, dist):
    return params[0] * np.exp(-params[1] * dist) + params[2]


def _gaussian(params, dist):
    return params[0] * np.exp(-(dist**2) / (2 * params[1] ** 2))


def _rational(params, dist):
    return params[0] / (1.0 + (dist / params[1]) ** params[2])


# name -> (function, number of parameters)
_DECAY_FUNCS = {
    "exponential": (_exponential, 2),
    "exponential_offset": (_exponential_offset, 3),
    "gaussian": (_gaussian, 2),
    "rational": (_rational, 3),
}


class SpatialDecayModel:
    """Decay of coherence with source distance, per frequency band.

    Parameters
    ----------
    band_names : list of str
        The names of the frequency bands.
    band_freqs : array-like of float
        The center frequency (Hz) of each band.
    functions : list of str
        The decay function of each band. Can be ``'exponential'``
        (``a * exp(-b * d)``), ``'exponential_offset'``
        (``a * exp(-b * d) + c``), ``'gaussian'``
        (``a * exp(-d ** 2 / (2 * b ** 2))``) or ``'rational'``
        (``a / (1 + (d / b) ** c)``).
    params : list of array-like
        The fitted parameters of each band, in the order given above.

    Notes
    -----
    Only function names and parameters are stored, so the model can be
    written to disk and hashed.
    """

    def __init__(self, band_names, band_freqs, functions, params):
        band_names = [str(name) for name in band_names]
        band_freqs = np.array(band_freqs, float).ravel()
        functions = list(functions)
        params = [np.array(p, float).ravel() for p in params]
        n_bands = len(band_names)
        for name, value in (
            ("band_freqs", band_freqs),
            ("functions", functions),
            ("params", params),
        ):
            if len(value) != n_bands:
                raise ValueError(
                    f"{name} must have one entry per band ({n_bands}), got "
                    f"{len(value)}"
                )
        if n_bands == 0:
            raise ValueError("A spatial decay model needs at least one band")
        if (band_freqs <= 0).any():
            raise ValueError(f"Band frequencies must be positive, got {band_freqs}")
        for bi, (func, p) in enumerate(zip(functions, params)):
            _check_option(f"functions[{bi}]", func, _DECAY_FUNCS)
            n_params = _DECAY_FUNCS[func][1]
            if len(p) != n_params:
                raise ValueError(
                    f"The {func} decay function of band {band_names[bi]} needs "
                    f"{n_params} parameters, got {len(p)}"
                )
        self.band_names = band_names
        self.band_freqs = band_freqs
        self.functions = functions
        self.params = params

    def __repr__(self):  # noqa: D105
        bands = ", ".join(
            f"{name} ({freq:0.1f} Hz)"
            for name, freq in zip(self.band_names, self.band_freqs)
        )
        return f"<SpatialDecayModel | {bands}>"

    def __len__(self):
        return len(self.band_names)

    @property
    def n_bands(self):
        """The number of frequency bands."""
        return len(self.band_names)

    def coherence(self, band, distances):
        """Evaluate the coherence of one band at given distances.

        Parameters
        ----------
        band : int | str
            The band index or name.
        distances : array-like
            The distances.

        Returns
        -------
        coh : ndarray
            The modeled coherence, same shape as ``distances``. Values are not
            clamped.
        """
        if isinstance(band, str):
            _check_option("band", band, self.band_names)
            band = self.band_names.index(band)
        func = _DECAY_FUNCS[self.functions[band]][0]
        return func(self.params[band], np.asarray(distances, float))

    @property
    def hash(self):
        """A hash of the model parameters."""
        return object_hash(self.__getstate__())

    def __getstate__(self):
        return dict(
            band_names=list(self.band_names),
            band_freqs=self.band_freqs,
            functions=list(self.functions),
            params=list(self.params),
        )

    def __setstate__(self, state):
        self.__init__(**state)

    def copy(self):
        """Copy the model.

        Returns
        -------
        model : instance of SpatialDecayModel
            The copied model.
        """
        return deepcopy(self)

    def save(self, fname, *, overwrite=False):
        """Save the model to disk.

        Parameters
        ----------
        fname : path-like
            The filename, should end with ``.h5`` or ``.hdf5``.
        overwrite : bool
            If True, overwrite the destination file if it exists.
        """
        _, write_hdf5 = _import_h5io_funcs()
        fname = _check_fname(fname, overwrite=overwrite)
        write_hdf5(fname, self.__getstate__(), overwrite=overwrite, title="eegsim")


def read_decay_model(fname):
    """Read a spatial decay model from disk.

    Parameters
    ----------
    fname : path-like
        The filename.

    Returns
    -------
    model : instance of SpatialDecayModel
        The model.
    """
    read_hdf5, _ = _import_h5io_funcs()
    fname = _check_fname(fname, overwrite="read", must_exist=True)
    return SpatialDecayModel(**read_hdf5(fname, title="eegsim"))


class NoiseMixing:
    """Per-band mixing matrices of coherent noise.

    Parameters
    ----------
    matrices : list of ndarray, shape (n_sources, n_sources)
        One mixing matrix ``M`` per band, such that ``M.T @ M`` is the band
        coherence matrix.
    band_freqs : array-like of float
        The center frequency (Hz) of each band.
    method : str
        The decomposition used to compute the matrices.
    dist_type : str | None
        The distance type the coherence was computed from.
    mixing_type : str
        The kind of mixing. Only ``'coh'`` is supported.
    """

    def __init__(self, matrices, band_freqs, method, dist_type=None, mixing_type="coh"):
        _check_option("mixing_type", mixing_type, ("coh",))
        self.matrices = [np.asarray(m, float) for m in matrices]
        self.band_freqs = np.array(band_freqs, float).ravel()
        if len(self.matrices) != len(self.band_freqs):
            raise ValueError(
                f"Got {len(self.matrices)} mixing matrices for "
                f"{len(self.band_freqs)} bands"
            )
        self.method = method
        self.dist_type = dist_type
        self.mixing_type = mixing_type

    def __repr__(self):  # noqa: D105
        n_sources = self.n_sources if self.matrices else 0
        return (
            f"<NoiseMixing | {len(self.band_freqs)} bands, {n_sources} sources, "
            f"{self.method}>"
        )

    @property
    def n_sources(self):
        """The number of sources."""
        return self.matrices[0].shape[0]

    def get_band_index(self, freqs):
        """Find the band with the center frequency nearest to each frequency.

        Parameters
        ----------
        freqs : float | array-like of float
            The frequencies (Hz).

        Returns
        -------
        idx : int | ndarray of int
            The band index for each frequency.
        """
        freqs = np.asarray(freqs, float)
        idx = np.argmin(np.abs(freqs[..., np.newaxis] - self.band_freqs), axis=-1)
        return int(idx) if idx.ndim == 0 else idx

    @property
    def alpha_band(self):
        """The index of the band used for alpha noise."""
        return self.get_band_index(_ALPHA_FREQ)

    def __getstate__(self):
        return dict(
            matrices=list(self.matrices),
            band_freqs=self.band_freqs,
            method=self.method,
            dist_type=self.dist_type,
            mixing_type=self.mixing_type,
        )

    def __setstate__(self, state):
        self.__init__(**state)


def _mixing_factor(coh, method, band_name):
    if method == "cholesky":
        try:
            return cholesky_upper(coh)
        except LinAlgError:
            raise LinAlgError(
                f"The coherence matrix of band {band_name} is not positive "
                "definite, use method='eigenvalue' instead"
            ) from None
    w, v = eigh(coh)
    # round-off can give slightly negative eigenvalues for PSD matrices
    tol = 1e-7 * max(np.abs(w).max(), np.finfo(float).tiny)
    w[(w < 0) & (w > -tol)] = 0.0
    sqrt_w = _check_real(
        np.sqrt(w.astype(complex)), f"The mixing matrix of band {band_name}"
    )
    return sqrt_w[:, np.newaxis] * v.T


@verbose
def make_noise_mixing(
    distances, decay_model, method="cholesky", dist_type=None, *, verbose=None
):
    """Compute coherent noise mixing matrices from source distances.

    For each band the coherence matrix ``C`` is obtained by evaluating the
    decay model at the source distances, clamped to [0, 1]. The mixing
    matrix ``M`` satisfies ``M.T @ M == C``.

    Parameters
    ----------
    %(distances)s
    decay_model : instance of SpatialDecayModel
        The coherence decay model.
    method : str
        The decomposition. ``'cholesky'`` gives the upper Cholesky factor and
        requires ``C`` to be positive definite, so it fails on singular
        coherence such as coincident sources (``LinAlgError``).
        ``'eigenvalue'`` gives ``sqrt(D) @ V.T`` from the eigendecomposition
        ``C = V @ D @ V.T`` and also works for positive semi-definite
        matrices.
    dist_type : str | None
        The distance type of ``distances``, stored with the result.
    %(verbose)s

    Returns
    -------
    mixing : instance of NoiseMixing
        The mixing matrices.
    """
    _validate_type(decay_model, SpatialDecayModel, "decay_model")
    _validate_type(method, str, "method")
    if method.lower() not in _DECOMPOSITIONS:
        raise NotImplementedError(
            f"Decomposition method {repr(method)} is not implemented, use one of "
            f"{_DECOMPOSITIONS}"
        )
    method = method.lower()
    distances = np.asarray(distances, float)
    if distances.ndim != 2 or distances.shape[0] != distances.shape[1]:
        raise ValueError(f"distances must be a square matrix, got {distances.shape}")
    logger.info(
        f"Computing {decay_model.n_bands} mixing matrices for "
        f"{len(distances)} sources using {method} decomposition ..."
    )
    matrices = list()
    bands = range(decay_model.n_bands)
    for bi in ProgressBar(bands, mesg="Computing mixing matrices"):
        coh = np.clip(decay_model.coherence(bi, distances), 0.0, 1.0)
        coh = (coh + coh.T) / 2.0
        matrices.append(_mixing_factor(coh, method, decay_model.band_names[bi]))
    return NoiseMixing(matrices, decay_model.band_freqs, method, dist_type)

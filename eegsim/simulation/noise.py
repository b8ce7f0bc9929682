"""Synthesis of spatially coherent background noise."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np

from ..utils import (
    _check_option,
    _ensure_int,
    _validate_type,
    check_random_state,
    fill_doc,
    logger,
    sum_squared,
    verbose,
    warn,
)
from .mixing import NoiseMixing

_NORMALIZATIONS = ("all_nodes", "active_nodes")
_ALPHA_BAND = (8.0, 12.0)


@fill_doc
def normalize_power(data, spatial_normalization="all_nodes"):
    """Scale source activity according to a normalization policy.

    Parameters
    ----------
    data : ndarray, shape (n_samples, n_sources)
        The source activity.
    %(spatial_normalization)s

    Returns
    -------
    data : ndarray, shape (n_samples, n_sources)
        The scaled activity. All-zero input is returned unchanged.
    """
    _check_option("spatial_normalization", spatial_normalization, _NORMALIZATIONS)
    data = np.asarray(data, float)
    norm = np.sqrt(sum_squared(data))
    if norm == 0:
        warn("The source activity is zero everywhere and cannot be normalized")
        return data
    data = data / norm
    if spatial_normalization == "active_nodes":
        n_active = np.count_nonzero((data**2).sum(axis=0))
        data *= n_active
    return data


def _mu_weights(mu):
    if np.isinf(mu):
        return 1.0, 0.0
    return np.sqrt(mu / (1.0 + mu)), np.sqrt(1.0 / (1.0 + mu))


def _unit_norm(data):
    norm = np.linalg.norm(data)
    return data / norm if norm > 0 else data


def _check_alpha_sources(alpha_sources, n_sources):
    if alpha_sources is None or (
        isinstance(alpha_sources, str) and alpha_sources == "all"
    ):
        return np.arange(n_sources)
    alpha_sources = np.asarray(alpha_sources)
    if alpha_sources.dtype == bool:
        if alpha_sources.shape != (n_sources,):
            raise ValueError(
                f"Boolean alpha_sources must have shape ({n_sources},), got "
                f"{alpha_sources.shape}"
            )
        return np.where(alpha_sources)[0]
    alpha_sources = np.unique(alpha_sources.astype(int))
    if len(alpha_sources) and (
        alpha_sources[0] < 0 or alpha_sources[-1] >= n_sources
    ):
        raise ValueError(
            f"alpha_sources must be between 0 and {n_sources - 1}, got values "
            f"between {alpha_sources[0]} and {alpha_sources[-1]}"
        )
    return alpha_sources


def _mix_spectrum(spec, freqs, mixing):
    """Mix each frequency bin with the matrix of the nearest band."""
    band_idx = mixing.get_band_index(freqs)
    out = np.empty_like(spec)
    for bi, mat in enumerate(mixing.matrices):
        mask = band_idx == bi
        out[mask] = spec[mask] @ mat
    return out


def _pink_noise(sfreq, n_samples, n_sources, mixing, rng):
    white = rng.standard_normal((n_samples, n_sources))
    spec = np.fft.rfft(white, axis=0)
    freqs = np.fft.rfftfreq(n_samples, 1.0 / sfreq)
    # 1/f power, so amplitudes go with 1/sqrt(f)
    scale = np.zeros(len(freqs))
    scale[1:] = 1.0 / np.sqrt(freqs[1:])
    spec *= scale[:, np.newaxis]
    if mixing is not None:
        spec = _mix_spectrum(spec, freqs, mixing)
    return np.fft.irfft(spec, n=n_samples, axis=0)


def _has_alpha_bins(sfreq, n_samples):
    freqs = np.fft.rfftfreq(n_samples, 1.0 / sfreq)
    return bool(((freqs >= _ALPHA_BAND[0]) & (freqs <= _ALPHA_BAND[1])).any())


def _alpha_noise(sfreq, n_samples, n_sources, alpha_sources, mixing, rng):
    alpha = np.zeros((n_samples, n_sources))
    if len(alpha_sources) == 0:
        return alpha
    # with mixing, the seeds live in the input space of the mixing matrix and
    # its alpha columns give the coherence among alpha sources only
    n_seeds = n_sources if mixing is not None else len(alpha_sources)
    white = rng.standard_normal((n_samples, n_seeds))
    spec = np.fft.rfft(white, axis=0)
    freqs = np.fft.rfftfreq(n_samples, 1.0 / sfreq)
    spec[(freqs < _ALPHA_BAND[0]) | (freqs > _ALPHA_BAND[1])] = 0.0
    if mixing is not None:
        mat = mixing.matrices[mixing.alpha_band]
        spec = spec @ mat[:, alpha_sources]
    alpha[:, alpha_sources] = np.fft.irfft(spec, n=n_samples, axis=0)
    return alpha


@verbose
def generate_noise(
    sfreq,
    n_samples,
    n_sources,
    mu=1.0,
    alpha_sources=None,
    mixing=None,
    spatial_normalization="all_nodes",
    random_state=None,
    *,
    verbose=None,
):
    """Generate background noise made of pink and alpha components.

    Pink noise has a 1/f power spectrum and is present on all sources. Alpha
    noise is band-limited to 8-12 Hz and only present on ``alpha_sources``.
    When ``mixing`` is given, each frequency bin is spatially mixed with the
    matrix of the band whose center frequency is nearest, so the noise
    coherence between sources follows the decay model.

    Parameters
    ----------
    %(sfreq)s
    n_samples : int
        The number of time samples.
    n_sources : int
        The number of sources.
    %(mu)s
    alpha_sources : array-like of int | array-like of bool | 'all' | None
        The sources that carry alpha noise. None and ``'all'`` use all
        sources.
    mixing : instance of NoiseMixing | None
        The coherence mixing matrices. If None, the noise is independent
        across sources.
    %(spatial_normalization)s
    %(random_state)s
    %(verbose)s

    Returns
    -------
    noise : ndarray, shape (n_samples, n_sources)
        The normalized noise,
        ``sqrt(mu / (1 + mu)) * alpha + sqrt(1 / (1 + mu)) * pink``.
    pink : ndarray, shape (n_samples, n_sources)
        The pink component, with unit Frobenius norm.
    alpha : ndarray, shape (n_samples, n_sources)
        The alpha component, with unit Frobenius norm (zero if there are no
        alpha sources or the trial is too short to resolve 8-12 Hz).
    """
    _validate_type(sfreq, "numeric", "sfreq")
    if sfreq <= 0:
        raise ValueError(f"sfreq must be positive, got {sfreq}")
    n_samples = _ensure_int(n_samples, "n_samples")
    n_sources = _ensure_int(n_sources, "n_sources")
    _validate_type(mu, "numeric", "mu")
    if mu < 0:
        raise ValueError(f"mu must be non-negative, got {mu}")
    _check_option("spatial_normalization", spatial_normalization, _NORMALIZATIONS)
    _validate_type(mixing, (NoiseMixing, None), "mixing")
    if mixing is not None and mixing.n_sources != n_sources:
        raise ValueError(
            f"The mixing matrices have {mixing.n_sources} sources but "
            f"n_sources is {n_sources}"
        )
    alpha_sources = _check_alpha_sources(alpha_sources, n_sources)
    if len(alpha_sources) == 0 and mu > 0:
        warn("There are no alpha sources, the noise will only contain pink noise")
    elif mu > 0 and not _has_alpha_bins(sfreq, n_samples):
        warn(
            f"No frequency bin of {n_samples} samples at {sfreq} Hz falls in the "
            f"alpha band ({_ALPHA_BAND[0]}-{_ALPHA_BAND[1]} Hz), the noise will "
            "only contain pink noise"
        )
    rng = check_random_state(random_state)
    logger.info(
        f"Generating {n_samples} samples of noise for {n_sources} sources "
        f"({len(alpha_sources)} with alpha, mu={mu}) ..."
    )

    pink = _unit_norm(_pink_noise(sfreq, n_samples, n_sources, mixing, rng))
    alpha = _unit_norm(
        _alpha_noise(sfreq, n_samples, n_sources, alpha_sources, mixing, rng)
    )
    w_alpha, w_pink = _mu_weights(mu)
    noise = w_alpha * alpha + w_pink * pink
    noise = normalize_power(noise, spatial_normalization)
    return noise, pink, alpha


@verbose
def generate_noise_trials(
    sfreq,
    n_samples,
    n_sources,
    n_trials,
    mu=1.0,
    alpha_sources=None,
    mixing=None,
    spatial_normalization="all_nodes",
    random_state=None,
    *,
    verbose=None,
):
    """Generate independent noise trials.

    Parameters
    ----------
    %(sfreq)s
    n_samples : int
        The number of time samples.
    n_sources : int
        The number of sources.
    n_trials : int
        The number of trials.
    %(mu)s
    alpha_sources : array-like of int | array-like of bool | 'all' | None
        The sources that carry alpha noise.
    mixing : instance of NoiseMixing | None
        The coherence mixing matrices.
    %(spatial_normalization)s
    %(random_state)s
    %(verbose)s

    Returns
    -------
    noise : ndarray, shape (n_samples, n_sources, n_trials)
        The noise of each trial, normalized per trial.

    See Also
    --------
    generate_noise
    """
    n_trials = _ensure_int(n_trials, "n_trials")
    if n_trials < 1:
        raise ValueError(f"n_trials must be at least 1, got {n_trials}")
    rng = check_random_state(random_state)
    noise = np.empty((_ensure_int(n_samples), _ensure_int(n_sources), n_trials))
    for ti in range(n_trials):
        noise[:, :, ti] = generate_noise(
            sfreq,
            n_samples,
            n_sources,
            mu,
            alpha_sources,
            mixing,
            spatial_normalization,
            rng,
            verbose=False,
        )[0]
    return noise

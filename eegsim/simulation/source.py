# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np

from ..region import _check_regions
from ..surface import _check_mesh
from ..utils import _pl, _validate_type, logger, verbose, warn
from .noise import normalize_power
from .spatial import compute_spatial_weights


def _snr_weights(lambda_):
    _validate_type(lambda_, "numeric", "lambda_")
    if lambda_ < 0:
        raise ValueError(f"lambda_ must be non-negative, got {lambda_}")
    if np.isinf(lambda_):
        return 1.0, 0.0
    return lambda_ / (lambda_ + 1.0), 1.0 / (lambda_ + 1.0)


@verbose
def compose_source_signal(
    regions,
    fwd,
    mesh,
    signal,
    noise,
    lambda_,
    spatial_normalization="all_nodes",
    n_vertices=None,
    spatial_profile="uniform",
    dist_type="geodesic",
    *,
    verbose=None,
):
    """Place seed signals in regions, add noise and project to the sensors.

    Parameters
    ----------
    %(regions)s
    %(fwd)s
    %(mesh)s
    signal : ndarray, shape (n_samples, n_regions)
        The seed waveform of each region.
    noise : ndarray, shape (n_samples, n_sources[, n_trials])
        The source noise, for instance from
        :func:`eegsim.simulation.generate_noise_trials`.
    lambda_ : float
        The signal-to-noise ratio. The source activity is
        ``lambda_ / (lambda_ + 1) * signal + 1 / (lambda_ + 1) * noise``,
        so ``np.inf`` gives pure signal and ``0`` pure noise.
    %(spatial_normalization)s
    %(n_vertices_roi)s
    %(spatial_profile)s
    %(dist_type)s
    %(verbose)s

    Returns
    -------
    eeg : ndarray, shape (n_samples, n_sensors[, n_trials]) | None
        The sensor data, None if the regions cannot be used.
    source : ndarray, shape (n_samples, n_sources[, n_trials]) | None
        The source activity, with unit Frobenius norm in each trial.
    roi_vertices : list of ndarray | None
        The vertices of each resized region.

    Notes
    -----
    Signal and noise are each normalized before they are combined, but
    they are only uncorrelated on average, so the sum is normalized again.
    The resulting power ratio only approximates ``lambda_``.
    """
    regions = _check_regions(regions)
    if len(regions) == 0:
        warn("No regions were given, no source signal can be composed")
        return None, None, None
    signal = np.asarray(signal, float)
    if signal.ndim == 1:
        signal = signal[:, np.newaxis]
    if len(regions) != signal.shape[1]:
        warn(
            f"The number of regions ({len(regions)}) does not match the number "
            f"of seed signals ({signal.shape[1]}), no source signal can be "
            "composed"
        )
        return None, None, None
    w_signal, w_noise = _snr_weights(lambda_)
    mesh = _check_mesh(mesh)
    fwd = np.asarray(fwd, float)
    if fwd.ndim != 2 or fwd.shape[1] != mesh["np"]:
        raise ValueError(
            f"The forward matrix must have shape (n_sensors, {mesh['np']}), got "
            f"{fwd.shape}"
        )
    noise = np.asarray(noise, float)
    squeeze = noise.ndim == 2
    if squeeze:
        noise = noise[..., np.newaxis]
    if noise.ndim != 3 or noise.shape[:2] != (len(signal), mesh["np"]):
        raise ValueError(
            f"noise must have shape ({len(signal)}, {mesh['np']}[, n_trials]), "
            f"got {noise.shape if not squeeze else noise.shape[:2]}"
        )
    logger.info(
        f"Composing source activity from {len(regions)} "
        f"region{_pl(regions)} and {noise.shape[2]} noise trial"
        f"{_pl(noise.shape[2])} ..."
    )

    weights, roi_vertices = compute_spatial_weights(
        regions, mesh, n_vertices, spatial_profile, dist_type
    )
    # outer product of each seed waveform with its weights, summed over seeds
    source_signal = normalize_power(signal @ weights.T, spatial_normalization)
    source = w_signal * source_signal[..., np.newaxis] + w_noise * noise
    norms = np.linalg.norm(source, axis=(0, 1))
    norms[norms == 0] = 1.0
    source /= norms
    eeg = np.einsum("tsk,cs->tck", source, fwd)
    if squeeze:
        eeg, source = eeg[..., 0], source[..., 0]
    return eeg, source, roi_vertices

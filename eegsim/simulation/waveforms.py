# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np

from ..utils import (
    _check_option,
    _check_range,
    _ensure_int,
    check_random_state,
    fill_doc,
    logger,
)


def get_waveform(waveform):
    """Check waveform exists and return the callable.

    Parameters
    ----------
    waveform : str | callable
        If str, must be one of the known waveforms: ``'sin'``, ``'ssvep'``.

    Returns
    -------
    func : callable
        The waveform function, called as ``func(times, freq=freq)``.
    """
    known_waveforms = {
        "sin": waveform_sin,
        "ssvep": waveform_ssvep,
    }
    if callable(waveform):
        return waveform
    if isinstance(waveform, str):
        _check_option("waveform", waveform.lower(), known_waveforms)
        return known_waveforms[waveform.lower()]
    raise TypeError(
        "Unrecognised type. Accepted inputs: str, callable. "
        f"List of accepted str: {', '.join(known_waveforms)}."
    )


def waveform_sin(times, amplitude=1.0, freq=10.0, phase=0.0):
    """Generate a sinusoid waveform.

    Parameters
    ----------
    times : array
        Array of times.
    amplitude : float
        Amplitude of the sinusoid.
    freq : float
        Ordinary frequency of the sinusoid.
    phase : float
        Phase of the sinusoid.

    Returns
    -------
    wave : array
        The waveform.
    """
    return amplitude * np.sin(2.0 * np.pi * freq * times + phase)


def waveform_ssvep(times, freq=5.0, n_harmonics=4, phases=None):
    """Generate a steady-state evoked response.

    The response is a sum of the first harmonics of the stimulation
    frequency, harmonic ``k`` having an amplitude of ``1 / k``.

    Parameters
    ----------
    times : array
        Array of times.
    freq : float
        The fundamental (stimulation) frequency.
    n_harmonics : int
        The number of harmonics, including the fundamental.
    phases : array-like, shape (n_harmonics,) | None
        The phase of each harmonic. None uses zero phases.

    Returns
    -------
    wave : array
        The waveform.
    """
    n_harmonics = _ensure_int(n_harmonics, "n_harmonics")
    phases = np.zeros(n_harmonics) if phases is None else np.asarray(phases, float)
    wave = np.zeros(np.shape(times))
    for k in range(1, n_harmonics + 1):
        wave += waveform_sin(times, 1.0 / k, k * freq, phases[k - 1])
    return wave


@fill_doc
def make_seed_signals(
    n_seeds,
    sfreq=100.0,
    duration=2.0,
    waveform="ssvep",
    freqs=None,
    random_state=None,
):
    """Generate default seed signals, one per region.

    Parameters
    ----------
    n_seeds : int
        The number of seed signals.
    %(sfreq)s
    duration : float
        The duration of the signals in seconds.
    waveform : str | callable
        The waveform, see :func:`get_waveform`.
    freqs : array-like, shape (n_seeds,) | None
        The fundamental frequency of each seed. None draws random integer
        frequencies between 3 and 6 Hz.
    %(random_state)s

    Returns
    -------
    signal : ndarray, shape (n_samples, n_seeds)
        The seed signals.
    freqs : ndarray, shape (n_seeds,)
        The fundamental frequencies.
    sfreq : float
        The sampling frequency.
    """
    n_seeds = _ensure_int(n_seeds, "n_seeds")
    _check_range(duration, 0, np.inf, "duration", min_inclusive=False)
    func = get_waveform(waveform)
    rng = check_random_state(random_state)
    if freqs is None:
        freqs = np.round(rng.uniform(size=n_seeds) * 3 + 3)
    freqs = np.array(freqs, float).ravel()
    if len(freqs) != n_seeds:
        raise ValueError(f"Need {n_seeds} frequencies, got {len(freqs)}")
    times = np.arange(int(round(duration * sfreq))) / float(sfreq)
    logger.info(f"Generating {n_seeds} seed signals at {freqs} Hz")
    signal = np.array([func(times, freq=freq) for freq in freqs]).T
    return signal.reshape(len(times), n_seeds), freqs, float(sfreq)

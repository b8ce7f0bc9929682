"""Simulation of EEG for all subjects of a project."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import numpy as np

from ..cache import ArtifactCache
from ..region import RegionSet
from ..surface import _check_mesh, compute_source_distances
from ..utils import (
    _check_fname,
    _import_h5io_funcs,
    _pl,
    _validate_type,
    check_random_state,
    logger,
    verbose,
    warn,
)
from .mixing import NoiseMixing, SpatialDecayModel, make_noise_mixing
from .noise import generate_noise_trials
from .params import SimulationConfig
from .source import compose_source_signal
from .waveforms import make_seed_signals

# number of seed signals drawn when neither signals nor regions are given
_N_DEFAULT_SEEDS = 2


def _strip_session(subject):
    """Remove the session suffix (``_ssn...``) from a subject id."""
    idx = subject.find("_ssn")
    return subject if idx < 0 else subject[:idx]


class SubjectSimulation:
    """The simulation of one subject.

    Parameters
    ----------
    subject : str
        The subject id.
    eeg : ndarray, shape (n_samples, n_sensors, n_trials) | None
        The simulated sensor data.
    source : ndarray, shape (n_samples, n_sources, n_trials) | None
        The simulated source activity.
    roi_vertices : list of ndarray | None
        The vertices of each resized seed region.
    region_names : list of str | None
        The full names of the seed regions.
    skipped : bool
        Whether the subject was skipped.
    reason : str | None
        Why the subject was skipped.
    """

    def __init__(
        self,
        subject,
        eeg=None,
        source=None,
        roi_vertices=None,
        region_names=None,
        skipped=False,
        reason=None,
    ):
        self.subject = subject
        self.eeg = eeg
        self.source = source
        self.roi_vertices = roi_vertices
        self.region_names = region_names
        self.skipped = skipped
        self.reason = reason

    def __repr__(self):  # noqa: D105
        if self.skipped:
            return f"<SubjectSimulation | {self.subject}, skipped: {self.reason}>"
        n_samples, n_sensors, n_trials = self.eeg.shape
        return (
            f"<SubjectSimulation | {self.subject}, {n_sensors} sensors, "
            f"{n_samples} samples, {n_trials} trial{_pl(n_trials)}>"
        )

    def __getstate__(self):
        return dict(
            subject=self.subject,
            eeg=self.eeg,
            source=self.source,
            roi_vertices=self.roi_vertices,
            region_names=self.region_names,
            skipped=self.skipped,
            reason=self.reason,
        )

    def __setstate__(self, state):
        self.__init__(**state)


class ProjectSimulation:
    """The simulations of all subjects of a project.

    Parameters
    ----------
    subjects : dict
        Subject id -> :class:`SubjectSimulation`, in processing order.
    region_names : list of str
        The full names of the seed regions, in the order of the seed
        signals.
    signal : ndarray, shape (n_samples, n_seeds) | None
        The seed signals.
    sfreq : float | None
        The sampling frequency.
    freqs : ndarray, shape (n_seeds,) | None
        The fundamental frequencies of generated SSVEP seed signals, None
        when the seed signals were given.
    """

    def __init__(self, subjects, region_names, signal=None, sfreq=None, freqs=None):
        self.subjects = dict(subjects)
        self.region_names = list(region_names)
        self.signal = signal
        self.sfreq = sfreq
        self.freqs = freqs

    def __repr__(self):  # noqa: D105
        n_ok = len(self.simulated)
        return (
            f"<ProjectSimulation | {n_ok}/{len(self)} subject{_pl(self)} "
            f"simulated, {len(self.region_names)} seed "
            f"region{_pl(self.region_names)}>"
        )

    def __len__(self):
        return len(self.subjects)

    def __iter__(self):
        return iter(self.subjects)

    def __getitem__(self, subject):
        return self.subjects[subject]

    @property
    def simulated(self):
        """The ids of the subjects that were not skipped."""
        return [s for s, sim in self.subjects.items() if not sim.skipped]

    def __getstate__(self):
        return dict(
            subjects={s: sim.__getstate__() for s, sim in self.subjects.items()},
            order=list(self.subjects),
            region_names=self.region_names,
            signal=self.signal,
            sfreq=self.sfreq,
            freqs=self.freqs,
        )

    def save(self, fname, *, overwrite=False):
        """Save the simulations to disk.

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


def read_project_simulation(fname):
    """Read project simulations from disk.

    Parameters
    ----------
    fname : path-like
        The filename.

    Returns
    -------
    sim : instance of ProjectSimulation
        The simulations.
    """
    read_hdf5, _ = _import_h5io_funcs()
    fname = _check_fname(fname, overwrite="read", must_exist=True)
    state = read_hdf5(fname, title="eegsim")
    subjects = {
        subject: SubjectSimulation(**state["subjects"][subject])
        for subject in state["order"]
    }
    return ProjectSimulation(
        subjects,
        state["region_names"],
        state["signal"],
        state["sfreq"],
        state.get("freqs"),
    )


def _check_region_sets(rois):
    """Make the region sets of all subjects consistent.

    Returns the region sets reordered by the master name list (the names of
    the largest set), the master list and the subjects that were removed
    because they lack regions.
    """
    if isinstance(rois, RegionSet):
        rois = [rois]
    if not isinstance(rois, dict):
        rois = list(rois)
        for ri, regions in enumerate(rois):
            _validate_type(regions, RegionSet, f"rois[{ri}]")
            if regions.subject is None:
                raise ValueError(f"rois[{ri}] has no subject")
        rois = {regions.subject: regions for regions in rois}
    rois = {_strip_session(subject): regions for subject, regions in rois.items()}
    removed = list()
    for subject, regions in rois.items():
        _validate_type(regions, RegionSet, f"rois[{repr(subject)}]")
        if regions.n_regions == 0:
            warn(f"No regions were given for subject {subject}, it is skipped")
            removed.append(subject)
    rois = {s: r for s, r in rois.items() if s not in removed}
    if not rois:
        warn("None of the subjects has regions, nothing can be simulated")
        return dict(), list(), removed
    master = max(rois.values(), key=lambda regions: regions.n_regions).full_names
    out = dict()
    for subject, regions in rois.items():
        regions = regions.reorder(master)
        if regions.n_regions != len(master):
            warn(
                f"Subject {subject} only has {regions.n_regions} of the "
                f"{len(master)} seed regions, it is skipped"
            )
            removed.append(subject)
            continue
        out[subject] = regions
    logger.info(f"Seed regions: {', '.join(master)}")
    return out, master, removed


class ProjectSimulator:
    """Simulate EEG for the subjects of a project.

    Parameters
    ----------
    config : instance of SimulationConfig | None
        The simulation options. None uses the defaults.
    forward_provider : callable
        Called as ``forward_provider(subject)``, returns the forward matrix
        of the subject, shape (n_sensors, n_sources).
    mesh_provider : callable
        Called as ``mesh_provider(subject)``, returns the cortical mesh of
        the subject (see :func:`eegsim.surface.make_mesh`).
    roi_provider : callable
        Called as ``roi_provider(subject, atlas)``, returns the
        :class:`~eegsim.RegionSet` of an atlas for the subject (possibly
        empty).
    decay_model : instance of SpatialDecayModel
        The spatial decay of coherence used for the noise.
    cache : instance of ArtifactCache | None
        Where forward matrices and mixing matrices are cached. None creates
        a cache in ``config.cache_dir``.

    Notes
    -----
    Subjects are processed one after the other. Errors raised by the
    providers with missing data (``OSError`` and ``KeyError``) skip the
    subject with a warning, the other subjects are still simulated.
    """

    def __init__(
        self,
        config=None,
        forward_provider=None,
        mesh_provider=None,
        roi_provider=None,
        decay_model=None,
        cache=None,
    ):
        _validate_type(config, (SimulationConfig, None), "config")
        for name, provider in (
            ("forward_provider", forward_provider),
            ("mesh_provider", mesh_provider),
            ("roi_provider", roi_provider),
        ):
            _validate_type(provider, "callable", name)
        _validate_type(decay_model, SpatialDecayModel, "decay_model")
        _validate_type(cache, (ArtifactCache, None), "cache")
        self.config = SimulationConfig() if config is None else config
        self.forward_provider = forward_provider
        self.mesh_provider = mesh_provider
        self.roi_provider = roi_provider
        self.decay_model = decay_model
        self.cache = ArtifactCache(self.config.cache_dir) if cache is None else cache

    def __repr__(self):  # noqa: D105
        return f"<ProjectSimulator | {self.config}>"

    @verbose
    def run(self, subjects, signal=None, rois=None, random_state=None, *, verbose=None):
        """Simulate all subjects.

        Parameters
        ----------
        subjects : list of str
            The subject ids. Session suffixes (``_ssn...``) are removed and
            repeated subjects are only simulated once.
        signal : ndarray, shape (n_samples, n_seeds) | None
            The seed signals, sampled at ``config.sfreq``. If None, SSVEP-like
            signals are generated, one per seed region.
        rois : dict | list of RegionSet | None
            The seed regions of each subject (subject id -> RegionSet). If
            None, ``n_seeds`` regions of ``config.atlas`` are drawn at random
            for the first subject and the same regions are used for every
            subject. Regions are matched by full name (``name_hemi``), not by
            position in the atlas, and subjects lacking one of them are
            skipped.
        %(random_state)s
        %(verbose)s

        Returns
        -------
        sim : instance of ProjectSimulation
            The simulations.
        """
        _validate_type(subjects, (list, tuple), "subjects")
        rng = check_random_state(random_state)
        config = self.config
        removed = list()
        master = None
        if rois is not None:
            rois, master, removed = _check_region_sets(rois)
            if not master:
                return ProjectSimulation(dict(), list(), signal, config.sfreq)
        freqs = None
        if signal is None:
            n_seeds = _N_DEFAULT_SEEDS if master is None else len(master)
            signal, freqs, _ = make_seed_signals(
                n_seeds, config.sfreq, random_state=rng
            )
        signal = np.asarray(signal, float)
        if signal.ndim == 1:
            signal = signal[:, np.newaxis]
        if master is not None and len(master) != signal.shape[1]:
            raise ValueError(
                f"Got {len(master)} seed regions but {signal.shape[1]} seed "
                "signals"
            )
        # indices of the randomly drawn regions, set by the first subject
        random_idx = None
        out = dict()
        for subject in subjects:
            _validate_type(subject, str, "subject")
            subject_id = _strip_session(subject)
            if subject_id in out:
                logger.info(f"EEG for subject {subject_id} was already simulated")
                continue
            logger.info(f"Simulating EEG for subject {subject_id}")
            if subject_id in removed:
                out[subject_id] = self._skip(
                    subject_id, "the seed regions cannot be found"
                )
                continue
            try:
                if rois is not None:
                    if subject_id not in rois:
                        out[subject_id] = self._skip(
                            subject_id, "no seed regions were given"
                        )
                        continue
                    regions = rois[subject_id]
                else:
                    regions = self._get_region_set(subject_id, config.atlas)
                    if random_idx is None:
                        if regions.n_regions < signal.shape[1]:
                            out[subject_id] = self._skip(
                                subject_id,
                                f"only {regions.n_regions} {config.atlas} regions "
                                f"for {signal.shape[1]} seed signals",
                            )
                            continue
                        random_idx = rng.permutation(regions.n_regions)[
                            : signal.shape[1]
                        ]
                        master = regions.select(random_idx).full_names
                        logger.info(f"Seed regions: {', '.join(master)}")
                    regions = regions.reorder(master)
                    if regions.n_regions != len(master):
                        out[subject_id] = self._skip(
                            subject_id, "the seed regions cannot be found"
                        )
                        continue
                out[subject_id] = self._simulate_subject(
                    subject_id, regions, signal, rng
                )
            except (OSError, KeyError) as exp:
                out[subject_id] = self._skip(
                    subject_id, f"data could not be loaded ({exp})"
                )
        n_ok = sum(not sim.skipped for sim in out.values())
        logger.info(f"Simulated {n_ok}/{len(out)} subject{_pl(out)}")
        return ProjectSimulation(
            out, list() if master is None else master, signal, config.sfreq, freqs
        )

    def _skip(self, subject, reason):
        warn(f"Skipping subject {subject}: {reason}")
        return SubjectSimulation(subject, skipped=True, reason=reason)

    def _get_region_set(self, subject, atlas):
        regions = self.roi_provider(subject, atlas)
        _validate_type(regions, RegionSet, "regions", extra="from roi_provider")
        return regions

    def _get_forward(self, subject):
        return self.cache.get_or_compute(
            subject,
            "forward",
            lambda: np.asarray(self.forward_provider(subject), float),
        )

    def _get_mixing(self, subject, mesh):
        noise = self.config.noise
        params = dict(
            dist_type=noise.dist_type,
            method=noise.decomposition,
            decay_model=self.decay_model.hash,
            n_sources=mesh["np"],
        )

        def _compute():
            distances = compute_source_distances(mesh, noise.dist_type)
            mixing = make_noise_mixing(
                distances, self.decay_model, noise.decomposition, noise.dist_type
            )
            return mixing.__getstate__()

        state = self.cache.get_or_compute(subject, "mixing", _compute, params)
        return NoiseMixing(**state)

    def _simulate_subject(self, subject, regions, signal, rng):
        config = self.config
        noise_params = config.noise
        alpha_regions = self._get_region_set(subject, config.alpha_atlas)
        if alpha_regions.n_regions == 0:
            return self._skip(
                subject, f"there are no {config.alpha_atlas} regions for alpha noise"
            )
        mesh = _check_mesh(self.mesh_provider(subject))
        fwd = self._get_forward(subject)
        if fwd.ndim != 2 or fwd.shape[1] != mesh["np"]:
            return self._skip(
                subject,
                f"the forward matrix has shape {fwd.shape} but the mesh has "
                f"{mesh['np']} sources",
            )
        mixing = self._get_mixing(subject, mesh)
        alpha_sources = np.where(alpha_regions.to_matrix(mesh["np"]).any(axis=1))[0]
        noise = generate_noise_trials(
            config.sfreq,
            len(signal),
            mesh["np"],
            config.n_trials,
            noise_params.mu,
            alpha_sources,
            mixing,
            noise_params.spatial_normalization,
            rng,
        )
        eeg, source, roi_vertices = compose_source_signal(
            regions,
            fwd,
            mesh,
            signal,
            noise,
            noise_params.get_lambda(len(signal)),
            noise_params.spatial_normalization,
            config.n_vertices,
            config.spatial_profile,
            config.resize_dist_type,
        )
        if eeg is None:
            return self._skip(subject, "the source signal could not be composed")
        return SubjectSimulation(
            subject,
            eeg,
            source if config.keep_source else None,
            roi_vertices,
            regions.full_names,
        )

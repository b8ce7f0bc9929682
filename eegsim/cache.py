"""Memoization of expensive per-subject artifacts."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

from pathlib import Path

from .utils import (
    _import_h5io_funcs,
    _validate_type,
    logger,
    object_hash,
)


class ArtifactCache:
    """Cache of derived artifacts keyed by subject, kind and parameters.

    Parameters
    ----------
    path : path-like | None
        The directory artifacts are written to as HDF5 files. If None,
        artifacts are only kept in memory.

    Notes
    -----
    Artifacts are stored under a key built from the subject, the artifact
    kind (for instance ``'forward'`` or ``'mixing'``) and a hash of the
    parameters they were computed with, so changing any parameter gives a
    new entry. Artifacts must be made of arrays, numbers, strings and nested
    lists or dicts of these.
    """

    def __init__(self, path=None):
        _validate_type(path, ("path-like", None), "path")
        if path is not None:
            path = Path(path).expanduser().absolute()
            path.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._memory = dict()

    def __repr__(self):  # noqa: D105
        where = "memory" if self.path is None else str(self.path)
        return f"<ArtifactCache | {where}, {len(self._memory)} loaded>"

    @staticmethod
    def _key(subject, kind, params):
        _validate_type(subject, str, "subject")
        _validate_type(kind, str, "kind")
        return f"{kind}-{subject}-{object_hash(params):032x}"

    def _fname(self, key):
        return self.path / f"{key}.h5"

    def get(self, subject, kind, params=None, default=None):
        """Get an artifact.

        Parameters
        ----------
        subject : str
            The subject.
        kind : str
            The artifact kind.
        params : dict | None
            The parameters the artifact was computed with.
        default : object
            Returned when the artifact is not cached.

        Returns
        -------
        data : object
            The artifact, or ``default``.
        """
        key = self._key(subject, kind, params)
        if key in self._memory:
            return self._memory[key]
        if self.path is not None and self._fname(key).is_file():
            read_hdf5, _ = _import_h5io_funcs()
            logger.info(f"    Reading cached {kind} for {subject}")
            data = read_hdf5(self._fname(key), title="eegsim")["data"]
            self._memory[key] = data
            return data
        return default

    def put(self, subject, kind, data, params=None):
        """Store an artifact.

        Parameters
        ----------
        subject : str
            The subject.
        kind : str
            The artifact kind.
        data : object
            The artifact.
        params : dict | None
            The parameters the artifact was computed with.
        """
        key = self._key(subject, kind, params)
        self._memory[key] = data
        if self.path is not None:
            _, write_hdf5 = _import_h5io_funcs()
            logger.info(f"    Writing {kind} for {subject} to the cache")
            write_hdf5(
                self._fname(key),
                dict(subject=subject, kind=kind, data=data),
                overwrite=True,
                title="eegsim",
            )

    def get_or_compute(self, subject, kind, compute, params=None):
        """Get an artifact, computing and storing it if it is not cached.

        Parameters
        ----------
        subject : str
            The subject.
        kind : str
            The artifact kind.
        compute : callable
            Called without arguments to compute the artifact.
        params : dict | None
            The parameters the artifact is computed with.

        Returns
        -------
        data : object
            The artifact.
        """
        _validate_type(compute, "callable", "compute")
        sentinel = object()
        data = self.get(subject, kind, params, default=sentinel)
        if data is sentinel:
            logger.debug(f"    No cached {kind} for {subject}, computing it")
            data = compute()
            self.put(subject, kind, data, params)
        return data

    def invalidate(self, subject=None, kind=None):
        """Remove cached artifacts.

        Parameters
        ----------
        subject : str | None
            Only remove artifacts of this subject. None removes all subjects.
        kind : str | None
            Only remove artifacts of this kind. None removes all kinds.

        Returns
        -------
        n_removed : int
            The number of removed entries (in memory and on disk).
        """

        def _match(key):
            key_kind, rest = key.split("-", 1)
            key_subject = rest.rsplit("-", 1)[0]
            return (kind is None or key_kind == kind) and (
                subject is None or key_subject == subject
            )

        n_removed = 0
        for key in [key for key in self._memory if _match(key)]:
            del self._memory[key]
            n_removed += 1
        if self.path is not None:
            for fname in self.path.glob("*-*-*.h5"):
                if _match(fname.stem):
                    fname.unlink()
                    n_removed += 1
        logger.info(f"Removed {n_removed} cached artifact(s)")
        return n_removed

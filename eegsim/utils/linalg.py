"""Utility functions for symmetric matrix factorizations.

Mixing matrices are computed once per frequency band on matrices that are
n_sources x n_sources, so inputs are made Fortran contiguous before they are
handed to LAPACK to avoid an extra copy.
"""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import functools

import numpy as np
from scipy import linalg


@functools.lru_cache(None)
def _get_evd(dtype):
    x = np.empty(0, dtype)
    if dtype == np.float64:
        driver = "syevd"
    else:
        assert dtype == np.complex128
        driver = "heevd"
    (evr,) = linalg.get_lapack_funcs((driver,), (x,))
    return evr, driver


def eigh(a, overwrite_a=False, check_finite=True):
    """Efficient wrapper for eigh.

    Parameters
    ----------
    a : ndarray, shape (n_components, n_components)
        The symmetric array operate on.
    overwrite_a : bool
        If True, the contents of a can be overwritten for efficiency.
    check_finite : bool
        If True, check that all elements are finite.

    Returns
    -------
    w : ndarray, shape (n_components,)
        The N eigenvalues, in ascending order, each repeated according to
        its multiplicity.
    v : ndarray, shape (n_components, n_components)
        The normalized eigenvector corresponding to the eigenvalue ``w[i]``
        is the column ``v[:, i]``.
    """
    # We use SYEVD, see https://github.com/scipy/scipy/issues/9212
    if check_finite:
        a = np.asarray_chkfinite(a)
    a = np.asfortranarray(a, dtype=np.complex128 if np.iscomplexobj(a) else np.float64)
    evd, driver = _get_evd(a.dtype.type)
    w, v, info = evd(a, lower=1, overwrite_a=overwrite_a)
    if info == 0:
        return w, v
    if info < 0:
        raise ValueError(f"illegal value in argument {-info} of internal {driver}")
    else:
        raise linalg.LinAlgError(
            "internal fortran routine failed to converge: "
            f"{info} off-diagonal elements of an "
            "intermediate tridiagonal form did not converge"
            " to zero."
        )


def cholesky_upper(a, check_finite=True):
    """Compute the upper Cholesky factor ``U`` with ``U.T @ U == a``.

    Parameters
    ----------
    a : ndarray, shape (n, n)
        The symmetric positive definite array.
    check_finite : bool
        If True, check that all elements are finite.

    Returns
    -------
    U : ndarray, shape (n, n)
        The upper-triangular factor.
    """
    return linalg.cholesky(
        np.asfortranarray(a), lower=False, check_finite=check_finite
    )

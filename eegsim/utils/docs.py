"""The documentation functions."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import sys

##############################################################################
# Define our standard documentation entries
#
# To reduce redundancy across functions, we store parameter descriptions
# here and insert them with ``%(name)s`` in docstrings.

docdict = dict()

# %%
# D

docdict["dist_type"] = """
dist_type : str
    How distances between vertices are measured. Can be ``'euclidean'``
    (straight-line distance) or ``'geodesic'`` (shortest path along the mesh
    edges). Matching is case-insensitive.
"""

docdict["distances"] = """
distances : ndarray, shape (n_sources, n_sources)
    Symmetric matrix of pairwise source distances with a zero diagonal, as
    returned by :func:`eegsim.surface.compute_source_distances`.
"""

# %%
# F

docdict["fwd"] = """
fwd : ndarray, shape (n_sensors, n_sources)
    The forward (lead-field) matrix of the subject.
"""

# %%
# M

docdict["mesh"] = """
mesh : dict
    The cortical mesh, as returned by :func:`eegsim.surface.make_mesh`. Must
    contain ``'rr'`` (vertex positions) and ``'tris'`` (0-based faces).
"""

docdict["mu"] = """
mu : float
    Power ratio of alpha noise to pink noise. Large values give
    alpha-dominated noise, ``np.inf`` gives pure alpha noise and ``0`` pure
    pink noise.
"""

# %%
# N

docdict["n_vertices_roi"] = """
n_vertices : int | None
    The number of vertices each region is resized to. If None, the regions
    are not resized.
"""

# %%
# R

docdict["random_state"] = """
random_state : None | int | instance of ~numpy.random.RandomState
    A seed for the NumPy random number generator (RNG). If ``None`` (default),
    the seed will be obtained from the operating system, meaning it will most
    likely produce different output every time this function or method is
    run. To achieve reproducible results, pass a value here to explicitly
    initialize the RNG with a defined state.
"""

docdict["regions"] = """
regions : instance of RegionSet | list of Region
    The seed regions, one per column of the seed signal.
"""

# %%
# S

docdict["sfreq"] = """
sfreq : float
    The sampling frequency in Hz.
"""

docdict["spatial_normalization"] = """
spatial_normalization : str
    How source-space activity is scaled. ``'all_nodes'`` divides by the
    Frobenius norm, ``'active_nodes'`` divides by the Frobenius norm and
    multiplies by the number of sources with nonzero power. Signal and noise
    must use the same policy for ``lambda_`` to be meaningful.
"""

docdict["spatial_profile"] = """
spatial_profile : str
    The spatial function used to spread a seed signal over its region. Can
    be ``'uniform'`` (weight 1 on each vertex) or ``'gaussian'`` (weights
    decaying with the distance from the region center, with a standard
    deviation of half the region radius).
"""

# %%
# V

docdict["verbose"] = """
verbose : bool | str | int | None
    Control verbosity of the logging output. If ``None``, use the default
    verbosity level. See :func:`eegsim.verbose` for details. Should only be
    passed as a keyword argument.
"""

docdict_indented = {}


def fill_doc(f):
    """Fill a docstring with docdict entries.

    Parameters
    ----------
    f : callable
        The function to fill the docstring of. Will be modified in place.

    Returns
    -------
    f : callable
        The function, potentially with an updated ``__doc__``.
    """
    docstring = f.__doc__
    if not docstring:
        return f
    lines = docstring.splitlines()
    # Find the minimum indent of the main docstring, after first line
    if len(lines) < 2:
        icount = 0
    else:
        icount = _indentcount_lines(lines[1:])
    # Insert this indent to dictionary docstrings
    try:
        indented = docdict_indented[icount]
    except KeyError:
        indent = " " * icount
        docdict_indented[icount] = indented = {}
        for name, dstr in docdict.items():
            lines = dstr.splitlines()
            try:
                newlines = [lines[0]]
                for line in lines[1:]:
                    newlines.append(indent + line)
                indented[name] = "\n".join(newlines)
            except IndexError:
                indented[name] = dstr
    try:
        f.__doc__ = docstring % indented
    except (TypeError, ValueError, KeyError) as exp:
        funcname = f.__name__
        funcname = docstring.split("\n")[0] if funcname is None else funcname
        raise RuntimeError(f"Error documenting {funcname}:\n{exp}")
    return f


def _indentcount_lines(lines):
    """Compute minimum indent for all lines in line list."""
    indentno = sys.maxsize
    for line in lines:
        stripped = line.lstrip()
        if stripped:
            indentno = min(indentno, len(line) - len(stripped))
    if indentno == sys.maxsize:
        return 0
    return indentno

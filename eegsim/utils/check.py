"""The check functions."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import operator
import os
from difflib import get_close_matches
from importlib import import_module
from pathlib import Path

import numpy as np

from ._logging import logger


def _ensure_int(x, name="unknown", must_be="an int", *, extra=""):
    """Ensure a variable is an integer."""
    # This is preferred over numbers.Integral, see:
    # https://github.com/scipy/scipy/pull/7351#issuecomment-299713159
    extra = f" {extra}" if extra else extra
    try:
        # someone passing True/False is much more likely to be an error than
        # intentional usage
        if isinstance(x, bool):
            raise TypeError()
        x = int(operator.index(x))
    except TypeError:
        raise TypeError(f"{name} must be {must_be}{extra}, got {type(x)}")
    return x


def _check_fname(fname, overwrite=False, must_exist=False, name="File"):
    """Check for file existence, and return its absolute path."""
    _validate_type(fname, "path-like", name)
    fname = Path(fname).expanduser().absolute()
    if fname.exists():
        if not overwrite:
            raise FileExistsError(
                "Destination file exists. Please use option "
                f'"overwrite=True" to force overwriting: {fname}'
            )
        elif overwrite != "read":
            logger.info("Overwriting existing file.")
    elif must_exist:
        raise FileNotFoundError(f'{name} does not exist: "{fname}"')
    return fname


def check_random_state(seed):
    """Turn seed into a numpy.random.mtrand.RandomState instance.

    If seed is None, return the RandomState singleton used by np.random.mtrand.
    If seed is an int, return a new RandomState instance seeded with seed.
    If seed is already a RandomState instance, return it.
    Otherwise raise ValueError.
    """
    if seed is None or seed is np.random:
        return np.random.mtrand._rand
    if isinstance(seed, int | np.integer):
        return np.random.mtrand.RandomState(seed)
    if isinstance(seed, np.random.mtrand.RandomState):
        return seed
    if isinstance(seed, np.random.Generator):
        return seed
    raise ValueError(
        f"{seed!r} cannot be used to seed a numpy.random.mtrand.RandomState instance"
    )


def _soft_import(name, purpose, strict=True):
    """Import soft dependencies, providing informative errors on failure.

    Parameters
    ----------
    name : str
        Name of the module to be imported. For example, 'h5io'.
    purpose : str
        A very brief statement (formulated as a noun phrase) explaining what
        functionality the package provides to eegsim.
    strict : bool
        Whether to raise an error if module import fails.
    """
    try:
        mod = import_module(name)
    except (ImportError, ModuleNotFoundError):
        mod = False
    if mod is False and strict:
        raise RuntimeError(
            f"For {purpose} to work, the module {name} is needed, "
            "but it could not be imported. Use the following installation method "
            "appropriate for your environment:\n\n"
            f"    pip install {name}\n"
            f"    conda install -c conda-forge {name}"
        )
    return mod


def _import_h5io_funcs():
    h5io = _soft_import("h5io", "HDF5-based I/O")

    def write_hdf5(fname, data, *args, **kwargs):
        """Write h5 with paths cast to string."""
        if isinstance(fname, Path):
            fname = fname.as_posix()
        h5io.write_hdf5(fname, data, *args, **kwargs)

    def read_hdf5(fname, *args, **kwargs):
        if isinstance(fname, Path):
            fname = fname.as_posix()
        return h5io.read_hdf5(fname, *args, **kwargs)

    return read_hdf5, write_hdf5


class _IntLike:
    @classmethod
    def __instancecheck__(cls, other):
        try:
            _ensure_int(other)
        except TypeError:
            return False
        else:
            return True


int_like = _IntLike()
path_like = (str, Path, os.PathLike)


class _Callable:
    @classmethod
    def __instancecheck__(cls, other):
        return callable(other)


_multi = {
    "str": (str,),
    "numeric": (np.floating, float, int_like),
    "path-like": path_like,
    "int-like": (int_like,),
    "callable": (_Callable(),),
    "array-like": (list, tuple, set, np.ndarray),
}


def _validate_type(item, types=None, item_name=None, type_name=None, *, extra=""):
    """Validate that `item` is an instance of `types`.

    Parameters
    ----------
    item : object
        The thing to be checked.
    types : type | str | tuple of types | tuple of str
         The types to be checked against.
         If str, must be one of {'int', 'int-like', 'str', 'numeric',
         'path-like', 'callable', 'array-like'}.
         If a tuple of str is passed, use 'int-like' and not 'int' for integers.
    item_name : str | None
        Name of the item to show inside the error message.
    type_name : str | None
        Possible types to show inside the error message that the checked item
        can be.
    extra : str
        Extra text to append to the warning.
    """
    if types == "int":
        _ensure_int(item, name=item_name, extra=extra)
        return  # terminate prematurely

    if not isinstance(types, list | tuple):
        types = [types]

    check_types = sum(
        (
            (type(None),)
            if type_ is None
            else (type_,)
            if not isinstance(type_, str)
            else _multi[type_]
            for type_ in types
        ),
        (),
    )
    extra = f" {extra}" if extra else extra
    if not isinstance(item, check_types):
        if type_name is None:
            type_name = [
                "None"
                if cls_ is None
                else cls_.__name__
                if not isinstance(cls_, str)
                else cls_
                for cls_ in types
            ]
            if len(type_name) == 1:
                type_name = type_name[0]
            elif len(type_name) == 2:
                type_name = " or ".join(type_name)
            else:
                type_name[-1] = "or " + type_name[-1]
                type_name = ", ".join(type_name)
        _item_name = "Item" if item_name is None else item_name
        raise TypeError(
            f"{_item_name} must be an instance of {type_name}{extra}, "
            f"got {type(item)} instead."
        )


def _check_range(val, min_val, max_val, name, min_inclusive=True, max_inclusive=True):
    """Check that item is within range.

    Parameters
    ----------
    val : int | float
        The value to be checked.
    min_val : int | float
        The minimum value allowed.
    max_val : int | float
        The maximum value allowed.
    name : str
        The name of the value.
    min_inclusive : bool
        Whether ``val`` is allowed to be ``min_val``.
    max_inclusive : bool
        Whether ``val`` is allowed to be ``max_val``.
    """
    below_min = val < min_val if min_inclusive else val <= min_val
    above_max = val > max_val if max_inclusive else val >= max_val
    if below_min or above_max:
        error_str = f"The value of {name} must be between {min_val} "
        if min_inclusive:
            error_str += "inclusive "
        error_str += f"and {max_val}"
        if max_inclusive:
            error_str += " inclusive"
        raise ValueError(f"{error_str}, got {val}")


def _check_option(parameter, value, allowed_values, extra=""):
    """Check the value of a parameter against a list of valid options.

    Return the value if it is valid, otherwise raise a ValueError with a
    readable error message.

    Parameters
    ----------
    parameter : str
        The name of the parameter to check. This is used in the error message.
    value : any type
        The value of the parameter to check.
    allowed_values : list
        The list of allowed values for the parameter.
    extra : str
        Extra string to append to the invalid value sentence, e.g.
        "when using geodesic distances".

    Raises
    ------
    ValueError
        When the value of the parameter is not one of the valid options.

    Returns
    -------
    value : any type
        The value if it is valid.
    """
    if value in allowed_values:
        return value

    # Prepare a nice error message for the user
    extra = f" {extra}" if extra else extra
    msg = (
        "Invalid value for the '{parameter}' parameter{extra}. "
        "{options}, but got {value!r} instead.{suggest}"
    )
    allowed_values = list(allowed_values)  # e.g., if a dict was given
    if len(allowed_values) == 1:
        options = f"The only allowed value is {repr(allowed_values[0])}"
    else:
        options = "Allowed values are "
        if len(allowed_values) == 2:
            options += " and ".join(repr(v) for v in allowed_values)
        else:
            options += ", ".join(repr(v) for v in allowed_values[:-1])
            options += f", and {repr(allowed_values[-1])}"
    suggest = ""
    if isinstance(value, str):
        suggest = _suggest(value, [str(v) for v in allowed_values])
    raise ValueError(
        msg.format(
            parameter=parameter,
            options=options,
            value=value,
            extra=extra,
            suggest=suggest,
        )
    )


def _suggest(val, options, cutoff=0.66):
    options = get_close_matches(val, options, cutoff=cutoff)
    if len(options) == 0:
        return ""
    elif len(options) == 1:
        return f" Did you mean {repr(options[0])}?"
    else:
        return f" Did you mean one of {repr(options)}?"


def _check_real(x, name, rtol=1e-7):
    """Return the real part of ``x``, raising if the imaginary part matters."""
    x = np.asarray(x)
    if not np.iscomplexobj(x):
        return x
    scale = max(np.abs(x).max(initial=0.0), np.finfo(float).tiny)
    imag = np.abs(x.imag).max(initial=0.0)
    if imag > rtol * scale:
        raise RuntimeError(
            f"{name} has a non-negligible imaginary part ({imag:0.3g} relative "
            f"to a maximum magnitude of {scale:0.3g}), this indicates a "
            "modeling error upstream."
        )
    return np.ascontiguousarray(x.real)

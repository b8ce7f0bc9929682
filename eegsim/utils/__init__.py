"""Utility functions."""

# Authors: The eegsim contributors.
# License: BSD-3-Clause

from ._bunch import Bunch
from .check import (
    check_random_state,
    _check_fname,
    _check_option,
    _check_range,
    _check_real,
    _ensure_int,
    _import_h5io_funcs,
    _soft_import,
    _validate_type,
)
from .config import get_config, set_config, get_config_path
from .docs import fill_doc, docdict as _docdict
from ._logging import (
    verbose,
    logger,
    set_log_level,
    set_log_file,
    use_log_level,
    catch_logging,
    warn,
    ClosingStringIO,
)
from .linalg import eigh, cholesky_upper
from .numerics import object_hash, sum_squared, _pl
from .progressbar import ProgressBar

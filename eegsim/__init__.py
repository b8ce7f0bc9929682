# Authors: The eegsim contributors.
# License: BSD-3-Clause

"""Simulation of EEG from cortical sources for multi-subject projects."""

import lazy_loader as lazy

try:
    from importlib.metadata import version

    __version__ = version("eegsim")
except Exception:
    __version__ = "0.0.0"

(__getattr__, __dir__, __all__) = lazy.attach_stub(__name__, __file__)

# initialize logging
from .utils import set_log_level, set_log_file

set_log_level(None, False)
set_log_file()

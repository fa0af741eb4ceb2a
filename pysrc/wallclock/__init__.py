from __future__ import annotations

import logging as _logging

from ._pywallclock import *
from ._pywallclock import __all__ as _core_all, __version__
from ._tz import reset_system_tz

__all__ = [*_core_all, "reset_system_tz"]

# Records are only emitted if the application configures logging
_logging.getLogger(__name__).addHandler(_logging.NullHandler())

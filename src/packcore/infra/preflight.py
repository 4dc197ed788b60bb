"""
infra.preflight — Installation environment sanity check.

packcore is normally run from a shell where the database installation
has been sourced.  When the installation-root variable is missing the
binary found on ``$PATH`` may not be the one that crashed, so the caller
asks the operator before continuing.
"""

from __future__ import annotations

import os
from typing import Optional

from ..core.config import Config


def check_install_root(cfg: Config) -> Optional[str]:
    """Return a problem description, or ``None`` when the variable looks sane."""
    var = cfg.install_root_var
    value = os.environ.get(var)
    if not value:
        return f"${var} is not set"
    if not os.path.isdir(value):
        return f"${var} points to '{value}', which is not a directory"
    return None

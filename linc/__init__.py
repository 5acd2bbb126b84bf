# SPDX-License-Identifier: MIT
"""linc: pick a Linear issue in the terminal and hand it to a coding agent."""

from linc._version import __version__

__all__ = ["__version__"]

"""
Capture platform notifications into a capped, newest-first, persistent log.
"""

from __future__ import annotations

__version__ = "0.1.0"

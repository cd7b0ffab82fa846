"""repoark - archive and restore git working trees, submodules included."""

from __future__ import annotations

__version__ = '0.1.0'

"""taskpulse package initialization."""

from ._build_info import APP_VERSION

__all__ = []

__version__ = APP_VERSION

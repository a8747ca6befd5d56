"""Utilities shared across luawalk"""

from .config import FRESH_NAME_FORMAT, LOGGER_ROOT

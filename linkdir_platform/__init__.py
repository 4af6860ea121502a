"""
linkdir_platform package initializer.
"""

from . import models
from . import storage

__all__ = ["models", "storage"]

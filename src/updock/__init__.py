"""
updock - template-driven container upgrades with health-checked rollback
"""

__version__ = "0.1.0"

from .core import UpgradeController
from .errors import UpdockError

__all__ = ["UpgradeController", "UpdockError"]

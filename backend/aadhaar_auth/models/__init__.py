from .account import Account
from .directory import DirectoryEntry

__all__ = [
    "Account",
    "DirectoryEntry",
]

"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .write_lock import LockKey, LockNamespace, WriteLock, ordered_keys
from .single_writer_lock import SingleWriterLock

__all__ = ['LockKey', 'LockNamespace', 'WriteLock', 'SingleWriterLock', 'ordered_keys']

"""
Write lock strategy factory.
Picks how writers are serialized from the database dialect.
"""

from gallery.services.interfaces.write_lock import WriteLock
from gallery.services.interfaces.single_writer_lock import SingleWriterLock
from gallery.services.advisory_lock import AdvisoryWriteLock


def get_write_lock(dialect_name: str) -> WriteLock:
    """
    Get the writer lock strategy for a dialect.

    - sqlite: SingleWriterLock (BEGIN IMMEDIATE already serializes writers)
    - postgresql: AdvisoryWriteLock (per-location advisory locks)
    """
    if dialect_name == "sqlite":
        return SingleWriterLock()
    if dialect_name == "postgresql":
        return AdvisoryWriteLock()
    raise ValueError(f"No write lock strategy for dialect {dialect_name!r}")


_strategies: dict[str, WriteLock] = {}


def get_lock_for(dialect_name: str) -> WriteLock:
    """Get a cached strategy instance per dialect."""
    if dialect_name not in _strategies:
        _strategies[dialect_name] = get_write_lock(dialect_name)
    return _strategies[dialect_name]

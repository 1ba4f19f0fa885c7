"""
Typed errors raised by the exhibition booking engine.

The HTTP layer maps each kind to a status code in one place
(see gallery.main). Raw storage exceptions never leave the engine:
they are wrapped as TransientStorageError or UnexpectedStorageError.
"""

from typing import Optional


class GalleryError(Exception):
    """Base class for every engine error."""

    code = "error"
    status_code = 500

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(GalleryError):
    """Malformed or out-of-range input. Never retried automatically."""

    code = "validation_error"
    status_code = 400


class NotFoundError(GalleryError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id, message: Optional[str] = None):
        super().__init__(message or f"{entity.capitalize()} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ReferenceNotFoundError(ValidationError, NotFoundError):
    """An exhibition points at an artwork or location that does not exist."""

    code = "reference_not_found"
    status_code = 400

    def __init__(self, entity: str, entity_id):
        NotFoundError.__init__(
            self, entity, entity_id, f"Referenced {entity} {entity_id} does not exist"
        )


class ConflictError(GalleryError):
    """Candidate date range overlaps a scheduled or active exhibition."""

    code = "exhibition_conflict"
    status_code = 409

    def __init__(self, location_id: int, conflict_count: int):
        super().__init__(
            f"Location {location_id} already has an exhibition scheduled in this period"
        )
        self.location_id = location_id
        self.conflict_count = conflict_count


class StaleWriteError(GalleryError):
    """Optimistic lock failure: the record changed since the caller read it."""

    code = "stale_write"
    status_code = 409

    def __init__(self, entity: str, entity_id):
        super().__init__(
            f"{entity.capitalize()} {entity_id} was modified by someone else. "
            "Reload it and try again."
        )
        self.entity = entity
        self.entity_id = entity_id


class ReferentialConflictError(GalleryError):
    """Deletion refused while scheduled or active exhibitions reference the entity."""

    code = "referential_conflict"
    status_code = 409

    def __init__(self, entity: str, entity_id, reference_count: int):
        super().__init__(
            f"{entity.capitalize()} {entity_id} is referenced by "
            f"{reference_count} scheduled or active exhibition(s)"
        )
        self.entity = entity
        self.entity_id = entity_id
        self.reference_count = reference_count


class TransientStorageError(GalleryError):
    """Lock contention or timeout that outlasted the retry budget."""

    code = "storage_busy"
    status_code = 503

    def __init__(self, attempts: int):
        super().__init__(
            f"Storage is busy; gave up after {attempts} attempt(s). Please retry shortly."
        )
        self.attempts = attempts


class UnexpectedStorageError(GalleryError):
    code = "storage_error"
    status_code = 500

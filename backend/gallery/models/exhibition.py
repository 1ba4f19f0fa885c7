"""
Exhibition model: one artwork shown at one location over a closed date range.

Key design decisions:
- start_date/end_date are calendar dates, both inclusive
- status is set by clients and never derived from today's date
- updated_at is the optimistic-locking version token
- artwork_id/location_id are cleared, not cascaded, when the artwork or
  location is deleted; only completed exhibitions can be left that way
- Overlap between scheduled/active exhibitions at a location is enforced by
  the conflict-checked transaction, not by a constraint: completed
  exhibitions are exempt, which a plain UNIQUE/CHECK cannot express portably
"""

import enum

from sqlalchemy import Column, Integer, String, Date, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from gallery.db.base import Base, TimestampMixin


class ExhibitionStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"


# Statuses that occupy their location and block overlapping bookings
LIVE_STATUSES = (ExhibitionStatus.SCHEDULED.value, ExhibitionStatus.ACTIVE.value)
STATUS_VALUES = tuple(s.value for s in ExhibitionStatus)


class Exhibition(Base, TimestampMixin):
    __tablename__ = "exhibitions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    artwork_id = Column(Integer, ForeignKey("artworks.id", ondelete="SET NULL"), nullable=True)
    location_id = Column(
        Integer, ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=ExhibitionStatus.SCHEDULED.value)
    notes = Column(Text, nullable=True)

    # Relationships
    artwork = relationship("Artwork", back_populates="exhibitions", lazy="joined")
    location = relationship("Location", back_populates="exhibitions", lazy="joined")

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="check_exhibition_dates_ordered"),
        CheckConstraint(
            "status IN ('scheduled', 'active', 'completed')", name="check_exhibition_status"
        ),
        # Conflict query: WHERE location_id = ? AND start_date <= ? AND end_date >= ?
        Index("ix_exhibitions_location_dates", "location_id", "start_date", "end_date"),
        # Referential guard counts per artwork
        Index("ix_exhibitions_artwork", "artwork_id"),
        Index("ix_exhibitions_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Exhibition(id={self.id}, artwork={self.artwork_id}, location={self.location_id}, "
            f"{self.start_date}..{self.end_date}, status={self.status})>"
        )

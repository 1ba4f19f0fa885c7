"""
Location model: a physical display space with fixed dimensions.

Ids are meaningful to staff (wall numbers), so creation may supply one
explicitly; otherwise the database assigns the next.
"""

from sqlalchemy import Column, Integer, String, CheckConstraint
from sqlalchemy.orm import relationship

from gallery.db.base import Base, TimestampMixin


class Location(Base, TimestampMixin):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True)
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    description = Column(String(1000), nullable=True)

    exhibitions = relationship(
        "Exhibition", back_populates="location", lazy="raise", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("width > 0", name="check_location_width_positive"),
        CheckConstraint("height > 0", name="check_location_height_positive"),
    )

    def __repr__(self) -> str:
        return f"<Location(id={self.id}, size={self.width}x{self.height})>"

"""
Artwork model: a piece that can be placed on exhibition.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from gallery.db.base import Base, TimestampMixin


class Artwork(Base, TimestampMixin):
    __tablename__ = "artworks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    artist = Column(String(255), nullable=False)
    detail_url = Column(String(1000), nullable=True)

    exhibitions = relationship(
        "Exhibition", back_populates="artwork", lazy="raise", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Artwork(id={self.id}, title={self.title}, artist={self.artist})>"

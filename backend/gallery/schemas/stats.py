"""
Pydantic schemas for the statistics summary.
"""

from pydantic import BaseModel


class TableCounts(BaseModel):
    artworks: int
    locations: int
    exhibitions: int


class ExhibitionCounts(BaseModel):
    total: int
    current: int
    scheduled: int


class StatsSummary(BaseModel):
    tables: TableCounts
    exhibitions: ExhibitionCounts

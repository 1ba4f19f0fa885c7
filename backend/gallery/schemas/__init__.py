from gallery.schemas.artwork import ArtworkCreate, ArtworkUpdate, ArtworkResponse
from gallery.schemas.location import (
    LocationCreate, LocationUpdate, LocationResponse, AvailabilityResponse,
)
from gallery.schemas.exhibition import (
    ExhibitionCreate, ExhibitionUpdate, ExhibitionResponse, ExhibitionDetail,
)
from gallery.schemas.stats import StatsSummary
from gallery.schemas.common import MessageResponse, ErrorResponse

__all__ = [
    "ArtworkCreate", "ArtworkUpdate", "ArtworkResponse",
    "LocationCreate", "LocationUpdate", "LocationResponse", "AvailabilityResponse",
    "ExhibitionCreate", "ExhibitionUpdate", "ExhibitionResponse", "ExhibitionDetail",
    "StatsSummary", "MessageResponse", "ErrorResponse",
]

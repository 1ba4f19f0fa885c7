from gallery.models.artwork import Artwork
from gallery.models.location import Location
from gallery.models.exhibition import Exhibition, ExhibitionStatus

__all__ = ["Artwork", "Location", "Exhibition", "ExhibitionStatus"]

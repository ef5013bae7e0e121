from app.buisness.locations.location_graph import Location, LocationGraph, LocationType

__all__ = ['Location', 'LocationGraph', 'LocationType']

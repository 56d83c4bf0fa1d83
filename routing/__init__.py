#Marks routing as a package.
#Re-exports the public geo / ETA API so other modules import from routing
#without knowing internal file names.
#No business logic.

from .geo import LatLon, InvalidCoordinate, distance_km, validate_coordinate
from .geofence import point_in_polygon, zones_containing
from .eta_service import ETAEstimator, EtaResult, DriverLocationStale
from .osrm_client import OSRMClient, OSRMError

__all__ = [
    "LatLon",
    "InvalidCoordinate",
    "distance_km",
    "validate_coordinate",
    "point_in_polygon",
    "zones_containing",
    "ETAEstimator",
    "EtaResult",
    "DriverLocationStale",
    "OSRMClient",
    "OSRMError",
]

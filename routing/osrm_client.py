#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#timeouts and error handling
#parsing response JSON into our internal shape
#It should not contain dispatch rules, fees or scoring.
#Used as an optional road-distance provider for the ETA estimator.

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional

import requests
from dotenv import load_dotenv

from routing.geo import LatLon, validate_coordinate

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()

logger = logging.getLogger(__name__)


class OSRMError(Exception):
    """Custom exception for OSRM client errors."""
    pass


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal (lat, lon) -> OSRM (lon,lat)
    - Return normalized outputs
    """

    def __init__(self, base_url: Optional[str] = None, profile: str = "driving", timeout: float = 5):
        self.base_url = (base_url or os.getenv("OSRM_BASE_URL") or "").rstrip("/")
        self.timeout = timeout  # seconds to wait for OSRM before giving up
        self.profile = profile  # driving, walking, cycling

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Pass base_url or set OSRM_BASE_URL in the .env file.")

    def format_coordinates(self, coords: List[LatLon]) -> str:
        """Convert list of (lat, lon) to OSRM format 'lon,lat;lon,lat;...'"""
        return ";".join(f"{lon},{lat}" for lat, lon in coords)

    def compute_route(self, coordinates: List[LatLon]) -> Dict[str, float]:
        """
        Calls the OSRM /route endpoint with the given coordinates.

        Returns:
            {
                "distance": float, # in meters
                "duration": float, # in seconds
            }
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        coordinates = [validate_coordinate(point) for point in coordinates]
        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(coordinates)}"

        try:
            response = requests.get(
                url,
                params={"overview": "false"},  # we don't need the route geometry
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("OSRM request failed: %s", exc)
            raise OSRMError(f"OSRM request failed: {exc}") from exc

        data = response.json()

        if data.get("code") != "Ok" or not data.get("routes"):
            raise OSRMError(f"OSRM error: {data.get('message', 'Unknown error')}")

        route = data["routes"][0]  # OSRM may return alternatives, take the first

        return {
            "distance": float(route["distance"]),
            "duration": float(route["duration"]),
        }

    def road_distance_km(self, origin: LatLon, destination: LatLon) -> float:
        """Road distance in km. Matches the ETA estimator's distance provider signature."""
        return self.compute_route([origin, destination])["distance"] / 1000.0

#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Used when a driver trip is created, to fix its route geometry once.
#Matching itself never calls OSRM (it works on the stored polyline).
#Encapsulates OSRM-specific details:
#coordinate formatting (lng,lat)
#URL construction (/route)
#timeouts and error handling
#decoding the polyline geometry into GeoPoints


from dotenv import load_dotenv
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence
import requests

from .geo import GeoPoint
from .polyline import decode_polyline

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()


class OSRMError(Exception):
    """Raised when OSRM cannot be reached or answers with a non-Ok code."""
    pass


@dataclass(frozen=True)
class RouteGeometry:
    """Normalized /route answer: decoded polyline plus totals."""
    points: List[GeoPoint]
    distance_km: float
    duration_s: float


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal GeoPoint -> OSRM 'lng,lat'
    - Return normalized outputs
    """
    def __init__(self, base_url: Optional[str] = None, profile: str = "driving", timeout: int = 5):
        self.base_url = base_url or os.getenv("OSRM_BASE_URL")
        self.timeout = timeout #seconds to wait for OSRM before giving up
        self.profile = profile #driving, walking, cycling

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Set OSRM_BASE_URL in the environment or .env file.")
        self.base_url = self.base_url.rstrip("/")

    def format_coordinates(self, points: Sequence[GeoPoint]) -> str:
        """Convert GeoPoints to OSRM format 'lng,lat;lng,lat;...'"""
        return ";".join(f"{point.lng},{point.lat}" for point in points)

    def fetch_route(self, waypoints: Sequence[GeoPoint]) -> RouteGeometry:
        """
        Calls the OSRM /route endpoint and returns the full route geometry.

        The geometry is requested as an encoded polyline (precision 5),
        the same format we store on driver trips.
        """
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required to compute a route.")

        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(waypoints)}"

        try:
            response = requests.get(
                url,
                params={
                    "overview": "full",
                    "geometries": "polyline",
                },
                timeout=self.timeout,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise OSRMError(f"OSRM request failed: {exc}") from exc

        if data.get("code") != "Ok" or not data.get("routes"):
            raise OSRMError(f"OSRM error: {data.get('message', 'Unknown error')}")

        route = data["routes"][0] #first route is the recommended one

        return RouteGeometry(
            points=decode_polyline(route.get("geometry", "")),
            distance_km=float(route["distance"]) / 1000.0,
            duration_s=float(route["duration"]),
        )

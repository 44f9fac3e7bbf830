"""
Elevation Loader - Elevation, slope and aspect from Open-Meteo.

Samples the elevation API at the point and at small north and east
offsets, then derives the surface gradient from the three heights.
"""

import math
import time
import sqlite3
from typing import Optional, Dict, List
from dataclasses import dataclass, asdict
import logging
import requests
from tenacity import retry, stop_after_attempt, wait_exponential

log = logging.getLogger(__name__)

# Rate limiter
_last_request_time = 0.0
_MIN_REQUEST_INTERVAL = 0.2  # 5 requests per second max

METERS_PER_DEGREE = 111_320.0


@dataclass
class TopographyResult:
    """Terrain data for a point."""
    latitude: float
    longitude: float
    elevation_meters: float
    slope_degrees: float
    aspect_degrees: Optional[float]
    data_source: str = "Open-Meteo"

    def to_dict(self) -> Dict:
        return asdict(self)


def slope_from_heights(lat: float, h0: float, h_north: float, h_east: float, offset_deg: float):
    """
    Slope and aspect (degrees) from a point and its north/east neighbours.

    Aspect is the downslope compass direction; None on flat ground.
    """
    dy = offset_deg * METERS_PER_DEGREE
    dx = offset_deg * METERS_PER_DEGREE * max(math.cos(math.radians(lat)), 1e-6)
    dz_dx = (h_east - h0) / dx
    dz_dy = (h_north - h0) / dy
    rise = math.hypot(dz_dx, dz_dy)
    slope = math.degrees(math.atan(rise))
    if rise == 0:
        return slope, None
    aspect = (math.degrees(math.atan2(-dz_dx, -dz_dy)) + 360.0) % 360.0
    return slope, aspect


class TopographyCache:
    """SQLite cache for topography data."""

    def __init__(self, db_path: str = "elevation_cache.db"):
        self.db_path = db_path
        self._init_db()

    def _init_db(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS topography_cache (
                lat_lon_key TEXT PRIMARY KEY,
                elevation_m REAL,
                slope_deg REAL,
                aspect_deg REAL,
                data_source TEXT,
                created_at REAL
            )
        """)
        conn.commit()
        conn.close()

    def _make_key(self, lat: float, lon: float) -> str:
        # Round to 5 decimal places (~1m precision)
        return f"{lat:.5f},{lon:.5f}"

    def get(self, lat: float, lon: float) -> Optional[TopographyResult]:
        conn = sqlite3.connect(self.db_path)
        row = conn.execute(
            "SELECT elevation_m, slope_deg, aspect_deg, data_source FROM topography_cache WHERE lat_lon_key = ?",
            (self._make_key(lat, lon),)
        ).fetchone()
        conn.close()
        if row:
            return TopographyResult(lat, lon, row[0], row[1], row[2], row[3])
        return None

    def set(self, result: TopographyResult):
        conn = sqlite3.connect(self.db_path)
        conn.execute(
            """INSERT OR REPLACE INTO topography_cache
               (lat_lon_key, elevation_m, slope_deg, aspect_deg, data_source, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (self._make_key(result.latitude, result.longitude),
             result.elevation_meters, result.slope_degrees, result.aspect_degrees,
             result.data_source, time.time())
        )
        conn.commit()
        conn.close()


class ElevationLoader:
    """
    Fetch elevation from the Open-Meteo elevation API (Copernicus DEM, 90 m).

    API Documentation:
    https://open-meteo.com/en/docs/elevation-api
    """

    ELEVATION_URL = "https://api.open-meteo.com/v1/elevation"
    OFFSET_DEG = 0.002

    def __init__(self, cache_path: str = "elevation_cache.db", timeout: float = 10.0):
        self.cache = TopographyCache(cache_path)
        self.timeout = timeout
        self.session = requests.Session()

    def _rate_limit(self):
        """Ensure we don't exceed rate limits."""
        global _last_request_time
        elapsed = time.time() - _last_request_time
        if elapsed < _MIN_REQUEST_INTERVAL:
            time.sleep(_MIN_REQUEST_INTERVAL - elapsed)
        _last_request_time = time.time()

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=5), reraise=True)
    def _fetch(self, lats: List[float], lons: List[float]) -> Dict:
        params = {
            "latitude": ",".join(f"{v:.6f}" for v in lats),
            "longitude": ",".join(f"{v:.6f}" for v in lons),
        }
        self._rate_limit()
        response = self.session.get(self.ELEVATION_URL, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def get_topography(self, lat: float, lon: float) -> Optional[TopographyResult]:
        """
        Get elevation, slope and aspect for a single point.

        Returns:
            TopographyResult or None if not available
        """
        cached = self.cache.get(lat, lon)
        if cached:
            return cached

        offset = self.OFFSET_DEG
        try:
            data = self._fetch([lat, lat + offset, lat], [lon, lon, lon + offset])
        except requests.RequestException as e:
            log.error(f"Elevation request failed for ({lat}, {lon}): {e}")
            return None

        try:
            h0, h_north, h_east = (float(h) for h in data["elevation"][:3])
        except (KeyError, ValueError, TypeError) as e:
            log.error(f"Failed to parse elevation response: {e}")
            return None

        # Open sea comes back as zero everywhere
        if h0 == 0 and h_north == 0 and h_east == 0:
            result = TopographyResult(lat, lon, 0.0, 0.0, None)
        else:
            slope, aspect = slope_from_heights(lat, h0, h_north, h_east, offset)
            result = TopographyResult(lat, lon, h0, round(slope, 2), aspect)

        self.cache.set(result)
        log.debug(f"Topography at ({lat:.4f}, {lon:.4f}): {result.elevation_meters:.1f}m, "
                  f"slope {result.slope_degrees}°")
        return result


# Singleton
_loader: Optional[ElevationLoader] = None

def get_elevation_loader() -> ElevationLoader:
    """Get singleton elevation loader."""
    global _loader
    if _loader is None:
        _loader = ElevationLoader()
    return _loader

"""
Soil Loader - Topsoil composition from ISRIC SoilGrids.

Features:
- Unit conversion (g/kg → %, dg/kg → %, pH×10 → pH)
- Water/no-data detection (SoilGrids returns nulls over water)
- SQLite caching of successful lookups
- Raster fallback when the service is unreachable
"""

import time
import sqlite3
import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, List

import requests
from tenacity import retry, stop_after_attempt, wait_exponential

from loaders.soil_raster import SoilRasterProvider, RasterNotLoadedError

log = logging.getLogger(__name__)

# Rate limiter - SoilGrids asks for at most 5 calls per minute
_last_request_time = 0.0
_MIN_REQUEST_INTERVAL = 1.0


@dataclass
class SoilSample:
    """Soil composition at a point (0-5 cm)."""
    latitude: float
    longitude: float
    clay_pct: float
    sand_pct: float
    silt_pct: float
    bulk_density: float  # cg/cm³
    organic_carbon: float = 0.0  # percent
    ph: Optional[float] = None
    is_water: bool = False
    measured: bool = True
    data_source: str = "SoilGrids"

    @classmethod
    def water(cls, lat: float, lon: float) -> "SoilSample":
        """No-data sample: SoilGrids has nothing here, most likely open water."""
        return cls(lat, lon, 0.0, 0.0, 0.0, 0.0, is_water=True, data_source="SoilGrids-nodata")

    def to_dict(self) -> Dict:
        return asdict(self)


class SoilCache:
    """SQLite cache for soil samples."""

    def __init__(self, db_path: str = "soil_cache.db"):
        self.db_path = db_path
        self._init_db()

    def _init_db(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS soil_cache (
                lat_lon_key TEXT PRIMARY KEY,
                result_json TEXT,
                created_at REAL
            )
        """)
        conn.commit()
        conn.close()

    def _make_key(self, lat: float, lon: float) -> str:
        # SoilGrids is 250 m; 3 decimals (~100 m) is plenty
        return f"{lat:.3f},{lon:.3f}"

    def get(self, lat: float, lon: float) -> Optional[SoilSample]:
        conn = sqlite3.connect(self.db_path)
        row = conn.execute(
            "SELECT result_json FROM soil_cache WHERE lat_lon_key = ?",
            (self._make_key(lat, lon),)
        ).fetchone()
        conn.close()
        if row:
            return SoilSample(**json.loads(row[0]))
        return None

    def set(self, sample: SoilSample):
        conn = sqlite3.connect(self.db_path)
        conn.execute(
            """INSERT OR REPLACE INTO soil_cache
               (lat_lon_key, result_json, created_at)
               VALUES (?, ?, ?)""",
            (self._make_key(sample.latitude, sample.longitude),
             json.dumps(sample.to_dict()), time.time())
        )
        conn.commit()
        conn.close()


def _layer_mean(layers: List[Dict], name: str) -> Optional[float]:
    """Mean value of the first depth of a named SoilGrids layer."""
    for layer in layers:
        if layer.get("name") != name:
            continue
        depths = layer.get("depths") or []
        if not depths:
            return None
        return depths[0].get("values", {}).get("mean")
    return None


class SoilGridsLoader:
    """
    Fetch soil properties from ISRIC SoilGrids v2.

    API Documentation:
    https://rest.isric.org/soilgrids/v2.0/docs
    """

    SOILGRIDS_URL = "https://rest.isric.org/soilgrids/v2.0/properties/query"
    PROPERTIES = ["bdod", "clay", "sand", "silt", "soc", "phh2o"]
    DEPTH = "0-5cm"

    def __init__(
        self,
        cache_path: str = "soil_cache.db",
        raster: Optional[SoilRasterProvider] = None,
        timeout: float = 15.0,
    ):
        self.cache = SoilCache(cache_path)
        self.raster = raster
        self.timeout = timeout
        self.session = requests.Session()

    def _rate_limit(self):
        global _last_request_time
        elapsed = time.time() - _last_request_time
        if elapsed < _MIN_REQUEST_INTERVAL:
            time.sleep(_MIN_REQUEST_INTERVAL - elapsed)
        _last_request_time = time.time()

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=5), reraise=True)
    def _fetch(self, lat: float, lon: float) -> Dict:
        params = {
            "lat": lat,
            "lon": lon,
            "property": self.PROPERTIES,
            "depth": self.DEPTH,
            "value": "mean",
        }
        self._rate_limit()
        response = self.session.get(self.SOILGRIDS_URL, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def parse(self, lat: float, lon: float, data: Dict) -> SoilSample:
        """Convert a SoilGrids response to a SoilSample."""
        layers = data["properties"]["layers"]
        clay = _layer_mean(layers, "clay")
        sand = _layer_mean(layers, "sand")
        bulk_density = _layer_mean(layers, "bdod")

        if clay is None or sand is None or bulk_density is None:
            log.info(f"SoilGrids returned no data at ({lat}, {lon}), likely water")
            return SoilSample.water(lat, lon)

        # g/kg → %
        clay_pct = clay / 10.0
        sand_pct = sand / 10.0
        silt = _layer_mean(layers, "silt")
        silt_pct = silt / 10.0 if silt is not None else max(100.0 - clay_pct - sand_pct, 0.0)

        soc = _layer_mean(layers, "soc")
        ph = _layer_mean(layers, "phh2o")

        return SoilSample(
            latitude=lat,
            longitude=lon,
            clay_pct=clay_pct,
            sand_pct=sand_pct,
            silt_pct=silt_pct,
            bulk_density=float(bulk_density),
            organic_carbon=soc / 100.0 if soc is not None else 0.0,  # dg/kg → %
            ph=ph / 10.0 if ph is not None else None,
        )

    def get_soil(self, lat: float, lon: float, depth_m: float = 2.5) -> Optional[SoilSample]:
        """
        Get topsoil composition for a point.

        Falls back to the raster provider (flagged as not measured) when
        SoilGrids cannot be reached.

        Returns:
            SoilSample or None if neither source is available
        """
        cached = self.cache.get(lat, lon)
        if cached:
            return cached

        try:
            data = self._fetch(lat, lon)
            sample = self.parse(lat, lon, data)
        except requests.RequestException as e:
            log.error(f"Soil request failed for ({lat}, {lon}): {e}")
            return self._fallback(lat, lon, depth_m)
        except (KeyError, ValueError, TypeError) as e:
            log.error(f"Failed to parse soil response: {e}")
            return self._fallback(lat, lon, depth_m)

        self.cache.set(sample)
        log.debug(f"Soil at ({lat:.4f}, {lon:.4f}): clay {sample.clay_pct}% sand {sample.sand_pct}%")
        return sample

    def _fallback(self, lat: float, lon: float, depth_m: float) -> Optional[SoilSample]:
        if self.raster is None:
            return None
        try:
            props = self.raster.properties_at(lat, lon, depth_m)
        except RasterNotLoadedError:
            log.warning("Soil raster fallback requested before rasters were loaded")
            return None

        return SoilSample(
            latitude=lat,
            longitude=lon,
            clay_pct=props.clay_pct,
            sand_pct=props.sand_pct,
            silt_pct=props.silt_pct,
            bulk_density=props.bulk_density,
            measured=False,
            data_source=f"Raster-{props.soil_class}",
        )


# Singleton
_loader: Optional[SoilGridsLoader] = None

def get_soil_loader(raster: Optional[SoilRasterProvider] = None) -> SoilGridsLoader:
    """Get singleton soil loader."""
    global _loader
    if _loader is None:
        _loader = SoilGridsLoader(raster=raster)
    return _loader

"""
Unified Data Fetcher - Combines all data sources into one feature bundle.

Fetches:
- Weather and 7-day rainfall from Open-Meteo
- Topsoil composition from SoilGrids (raster fallback)
- Elevation, slope and aspect from Open-Meteo

Missing sources are replaced by central defaults and recorded in
``fetch_errors``; they never raise.
"""

import logging
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from concurrent.futures import ThreadPoolExecutor, as_completed, TimeoutError as FuturesTimeout

from core.models import EnvironmentalFeatures
from loaders.weather import get_weather_loader, WeatherResult
from loaders.soil import get_soil_loader, SoilSample
from loaders.elevation import get_elevation_loader, TopographyResult
from loaders.soil_raster import SOIL_CLASSES, DEFAULT_CLASS

log = logging.getLogger(__name__)

DEFAULT_FAILURE_DEPTH_M = 2.5

# Applied when the weather service is unavailable
DEFAULT_WEATHER = {
    "temperature_c": 25.0,
    "humidity_pct": 50.0,
    "rain_current_mm": 0.0,
    "rain_7day_mm": 0.0,
    "weather_code": 0,
}


@dataclass
class LocationData:
    """
    Everything fetched for a point, plus the feature bundle built from it.
    """
    latitude: float
    longitude: float
    features: Optional[EnvironmentalFeatures] = None
    weather: Optional[WeatherResult] = None
    soil: Optional[SoilSample] = None
    topography: Optional[TopographyResult] = None
    is_simulated: bool = False
    data_sources: List[str] = field(default_factory=list)
    fetch_errors: List[str] = field(default_factory=list)

    @property
    def data_complete(self) -> bool:
        return not self.fetch_errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": {"lat": self.latitude, "lng": self.longitude},
            "weather": self.weather.to_dict() if self.weather else None,
            "soil": self.soil.to_dict() if self.soil else None,
            "topography": self.topography.to_dict() if self.topography else None,
            "is_simulated": self.is_simulated,
            "data_sources": list(self.data_sources),
            "fetch_errors": list(self.fetch_errors),
        }


def build_features(
    lat: float,
    lon: float,
    weather: Optional[WeatherResult] = None,
    soil: Optional[SoilSample] = None,
    topography: Optional[TopographyResult] = None,
    failure_depth_m: float = DEFAULT_FAILURE_DEPTH_M,
    manual_rain_mm: Optional[float] = None,
) -> EnvironmentalFeatures:
    """
    Merge provider results into one validated EnvironmentalFeatures.

    This is the only place defaults are applied. A manual rainfall value
    replaces both the current and the 7-day signal and marks the bundle
    as simulated.

    Raises:
        FeatureValidationError: if any merged value is out of range
    """
    if weather is not None:
        w = {
            "temperature_c": weather.temperature_c,
            "humidity_pct": weather.humidity_pct,
            "rain_current_mm": weather.rain_current_mm,
            "rain_7day_mm": weather.rain_7day_mm,
            "weather_code": int(weather.weather_code),
        }
        t_min, t_max, wind = weather.temperature_min_c, weather.temperature_max_c, weather.wind_speed_kmh
    else:
        w = dict(DEFAULT_WEATHER)
        t_min = t_max = wind = None

    is_simulated = manual_rain_mm is not None
    if is_simulated:
        w["rain_current_mm"] = float(manual_rain_mm)
        w["rain_7day_mm"] = float(manual_rain_mm)

    if soil is None:
        props = SOIL_CLASSES[DEFAULT_CLASS]
        soil = SoilSample(
            lat, lon, props.clay_pct, props.sand_pct, props.silt_pct, props.bulk_density,
            measured=False, data_source="Default-loamy",
        )

    if topography is not None:
        elevation, slope, aspect = (
            topography.elevation_meters, topography.slope_degrees, topography.aspect_degrees
        )
    else:
        elevation, slope, aspect = 0.0, 0.0, None

    return EnvironmentalFeatures(
        latitude=lat,
        longitude=lon,
        slope_deg=slope,
        elevation_m=elevation,
        clay_pct=soil.clay_pct,
        sand_pct=soil.sand_pct,
        silt_pct=soil.silt_pct,
        bulk_density=soil.bulk_density,
        organic_carbon=soil.organic_carbon,
        failure_depth_m=failure_depth_m,
        is_water_hint=soil.is_water,
        temperature_min_c=t_min,
        temperature_max_c=t_max,
        aspect_deg=aspect,
        wind_speed_kmh=wind,
        ph=soil.ph,
        is_simulated=is_simulated,
        soil_measured=soil.measured,
        **w,
    )


class UnifiedDataFetcher:
    """
    Combines all data sources into a single interface.

    Usage:
        fetcher = UnifiedDataFetcher()
        data = fetcher.fetch(27.7172, 85.3240)
        assessment = LandslideEngine().assess(data.features)
    """

    FETCH_TIMEOUT_S = 60.0

    def __init__(self, weather=None, soil=None, elevation=None):
        self.weather = weather or get_weather_loader()
        self.soil = soil or get_soil_loader()
        self.elevation = elevation or get_elevation_loader()

    def fetch(
        self,
        lat: float,
        lon: float,
        failure_depth_m: float = DEFAULT_FAILURE_DEPTH_M,
        manual_rain_mm: Optional[float] = None,
    ) -> LocationData:
        """
        Fetch all sources in parallel and build the feature bundle.

        Args:
            lat: Latitude
            lon: Longitude
            failure_depth_m: Depth of the assumed failure plane
            manual_rain_mm: Rainfall override for simulation mode

        Returns:
            LocationData with the merged features and raw results
        """
        result = LocationData(latitude=lat, longitude=lon)

        with ThreadPoolExecutor(max_workers=3) as executor:
            futures = {
                executor.submit(self.weather.get_weather, lat, lon): "weather",
                executor.submit(self.soil.get_soil, lat, lon, failure_depth_m): "soil",
                executor.submit(self.elevation.get_topography, lat, lon): "topography",
            }

            pending = dict(futures)
            try:
                for future in as_completed(futures, timeout=self.FETCH_TIMEOUT_S):
                    source = pending.pop(future)
                    try:
                        data = future.result()
                    except Exception as e:
                        log.error(f"Error fetching {source}: {e}")
                        result.fetch_errors.append(f"{source}: {e}")
                        continue
                    if data is None:
                        result.fetch_errors.append(f"{source}: unavailable, using defaults")
                        continue
                    setattr(result, source, data)
                    result.data_sources.append(getattr(data, "data_source", source))
            except FuturesTimeout:
                for future, source in pending.items():
                    future.cancel()
                    log.error(f"Timed out fetching {source} after {self.FETCH_TIMEOUT_S}s")
                    result.fetch_errors.append(f"{source}: timed out, using defaults")

        result.features = build_features(
            lat,
            lon,
            weather=result.weather,
            soil=result.soil,
            topography=result.topography,
            failure_depth_m=failure_depth_m,
            manual_rain_mm=manual_rain_mm,
        )
        result.is_simulated = result.features.is_simulated
        return result


# Singleton
_fetcher: Optional[UnifiedDataFetcher] = None

def get_data_fetcher() -> UnifiedDataFetcher:
    """Get singleton data fetcher."""
    global _fetcher
    if _fetcher is None:
        _fetcher = UnifiedDataFetcher()
    return _fetcher

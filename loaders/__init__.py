"""
Data loaders for the Landslide Risk Engine.

Includes:
- Weather (Open-Meteo forecast)
- Soil composition (ISRIC SoilGrids)
- Elevation, slope and aspect (Open-Meteo elevation)
- Soil class rasters (local GeoTIFF fallback)
- Unified fetcher (combines all sources into EnvironmentalFeatures)
"""

from loaders.weather import WeatherLoader, get_weather_loader, WeatherResult
from loaders.soil import SoilGridsLoader, get_soil_loader, SoilSample
from loaders.elevation import ElevationLoader, get_elevation_loader, TopographyResult
from loaders.soil_raster import SoilRasterProvider, RasterStatus, RasterNotLoadedError
from loaders.unified import UnifiedDataFetcher, get_data_fetcher, LocationData, build_features

__all__ = [
    "WeatherLoader",
    "get_weather_loader",
    "WeatherResult",
    "SoilGridsLoader",
    "get_soil_loader",
    "SoilSample",
    "ElevationLoader",
    "get_elevation_loader",
    "TopographyResult",
    "SoilRasterProvider",
    "RasterStatus",
    "RasterNotLoadedError",
    # Unified
    "UnifiedDataFetcher",
    "get_data_fetcher",
    "LocationData",
    "build_features",
]

"""
Soil Raster Provider - Dominant soil class from local GeoTIFF rasters.

Used as the soil fallback when SoilGrids is unreachable. Each raster
holds the presence score of one soil class (clayey, clay-skeletal,
loamy, sandy); the class with the highest value at a point wins.

The provider is an explicit object handed to the loaders that need it.
It starts in the NOT_LOADED state; querying it before ``load_directory``
or ``register`` raises RasterNotLoadedError.
"""

import logging
from dataclasses import dataclass, asdict, replace
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
import rasterio
from rasterio.errors import RasterioError

log = logging.getLogger(__name__)


class RasterNotLoadedError(RuntimeError):
    """Raised when the provider is queried before any load attempt."""


class RasterStatus(Enum):
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"
    UNAVAILABLE = "unavailable"  # load attempted, nothing usable found


@dataclass
class SoilClassProperties:
    """Representative properties of a mapped soil class."""
    soil_class: str
    clay_pct: float
    sand_pct: float
    silt_pct: float
    cohesion_kpa: float
    friction_angle_deg: float
    bulk_density: float  # cg/cm³
    permeability: float  # mm/h

    def to_dict(self) -> Dict:
        return asdict(self)


SOIL_CLASSES = {
    "clayey": SoilClassProperties("clayey", 55, 15, 30, 45.0, 18.0, 150, 0.1),
    "clayskeletal": SoilClassProperties("clayskeletal", 50, 20, 30, 35.0, 22.0, 160, 0.2),
    "loamy": SoilClassProperties("loamy", 27, 40, 33, 20.0, 28.0, 140, 5.0),
    "sandy": SoilClassProperties("sandy", 5, 85, 10, 0.5, 35.0, 130, 25.0),
}
DEFAULT_CLASS = "loamy"

RASTER_FILES = {
    "clayey": "fclayey.tif",
    "clayskeletal": "fclayskeletal.tif",
    "loamy": "floamy.tif",
    "sandy": "fsandy.tif",
}


@dataclass
class RasterLayer:
    """A single-band raster in geographic coordinates."""
    data: np.ndarray
    bbox: Tuple[float, float, float, float]  # (min_lon, min_lat, max_lon, max_lat)

    @property
    def height(self) -> int:
        return self.data.shape[0]

    @property
    def width(self) -> int:
        return self.data.shape[1]

    def value_at(self, lat: float, lon: float) -> Optional[float]:
        """Pixel value under a point, or None outside the raster / on nodata."""
        min_x, min_y, max_x, max_y = self.bbox
        if max_x <= min_x or max_y <= min_y:
            return None
        col = int(np.floor((lon - min_x) / (max_x - min_x) * self.width))
        row = int(np.floor((max_y - lat) / (max_y - min_y) * self.height))
        if not (0 <= col < self.width and 0 <= row < self.height):
            return None
        value = float(self.data[row, col])
        if not np.isfinite(value):
            return None
        return value


def depth_adjusted(props: SoilClassProperties, depth_m: float) -> SoilClassProperties:
    """Deeper planes carry slightly less cohesion (down to 80%)."""
    factor = max(0.8, 1 - (depth_m / 20) * 0.2)
    return replace(props, cohesion_kpa=props.cohesion_kpa * factor)


class SoilRasterProvider:
    """
    Injected soil-class provider backed by GeoTIFF rasters.

    Usage:
        provider = SoilRasterProvider()
        provider.load_directory("data/soil")
        props = provider.properties_at(27.7, 85.3, depth_m=2.5)
    """

    def __init__(self):
        self._layers: Dict[str, RasterLayer] = {}
        self.status = RasterStatus.NOT_LOADED

    @property
    def is_loaded(self) -> bool:
        return self.status == RasterStatus.LOADED

    def register(self, soil_class: str, data: np.ndarray, bbox: Tuple[float, float, float, float]):
        """Register an in-memory raster for a soil class."""
        if soil_class not in SOIL_CLASSES:
            raise ValueError(f"Unknown soil class {soil_class!r}")
        array = np.asarray(data, dtype=np.float64)
        if array.ndim != 2:
            raise ValueError(f"Raster for {soil_class} must be 2-D, got shape {array.shape}")
        self._layers[soil_class] = RasterLayer(array, tuple(bbox))
        self.status = RasterStatus.LOADED

    def load_directory(self, directory) -> int:
        """
        Load every known soil raster found in ``directory``.

        Returns:
            Number of rasters loaded. Zero leaves the provider UNAVAILABLE.
        """
        directory = Path(directory)
        loaded = 0
        for soil_class, filename in RASTER_FILES.items():
            path = directory / filename
            if not path.exists():
                continue
            try:
                with rasterio.open(path) as src:
                    band = src.read(1).astype(np.float64)
                    if src.nodata is not None:
                        band[band == src.nodata] = np.nan
                    bounds = src.bounds
                self._layers[soil_class] = RasterLayer(
                    band, (bounds.left, bounds.bottom, bounds.right, bounds.top)
                )
                loaded += 1
                log.info(f"Loaded {filename} ({band.shape[1]}x{band.shape[0]})")
            except RasterioError as e:
                log.warning(f"Failed to load {filename}: {e}")

        if self._layers:
            self.status = RasterStatus.LOADED
        else:
            self.status = RasterStatus.UNAVAILABLE
            log.warning(f"No soil rasters found in {directory}, using {DEFAULT_CLASS} defaults")
        return loaded

    def dominant_class(self, lat: float, lon: float) -> str:
        """Soil class with the highest raster value at a point."""
        if self.status == RasterStatus.NOT_LOADED:
            raise RasterNotLoadedError("Soil rasters have not been loaded")

        best_class, best_value = DEFAULT_CLASS, 0.0
        for soil_class, layer in self._layers.items():
            value = layer.value_at(lat, lon)
            if value is not None and value > best_value:
                best_class, best_value = soil_class, value

        log.debug(f"Dominant soil at ({lat:.3f}, {lon:.3f}): {best_class} ({best_value})")
        return best_class

    def properties_at(self, lat: float, lon: float, depth_m: float = 2.5) -> SoilClassProperties:
        """Representative soil properties at a point, adjusted for failure depth."""
        soil_class = self.dominant_class(lat, lon)
        return depth_adjusted(SOIL_CLASSES[soil_class], depth_m)

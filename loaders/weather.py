"""
Weather Loader - Current conditions and 7-day rainfall from Open-Meteo.

Uses the Open-Meteo forecast API with ``past_days`` so one request
returns both the current reading and the antecedent rainfall.
"""

import time
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, List

import requests
from tenacity import retry, stop_after_attempt, wait_exponential

log = logging.getLogger(__name__)

# Rate limiter
_last_request_time = 0.0
_MIN_REQUEST_INTERVAL = 0.1  # 10 requests per second max


@dataclass
class WeatherResult:
    """Weather signals for a point."""
    latitude: float
    longitude: float
    temperature_c: float
    humidity_pct: float
    rain_current_mm: float
    rain_7day_mm: float
    weather_code: int
    temperature_min_c: Optional[float] = None
    temperature_max_c: Optional[float] = None
    wind_speed_kmh: Optional[float] = None

    def to_dict(self) -> Dict:
        return asdict(self)


def _sum_past(values: List[Optional[float]], days: int, forecast_days: int) -> float:
    """Sum the ``days`` entries preceding the trailing forecast entries."""
    past = values[:max(len(values) - forecast_days, 0)]
    return float(sum(v for v in past[-days:] if v is not None))


class WeatherLoader:
    """
    Fetch weather from Open-Meteo.

    API Documentation:
    https://open-meteo.com/en/docs
    """

    FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
    RAIN_WINDOW_DAYS = 7
    FORECAST_DAYS = 1

    def __init__(self, timeout: float = 10.0):
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
            "latitude": lat,
            "longitude": lon,
            "current": "temperature_2m,relative_humidity_2m,precipitation,weather_code,wind_speed_10m",
            "daily": "precipitation_sum,temperature_2m_max,temperature_2m_min",
            "past_days": self.RAIN_WINDOW_DAYS,
            "forecast_days": self.FORECAST_DAYS,
            "timezone": "auto",
        }
        self._rate_limit()
        response = self.session.get(self.FORECAST_URL, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def get_weather(self, lat: float, lon: float) -> Optional[WeatherResult]:
        """
        Get current weather and accumulated rainfall for a point.

        Returns:
            WeatherResult or None if the service is unavailable
        """
        try:
            data = self._fetch(lat, lon)
        except requests.RequestException as e:
            log.error(f"Weather request failed for ({lat}, {lon}): {e}")
            return None

        try:
            current = data["current"]
            daily = data.get("daily", {})
            precipitation = daily.get("precipitation_sum") or []
            t_max = daily.get("temperature_2m_max") or []
            t_min = daily.get("temperature_2m_min") or []

            result = WeatherResult(
                latitude=lat,
                longitude=lon,
                temperature_c=float(current["temperature_2m"]),
                humidity_pct=float(current["relative_humidity_2m"]),
                rain_current_mm=float(current.get("precipitation") or 0.0),
                rain_7day_mm=_sum_past(precipitation, self.RAIN_WINDOW_DAYS, self.FORECAST_DAYS),
                weather_code=int(current.get("weather_code") or 0),
                temperature_min_c=float(t_min[-1]) if t_min and t_min[-1] is not None else None,
                temperature_max_c=float(t_max[-1]) if t_max and t_max[-1] is not None else None,
                wind_speed_kmh=current.get("wind_speed_10m"),
            )
        except (KeyError, ValueError, TypeError) as e:
            log.error(f"Failed to parse weather response: {e}")
            return None

        log.debug(f"Weather at ({lat:.4f}, {lon:.4f}): {result.temperature_c}°C, "
                  f"rain {result.rain_current_mm} mm now / {result.rain_7day_mm} mm 7d")
        return result


# Singleton
_loader: Optional[WeatherLoader] = None

def get_weather_loader() -> WeatherLoader:
    """Get singleton weather loader."""
    global _loader
    if _loader is None:
        _loader = WeatherLoader()
    return _loader

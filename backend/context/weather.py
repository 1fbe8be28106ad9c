from typing import Optional

import requests

from backend.context.models import WeatherReport

OPENWEATHER_ENDPOINT = "https://api.openweathermap.org/data/2.5/weather"


class OpenWeatherClient:
    """
    Current conditions only. Historical weather needs a paid tier, so the
    model is allowed to search the web for it instead.
    """

    def __init__(self, api_key: Optional[str], endpoint: str = OPENWEATHER_ENDPOINT, timeout: int = 10):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout

    def fetch(self, latitude: float, longitude: float) -> Optional[WeatherReport]:
        if not self.api_key:
            print("[Weather] OPENWEATHER_API_KEY not configured, skipping")
            return None

        params = {
            "lat": latitude,
            "lon": longitude,
            "appid": self.api_key,
            "units": "metric",
        }
        response = requests.get(self.endpoint, params=params, timeout=self.timeout)
        response.raise_for_status()

        data = response.json()
        weather = data.get("weather") or []
        main = data.get("main") or {}

        return WeatherReport(
            description=(weather[0].get("description") if weather else None) or "Unknown",
            temperature=main.get("temp"),
            conditions=[w["main"] for w in weather if w.get("main")],
        )

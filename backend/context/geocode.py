from typing import Optional

import requests

MAPBOX_GEOCODE_ENDPOINT = "https://api.mapbox.com/geocoding/v5/mapbox.places"


class MapboxGeocoder:
    def __init__(self, token: Optional[str], endpoint: str = MAPBOX_GEOCODE_ENDPOINT, timeout: int = 10):
        self.token = token
        self.endpoint = endpoint
        self.timeout = timeout

    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        if not self.token:
            print("[Geocode] MAPBOX_TOKEN not configured, skipping")
            return None

        # Mapbox takes lng,lat order
        url = f"{self.endpoint}/{longitude},{latitude}.json"
        response = requests.get(url, params={"access_token": self.token}, timeout=self.timeout)
        response.raise_for_status()

        features = response.json().get("features") or []
        if not features:
            return None
        return features[0].get("place_name") or None

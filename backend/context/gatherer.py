from datetime import datetime
from typing import Optional

from backend.context.geocode import MapboxGeocoder
from backend.context.models import ContextSnapshot
from backend.context.sun import SunriseSunsetClient
from backend.context.weather import OpenWeatherClient


class ContextGatherer:
    """
    Collects sunrise/sunset, weather and place name for a coordinate.

    Never raises: a failing lookup leaves its signal empty and verification
    continues with whatever context is left.
    """

    def __init__(
        self,
        sun_client: SunriseSunsetClient,
        weather_client: OpenWeatherClient,
        geocoder: MapboxGeocoder,
    ):
        self.sun_client = sun_client
        self.weather_client = weather_client
        self.geocoder = geocoder

    def gather(
        self,
        latitude: Optional[float],
        longitude: Optional[float],
        capture_date: Optional[datetime],
    ) -> ContextSnapshot:
        snapshot = ContextSnapshot(
            latitude=latitude,
            longitude=longitude,
            capture_date=capture_date,
        )

        if latitude is None or longitude is None:
            print("[ContextGatherer] No coordinates, skipping context lookups")
            return snapshot

        if capture_date is not None:
            try:
                snapshot.sun = self.sun_client.fetch(latitude, longitude, capture_date)
            except Exception as e:
                print(f"[ContextGatherer] Sunrise/sunset unavailable: {e}")

            try:
                snapshot.weather = self.weather_client.fetch(latitude, longitude)
            except Exception as e:
                print(f"[ContextGatherer] Weather unavailable: {e}")

        try:
            snapshot.location_name = self.geocoder.reverse(latitude, longitude)
        except Exception as e:
            print(f"[ContextGatherer] Reverse geocode unavailable: {e}")

        print(
            f"[ContextGatherer] sun={'yes' if snapshot.sun else 'no'} "
            f"weather={'yes' if snapshot.weather else 'no'} "
            f"place={snapshot.location_name or 'unknown'}"
        )
        return snapshot

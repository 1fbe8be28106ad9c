from datetime import datetime, timezone
from typing import Optional

import requests

from backend.context.models import SunTimes

SUNRISE_SUNSET_ENDPOINT = "https://api.sunrise-sunset.org/json"


def minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def is_daytime(capture_minutes: int, sunrise_minutes: int, sunset_minutes: int) -> bool:
    """
    True when the capture time-of-day lies between sunrise and sunset.

    When sunset's time-of-day is numerically before sunrise (the daylight
    window crosses midnight in this frame) either side of midnight counts.
    """
    if sunset_minutes > sunrise_minutes:
        return sunrise_minutes <= capture_minutes <= sunset_minutes
    return capture_minutes >= sunrise_minutes or capture_minutes <= sunset_minutes


def local_frame(capture_date: datetime) -> datetime:
    # Naive capture timestamps are stored as UTC
    if capture_date.tzinfo is None:
        return capture_date.replace(tzinfo=timezone.utc)
    return capture_date


class SunriseSunsetClient:
    def __init__(self, endpoint: str = SUNRISE_SUNSET_ENDPOINT, timeout: int = 10):
        self.endpoint = endpoint
        self.timeout = timeout

    def fetch(self, latitude: float, longitude: float, capture_date: datetime) -> Optional[SunTimes]:
        capture = local_frame(capture_date)
        params = {
            "lat": latitude,
            "lng": longitude,
            "date": capture.date().isoformat(),
            "formatted": 0,
        }
        response = requests.get(self.endpoint, params=params, timeout=self.timeout)
        response.raise_for_status()

        data = response.json()
        if data.get("status") != "OK":
            raise ValueError(f"Invalid sunrise/sunset response: {data.get('status')}")

        # API answers in UTC; compare in the capture's own offset
        sunrise = datetime.fromisoformat(data["results"]["sunrise"]).astimezone(capture.tzinfo)
        sunset = datetime.fromisoformat(data["results"]["sunset"]).astimezone(capture.tzinfo)

        return SunTimes(
            sunrise=sunrise,
            sunset=sunset,
            is_daytime=is_daytime(
                minutes_of_day(capture),
                minutes_of_day(sunrise),
                minutes_of_day(sunset),
            ),
        )

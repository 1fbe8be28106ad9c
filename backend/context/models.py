from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class SunTimes(BaseModel):
    sunrise: datetime
    sunset: datetime
    is_daytime: bool


class WeatherReport(BaseModel):
    description: str
    temperature: Optional[float] = None
    conditions: List[str] = Field(default_factory=list)


class ContextSnapshot(BaseModel):
    """
    Ground-truth signals for one verification attempt. Any signal may be
    missing; callers treat None as "no data".
    """

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    capture_date: Optional[datetime] = None
    sun: Optional[SunTimes] = None
    weather: Optional[WeatherReport] = None
    location_name: Optional[str] = None

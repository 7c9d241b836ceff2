from typing import Optional

from pydantic import BaseModel, Field


class SafetyCity(BaseModel):
    city_id: str = Field(..., min_length=1)
    fatalities_per_lakh: float

    total_fatalities: Optional[int] = None
    population_lakhs: Optional[float] = None
    pedestrian_fatalities: Optional[int] = None
    cyclist_fatalities: Optional[int] = None
    source: Optional[str] = None


class SafetyPayload(BaseModel):
    year: int = Field(..., ge=1900, le=2100)
    cities: list[SafetyCity] = Field(..., min_length=1)

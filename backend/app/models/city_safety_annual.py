from sqlalchemy import Column, DateTime, Float, Integer, Text
from sqlalchemy.sql import func

from app.core.db import Base


class CitySafetyAnnual(Base):
    __tablename__ = "city_safety_annual"

    city_id = Column(Text, primary_key=True)
    year = Column(Integer, primary_key=True)

    fatalities_per_lakh = Column(Float, nullable=False)
    total_fatalities = Column(Integer, nullable=True)
    population_lakhs = Column(Float, nullable=True)
    pedestrian_fatalities = Column(Integer, nullable=True)
    cyclist_fatalities = Column(Integer, nullable=True)
    source = Column(Text, nullable=True)

    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

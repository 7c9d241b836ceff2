from sqlalchemy import Column, Date, DateTime, Float, Integer, Text, UniqueConstraint
from sqlalchemy.sql import func

from app.core.db import Base


class AirQualityDaily(Base):
    __tablename__ = "air_quality_daily"
    __table_args__ = (UniqueConstraint("city_id", "date", name="uq_air_quality_daily_city_date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)

    city_id = Column(Text, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)

    pm25_avg = Column(Float, nullable=True)
    pm25_max = Column(Float, nullable=True)
    pm10_avg = Column(Float, nullable=True)
    stations_reporting = Column(Integer, nullable=True)
    source = Column(Text, nullable=False, default="openaq")

    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

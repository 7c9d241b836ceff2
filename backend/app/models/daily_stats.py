from sqlalchemy import Column, Date, DateTime, Float, Integer
from sqlalchemy.sql import func

from app.core.db import Base


class DailyStat(Base):
    __tablename__ = "daily_stats"

    date = Column(Date, primary_key=True)

    facilities = Column(Integer, nullable=True)
    riders = Column(Integer, nullable=False, default=0)
    rides = Column(Integer, nullable=False, default=0)
    distance = Column(Float, nullable=False, default=0)
    co2_saved = Column(Float, nullable=False, default=0)
    petrol_saved = Column(Float, nullable=False, default=0)

    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

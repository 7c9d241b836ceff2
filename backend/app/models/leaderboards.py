from sqlalchemy import Column, DateTime, Float, Integer, Text
from sqlalchemy.sql import func

from app.core.db import Base


class LeaderboardEntry(Base):
    __tablename__ = "leaderboards"

    company_name = Column(Text, primary_key=True)

    rank = Column(Integer, nullable=True)
    percentage = Column(Float, nullable=True)
    riders = Column(Integer, nullable=False, default=0)
    rides = Column(Integer, nullable=False, default=0)
    carbon_credits = Column(Integer, nullable=False, default=0)
    city_id = Column(Integer, nullable=True, index=True)

    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

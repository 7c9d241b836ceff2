from sqlalchemy import BigInteger, Column, DateTime, Float, Integer, Text
from sqlalchemy.sql import func

from app.core.db import Base
from app.models.types import JsonColumn


class ActivityRoute(Base):
    __tablename__ = "activity_routes"

    activity_id = Column(BigInteger, primary_key=True, autoincrement=False)
    activity_type = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True, index=True)

    distance = Column(Float, nullable=False, default=0)
    moving_time = Column(Integer, nullable=False, default=0)

    start_lat = Column(Float, nullable=True)
    start_lng = Column(Float, nullable=True)
    end_lat = Column(Float, nullable=True)
    end_lng = Column(Float, nullable=True)

    direction = Column(Text, nullable=True)
    facility_id = Column(Integer, nullable=True)
    company_id = Column(Integer, nullable=True)
    city_id = Column(Integer, nullable=True, index=True)
    path = Column(JsonColumn, nullable=True)

    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

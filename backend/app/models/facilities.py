from sqlalchemy import Boolean, Column, DateTime, Float, Integer, Text
from sqlalchemy.sql import func

from app.core.db import Base
from app.models.types import JsonColumn


class Facility(Base):
    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(Text, nullable=True)
    approved = Column(Boolean, nullable=False, default=False)

    activities = Column(Integer, nullable=False, default=0)
    distance = Column(Float, nullable=False, default=0)
    emp_count = Column(Integer, nullable=False, default=0)

    city = Column(Text, nullable=True)
    city_id = Column(Integer, nullable=True, index=True)
    latlngs = Column(JsonColumn, nullable=True)

    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

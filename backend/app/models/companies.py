from sqlalchemy import Column, DateTime, Float, Integer, Text
from sqlalchemy.sql import func

from app.core.db import Base
from app.models.types import JsonColumn


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(Text, nullable=True)

    activities = Column(Integer, nullable=False, default=0)
    distance = Column(Float, nullable=False, default=0)
    emp_count = Column(Integer, nullable=False, default=0)
    facilities = Column(JsonColumn, nullable=True)

    synced_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

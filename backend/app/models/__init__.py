from app.models.activity_routes import ActivityRoute
from app.models.air_quality_daily import AirQualityDaily
from app.models.city_safety_annual import CitySafetyAnnual
from app.models.companies import Company
from app.models.daily_stats import DailyStat
from app.models.facilities import Facility
from app.models.leaderboards import LeaderboardEntry

__all__ = [
    "ActivityRoute",
    "AirQualityDaily",
    "CitySafetyAnnual",
    "Company",
    "DailyStat",
    "Facility",
    "LeaderboardEntry",
]

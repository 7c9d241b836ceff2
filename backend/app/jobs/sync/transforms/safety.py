from app.jobs.sync.types import CanonicalRow

CONFLICT_KEY = ("city_id", "year")


def safety_to_row(city, *, year: int) -> CanonicalRow:
    """city is a validated SafetyCity; optional counts stay null when not reported."""
    return {
        "city_id": city.city_id,
        "year": year,
        "fatalities_per_lakh": city.fatalities_per_lakh,
        "total_fatalities": city.total_fatalities,
        "population_lakhs": city.population_lakhs,
        "pedestrian_fatalities": city.pedestrian_fatalities,
        "cyclist_fatalities": city.cyclist_fatalities,
        "source": city.source,
    }

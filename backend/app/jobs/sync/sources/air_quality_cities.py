# OpenAQ v3 PM2.5 sensor ids near each city, found through
#   /v3/locations?coordinates={lat},{lng}&radius=25000&parameters_id=2
# and then /v3/locations/{id}/sensors. Empty lists have no live sensors yet.
CITY_PM25_SENSORS: dict[str, list[int]] = {
    "ahmedabad": [],
    "bengaluru": [12235361, 12235370, 12235267, 12235240, 12235285, 12235258, 12235249],
    "chennai": [12235653, 12235531, 12235796, 12236299, 12236308, 12236274, 12236290],
    "delhi": [
        12234787, 12234796, 12235610, 12234702, 12234684,
        12234708, 12234769, 12235187, 12234690, 12234753,
    ],
    "hyderabad": [12235583, 12235400, 12242121, 12242129, 12237098, 12237125, 12237116],
    "indore": [12234921, 12237818, 12238477, 12238486, 12815122, 12238495],
    "kochi": [12235842],
    "kolkata": [],
    "mumbai": [],
    "pune": [12235540, 12236443, 12236457, 12236463, 12236449, 12304615, 12237987],
}

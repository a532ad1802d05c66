from pathlib import Path

# Base paths
ROOT = Path("data")
RAW = ROOT / "raw"
OUT = ROOT / "out"

# Inputs (NYPD Shooting Incident Data, historic)
INCIDENTS_CSV = RAW / "nypd_shooting_incidents.csv"  # local cache of the download
INCIDENTS_URL = "https://data.cityofnewyork.us/api/views/833y-fsy8/rows.csv?accessType=DOWNLOAD"

# Source column -> canonical column
COLUMN_ALIASES = {
    "INCIDENT_KEY": "incident_key",
    "OCCUR_DATE": "occurred_on",
    "BORO": "region",
    "VIC_RACE": "victim_race",
    "STATISTICAL_MURDER_FLAG": "is_fatal",
}

DATE_COLUMN = "occurred_on"
DATE_FORMAT = "%m/%d/%Y"
FATAL_COLUMN = "is_fatal"
REGION_COLUMN = "region"
RACE_COLUMN = "victim_race"

# Raw columns not used by the analysis (sparse, free text or location detail)
DROP_COLUMNS = [
    "OCCUR_TIME",
    "LOC_OF_OCCUR_DESC",
    "PRECINCT",
    "JURISDICTION_CODE",
    "LOC_CLASSFCTN_DESC",
    "LOCATION_DESC",
    "PERP_AGE_GROUP",
    "PERP_SEX",
    "PERP_RACE",
    "VIC_AGE_GROUP",
    "VIC_SEX",
    "X_COORD_CD",
    "Y_COORD_CD",
    "Latitude",
    "Longitude",
    "Lon_Lat",
]

REGIONS = ["BRONX", "BROOKLYN", "MANHATTAN", "QUEENS", "STATEN ISLAND"]

# 2014 census estimates
REGION_POPULATION = {
    "BRONX": 1438159,
    "BROOKLYN": 2621793,
    "MANHATTAN": 1636268,
    "QUEENS": 2321580,
    "STATEN ISLAND": 473279,
}

# Races with enough incidents per borough to fit the rate model
REGRESSION_RACES = ["BLACK", "WHITE HISPANIC", "BLACK HISPANIC", "WHITE"]

# Display rounding (applied only when tables leave the pipeline)
PROPORTION_DECIMALS = 2
FRACTION_DECIMALS = 3
PERCENT_DECIMALS = 1

# Outputs
OUT_REGION_RATES = "region_rates"
OUT_REGION_RACE = "region_race_proportions"
OUT_RACE_REGION_RATES = "race_region_rates"
OUT_PER_CAPITA = "region_per_capita"
OUT_REGRESSION_TERMS = "regression_terms"
OUT_REGRESSION_SUMMARY = "regression_summary.txt"
OUT_STATS = "report_stats.json"

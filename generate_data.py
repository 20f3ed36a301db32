import random
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pandas as pd

# --- Configuration for Data Generation ---
# Writes a synthetic daily report in the Johns Hopkins CSSE layout so the
# dashboard has seed data offline. Counts are random; coordinates are real.
RANDOM_SEED = 42
LAST_UPDATE = datetime.now(timezone.utc).replace(microsecond=0)
OUTPUT_PATH = Path("data_sources") / "reports_sample.csv"

# (country, province, lat, lon, population in millions)
REGIONS = [
    ("Afghanistan", "", 33.93911, 67.709953, 40.1),
    ("Albania", "", 41.1533, 20.1683, 2.8),
    ("Brazil", "", -14.235, -51.9253, 214.3),
    ("Canada", "Alberta", 53.9333, -116.5765, 4.4),
    ("Canada", "British Columbia", 53.7267, -127.6476, 5.2),
    ("Canada", "Ontario", 51.2538, -85.3232, 14.9),
    ("Canada", "Quebec", 52.9399, -73.5491, 8.6),
    ("China", "Beijing", 40.1824, 116.4142, 21.9),
    ("China", "Hubei", 30.9756, 112.2707, 58.3),
    ("China", "Shanghai", 31.202, 121.4491, 24.9),
    ("France", "", 46.2276, 2.2137, 67.8),
    ("Germany", "", 51.165691, 10.451526, 83.2),
    ("India", "", 20.593684, 78.96288, 1408.0),
    ("Iran", "", 32.427908, 53.688046, 87.9),
    ("Italy", "", 41.87194, 12.56738, 59.1),
    ("Japan", "", 36.204824, 138.252924, 125.7),
    ("Korea, South", "", 35.907757, 127.766922, 51.7),
    ("South Africa", "", -30.5595, 22.9375, 59.4),
    ("Spain", "", 40.463667, -3.74922, 47.4),
    ("United Kingdom", "England", 52.3555, -1.1743, 56.5),
    ("United Kingdom", "Scotland", 56.4907, -4.2026, 5.5),
    ("United Kingdom", "Wales", 52.1307, -3.7837, 3.1),
    ("US", "California", 36.1162, -119.6816, 39.2),
    ("US", "New York", 42.1657, -74.9481, 19.8),
    ("US", "Texas", 31.0545, -97.5635, 29.5),
    ("US", "Florida", 27.7663, -81.6868, 21.8),
]

ATTACK_RATE_RANGE = (0.05, 0.45)
FATALITY_RATE_RANGE = (0.002, 0.02)

random.seed(RANDOM_SEED)
rng = np.random.default_rng(RANDOM_SEED)

print("Starting data generation...")

rows = []
for country, province, lat, lon, population_m in REGIONS:
    confirmed = int(population_m * 1_000_000 * rng.uniform(*ATTACK_RATE_RANGE))
    deaths = int(confirmed * rng.uniform(*FATALITY_RATE_RANGE))
    rows.append({
        "FIPS": "",
        "Admin2": "",
        "Province_State": province,
        "Country_Region": country,
        "Last_Update": LAST_UPDATE.strftime("%Y-%m-%d %H:%M:%S"),
        "Lat": round(lat + random.uniform(-0.05, 0.05), 6),
        "Long_": round(lon + random.uniform(-0.05, 0.05), 6),
        "Confirmed": confirmed,
        "Deaths": deaths,
        "Recovered": "",
        "Active": "",
        "Combined_Key": f"{province}, {country}" if province else country,
    })

# An unlocated bucket and a zero-case country, both present in the real feed.
rows.append({**rows[3], "Province_State": "Unknown", "Lat": "", "Long_": "", "Confirmed": 0, "Deaths": 0,
             "Combined_Key": "Unknown, Canada"})
rows.append({**rows[0], "Country_Region": "Nauru", "Lat": -0.5228, "Long_": 166.9315, "Confirmed": 0, "Deaths": 0,
             "Combined_Key": "Nauru"})

report_df = pd.DataFrame(rows)

# --- Save to CSV ---
OUTPUT_PATH.parent.mkdir(parents=True, exist_ok=True)
report_df.to_csv(OUTPUT_PATH, index=False)

print(f"\nGenerated {len(report_df)} report rows across {report_df['Country_Region'].nunique()} countries.")
print(f"Total confirmed: {report_df['Confirmed'].sum():,}")
print(f"Data saved to {OUTPUT_PATH.resolve()}")

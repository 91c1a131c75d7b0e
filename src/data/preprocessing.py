import logging
import numpy as np
import pandas as pd
from typing import List, Dict, Any
from pathlib import Path

from config import RAW_DATA_DIR, INPUT_CONFIG
from clustering.exceptions import MalformedInputError
from clustering.points import IncidentPoint

logger = logging.getLogger(__name__)

# Header occupies line 1 of the CSV
FIRST_DATA_LINE = 2

class IncidentDataPreprocessor:
    def __init__(self, input_config: Dict[str, str] = None):
        self.config = dict(INPUT_CONFIG)
        if input_config:
            self.config.update(input_config)
        self.raw_data = None
        self.processed_data = None
        self.dropped_rows = 0

    @property
    def required_columns(self) -> List[str]:
        return [
            self.config["lat_column"], self.config["lon_column"],
            self.config["weapon_column"], self.config["race_column"]
        ]

    def load_incident_data(self, data_path: Path = None) -> pd.DataFrame:
        """Load the raw incident CSV with every field kept as text"""
        if data_path is None:
            data_path = RAW_DATA_DIR / self.config["filename"]

        df = pd.read_csv(data_path, dtype=str, keep_default_na=False)

        missing = [col for col in self.required_columns if col not in df.columns]
        if missing:
            raise ValueError(f"{data_path} is missing required columns: {', '.join(missing)}")

        logger.info(f"Loaded {len(df)} records from {data_path}")
        self.raw_data = df
        return df

    def filter_complete_records(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop rows where any required field is blank"""
        fields = df[self.required_columns].apply(lambda col: col.str.strip())
        complete = (fields != "").all(axis=1)

        self.dropped_rows = int((~complete).sum())
        if self.dropped_rows:
            logger.info(f"Dropped {self.dropped_rows} records with missing fields")

        filtered = df.loc[complete].copy()
        filtered[self.required_columns] = fields.loc[complete]
        return filtered

    def parse_coordinates(self, df: pd.DataFrame) -> pd.DataFrame:
        """Convert coordinate columns to floats, rejecting anything non-finite"""
        df = df.copy()

        for column in [self.config["lat_column"], self.config["lon_column"]]:
            values = pd.to_numeric(df[column], errors="coerce")
            bad = ~np.isfinite(values.to_numpy(dtype=float))
            if bad.any():
                position = int(np.argmax(bad))
                row = int(df.index[position]) + FIRST_DATA_LINE
                raise MalformedInputError(row, column, df[column].iloc[position])
            df[column] = values.astype(float)

        return df

    def to_points(self, df: pd.DataFrame) -> List[IncidentPoint]:
        lat_col, lon_col, weapon_col, race_col = self.required_columns
        return [
            IncidentPoint(float(lat), float(lon), weapon, race)
            for lat, lon, weapon, race in zip(df[lat_col], df[lon_col], df[weapon_col], df[race_col])
        ]

    def get_data_summary(self, df: pd.DataFrame) -> Dict[str, Any]:
        """Generate summary statistics for the cleaned dataset"""
        lat_col, lon_col, weapon_col, race_col = self.required_columns

        summary = {
            "total_records": len(df),
            "dropped_records": self.dropped_rows,
            "weapon_distribution": df[weapon_col].value_counts().to_dict(),
            "race_distribution": df[race_col].value_counts().to_dict(),
            "lat_range": {
                "min": float(df[lat_col].min()) if len(df) else None,
                "max": float(df[lat_col].max()) if len(df) else None
            },
            "lon_range": {
                "min": float(df[lon_col].min()) if len(df) else None,
                "max": float(df[lon_col].max()) if len(df) else None
            }
        }

        return summary

    def process_incident_data(self, data_path: Path = None) -> List[IncidentPoint]:
        """Complete loading pipeline: read, filter, validate, convert"""
        df = self.load_incident_data(data_path)
        df = self.filter_complete_records(df)
        df = self.parse_coordinates(df)

        summary = self.get_data_summary(df)
        logger.debug(f"Data summary: {summary}")

        self.processed_data = df
        return self.to_points(df)

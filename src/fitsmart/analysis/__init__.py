"""Workout history import."""

from .csv_normalizer import (
    ColumnMapping,
    CsvImport,
    CsvVendor,
    detect_schema,
    import_workout_csv,
    parse_rows,
    parse_workout_csv,
    serialize_for_transmission,
    split_csv_line,
)

__all__ = [
    "ColumnMapping",
    "CsvImport",
    "CsvVendor",
    "detect_schema",
    "import_workout_csv",
    "parse_rows",
    "parse_workout_csv",
    "serialize_for_transmission",
    "split_csv_line",
]

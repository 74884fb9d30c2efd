"""
Workout History CSV Normalization Module.

Converts vendor-specific workout exports (Hevy, Strong, or a generic
date/exercise/weight/reps sheet in English or Spanish) into canonical
WorkoutSession objects, then condenses the most recent sessions into a
compact text block for the reasoning engine.

Pipeline:
- split_csv_line: quote-aware field splitting
- detect_schema: header -> ColumnMapping (vendor strategies in priority order)
- parse_rows: rows -> sessions grouped and deduplicated by date
- serialize_for_transmission: newest sessions -> bounded prompt text
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..exceptions import CsvUnmappableError
from ..models.workouts import SetType, WorkoutSession, WorkoutSet


logger = logging.getLogger(__name__)

DEFAULT_SESSION_TITLE = "Entrenamiento"
DEFAULT_MAX_SESSIONS = 5
TRANSMISSION_HEADER = "HISTORIAL DE ENTRENAMIENTO (Últimas sesiones):"

# Full timestamps seen in vendor exports, collapsed to their calendar date
_TIMESTAMP_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
    "%d %b %Y, %H:%M",
    "%d %b %Y %H:%M",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
)

# Date-only keys accepted when ordering sessions
_DATE_KEY_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y")

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

_SET_TYPE_ALIASES: Dict[str, SetType] = {
    "normal": SetType.NORMAL,
    "warmup": SetType.WARMUP,
    "warm_up": SetType.WARMUP,
    "w": SetType.WARMUP,
    "dropset": SetType.DROP,
    "drop": SetType.DROP,
    "d": SetType.DROP,
    "failure": SetType.FAILURE,
    "f": SetType.FAILURE,
}


class CsvVendor(str, Enum):
    """Column mapping strategy that matched the header."""
    HEVY = "hevy"
    STRONG = "strong"
    GENERIC = "generic"


@dataclass(frozen=True)
class ColumnMapping:
    """Column indices for the canonical fields. Date and exercise are mandatory."""
    vendor: CsvVendor
    date: int
    exercise: int
    title: Optional[int] = None
    weight: Optional[int] = None
    reps: Optional[int] = None
    rpe: Optional[int] = None
    set_type: Optional[int] = None


@dataclass
class CsvImport:
    """Result of importing one export file."""
    vendor: CsvVendor
    sessions: List[WorkoutSession]

    @property
    def total_sets(self) -> int:
        return sum(len(s.sets) for s in self.sessions)


# ============================================================================
# Field splitting
# ============================================================================

def split_csv_line(line: str, delimiter: str = ",") -> List[str]:
    """
    Split a CSV line, ignoring delimiters inside double quotes.

    Surrounding whitespace and quote characters are stripped per field.
    """
    fields: List[str] = []
    start = 0
    in_quotes = False
    for i, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append(_clean_field(line[start:i]))
            start = i + 1
    fields.append(_clean_field(line[start:]))
    return fields


def _clean_field(raw: str) -> str:
    return raw.strip().strip('"').strip()


# ============================================================================
# Schema detection
# ============================================================================

def _index(headers: Sequence[str], name: str) -> Optional[int]:
    try:
        return list(headers).index(name)
    except ValueError:
        return None


def _find(headers: Sequence[str], *tokens: str) -> Optional[int]:
    for i, header in enumerate(headers):
        if any(token in header for token in tokens):
            return i
    return None


def detect_schema(headers: Sequence[str]) -> ColumnMapping:
    """
    Map a lower-cased header row to column indices.

    Strategies are tried in priority order: Hevy (title + weight_kg),
    Strong (workout name + weight), then a generic substring search for
    date/exercise/weight/reps tokens in English or Spanish.

    Raises:
        CsvUnmappableError: If the date or exercise column cannot be located.
    """
    headers = [h.strip().lower() for h in headers]

    if "title" in headers and "weight_kg" in headers:
        vendor = CsvVendor.HEVY
        date_idx = _index(headers, "start_time")
        exercise_idx = _index(headers, "exercise_title")
        extra = dict(
            title=_index(headers, "title"),
            weight=_index(headers, "weight_kg"),
            reps=_index(headers, "reps"),
            rpe=_index(headers, "rpe"),
            set_type=_index(headers, "set_type"),
        )
    elif "workout name" in headers and "weight" in headers:
        vendor = CsvVendor.STRONG
        date_idx = _index(headers, "date")
        exercise_idx = _index(headers, "exercise name")
        extra = dict(
            title=_index(headers, "workout name"),
            weight=_index(headers, "weight"),
            reps=_index(headers, "reps"),
            rpe=_index(headers, "rpe"),
            set_type=_index(headers, "set order"),
        )
    else:
        vendor = CsvVendor.GENERIC
        date_idx = _find(headers, "date", "fecha")
        exercise_idx = _find(headers, "exercise", "ejercicio")
        extra = dict(
            weight=_find(headers, "weight", "peso"),
            reps=_find(headers, "reps", "repeticiones"),
        )

    if date_idx is None or exercise_idx is None:
        raise CsvUnmappableError(headers=list(headers))

    mapping = ColumnMapping(vendor=vendor, date=date_idx, exercise=exercise_idx, **extra)
    logger.debug(f"CSV header mapped with {vendor.value} strategy: {mapping}")
    return mapping


# ============================================================================
# Row parsing
# ============================================================================

def date_key(raw: str) -> str:
    """Collapse a raw timestamp to its calendar-date key."""
    raw = raw.strip()
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date().isoformat()
        except ValueError:
            continue
    return raw.split(" ")[0]


def _parse_number(raw: Optional[str]) -> Optional[float]:
    """Parse the leading number of a cell, accepting a decimal comma."""
    if raw is None:
        return None
    match = _LEADING_NUMBER.match(raw.strip().replace(",", "."))
    if not match:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def _cell(cols: Sequence[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(cols):
        return None
    return cols[index]


def _set_type(raw: Optional[str]) -> SetType:
    if not raw:
        return SetType.NORMAL
    return _SET_TYPE_ALIASES.get(raw.strip().lower(), SetType.NORMAL)


def parse_rows(rows: Sequence[Sequence[str]], mapping: ColumnMapping) -> List[WorkoutSession]:
    """
    Group data rows into sessions keyed by date.

    The first row is the header and is skipped. Rows with fewer columns
    than the header are ignored. Same-day rows merge into one session that
    keeps the title of its first row; sets keep file order.

    Returns:
        Sessions sorted newest first.
    """
    if not rows:
        return []

    width = len(rows[0])
    sessions: Dict[str, WorkoutSession] = {}
    skipped = 0

    for cols in rows[1:]:
        if len(cols) < width:
            skipped += 1
            continue

        key = date_key(cols[mapping.date])
        session = sessions.get(key)
        if session is None:
            title = _cell(cols, mapping.title) if mapping.title is not None else None
            session = WorkoutSession(date=key, title=title or DEFAULT_SESSION_TITLE)
            sessions[key] = session

        session.sets.append(
            WorkoutSet(
                exercise=cols[mapping.exercise],
                weight=max(_parse_number(_cell(cols, mapping.weight)) or 0.0, 0.0),
                reps=max(_parse_number(_cell(cols, mapping.reps)) or 0.0, 0.0),
                rpe=_parse_number(_cell(cols, mapping.rpe)),
                set_type=_set_type(_cell(cols, mapping.set_type)),
            )
        )

    if skipped:
        logger.info(f"Skipped {skipped} malformed CSV rows")

    return sort_sessions(list(sessions.values()))


def _calendar_date(key: str) -> Optional[date]:
    for fmt in _DATE_KEY_FORMATS:
        try:
            return datetime.strptime(key, fmt).date()
        except ValueError:
            continue
    return None


def sort_sessions(sessions: Sequence[WorkoutSession]) -> List[WorkoutSession]:
    """Order sessions by calendar date, newest first; undated keys go last."""
    dated = [(d, s) for s in sessions if (d := _calendar_date(s.date)) is not None]
    undated = [s for s in sessions if _calendar_date(s.date) is None]
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [s for _, s in dated] + undated


def import_workout_csv(text: str) -> CsvImport:
    """
    Parse a full CSV export.

    Raises:
        CsvUnmappableError: If no mapping strategy matches the header.
    """
    lines = [line for line in text.lstrip("\ufeff").splitlines() if line.strip()]
    if not lines:
        raise CsvUnmappableError()

    header = split_csv_line(lines[0].lower())
    mapping = detect_schema(header)
    rows = [header] + [split_csv_line(line) for line in lines[1:]]
    return CsvImport(vendor=mapping.vendor, sessions=parse_rows(rows, mapping))


def parse_workout_csv(text: str) -> List[WorkoutSession]:
    """Parse a CSV export into sessions sorted newest first."""
    return import_workout_csv(text).sessions


# ============================================================================
# Serialization
# ============================================================================

def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_set(workout_set: WorkoutSet) -> str:
    """Render a set as ``<weight>kg x <reps>`` with an optional RPE suffix."""
    text = f"{_format_number(workout_set.weight)}kg x {_format_number(workout_set.reps)}"
    if workout_set.rpe:
        text += f" @RPE{_format_number(workout_set.rpe)}"
    return text


def serialize_for_transmission(
    sessions: Sequence[WorkoutSession],
    max_sessions: int = DEFAULT_MAX_SESSIONS,
) -> str:
    """
    Condense the most recent sessions into prompt text.

    One header line per session, then one line per distinct exercise
    listing its sets in order.
    """
    lines = [TRANSMISSION_HEADER]
    for session in sort_sessions(sessions)[:max_sessions]:
        lines.append("")
        lines.append(f"FECHA: {session.date} | TÍTULO: {session.title}")

        by_exercise: Dict[str, List[str]] = {}
        for workout_set in session.sets:
            by_exercise.setdefault(workout_set.exercise, []).append(format_set(workout_set))

        for name, set_texts in by_exercise.items():
            lines.append(f"- {name}: {', '.join(set_texts)}")

    return "\n".join(lines) + "\n"

"""Tests for the workout history CSV normalizer."""

import pytest

from fitsmart.analysis.csv_normalizer import (
    TRANSMISSION_HEADER,
    CsvVendor,
    date_key,
    detect_schema,
    format_set,
    import_workout_csv,
    parse_rows,
    parse_workout_csv,
    serialize_for_transmission,
    sort_sessions,
    split_csv_line,
)
from fitsmart.exceptions import CsvUnmappableError
from fitsmart.models.workouts import SetType, WorkoutSession, WorkoutSet


STRONG_CSV = """Date,Workout Name,Duration,Exercise Name,Set Order,Weight,Reps,Distance,Seconds,Notes,Workout Notes,RPE
2024-01-10 07:30:00,Morning A,1h,Squat (Barbell),1,100,5,0,0,,,
2024-01-10 07:30:00,Morning A,1h,Squat (Barbell),2,100,5,0,0,,,8
2024-01-12 07:30:00,Morning B,1h,Bench Press (Barbell),W,40,10,0,0,,,
2024-01-12 07:30:00,Morning B,1h,Bench Press (Barbell),1,70,8,0,0,,,
2024-01-12 07:30:00,Morning B,1h,Bench Press (Barbell),D,50,12,0,0,,,
2023-12-30 09:00:00,Old,1h,Deadlift (Barbell),1,120,5,0,0,,,
"""


class TestSplitCsvLine:
    """Quote-aware field splitting."""

    def test_delimiter_inside_quotes_is_not_a_boundary(self):
        assert split_csv_line('a,"b,c",d') == ["a", "b,c", "d"]

    def test_strips_whitespace_and_quotes(self):
        assert split_csv_line(' "x" , y ,"z"') == ["x", "y", "z"]

    def test_keeps_empty_fields(self):
        assert split_csv_line("a,,b,") == ["a", "", "b", ""]

    def test_custom_delimiter(self):
        assert split_csv_line('a;"b;c"', delimiter=";") == ["a", "b;c"]


class TestDetectSchema:
    """Column mapping strategies and their priority."""

    def test_hevy_headers(self):
        headers = ["title", "start_time", "exercise_title", "set_type", "weight_kg", "reps", "rpe"]
        mapping = detect_schema(headers)
        assert mapping.vendor == CsvVendor.HEVY
        assert (mapping.date, mapping.exercise, mapping.title) == (1, 2, 0)
        assert (mapping.weight, mapping.reps, mapping.rpe, mapping.set_type) == (4, 5, 6, 3)

    def test_strong_headers(self):
        headers = ["date", "workout name", "exercise name", "set order", "weight", "reps"]
        mapping = detect_schema(headers)
        assert mapping.vendor == CsvVendor.STRONG
        assert (mapping.date, mapping.exercise, mapping.title, mapping.weight) == (0, 2, 1, 4)
        assert mapping.rpe is None

    def test_vendor_a_wins_over_generic_tokens(self):
        # Also matches the generic date/exercise/weight/reps search
        headers = ["date", "exercise", "title", "start_time", "exercise_title", "weight_kg", "reps"]
        mapping = detect_schema(headers)
        assert mapping.vendor == CsvVendor.HEVY
        assert mapping.date == 3
        assert mapping.exercise == 4

    def test_generic_spanish_headers(self):
        mapping = detect_schema(["Fecha", "Ejercicio", "Peso (kg)", "Repeticiones"])
        assert mapping.vendor == CsvVendor.GENERIC
        assert (mapping.date, mapping.exercise, mapping.weight, mapping.reps) == (0, 1, 2, 3)
        assert mapping.title is None

    def test_generic_english_headers(self):
        mapping = detect_schema(["workout date", "exercise name", "weight", "reps"])
        assert mapping.vendor == CsvVendor.GENERIC
        assert (mapping.date, mapping.exercise) == (0, 1)

    def test_unmappable_raises(self):
        with pytest.raises(CsvUnmappableError) as exc_info:
            detect_schema(["name", "value"])
        assert exc_info.value.details["headers"] == ["name", "value"]

    def test_hevy_without_start_time_is_unmappable(self):
        with pytest.raises(CsvUnmappableError):
            detect_schema(["title", "exercise_title", "weight_kg"])


class TestDateKey:
    """Timestamp collapsing."""

    @pytest.mark.parametrize("raw", [
        "2024-03-05 18:00:00",
        "2024-03-05 18:00",
        "2024-03-05T18:00:00",
        "2024-03-05",
        "5 Mar 2024, 18:00",
        "05/03/2024",
    ])
    def test_known_formats_collapse_to_iso_date(self, raw):
        assert date_key(raw) == "2024-03-05"

    def test_unknown_format_uses_text_before_first_space(self):
        assert date_key("semana-3 lunes") == "semana-3"


class TestParseRows:
    """Row grouping into sessions."""

    def test_hevy_grouping_and_order(self, hevy_csv):
        sessions = parse_workout_csv(hevy_csv)

        assert [s.date for s in sessions] == ["2024-03-07", "2024-03-05", "2024-02-28"]
        assert [len(s.sets) for s in sessions] == [2, 3, 1]
        assert [s.title for s in sessions] == ["Leg Day", "Push Day", "Pull Day"]

    def test_hevy_values_and_set_types(self, hevy_csv):
        push = parse_workout_csv(hevy_csv)[1]

        assert push.sets[0] == WorkoutSet(
            exercise="Bench Press (Barbell)", weight=60, reps=10, rpe=None, set_type=SetType.WARMUP,
        )
        assert push.sets[1].rpe == 8
        assert push.sets[2].rpe == 8.5
        assert push.exercise_names == ["Bench Press (Barbell)", "Overhead Press (Barbell)"]

    def test_strong_grouping_and_set_order_markers(self):
        imported = import_workout_csv(STRONG_CSV)

        assert imported.vendor == CsvVendor.STRONG
        assert [s.date for s in imported.sessions] == ["2024-01-12", "2024-01-10", "2023-12-30"]
        assert imported.total_sets == 6
        bench = imported.sessions[0]
        assert [s.set_type for s in bench.sets] == [SetType.WARMUP, SetType.NORMAL, SetType.DROP]
        assert imported.sessions[1].sets[1].rpe == 8

    def test_session_count_matches_distinct_dates(self):
        rows = [["fecha", "ejercicio", "peso", "reps"]]
        dates = ["2024-01-%02d" % d for d in (3, 1, 2, 1, 3, 3)]
        rows += [[d, "Curl", "10", "12"] for d in dates]

        sessions = parse_rows(rows, detect_schema(rows[0]))

        assert len(sessions) == 3
        counts = {s.date: len(s.sets) for s in sessions}
        assert counts == {"2024-01-03": 3, "2024-01-02": 1, "2024-01-01": 2}

    def test_generic_title_defaults(self):
        sessions = parse_workout_csv("fecha,ejercicio,peso,reps\n2024-01-01,Curl,10,12\n")
        assert sessions[0].title == "Entrenamiento"

    def test_short_rows_are_skipped(self):
        text = "fecha,ejercicio,peso,reps\n2024-01-01,Curl,10,12\n2024-01-02,Curl\n"
        sessions = parse_workout_csv(text)
        assert len(sessions) == 1
        assert len(sessions[0].sets) == 1

    def test_unparseable_numbers_default_to_zero(self):
        text = "fecha,ejercicio,peso,reps\n2024-01-01,Plancha,peso corporal,n/a\n"
        workout_set = parse_workout_csv(text)[0].sets[0]
        assert workout_set.weight == 0
        assert workout_set.reps == 0
        assert workout_set.rpe is None

    def test_decimal_comma_and_units(self):
        text = 'fecha,ejercicio,peso,reps\n2024-01-01,Curl,"12,5 kg",10\n'
        assert parse_workout_csv(text)[0].sets[0].weight == 12.5

    def test_quoted_exercise_with_comma(self):
        text = 'fecha,ejercicio,peso,reps\n2024-01-01,"Press, inclinado",30,10\n'
        assert parse_workout_csv(text)[0].sets[0].exercise == "Press, inclinado"

    def test_byte_order_mark_is_ignored(self, hevy_csv):
        assert import_workout_csv("\ufeff" + hevy_csv).vendor == CsvVendor.HEVY

    def test_empty_text_is_unmappable(self):
        with pytest.raises(CsvUnmappableError):
            import_workout_csv("   \n")

    def test_header_only_yields_no_sessions(self):
        assert parse_workout_csv("fecha,ejercicio,peso,reps\n") == []


class TestSortSessions:
    """Calendar ordering."""

    def test_calendar_order_not_string_order(self):
        sessions = [WorkoutSession(date=d, title="t") for d in ("02/01/2024", "10/12/2023", "01/03/2024")]
        assert [s.date for s in sort_sessions(sessions)] == ["01/03/2024", "02/01/2024", "10/12/2023"]

    def test_undated_sessions_go_last(self):
        sessions = [
            WorkoutSession(date="semana-1", title="t"),
            WorkoutSession(date="2024-01-01", title="t"),
            WorkoutSession(date="semana-2", title="t"),
        ]
        assert [s.date for s in sort_sessions(sessions)] == ["2024-01-01", "semana-1", "semana-2"]


class TestSerializeForTransmission:
    """Compact prompt text."""

    def test_format_set(self):
        assert format_set(WorkoutSet(exercise="x", weight=80, reps=8)) == "80kg x 8"
        assert format_set(WorkoutSet(exercise="x", weight=82.5, reps=5, rpe=9)) == "82.5kg x 5 @RPE9"

    def test_layout(self, hevy_csv):
        text = serialize_for_transmission(parse_workout_csv(hevy_csv))
        lines = text.splitlines()

        assert lines[0] == TRANSMISSION_HEADER
        assert "FECHA: 2024-03-07 | TÍTULO: Leg Day" in lines
        assert "- Squat (Barbell): 100kg x 5, 100kg x 4 @RPE10" in lines
        assert "- Bench Press (Barbell): 60kg x 10, 80kg x 8 @RPE8" in lines
        assert lines.index("FECHA: 2024-03-07 | TÍTULO: Leg Day") < lines.index("FECHA: 2024-03-05 | TÍTULO: Push Day")

    def test_caps_at_five_most_recent_sessions(self):
        sessions = [
            WorkoutSession(date=f"2024-01-0{day}", title=f"S{day}", sets=[WorkoutSet("Curl", 10, 10)])
            for day in range(1, 9)
        ]

        text = serialize_for_transmission(sessions)

        for day in range(4, 9):
            assert f"2024-01-0{day}" in text
        for day in range(1, 4):
            assert f"2024-01-0{day}" not in text
        assert text.count("FECHA:") == 5

    def test_custom_cap(self, hevy_csv):
        text = serialize_for_transmission(parse_workout_csv(hevy_csv), max_sessions=1)
        assert text.count("FECHA:") == 1

"""Tests for the command line interface."""

import pytest

from fitsmart import cli
from fitsmart.exceptions import LLMTimeoutError
from fitsmart.models.profile import ProfileDraft
from fitsmart.services.flow_controller import FlowController


@pytest.fixture
def csv_file(tmp_path, hevy_csv):
    path = tmp_path / "workouts.csv"
    path.write_text(hevy_csv, encoding="utf-8")
    return path


@pytest.fixture
def offline_cli(monkeypatch, mock_gateway, settings):
    """Route the CLI through the mocked gateway with scripted answers."""
    monkeypatch.setattr(cli, "_build_controller", lambda: FlowController(mock_gateway, settings=settings))
    monkeypatch.setattr(cli, "_ask_profile", lambda controller: ProfileDraft(
        goal="Fuerza Máxima",
        training_type="Powerlifting",
        age=35,
        custom_answer="Me falla el bloqueo",
    ))
    return mock_gateway


class TestInspectCsv:
    def test_prints_sessions(self, csv_file, capsys):
        assert cli.main(["inspect-csv", str(csv_file)]) == 0
        output = capsys.readouterr().out
        assert "hevy" in output
        assert "2024-03-07" in output

    def test_unmappable(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text("name,value\nx,1\n", encoding="utf-8")
        assert cli.main(["inspect-csv", str(path)]) == 1


class TestAudit:
    def test_audit_writes_report(self, offline_cli, csv_file, tmp_path):
        report = tmp_path / "informe.txt"

        code = cli.main(["audit", str(csv_file), "--persona", "todor", "--report", str(report)])

        assert code == 0
        assert "Puntuación de Rutina: 72/100" in report.read_text(encoding="utf-8")
        routine, persona = offline_cli.pre_analyze.await_args.args
        assert routine.kind.value == "csv"
        assert persona.value == "todor"

    def test_pre_analysis_failure(self, offline_cli, csv_file):
        offline_cli.pre_analyze.side_effect = LLMTimeoutError()
        assert cli.main(["audit", str(csv_file), "--persona", "sara"]) == 1

    def test_deep_failure_without_retry(self, offline_cli, csv_file, monkeypatch):
        offline_cli.analyze_deep.side_effect = LLMTimeoutError()
        monkeypatch.setattr(cli.Confirm, "ask", lambda *args, **kwargs: False)

        assert cli.main(["audit", str(csv_file), "--persona", "raul"]) == 1
        assert offline_cli.analyze_deep.await_count == 1

    def test_video(self, offline_cli, tmp_path):
        path = tmp_path / "sentadilla.mp4"
        path.write_bytes(b"fake mp4 bytes")

        assert cli.main(["video", str(path)]) == 0
        offline_cli.analyze_video.assert_awaited_once()


def test_score_colors():
    assert cli.get_score_color(90) == "green"
    assert cli.get_score_color(60) == "yellow"
    assert cli.get_score_color(20) == "red"


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "inspect-csv" in capsys.readouterr().out

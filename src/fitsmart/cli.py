#!/usr/bin/env python3
"""
FitSmart CLI.

Persona-voiced biomechanical audits of workout routines and lift videos.

Usage:
    fitsmart inspect-csv hevy_export.csv      # Preview how a CSV export is read
    fitsmart audit rutina.pdf --persona todor  # Full audit with questionnaire
    fitsmart audit historial.csv --report informe.txt
    fitsmart video sentadilla.mp4             # Rep count and technique judgement
    fitsmart serve --port 8000                # Run the HTTP API
"""

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from .agents.analysis_gateway import AnalysisGateway, build_stage_configs
from .analysis.csv_normalizer import import_workout_csv, serialize_for_transmission
from .config import get_settings, require_api_key
from .exceptions import CsvUnmappableError, FitSmartError, ProfileValidationError
from .models.analysis import BiomechanicalAnalysis, ExperienceLevel, VideoAnalysisResult
from .models.profile import ProfileDraft, validate_profile
from .models.routine import PERSONAS, InputKind, PersonaId
from .report.renderer import render_report
from .services.flow_controller import (
    AnsweringProfile,
    FlowController,
    ShowingResults,
    ShowingVideoResults,
)
from .utils.log_sanitizer import install_log_sanitizer

console = Console()
logger = logging.getLogger(__name__)


def get_score_color(score: int) -> str:
    """Get rich color for an audit score."""
    if score >= 75:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _build_controller() -> FlowController:
    settings = get_settings()
    require_api_key(settings)
    gateway = AnalysisGateway(stage_configs=build_stage_configs(settings))
    return FlowController(gateway, settings=settings)


async def _with_spinner(message: str, coro):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(message, total=None)
        return await coro


async def _capture(controller: FlowController, path: Path, kind: Optional[InputKind]) -> bool:
    media_type = mimetypes.guess_type(path.name)[0]
    await controller.capture_file(path.name, path.read_bytes(), kind=kind, media_type=media_type)
    if controller.error:
        console.print(f"[red]{controller.error}[/red]")
        return False
    return True


# ============================================================================
# Rendering
# ============================================================================

def print_analysis(analysis: BiomechanicalAnalysis) -> None:
    """Print a deep analysis result."""
    color = get_score_color(analysis.score)
    console.print(Panel(
        f"[bold {color}]{analysis.score}/100[/bold {color}]\n\n{analysis.summary}",
        title="Veredicto",
    ))
    console.print(Panel(analysis.safety_assessment, title="Seguridad Biomecánica", border_style="yellow"))
    console.print(Panel(analysis.alignment_with_goal, title="Alineación con el objetivo"))

    if analysis.detected_exercises:
        table = Table(title="Ejercicios detectados", box=box.ROUNDED)
        table.add_column("Ejercicio", style="cyan")
        table.add_column("Grupo")
        table.add_column("Tipo")
        table.add_column("Variante")
        table.add_column("Consejo", style="dim")
        for exercise in analysis.detected_exercises:
            table.add_row(
                exercise.name,
                exercise.target_group,
                exercise.type.value,
                exercise.variant_detected,
                exercise.technical_tip or "",
            )
        console.print(table)

    if analysis.warm_up_recommendations:
        table = Table(title="Calentamiento Recomendado", box=box.ROUNDED)
        table.add_column("Ejercicio", style="cyan")
        table.add_column("Dosis", style="green")
        table.add_column("Descripción")
        for warm_up in analysis.warm_up_recommendations:
            table.add_row(warm_up.name, warm_up.dosage, warm_up.description)
        console.print(table)

    table = Table(title="Modificaciones", box=box.ROUNDED)
    table.add_column("Original", style="dim")
    table.add_column("Recomendado", style="cyan")
    table.add_column("Sets x Reps")
    table.add_column("Descanso")
    table.add_column("Motivo")
    for mod in analysis.modifications:
        table.add_row(mod.original or "-", mod.recommended, f"{mod.sets} x {mod.reps}", mod.rest, mod.reason)
    console.print(table)

    for advice in analysis.general_advice:
        console.print(f"  • {advice}")


def print_video_result(result: VideoAnalysisResult) -> None:
    """Print a video analysis result."""
    console.print(Panel(
        f"[bold]{result.exercise_name}[/bold] ({result.variant})\n"
        f"Repeticiones válidas: [bold cyan]{result.rep_count}[/bold cyan]  "
        f"Confianza: {result.confidence:.0f}%  Ángulo: {result.camera_angle}",
        title="Video Análisis",
    ))

    metrics = Table(title="Métricas", box=box.ROUNDED)
    metrics.add_column("Métrica", style="cyan")
    metrics.add_column("Valor")
    for label, value in result.metrics.model_dump().items():
        metrics.add_row(label, value or "N/A")
    console.print(metrics)

    if result.setup_details:
        setup = Table(title="Setup", box=box.ROUNDED)
        setup.add_column("Punto", style="cyan")
        setup.add_column("Valor")
        setup.add_column("Estado")
        setup.add_column("Recomendación", style="dim")
        for item in result.setup_details:
            status_color = "green" if item.status.value == "OK" else "yellow"
            setup.add_row(
                item.label,
                item.value,
                f"[{status_color}]{item.status.value}[/{status_color}]",
                item.recommendation or "",
            )
        console.print(setup)

    feedback = result.feedback
    border = "red" if feedback.type.value == "correction" else "blue"
    lines = [feedback.text, ""]
    lines += [f"[green]+[/green] {p}" for p in feedback.positive]
    lines += [f"[red]-[/red] {n}" for n in feedback.negative]
    console.print(Panel("\n".join(lines), title=f"Feedback ({feedback.type.value})", border_style=border))


# ============================================================================
# Commands
# ============================================================================

def cmd_inspect_csv(args) -> int:
    """Show how a CSV export is normalized and what would be sent."""
    path = Path(args.file)
    try:
        imported = import_workout_csv(path.read_text(encoding="utf-8-sig"))
    except CsvUnmappableError as e:
        console.print(f"[red]{e.message}[/red]")
        console.print(f"Headers: {', '.join(e.details.get('headers', []))}")
        return 1

    console.print(f"Detected format: [bold cyan]{imported.vendor.value}[/bold cyan]")
    table = Table(title=f"{len(imported.sessions)} sessions, {imported.total_sets} sets", box=box.ROUNDED)
    table.add_column("Date", style="cyan")
    table.add_column("Title")
    table.add_column("Sets", justify="right", style="green")
    table.add_column("Exercises")
    for session in imported.sessions:
        table.add_row(session.date, session.title, str(len(session.sets)), ", ".join(session.exercise_names))
    console.print(table)

    text = serialize_for_transmission(imported.sessions, args.max_sessions)
    console.print(Panel(text.rstrip(), title="Transmission text"))
    return 0


def _ask_profile(controller: FlowController) -> ProfileDraft:
    stage: AnsweringProfile = controller.stage
    defaults = controller.profile_defaults()
    experience_choices = [level.value for level in ExperienceLevel]

    draft = ProfileDraft(
        goal=Prompt.ask("Objetivo", default=defaults.goal),
        training_type=Prompt.ask("Tipo de entrenamiento", default=defaults.training_type or ""),
        experience=Prompt.ask("Nivel", choices=experience_choices, default=defaults.experience),
        age=IntPrompt.ask("Edad", default=defaults.age or 0),
        gender=Prompt.ask("Género", default=defaults.gender),
        injuries=Prompt.ask("Lesiones o molestias", default=defaults.injuries),
        custom_answer=Prompt.ask(f"[bold]{stage.pre_analysis.specific_question}[/bold]\nRespuesta"),
    )
    while validate_profile(draft):
        problems = validate_profile(draft)
        console.print(f"[yellow]Revisa: {', '.join(problems)}[/yellow]")
        if "age" in problems:
            draft.age = IntPrompt.ask("Edad")
        if "goal" in problems:
            draft.goal = Prompt.ask("Objetivo")
        if "trainingType" in problems:
            draft.training_type = Prompt.ask("Tipo de entrenamiento")
        if "customAnswer" in problems:
            draft.custom_answer = Prompt.ask("Respuesta (más de 3 caracteres)")
    return draft


async def _run_audit(args) -> int:
    controller = _build_controller()
    kind = InputKind(args.kind) if args.kind else None
    if not await _capture(controller, Path(args.file), kind):
        return 1

    if isinstance(controller.stage, ShowingVideoResults):
        print_video_result(controller.stage.result)
        return 0

    persona_id = PersonaId(args.persona) if args.persona else PersonaId(Prompt.ask(
        "Elige auditor",
        choices=[p.value for p in PersonaId],
        default=PersonaId.SARA.value,
    ))
    persona = PERSONAS[persona_id]
    await _with_spinner(persona.loading_message, controller.select_persona(persona_id))
    if controller.error:
        console.print(f"[red]{controller.error}[/red]")
        return 1

    pre = controller.stage.pre_analysis
    console.print(Panel(
        f"{pre.summary_observation}\n\n"
        f"[dim]{pre.detected_training_type.value} | {pre.detected_goal_guess} | "
        f"confianza {pre.confidence_score:.0f}%[/dim]",
        title=f"{persona.name} ({persona.role})",
    ))

    draft = _ask_profile(controller)
    while True:
        try:
            await _with_spinner(persona.loading_message, controller.submit_profile(draft))
        except ProfileValidationError as e:
            console.print(f"[red]{e.message}[/red]")
            return 1
        if isinstance(controller.stage, ShowingResults):
            break
        console.print(f"[red]{controller.error}[/red]")
        if not Confirm.ask("¿Reintentar el análisis?", default=True):
            return 1

    stage: ShowingResults = controller.stage
    print_analysis(stage.analysis)

    if args.report:
        Path(args.report).write_text(render_report(stage.analysis, stage.profile), encoding="utf-8")
        console.print(f"Report written to [cyan]{args.report}[/cyan]")
    return 0


async def _run_video(args) -> int:
    controller = _build_controller()
    path = Path(args.file)
    if not await _with_spinner("Analizando video...", _capture(controller, path, InputKind.VIDEO)):
        return 1
    print_video_result(controller.stage.result)
    return 0


def cmd_audit(args) -> int:
    """Run the full audit flow interactively."""
    return asyncio.run(_run_audit(args))


def cmd_video(args) -> int:
    """Run the video analysis branch."""
    return asyncio.run(_run_video(args))


def cmd_serve(args) -> int:
    """Serve the HTTP API."""
    from .main import run

    run(host=args.host, port=args.port)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="FitSmart - persona-voiced routine and lift audits",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fitsmart inspect-csv hevy_export.csv
  fitsmart audit rutina.pdf --persona todor
  fitsmart audit historial.csv --report informe.txt
  fitsmart video sentadilla.mp4
  fitsmart serve --port 8000
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    inspect_p = subparsers.add_parser("inspect-csv", help="Preview how a CSV export is read")
    inspect_p.add_argument("file", help="CSV export (Hevy, Strong or generic)")
    inspect_p.add_argument(
        "--max-sessions", type=int, default=get_settings().max_serialized_sessions,
        help="Sessions included in the transmission text",
    )

    audit_p = subparsers.add_parser("audit", help="Audit a routine or workout history")
    audit_p.add_argument("file", help="Routine file (csv, txt, pdf, image) or video")
    audit_p.add_argument("--kind", choices=[k.value for k in InputKind], help="Override the input kind")
    audit_p.add_argument("--persona", choices=[p.value for p in PersonaId], help="Auditor persona")
    audit_p.add_argument("--report", help="Write a plain-text report to this path")

    video_p = subparsers.add_parser("video", help="Analyze a lift video")
    video_p.add_argument("file", help="Video file")

    serve_p = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", help="Bind address")
    serve_p.add_argument("--port", type=int, help="Port")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    install_log_sanitizer()

    try:
        if args.command == "inspect-csv":
            return cmd_inspect_csv(args)
        elif args.command == "audit":
            return cmd_audit(args)
        elif args.command == "video":
            return cmd_video(args)
        elif args.command == "serve":
            return cmd_serve(args)
    except FitSmartError as e:
        console.print(f"[red]{e.message}[/red]")
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

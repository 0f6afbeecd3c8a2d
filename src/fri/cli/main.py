"""Typer CLI entry point."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, Iterable, List, Optional

import orjson
import typer

from fri.config import Settings
from fri.db.client import db_cursor
from fri.errors import IntakeError
from fri.extraction.client import ExtractionClient, MultipleExtraction, SingleExtraction
from fri.intake.notices import Notice
from fri.intake.session import EditSession, IntakeSession, ReviewSession
from fri.models import HELP_CATEGORIES, URGENCY_LEVELS, Report
from fri.ocr.client import OcrClient
from fri.pipeline.merge import build_new_report
from fri.store.reports import ReportStore
from fri.utils.logging import configure_logging, get_logger
from fri.utils.time import format_thai_datetime


app = typer.Typer(help="Flood Report Intake CLI")
reports_app = typer.Typer(help="Stored report commands")
db_app = typer.Typer(help="Database utilities")

app.add_typer(reports_app, name="reports")
app.add_typer(db_app, name="db")

logger = get_logger(__name__)


@app.callback()
def main() -> None:
    """Initialize logging for all commands."""
    settings = Settings()
    configure_logging(settings.log_level)


def _echo_json(value: Any) -> None:
    typer.echo(orjson.dumps(value, option=orjson.OPT_INDENT_2).decode("utf-8"))


def _echo_notices(items: Iterable[Notice]) -> None:
    for notice in items:
        line = f"[{notice.level}] {notice.title}"
        if notice.description:
            line += f": {notice.description}"
        typer.echo(line, err=notice.level in ("warning", "error"))


def _read_message(text: Optional[str], file: Optional[Path]) -> str:
    if text:
        return text
    if file:
        return file.read_text(encoding="utf-8")
    typer.echo("Provide --text or --file", err=True)
    raise typer.Exit(1)


def _read_image(path: Path) -> tuple[bytes, Optional[str]]:
    content_type, _ = mimetypes.guess_type(path.name)
    return path.read_bytes(), content_type


def _parse_assignments(assignments: Iterable[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected key=value, got {item!r}")
        values[key.strip()] = value
    return values


def _summary_line(index: int, name: Optional[str], address: Optional[str], urgency: Any) -> str:
    return f"{index}. {name or '-'} | {address or '-'} | urgency={urgency if urgency is not None else '-'}"


def _print_report(report: Report) -> None:
    typer.echo(f"id:            {report.id}")
    typer.echo(f"status:        {report.status}")
    typer.echo(f"name:          {report.name} {report.lastname}".rstrip())
    typer.echo(f"reporter:      {report.reporter_name or '-'}")
    typer.echo(f"address:       {report.address or '-'}")
    typer.echo(f"phone:         {', '.join(report.phone) or '-'}")
    typer.echo(
        "people:        "
        f"adults={report.number_of_adults} children={report.number_of_children} "
        f"infants={report.number_of_infants} seniors={report.number_of_seniors} "
        f"patients={report.number_of_patients}"
    )
    typer.echo(f"health:        {report.health_condition or '-'}")
    categories = [HELP_CATEGORIES.get(tag, tag) for tag in report.help_categories]
    typer.echo(f"categories:    {', '.join(categories) or '-'}")
    typer.echo(f"help needed:   {report.help_needed or '-'}")
    typer.echo(f"additional:    {report.additional_info or '-'}")
    typer.echo(
        f"urgency:       {report.urgency_level} - {URGENCY_LEVELS.get(report.urgency_level, '')}"
    )
    if report.location_lat is not None and report.location_long is not None:
        typer.echo(f"location:      {report.location_lat}, {report.location_long}")
    typer.echo(f"map:           {report.map_link or '-'}")
    typer.echo(f"created:       {format_thai_datetime(report.created_at)}")
    typer.echo(f"updated:       {format_thai_datetime(report.updated_at)}")
    typer.echo("raw message:")
    typer.echo(report.raw_message)


@app.command("extract")
def extract(
    text: Optional[str] = typer.Option(None, help="Message text"),
    file: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="File with the message"),
) -> None:
    """Extract report candidates from a message and print them as JSON."""
    message = _read_message(text, file)
    try:
        outcome = ExtractionClient().extract(message)
    except IntakeError as exc:
        typer.echo(f"Extraction failed: {exc.message}", err=True)
        raise typer.Exit(1)

    if isinstance(outcome, SingleExtraction):
        candidates = [outcome.candidate]
    elif isinstance(outcome, MultipleExtraction):
        candidates = outcome.candidates
    else:
        typer.echo("No reports could be extracted", err=True)
        raise typer.Exit(1)
    _echo_json([c.model_dump(exclude_none=True) for c in candidates])


@app.command("ocr")
def ocr(
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image file"),
) -> None:
    """Read the text in an image."""
    data, content_type = _read_image(image)
    try:
        text = OcrClient().read_image(data, content_type)
    except IntakeError as exc:
        typer.echo(f"OCR failed: {exc.message}", err=True)
        raise typer.Exit(1)

    if text is None:
        typer.echo("No legible text found", err=True)
        raise typer.Exit(1)
    typer.echo(text)


@app.command("intake")
def intake(
    text: Optional[str] = typer.Option(None, help="Message text"),
    file: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="File with the message"),
    image: Optional[List[Path]] = typer.Option(
        None, exists=True, dir_okay=False, help="Screenshot to OCR (repeatable)"
    ),
    select: Optional[int] = typer.Option(
        None, help="Candidate number to store when several are extracted (1-based)"
    ),
    dry_run: bool = typer.Option(False, help="Do not write to DB"),
) -> None:
    """OCR, extract and store a report in one go."""
    session = IntakeSession(ExtractionClient(), OcrClient())
    if text or file:
        session.type_text(_read_message(text, file))
    for path in image or []:
        data, content_type = _read_image(path)
        session.upload_image(data, content_type)
        if session.error:
            _echo_notices(session.notices)
            typer.echo(f"{path}: {session.error}", err=True)
            raise typer.Exit(1)

    outcome = session.process()
    _echo_notices(session.notices)
    if outcome is None or session.error:
        typer.echo(session.error or "Extraction skipped", err=True)
        raise typer.Exit(1)

    review = ReviewSession.from_outcome(outcome, session.raw_message, ReportStore())
    if review.needs_selection:
        if select is None:
            typer.echo(f"{len(review.candidates)} reports extracted; choose one with --select:")
            for number, candidate in enumerate(review.candidates, start=1):
                typer.echo(
                    _summary_line(number, candidate.name, candidate.address, candidate.urgency_level)
                )
            raise typer.Exit(1)
        try:
            review.select(select - 1)
        except IntakeError as exc:
            typer.echo(exc.message, err=True)
            raise typer.Exit(1)

    if dry_run:
        new_report = build_new_report(review.form, review.raw_message, phone_input=review.phone_input)
        _echo_json(new_report.model_dump())
        return

    stored = review.save()
    _echo_notices(review.notices)
    if stored is None:
        raise typer.Exit(1)
    typer.echo(stored.id)


@reports_app.command("list")
def reports_list(
    limit: int = typer.Option(50, help="Max reports to show"),
    status: Optional[str] = typer.Option(None, help="Only reports with this status"),
) -> None:
    """List stored reports, most urgent first."""
    try:
        rows = ReportStore().list_recent(limit=limit, status=status)
    except IntakeError as exc:
        typer.echo(f"Listing failed: {exc.message}", err=True)
        raise typer.Exit(1)

    for report in rows:
        typer.echo(
            f"{report.id} | {report.urgency_level} | {report.status} | "
            f"{report.name} {report.lastname}".rstrip()
            + f" | {', '.join(report.phone) or '-'}"
        )


@reports_app.command("show")
def reports_show(report_id: str = typer.Argument(..., help="Report id")) -> None:
    """Show one stored report."""
    try:
        report = ReportStore().get(report_id)
    except IntakeError as exc:
        typer.echo(f"Lookup failed: {exc.message}", err=True)
        raise typer.Exit(1)
    if report is None:
        typer.echo(f"Report {report_id} not found", err=True)
        raise typer.Exit(1)
    _print_report(report)


@reports_app.command("edit")
def reports_edit(
    report_id: str = typer.Argument(..., help="Report id"),
    field: Optional[List[str]] = typer.Option(None, help="key=value (repeatable)"),
    phones: Optional[str] = typer.Option(None, help="Comma-separated phone numbers"),
    add_category: Optional[List[str]] = typer.Option(None, help="Help category to add"),
    remove_category: Optional[List[str]] = typer.Option(None, help="Help category to remove"),
) -> None:
    """Edit a stored report; the original message is never changed."""
    store = ReportStore()
    try:
        report = store.get(report_id)
    except IntakeError as exc:
        typer.echo(f"Lookup failed: {exc.message}", err=True)
        raise typer.Exit(1)
    if report is None:
        typer.echo(f"Report {report_id} not found", err=True)
        raise typer.Exit(1)

    session = EditSession(report, store)
    try:
        for name, value in _parse_assignments(field or []).items():
            session.set_field(name, value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if phones is not None:
        session.set_field("phone", phones)
    for tag in add_category or []:
        session.toggle_category(tag, True)
    for tag in remove_category or []:
        session.toggle_category(tag, False)

    saved = session.save()
    _echo_notices(session.notices)
    if not saved:
        raise typer.Exit(1)
    _print_report(session.report)


@db_app.command("check")
def db_check() -> None:
    """Check database connectivity."""
    try:
        with db_cursor() as cursor:
            cursor.execute("select 1")
            logger.info("db.check.ok")
    except Exception as exc:
        logger.error("db.check.failed: %s", exc)
        typer.echo(f"Database check failed: {exc}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

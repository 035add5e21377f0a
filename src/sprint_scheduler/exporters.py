"""Export functionality for schedule results."""

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd

from .scheduler.models import ScheduleResult, SlotUpdate

TICKET_COLUMNS = [
    "Epic",
    "Ticket",
    "Summary",
    "Dev Days",
    "Sprint",
    "Start Day",
    "End Day",
    "Start Date",
    "End Date",
    "Parallel Group",
    "Critical Path Weight",
    "Critical Path",
    "Uncertain",
    "Blocked By",
]


class BaseExporter(ABC):
    """Base class for exporters."""

    @abstractmethod
    def export(self, result: ScheduleResult, output_path: str | Path) -> None:
        """Export schedule result to file.

        Args:
            result: ScheduleResult to export
            output_path: Path to output file or directory
        """
        pass


def _sprint_names(result: ScheduleResult) -> dict[int, str]:
    return {s.id: s.name for s in result.sprints}


def _summary_rows(result: ScheduleResult) -> list[tuple[str, object]]:
    return [
        ("Project Start", result.project_start_date.isoformat()),
        ("Project End", result.project_end_date.isoformat()),
        ("Total Dev Days", result.total_dev_days),
        ("Total Work Days", result.total_days),
        ("Epics", len(result.epics)),
        ("Scheduled Tickets", len(result.scheduled_tickets)),
        ("Unscheduled Tickets", len(result.unscheduled_tickets)),
        ("Sprints", len(result.sprints)),
        ("Overbooked Days", len(result.overbooked_days)),
    ]


class JSONExporter(BaseExporter):
    """Export to JSON format."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        """Initialize exporter.

        Args:
            indent: JSON indentation level
            ensure_ascii: If False, allows non-ASCII characters
        """
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def export(self, result: ScheduleResult, output_path: str | Path) -> None:
        """Export schedule result to JSON file.

        Args:
            result: ScheduleResult to export
            output_path: Path to output JSON file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(
                result.to_dict(),
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
            )


class CSVExporter(BaseExporter):
    """Export to CSV format (multiple files)."""

    def export(self, result: ScheduleResult, output_path: str | Path) -> None:
        """Export schedule result to CSV files.

        Creates four files:
        - tickets.csv: Placed tickets in timeline order
        - epics.csv: Epic spans and totals
        - capacity.csv: Per-day capacity after placement
        - summary.csv: Overall summary

        Args:
            result: ScheduleResult to export
            output_path: Path to output directory
        """
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        self._export_tickets(result, output_dir / "tickets.csv")
        self._export_epics(result, output_dir / "epics.csv")
        self._export_capacity(result, output_dir / "capacity.csv")
        self._export_summary(result, output_dir / "summary.csv")

    def _export_tickets(self, result: ScheduleResult, output_path: Path) -> None:
        """Export placed tickets to CSV."""
        rows = []
        for ticket in sorted(result.scheduled_tickets, key=lambda t: (t.start_day, t.key)):
            rows.append(
                {
                    "epic_key": ticket.epic_key,
                    "ticket_key": ticket.key,
                    "summary": ticket.ticket.summary,
                    "dev_days": ticket.dev_days,
                    "sprint_id": ticket.sprint_id,
                    "start_day": ticket.start_day,
                    "end_day": ticket.end_day,
                    "start_date": ticket.start_date.isoformat(),
                    "end_date": ticket.end_date.isoformat(),
                    "parallel_group": ticket.parallel_group,
                    "critical_path_weight": ticket.critical_path_weight,
                    "is_on_critical_path": ticket.is_on_critical_path,
                    "is_uncertain": ticket.is_uncertain,
                    "blocked_by": "; ".join(sorted(ticket.ticket.blocked_by)),
                }
            )

        self._write_csv(output_path, rows)

    def _export_epics(self, result: ScheduleResult, output_path: Path) -> None:
        """Export epics to CSV."""
        rows = []
        for epic in result.epics:
            rows.append(
                {
                    "epic_key": epic.key,
                    "summary": epic.epic.summary,
                    "commit_type": epic.epic.commit_type.value,
                    "priority_override": epic.epic.priority_override,
                    "tickets": len(epic.tickets),
                    "total_dev_days": epic.total_dev_days,
                    "start_day": epic.start_day,
                    "end_day": epic.end_day,
                    "critical_path": "; ".join(epic.critical_path),
                }
            )

        self._write_csv(output_path, rows)

    def _export_capacity(self, result: ScheduleResult, output_path: Path) -> None:
        """Export the capacity snapshot to CSV."""
        rows = [
            {
                "day_index": day.day_index,
                "date": day.date.isoformat(),
                "sprint_id": day.sprint_id,
                "total_capacity": day.total_capacity,
                "used_capacity": day.used_capacity,
                "remaining_capacity": day.remaining_capacity,
            }
            for day in result.daily_capacities
        ]

        self._write_csv(output_path, rows)

    def _export_summary(self, result: ScheduleResult, output_path: Path) -> None:
        """Export summary to CSV."""
        rows = [
            {"metric": metric.lower().replace(" ", "_"), "value": value}
            for metric, value in _summary_rows(result)
        ]

        self._write_csv(output_path, rows)

    def _write_csv(self, output_path: Path, rows: list[dict]) -> None:
        """Write rows to CSV file."""
        if not rows:
            return

        with open(output_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=rows[0].keys())
            writer.writeheader()
            writer.writerows(rows)


class ExcelExporter(BaseExporter):
    """Export to Excel format (single workbook with multiple sheets)."""

    def export(self, result: ScheduleResult, output_path: str | Path) -> None:
        """Export schedule result to Excel file.

        Creates workbook with sheets:
        - Tickets: Placed tickets in timeline order
        - Epics: Epic spans and totals
        - Capacity: Per-day capacity after placement
        - Summary: Overall summary
        - Unscheduled: Tickets left off the timeline

        Args:
            result: ScheduleResult to export
            output_path: Path to output Excel file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            self._export_tickets_sheet(result, writer)
            self._export_epics_sheet(result, writer)
            self._export_capacity_sheet(result, writer)
            self._export_summary_sheet(result, writer)
            self._export_unscheduled_sheet(result, writer)

    def _export_tickets_sheet(self, result: ScheduleResult, writer: pd.ExcelWriter) -> None:
        """Export placed tickets to Excel sheet."""
        sprint_names = _sprint_names(result)
        rows = []
        for ticket in sorted(result.scheduled_tickets, key=lambda t: (t.start_day, t.key)):
            rows.append(
                {
                    "Epic": ticket.epic_key,
                    "Ticket": ticket.key,
                    "Summary": ticket.ticket.summary,
                    "Dev Days": ticket.dev_days,
                    "Sprint": sprint_names.get(ticket.sprint_id, str(ticket.sprint_id)),
                    "Start Day": ticket.start_day,
                    "End Day": ticket.end_day,
                    "Start Date": ticket.start_date.isoformat(),
                    "End Date": ticket.end_date.isoformat(),
                    "Parallel Group": ticket.parallel_group,
                    "Critical Path Weight": ticket.critical_path_weight,
                    "Critical Path": ticket.is_on_critical_path,
                    "Uncertain": ticket.is_uncertain,
                    "Blocked By": "; ".join(sorted(ticket.ticket.blocked_by)),
                }
            )

        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=TICKET_COLUMNS)
        df.to_excel(writer, sheet_name="Tickets", index=False)

    def _export_epics_sheet(self, result: ScheduleResult, writer: pd.ExcelWriter) -> None:
        """Export epics to Excel sheet."""
        rows = []
        for epic in result.epics:
            rows.append(
                {
                    "Epic": epic.key,
                    "Summary": epic.epic.summary,
                    "Commit Type": epic.epic.commit_type.value,
                    "Priority Override": epic.epic.priority_override,
                    "Tickets": len(epic.tickets),
                    "Total Dev Days": epic.total_dev_days,
                    "Start Day": epic.start_day,
                    "End Day": epic.end_day,
                    "Critical Path": " -> ".join(epic.critical_path),
                }
            )

        df = pd.DataFrame(rows)
        df.to_excel(writer, sheet_name="Epics", index=False)

    def _export_capacity_sheet(self, result: ScheduleResult, writer: pd.ExcelWriter) -> None:
        """Export capacity snapshot to Excel sheet."""
        sprint_names = _sprint_names(result)
        rows = [
            {
                "Day": day.day_index,
                "Date": day.date.isoformat(),
                "Sprint": sprint_names.get(day.sprint_id, str(day.sprint_id)),
                "Total": day.total_capacity,
                "Used": day.used_capacity,
                "Remaining": day.remaining_capacity,
            }
            for day in result.daily_capacities
        ]

        df = pd.DataFrame(rows)
        df.to_excel(writer, sheet_name="Capacity", index=False)

    def _export_summary_sheet(self, result: ScheduleResult, writer: pd.ExcelWriter) -> None:
        """Export summary to Excel sheet."""
        rows = [{"Metric": metric, "Value": value} for metric, value in _summary_rows(result)]

        df = pd.DataFrame(rows)
        df.to_excel(writer, sheet_name="Summary", index=False)

    def _export_unscheduled_sheet(
        self, result: ScheduleResult, writer: pd.ExcelWriter
    ) -> None:
        """Export unscheduled tickets to Excel sheet."""
        columns = ["Ticket", "Epic", "Dev Days", "Reason", "Details"]
        rows = [
            {
                "Ticket": item.ticket_key,
                "Epic": item.epic_key,
                "Dev Days": item.dev_days,
                "Reason": item.reason.value,
                "Details": item.details,
            }
            for item in result.unscheduled_tickets
        ]
        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=columns)
        df.to_excel(writer, sheet_name="Unscheduled", index=False)


def export_slot_updates_json(updates: list[SlotUpdate], output_path: str | Path) -> None:
    """Export a write-back plan to a JSON file.

    Args:
        updates: Slot updates to write
        output_path: Path to output JSON file
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with open(output, "w", encoding="utf-8") as f:
        json.dump({"updates": [u.to_dict() for u in updates]}, f, ensure_ascii=False, indent=2)


def get_exporter(format_type: str) -> BaseExporter:
    """Get appropriate exporter for format type.

    Args:
        format_type: Export format ('json', 'csv', 'excel')

    Returns:
        Exporter instance

    Raises:
        ValueError: If format type is not supported
    """
    exporters = {
        "json": JSONExporter,
        "csv": CSVExporter,
        "excel": ExcelExporter,
    }

    if format_type not in exporters:
        raise ValueError(
            f"Unsupported format: {format_type}. Supported: {', '.join(exporters.keys())}"
        )

    return exporters[format_type]()

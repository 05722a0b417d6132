"""Console reporter for the polling monitors.

Produces a continuously growing transcript rather than a redrawn screen:
the first snapshot of a session renders a full table (header and one row),
every later snapshot renders one more row with the same columns and
widths.  Undefined values render as ``N/A``, never blank or zero.

Tables are built with Rich and rendered to plain text so the transcript
can be streamed to a terminal, piped to a file, or captured in tests.
"""

from __future__ import annotations

import io
from collections.abc import Callable

from rich import box
from rich.console import Console
from rich.table import Table

from pollwatch.core.history import HistoryStore
from pollwatch.core.metrics import format_elapsed
from pollwatch.models.reports import Column, ReportSchema
from pollwatch.models.snapshots import DerivedMetrics, MonitorResult, Snapshot

PLACEHOLDER = "N/A"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _number(value: float | int | None) -> str:
    if value is None:
        return PLACEHOLDER
    if isinstance(value, int):
        return str(value)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _text(value: str | None) -> str:
    return value if value else PLACEHOLDER


_CELLS: dict[Column, Callable[[Snapshot, DerivedMetrics], str]] = {
    Column.TIMESTAMP: lambda s, m: s.captured_at.strftime(TIMESTAMP_FORMAT),
    Column.SCOPE: lambda s, m: _text(s.scope),
    Column.STATE: lambda s, m: _text(s.raw_state),
    Column.REMAINING: lambda s, m: _number(s.remaining_work),
    Column.SECONDARY: lambda s, m: _number(s.secondary_count),
    Column.ELAPSED: lambda s, m: (
        format_elapsed(m.elapsed) if m.elapsed is not None else PLACEHOLDER
    ),
    Column.ETA_HOURS: lambda s, m: _number(m.eta_hours_part),
    Column.ETA_MINUTES: lambda s, m: _number(m.eta_minutes_part),
    Column.THROUGHPUT: lambda s, m: _number(m.throughput),
}


class Reporter:
    """Renders monitoring progress for one operation family.

    Parameters
    ----------
    schema:
        The fixed column set and order for this family.
    """

    def __init__(self, schema: ReportSchema) -> None:
        self.schema = schema
        # Cell widths + one space of padding either side + column gaps.
        self._width = sum(spec.width + 3 for spec in schema.columns) + 2

    # ------------------------------------------------------------------
    # Progress rows
    # ------------------------------------------------------------------

    def render(self, history: HistoryStore, metrics: DerivedMetrics) -> str:
        """Render the latest snapshot in *history*.

        Returns the full table for the first snapshot of a session and a
        single appended row afterwards.
        """
        latest = history.latest()
        if latest is None:
            raise ValueError("Cannot render an empty history")

        table = self._build_table(show_header=history.count() == 1)
        table.add_row(*self.cells(latest, metrics))
        return self._to_text(table)

    def cells(self, snapshot: Snapshot, metrics: DerivedMetrics) -> list[str]:
        """Cell values for one row, in schema column order."""
        return [_CELLS[spec.column](snapshot, metrics) for spec in self.schema.columns]

    def _build_table(self, *, show_header: bool) -> Table:
        table = Table(
            box=box.SIMPLE_HEAD,
            show_header=show_header,
            show_edge=False,
            header_style="bold",
            pad_edge=False,
            expand=False,
        )
        for spec in self.schema.columns:
            table.add_column(
                spec.header,
                width=spec.width,
                justify=spec.justify,  # type: ignore[arg-type]
                no_wrap=True,
                overflow="ellipsis",
            )
        return table

    def _to_text(self, table: Table) -> str:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=self._width,
            color_system=None,
            force_terminal=False,
            highlight=False,
        )
        console.print(table)
        lines = [line.rstrip() for line in buffer.getvalue().splitlines()]
        return "\n".join(line for line in lines if line)

    # ------------------------------------------------------------------
    # Session messages
    # ------------------------------------------------------------------

    def render_title(self, handle: str) -> str:
        return f"{self.schema.title} monitor for {handle or 'all'}"

    def render_empty(self) -> str:
        """The only output of a session that found no work at all."""
        return self.schema.empty_message

    def render_status(self, result: MonitorResult) -> str:
        return result.status_line()

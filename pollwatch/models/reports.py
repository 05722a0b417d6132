"""Per-family report schemas.

Each operation family renders a fixed set of columns in a fixed order.
The schema is a tagged configuration value handed to the Reporter; the
Reporter never inspects snapshot fields to decide what to show.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Column(str, Enum):
    """Every value a Reporter knows how to render."""

    TIMESTAMP = "timestamp"
    SCOPE = "scope"
    STATE = "state"
    REMAINING = "remaining"
    SECONDARY = "secondary"
    ELAPSED = "elapsed"
    ETA_HOURS = "eta_hours"
    ETA_MINUTES = "eta_minutes"
    THROUGHPUT = "throughput"


class OperationFamily(str, Enum):
    VSAN_RESYNC = "vsan_resync"
    VSPHERE_TASKS = "vsphere_tasks"
    POLICY_SCAN = "policy_scan"


class ColumnSpec(BaseModel):
    """One column: which value, what header, how wide."""

    model_config = ConfigDict(frozen=True)

    column: Column
    header: str
    width: int = Field(default=12, gt=0)
    justify: str = "right"


class ReportSchema(BaseModel):
    """Column set, units and rate scaling for one operation family."""

    model_config = ConfigDict(frozen=True)

    family: OperationFamily
    title: str
    columns: list[ColumnSpec]
    work_unit: str  # unit of Snapshot.remaining_work
    rate_unit: str  # unit of DerivedMetrics.throughput
    # Converts (work units / second) into rate units.
    unit_scale_factor: float = Field(default=1.0, gt=0)
    empty_message: str = "No work outstanding, nothing to monitor."

    @property
    def headers(self) -> list[str]:
        return [spec.header for spec in self.columns]


VSAN_RESYNC_SCHEMA = ReportSchema(
    family=OperationFamily.VSAN_RESYNC,
    title="vSAN resync",
    columns=[
        ColumnSpec(column=Column.TIMESTAMP, header="Time", width=19, justify="left"),
        ColumnSpec(column=Column.SCOPE, header="Cluster", width=20, justify="left"),
        ColumnSpec(column=Column.REMAINING, header="GB Left", width=10),
        ColumnSpec(column=Column.SECONDARY, header="Objects Left", width=12),
        ColumnSpec(column=Column.ETA_HOURS, header="ETA Hours", width=9),
        ColumnSpec(column=Column.ETA_MINUTES, header="ETA Minutes", width=11),
        ColumnSpec(column=Column.THROUGHPUT, header="MiB/s", width=8),
    ],
    work_unit="GB",
    rate_unit="MiB/s",
    unit_scale_factor=1024.0,
    empty_message="No objects are resyncing, nothing to monitor.",
)

VSPHERE_TASKS_SCHEMA = ReportSchema(
    family=OperationFamily.VSPHERE_TASKS,
    title="vSphere tasks",
    columns=[
        ColumnSpec(column=Column.TIMESTAMP, header="Time", width=19, justify="left"),
        ColumnSpec(column=Column.SCOPE, header="Operation", width=24, justify="left"),
        ColumnSpec(column=Column.STATE, header="State", width=10, justify="left"),
        ColumnSpec(column=Column.REMAINING, header="Outstanding", width=11),
        ColumnSpec(column=Column.SECONDARY, header="Pending", width=7),
        ColumnSpec(column=Column.ELAPSED, header="Elapsed", width=20, justify="left"),
        ColumnSpec(column=Column.THROUGHPUT, header="Tasks/min", width=9),
    ],
    work_unit="tasks",
    rate_unit="tasks/min",
    unit_scale_factor=60.0,
    empty_message="No tasks in the running state, nothing to monitor.",
)

POLICY_SCAN_SCHEMA = ReportSchema(
    family=OperationFamily.POLICY_SCAN,
    title="Policy compliance scan",
    columns=[
        ColumnSpec(column=Column.TIMESTAMP, header="Time", width=19, justify="left"),
        ColumnSpec(column=Column.SCOPE, header="Scope", width=36, justify="left"),
        ColumnSpec(column=Column.STATE, header="State", width=10, justify="left"),
        ColumnSpec(column=Column.ELAPSED, header="Elapsed", width=20, justify="left"),
    ],
    work_unit="scans",
    rate_unit="scans/min",
    unit_scale_factor=60.0,
    empty_message="The compliance scan finished before the first poll.",
)

SCHEMAS: dict[OperationFamily, ReportSchema] = {
    schema.family: schema
    for schema in (VSAN_RESYNC_SCHEMA, VSPHERE_TASKS_SCHEMA, POLICY_SCAN_SCHEMA)
}

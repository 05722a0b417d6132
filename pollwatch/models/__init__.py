"""Pollwatch data models — all Pydantic v2, all frozen (immutable)."""

from pollwatch.models.reports import (
    POLICY_SCAN_SCHEMA,
    SCHEMAS,
    VSAN_RESYNC_SCHEMA,
    VSPHERE_TASKS_SCHEMA,
    Column,
    ColumnSpec,
    OperationFamily,
    ReportSchema,
)
from pollwatch.models.snapshots import (
    DerivedMetrics,
    EtaSource,
    MonitorResult,
    Outcome,
    Snapshot,
    StatusReading,
)

__all__ = [
    # snapshots
    "StatusReading",
    "Snapshot",
    "DerivedMetrics",
    "EtaSource",
    "Outcome",
    "MonitorResult",
    # reports
    "Column",
    "ColumnSpec",
    "OperationFamily",
    "ReportSchema",
    "VSAN_RESYNC_SCHEMA",
    "VSPHERE_TASKS_SCHEMA",
    "POLICY_SCAN_SCHEMA",
    "SCHEMAS",
]

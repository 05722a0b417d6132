"""Pollwatch: operator monitors for long-running remote operations.

v0.1.0 — polling monitors for cloud and virtualization management planes:
  - vSAN object resync (remaining GB, objects left, MiB/s, ETA)
  - vSphere running tasks (task count, elapsed time)
  - Azure Policy compliance scans (trigger + watch to completion)
  - Bounded retry on transient fetch failures, typed error taxonomy
  - Incrementally growing console report (header once, one row per tick)
"""

__version__ = "0.1.0"
__description__ = "Polling monitors for long-running cloud and vSphere operations"

from pollwatch.core.monitor_loop import MonitorLoop
from pollwatch.cli.app import app as cli

__all__ = ["MonitorLoop", "cli", "__version__"]

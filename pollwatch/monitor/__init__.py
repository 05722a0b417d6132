"""Pollwatch console output.

Modules
-------
reporter
    ``Reporter`` turns the session history and the latest ``DerivedMetrics``
    into a growing plain-text table: header once, then one row per tick.
"""

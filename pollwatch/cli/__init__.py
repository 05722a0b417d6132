"""Pollwatch CLI — Typer-based command-line interface.

Provides the ``pollwatch`` command with one subcommand per operation
family (vSAN resync, vSphere tasks, Azure Policy scans) plus ``config``.

All output uses Rich for formatted terminal display.
"""

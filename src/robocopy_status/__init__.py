"""Robocopy Status - configure, launch and follow robocopy file replication.

This package turns untrusted option input into a validated robocopy argument
vector and turns robocopy's semi-structured console output into a running
statistics model with structured events.
"""

from robocopy_status.__main__ import main

__all__ = ["main"]

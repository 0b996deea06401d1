"""Shared help-panel groups for the planwire CLI."""

from __future__ import annotations

from cyclopts import Group

session_group = Group(
    "Session",
    help="Logging and configuration file options.",
    sort_key=0,
)

limits_group = Group(
    "Limits",
    help="Codec and validation limits (also read from PLANWIRE_* variables).",
    sort_key=1,
)

input_group = Group(
    "Input",
    help="Select how plan files are read.",
    sort_key=2,
)

output_group = Group(
    "Output",
    help="Select where and how results are written.",
    sort_key=3,
)

admin_group = Group(
    "Admin",
    help="Administrative commands and help.",
    sort_key=99,
)

__all__ = [
    "admin_group",
    "input_group",
    "limits_group",
    "output_group",
    "session_group",
]

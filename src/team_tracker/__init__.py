"""Team Tracker package.

A Flask JSON service organized by feature modules (tasks, notifications,
teams, activity, reports, auth) with thin controllers over service and
repository layers.
"""
from __future__ import annotations

from .main import create_app

__all__ = ["create_app"]

"""Teamspace: projects, tasks, chat and files with live updates."""

__version__ = "1.0.0"

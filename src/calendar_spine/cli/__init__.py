"""``calendar-spine`` command line interface."""

from calendar_spine.cli.app import app

__all__ = ["app"]

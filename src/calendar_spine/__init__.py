"""
Calendar-Spine - date-range resolution and event projection for a
production scheduling calendar.

Subpackages:
- calendar_spine.core: errors, logging, settings, timestamps, local cache
- calendar_spine.production: range cache, date resolver, projector,
  resource assigner, view resolver and the range orchestrator
- calendar_spine.cli: ``calendar-spine`` command line
"""

__version__ = "0.1.0"

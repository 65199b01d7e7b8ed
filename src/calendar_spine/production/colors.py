"""Event colours: status palette, workstation override and text contrast."""

from __future__ import annotations

from calendar_spine.core.enums import TaskStatus
from calendar_spine.production.models import Task, Workstation

STATUS_COLORS: dict[TaskStatus, str] = {
    TaskStatus.SCHEDULED: "#3788d8",
    TaskStatus.IN_PROGRESS: "#f39c12",
    TaskStatus.COMPLETED: "#2ecc71",
    TaskStatus.CANCELLED: "#e74c3c",
    TaskStatus.ON_HOLD: "#757575",
}
UNKNOWN_STATUS_COLOR = "#95a5a6"


def status_color(status: object) -> str:
    parsed = TaskStatus.parse(status)
    if parsed is None:
        return UNKNOWN_STATUS_COLOR
    return STATUS_COLORS[parsed]


def task_color(
    task: Task,
    workstations: dict[str, Workstation] | None = None,
    *,
    use_workstation_colors: bool = False,
) -> str:
    """Status colour, unless workstation colouring is on and the task's
    workstation defines its own colour."""
    if use_workstation_colors and task.workstation_id and workstations:
        workstation = workstations.get(task.workstation_id)
        if workstation is not None and workstation.color:
            return workstation.color
    return status_color(task.status)


def contrast_text_color(hex_color: str) -> str:
    """Black on light backgrounds, white on dark ones (YIQ brightness >= 128 is light)."""
    value = hex_color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    try:
        r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return "#ffffff"
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return "#000000" if yiq >= 128 else "#ffffff"


__all__ = [
    "STATUS_COLORS",
    "UNKNOWN_STATUS_COLOR",
    "contrast_text_color",
    "status_color",
    "task_color",
]

"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TRACKED_FIELDS = (
    "status",
    "assigned_to",
    "assigned_to2",
    "pc",
    "start_date",
    "end_date",
    "priority",
    "sub_phase",
    "project_name",
    "bug_count",
    "comments",
    "current_updates",
)

HOURS_PER_WORKDAY = 8
SECONDS_PER_WORKDAY = HOURS_PER_WORKDAY * 3600

DEFAULT_SESSION_DAYS = 30
DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 200
DEFAULT_TASK_PAGE_SIZE = 50

DEFAULT_TASK_NAME = "General Task"
UNASSIGNED = "Unassigned"
NO_DEPARTMENT = "Other"

OUTBOX_HISTORY = 500

from campcheck.validator.policy import PolicyTable, resolve_policy
from campcheck.validator.validator import ScheduleValidator, validate_schedule, validate_snapshot

__all__ = [
    "PolicyTable",
    "ScheduleValidator",
    "resolve_policy",
    "validate_schedule",
    "validate_snapshot",
]

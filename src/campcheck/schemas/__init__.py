from campcheck.schemas.findings import Category, Finding, FindingKind, Severity, ValidationReport
from campcheck.schemas.models import (
    Config,
    Division,
    LeagueSlot,
    ResourceProperties,
    ResourceSharingPolicy,
    ScheduleEntry,
    ScheduleSnapshot,
    SharingType,
    TimeSlot,
)

__all__ = [
    "Category",
    "Config",
    "Division",
    "Finding",
    "FindingKind",
    "LeagueSlot",
    "ResourceProperties",
    "ResourceSharingPolicy",
    "ScheduleEntry",
    "ScheduleSnapshot",
    "Severity",
    "SharingType",
    "TimeSlot",
    "ValidationReport",
]

from models.semester import Semester
from models.blocked_week import BlockType, BlockedWeek
from models.entry import DateRange, Entry, MeetingDetail, PlotWeek
from models.plan import CurriculumPlan

__all__ = [
    "Semester",
    "BlockType",
    "BlockedWeek",
    "DateRange",
    "Entry",
    "MeetingDetail",
    "PlotWeek",
    "CurriculumPlan",
]

from schedule_builder.schemas.schedule import (
    AutoCalculateRead,
    GenerateRequest,
    LineItemIn,
    MilestoneCreate,
    MilestoneRead,
    MilestoneUpdate,
    ProjectSchedule,
    ScheduleItemRead,
    ScheduleItemUpdate,
    WindowUpdate,
)

__all__ = [
    "AutoCalculateRead",
    "GenerateRequest",
    "LineItemIn",
    "MilestoneCreate",
    "MilestoneRead",
    "MilestoneUpdate",
    "ProjectSchedule",
    "ScheduleItemRead",
    "ScheduleItemUpdate",
    "WindowUpdate",
]

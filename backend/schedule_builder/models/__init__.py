from schedule_builder.models.schedule import ScheduleRecord

__all__ = ["ScheduleRecord"]

from schedule_builder.routes import schedules

__all__ = ["schedules"]

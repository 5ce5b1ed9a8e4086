"""ORM models exposed for metadata discovery."""
from dayplan.db.models.daily_mode import DailyMode
from dayplan.db.models.daily_plan import DailyPlan
from dayplan.db.models.nutrition_profile import NutritionProfile
from dayplan.db.models.plan_item import PlanItem
from dayplan.db.models.schedule_profile import ScheduleProfile
from dayplan.db.models.task import Task
from dayplan.db.models.user import User
from dayplan.db.models.weekly_schedule import WeeklyScheduleEntry

__all__ = [
    "DailyMode",
    "DailyPlan",
    "NutritionProfile",
    "PlanItem",
    "ScheduleProfile",
    "Task",
    "User",
    "WeeklyScheduleEntry",
]

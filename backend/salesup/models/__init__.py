# Import models here so Alembic can discover metadata.
from salesup.models.user import User  # noqa: F401
from salesup.models.daily_entry import DailyEntry  # noqa: F401
from salesup.models.performance_snapshot import PerformanceSnapshot  # noqa: F401
from salesup.models.invitation import Invitation  # noqa: F401

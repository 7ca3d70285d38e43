"""Activity feed domain service."""

from cartsync.database.base import LocalStore
from cartsync.domain.entities import Activity, ActivityType, Table
from cartsync.utils.ids import generate_id
from cartsync.utils.timestamps import now_iso


class ActivityService:
    """Service for the activity feed."""

    def __init__(self, store: LocalStore):
        """Initialize activity service.

        Args:
            store: Local record store
        """
        self.store = store

    def record(self, activity_type: ActivityType, description: str, user_id: str) -> Activity:
        """Append an entry to the activity feed.

        Args:
            activity_type: Kind of activity
            description: Human-readable description
            user_id: User who performed it

        Returns:
            The stored activity
        """
        now = now_iso()
        activity = Activity(
            id=generate_id(),
            type=ActivityType(activity_type).value,
            description=description,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        self.store.save_record(Table.ACTIVITIES, activity)
        return activity

    def list_recent(self, limit: int = 20) -> list[Activity]:
        """List the most recent activities, newest first."""
        activities = self.store.list_records(Table.ACTIVITIES)
        activities.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        return activities[:limit]

"""User domain service."""

import re
from dataclasses import replace
from typing import Optional

from cartsync.database.base import LocalStore
from cartsync.domain.activities import ActivityService
from cartsync.domain.entities import ActivityType, SyncStatus, Table, User, UserRole
from cartsync.domain.errors import ConflictError, NotFoundError, ValidationError, pin_taken, user_not_found
from cartsync.utils.ids import generate_id
from cartsync.utils.timestamps import now_iso

_PIN_PATTERN = re.compile(r"^\d{4,12}$")


def validate_pin(pin: str) -> str:
    """Return the PIN if it is 4 to 12 digits.

    Raises:
        ValidationError: If it is not
    """
    pin = pin.strip()
    if not _PIN_PATTERN.match(pin):
        raise ValidationError("PIN must be 4 to 12 digits")
    return pin


class UserService:
    """Service for managing cart staff."""

    def __init__(self, store: LocalStore):
        """Initialize user service.

        Args:
            store: Local record store
        """
        self.store = store
        self.activities = ActivityService(store)

    def create_user(self, name: str, pin: str, role: UserRole | str = UserRole.INVENTORY_CLERK) -> User:
        """Create a user.

        Args:
            name: Display name
            pin: Login PIN (4 to 12 digits, unique)
            role: User role

        Returns:
            The new user

        Raises:
            ValidationError: If name, PIN or role is invalid
            ConflictError: If the PIN is already taken
        """
        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        pin = validate_pin(pin)
        try:
            role = UserRole(role)
        except ValueError:
            raise ValidationError(f"Unknown role '{role}'")
        if self.store.get_user_by_pin(pin) is not None:
            raise ConflictError(pin_taken())

        now = now_iso()
        user = User(id=generate_id(), name=name, pin=pin, role=role.value, created_at=now, updated_at=now)
        self.store.save_record(Table.USERS, user)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        return self.store.get_record(Table.USERS, user_id)

    def list_users(self) -> list[User]:
        """List all users."""
        return self.store.list_records(Table.USERS)

    def authenticate(self, pin: str) -> Optional[User]:
        """Return the user owning ``pin``, or None."""
        return self.store.get_user_by_pin(pin.strip())

    def _require(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        return user

    def update_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        bio: Optional[str] = None,
        profile_picture: Optional[str] = None,
    ) -> User:
        """Update a user's editable profile fields.

        Args:
            user_id: User to update
            name: New display name (unchanged if None)
            bio: New bio (unchanged if None)
            profile_picture: New picture URI (unchanged if None)

        Returns:
            The updated user

        Raises:
            NotFoundError: If the user doesn't exist
            ValidationError: If the new name is empty
        """
        user = self._require(user_id)
        changes = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Name cannot be empty")
            changes["name"] = name.strip()
        if bio is not None:
            changes["bio"] = bio
        if profile_picture is not None:
            changes["profile_picture"] = profile_picture
        if not changes:
            return user

        updated = replace(user, **changes, updated_at=now_iso(), sync_status=SyncStatus.PENDING)
        self.store.save_record(Table.USERS, updated)
        self.activities.record(ActivityType.PROFILE_UPDATE, f"{updated.name} updated their profile", user_id)
        return updated

    def change_pin(self, user_id: str, new_pin: str) -> User:
        """Change a user's login PIN.

        Raises:
            NotFoundError: If the user doesn't exist
            ValidationError: If the PIN is malformed
            ConflictError: If another user owns the PIN
        """
        user = self._require(user_id)
        new_pin = validate_pin(new_pin)
        owner = self.store.get_user_by_pin(new_pin)
        if owner is not None and owner.id != user_id:
            raise ConflictError(pin_taken())
        if new_pin == user.pin:
            return user

        updated = replace(user, pin=new_pin, updated_at=now_iso(), sync_status=SyncStatus.PENDING)
        self.store.save_record(Table.USERS, updated)
        self.activities.record(ActivityType.SETTINGS_CHANGE, f"{user.name} changed their PIN", user_id)
        return updated

"""Tests for domain entities."""

from dataclasses import FrozenInstanceError, replace
from datetime import date
from decimal import Decimal

import pytest

from cartsync.domain.entities import (
    DEFAULT_USERS,
    RECOVERY_PIN,
    Sale,
    SyncStatus,
    Table,
    User,
    normalize_category_name,
)


def test_user_defaults():
    """Test a new user is pending and has no profile extras."""
    user = User(id="u-1", name="Maria", pin="1234", role="general_manager",
                created_at="2024-03-01T08:00:00+00:00", updated_at="2024-03-01T08:00:00+00:00")

    assert user.sync_status == SyncStatus.PENDING
    assert user.bio is None
    assert user.profile_picture is None


def test_entities_are_immutable():
    sale = Sale(id="s-1", name="Morning", total=Decimal("500"), date=date(2024, 3, 1), created_by="u-1",
                created_at="2024-03-01T08:00:00+00:00", updated_at="2024-03-01T08:00:00+00:00")

    with pytest.raises(FrozenInstanceError):
        sale.total = Decimal("1")
    assert replace(sale, sync_status=SyncStatus.SYNCED).sync_status == SyncStatus.SYNCED


@pytest.mark.parametrize("name", ["Snacks", " snacks", "SNACKS  ", "sNaCkS"])
def test_normalize_category_name(name):
    assert normalize_category_name(name) == "snacks"


def test_table_order():
    """Test tables are listed parents first."""
    assert [t.value for t in Table] == ["users", "categories", "inventory", "sales", "expenses", "activities"]


def test_recovery_pin_is_a_seeded_user():
    assert RECOVERY_PIN in {pin for _, pin, _ in DEFAULT_USERS}

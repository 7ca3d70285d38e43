"""Tests for the local record store interface."""

from datetime import date
from decimal import Decimal

import pytest

from cartsync.domain.entities import SyncStatus, Table
from helpers import (
    T0,
    T1,
    make_activity,
    make_category,
    make_expense,
    make_item,
    make_sale,
    make_user,
)


class TestRecordOperations:
    """Generic per-table CRUD."""

    def test_save_and_get(self, temp_store):
        """Test a saved record comes back equal."""
        item = make_item()
        temp_store.save_record(Table.INVENTORY, item)

        loaded = temp_store.get_record(Table.INVENTORY, "i-1")
        assert loaded.name == "Hotdog"
        assert loaded.price == Decimal("25.00")
        assert loaded.quantity == Decimal("10")
        assert loaded.sync_status == SyncStatus.PENDING

    def test_get_missing_returns_none(self, temp_store):
        """Test getting an unknown id."""
        assert temp_store.get_record(Table.USERS, "nope") is None

    def test_save_replaces_existing(self, temp_store):
        """Test saving the same id twice keeps one row with the new values."""
        temp_store.save_record(Table.CATEGORIES, make_category(name="Snacks"))
        temp_store.save_record(Table.CATEGORIES, make_category(name="Drinks"))

        categories = temp_store.list_records(Table.CATEGORIES)
        assert [c.name for c in categories] == ["Drinks"]

    def test_delete_record(self, temp_store):
        """Test deleting reports whether a row existed."""
        temp_store.save_record(Table.USERS, make_user())

        assert temp_store.delete_record(Table.USERS, "u-1") is True
        assert temp_store.delete_record(Table.USERS, "u-1") is False
        assert temp_store.get_record(Table.USERS, "u-1") is None

    def test_list_records_ordered_by_creation(self, temp_store):
        """Test records are listed oldest first."""
        temp_store.save_record(Table.CATEGORIES, make_category(id="c-2", name="B", created_at=T1))
        temp_store.save_record(Table.CATEGORIES, make_category(id="c-1", name="A", created_at=T0))

        assert [c.id for c in temp_store.list_records(Table.CATEGORIES)] == ["c-1", "c-2"]


class TestPendingTracking:
    """Pending/synced bookkeeping."""

    def test_pending_counts(self, temp_store):
        """Test per-table and total pending counts."""
        temp_store.save_record(Table.USERS, make_user())
        temp_store.save_record(Table.SALES, make_sale())
        temp_store.save_record(Table.SALES, make_sale(id="s-2", sync_status=SyncStatus.SYNCED))

        assert temp_store.pending_count(Table.SALES) == 1
        assert temp_store.pending_count() == 2
        assert [s.id for s in temp_store.list_pending(Table.SALES)] == ["s-1"]

    def test_mark_all_synced(self, temp_store):
        """Test every table is flipped to synced."""
        temp_store.save_record(Table.USERS, make_user())
        temp_store.save_record(Table.EXPENSES, make_expense())
        temp_store.save_record(Table.ACTIVITIES, make_activity())

        assert temp_store.mark_all_synced() == 3
        assert temp_store.pending_count() == 0
        assert temp_store.get_record(Table.EXPENSES, "e-1").sync_status == SyncStatus.SYNCED


class TestUpsertFromRemote:
    """The per-record merge rule."""

    def test_inserts_unknown_record_as_synced(self, temp_store):
        """Test a new remote record is inserted and marked synced."""
        written = temp_store.upsert_from_remote(Table.USERS, make_user(sync_status=SyncStatus.PENDING))

        assert written is True
        assert temp_store.get_record(Table.USERS, "u-1").sync_status == SyncStatus.SYNCED

    def test_overwrites_synced_local(self, temp_store):
        """Test the remote version replaces a synced local row."""
        temp_store.save_record(Table.USERS, make_user(name="Old", sync_status=SyncStatus.SYNCED))

        temp_store.upsert_from_remote(Table.USERS, make_user(name="New", sync_status=SyncStatus.SYNCED))

        assert temp_store.get_record(Table.USERS, "u-1").name == "New"

    def test_keeps_pending_local(self, temp_store):
        """Test a pending local row is never overwritten."""
        temp_store.save_record(Table.USERS, make_user(name="Local edit"))

        written = temp_store.upsert_from_remote(Table.USERS, make_user(name="Server", sync_status=SyncStatus.SYNCED))

        assert written is False
        loaded = temp_store.get_record(Table.USERS, "u-1")
        assert loaded.name == "Local edit"
        assert loaded.sync_status == SyncStatus.PENDING


class TestLookups:
    """Lookups used by services."""

    def test_get_user_by_pin(self, temp_store):
        """Test finding a user by PIN."""
        temp_store.save_record(Table.USERS, make_user(pin="4821"))

        assert temp_store.get_user_by_pin("4821").id == "u-1"
        assert temp_store.get_user_by_pin("0000") is None

    def test_find_categories_by_name_is_normalized(self, temp_store):
        """Test category lookup ignores case and surrounding spaces."""
        temp_store.save_record(Table.CATEGORIES, make_category(name="  Snacks "))

        assert [c.id for c in temp_store.find_categories_by_name("SNACKS")] == ["c-1"]
        assert temp_store.find_categories_by_name("snacks", exclude_id="c-1") == []

    def test_count_items_in_category(self, temp_store):
        """Test counting items in a category."""
        temp_store.save_record(Table.INVENTORY, make_item(id="i-1", category_id="c-1"))
        temp_store.save_record(Table.INVENTORY, make_item(id="i-2", category_id="c-1"))
        temp_store.save_record(Table.INVENTORY, make_item(id="i-3", category_id=None))

        assert temp_store.count_items_in_category("c-1") == 2

    def test_list_dated_records_range(self, temp_store):
        """Test the day range is inclusive and newest first."""
        temp_store.save_record(Table.SALES, make_sale(id="s-1", day=date(2024, 3, 1)))
        temp_store.save_record(Table.SALES, make_sale(id="s-2", day=date(2024, 3, 2)))
        temp_store.save_record(Table.SALES, make_sale(id="s-3", day=date(2024, 3, 5)))

        sales = temp_store.list_dated_records(Table.SALES, date(2024, 3, 1), date(2024, 3, 2))
        assert [s.id for s in sales] == ["s-2", "s-1"]

    def test_list_dated_records_rejects_undated_table(self, temp_store):
        """Test only sales and expenses have a business date."""
        with pytest.raises(ValueError, match="no business date"):
            temp_store.list_dated_records(Table.INVENTORY)


class TestReferenceRepair:
    """Bulk reference rewrites and dangling reference detection."""

    def test_repoint_user_references_marks_pending(self, temp_store):
        """Test every author reference moves and becomes pending."""
        temp_store.save_record(Table.INVENTORY, make_item(created_by="old", sync_status=SyncStatus.SYNCED))
        temp_store.save_record(Table.SALES, make_sale(created_by="old", sync_status=SyncStatus.SYNCED))
        temp_store.save_record(Table.EXPENSES, make_expense(created_by="old", sync_status=SyncStatus.SYNCED))
        temp_store.save_record(Table.ACTIVITIES, make_activity(user_id="old", sync_status=SyncStatus.SYNCED))

        assert temp_store.repoint_user_references("old", "new") == 4

        assert temp_store.get_record(Table.INVENTORY, "i-1").created_by == "new"
        assert temp_store.get_record(Table.SALES, "s-1").created_by == "new"
        assert temp_store.get_record(Table.EXPENSES, "e-1").created_by == "new"
        activity = temp_store.get_record(Table.ACTIVITIES, "a-1")
        assert activity.user_id == "new"
        assert activity.sync_status == SyncStatus.PENDING
        assert activity.updated_at != T0

    def test_repoint_category_references_can_detach(self, temp_store):
        """Test None as the new category detaches items."""
        temp_store.save_record(Table.INVENTORY, make_item(category_id="c-1"))

        assert temp_store.repoint_category_references("c-1", None) == 1
        assert temp_store.get_record(Table.INVENTORY, "i-1").category_id is None

    def test_find_dangling_references(self, temp_store):
        """Test references to unknown users and categories are reported."""
        temp_store.save_record(Table.USERS, make_user(id="u-1"))
        temp_store.save_record(Table.CATEGORIES, make_category(id="c-1"))
        temp_store.save_record(Table.INVENTORY, make_item(id="i-1", category_id="c-1", created_by="u-1"))
        temp_store.save_record(Table.INVENTORY, make_item(id="i-2", category_id="gone", created_by="ghost"))
        temp_store.save_record(Table.ACTIVITIES, make_activity(user_id="ghost"))

        assert temp_store.find_dangling_user_references() == [
            (Table.INVENTORY, "i-2", "ghost"),
            (Table.ACTIVITIES, "a-1", "ghost"),
        ]
        assert temp_store.find_dangling_category_references() == [("i-2", "gone")]

    def test_set_user_reference_unknown_table(self, temp_store):
        """Test tables without an author field are rejected."""
        with pytest.raises(ValueError):
            temp_store.set_user_reference(Table.CATEGORIES, "c-1", "u-1")


class TestSyncBookkeeping:
    """Deletion queue and sync metadata."""

    def test_enqueue_deletion_is_idempotent(self, temp_store):
        """Test queuing the same deletion twice keeps one entry."""
        temp_store.enqueue_deletion(Table.SALES, "s-1")
        temp_store.enqueue_deletion(Table.SALES, "s-1")
        temp_store.enqueue_deletion(Table.INVENTORY, "i-1")

        deletions = temp_store.list_pending_deletions()
        assert [(d.table, d.record_id) for d in deletions] == [
            (Table.SALES, "s-1"),
            (Table.INVENTORY, "i-1"),
        ]

        temp_store.clear_pending_deletions()
        assert temp_store.list_pending_deletions() == []

    def test_meta_round_trip(self, temp_store):
        """Test reading and overwriting a metadata value."""
        assert temp_store.get_meta("last_sync_time") is None
        temp_store.set_meta("last_sync_time", T0)
        temp_store.set_meta("last_sync_time", T1)
        assert temp_store.get_meta("last_sync_time") == T1

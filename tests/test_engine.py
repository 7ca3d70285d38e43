"""Tests for the reconciliation engine."""

from unittest.mock import MagicMock

import pytest

from cartsync.domain.entities import SyncStatus, Table, normalize_category_name
from cartsync.sync.connectivity import ManualConnectivityMonitor, ProbeConnectivityMonitor
from cartsync.sync.engine import LAST_SYNC_KEY, SyncEngine, SyncReason
from cartsync.sync.state import SyncIndicator
from helpers import FakeRemoteStore, make_category, make_expense, make_item, make_sale, make_user


@pytest.fixture
def seeded(temp_store):
    """A device with one pending user and one pending sale."""
    temp_store.save_record(Table.USERS, make_user(id="u-1", pin="2345"))
    temp_store.save_record(Table.SALES, make_sale(created_by="u-1"))
    return temp_store


class TestGuards:
    """Early exits before any remote work."""

    def test_unconfigured_remote(self, seeded, monitor):
        """Test no remote calls are made and the state stays pending."""
        remote = FakeRemoteStore(configured=False)
        engine = SyncEngine(seeded, remote, monitor)

        result = engine.run_sync("manual")

        assert result.ok is False
        assert result.message == "remote store not configured"
        assert remote.calls == []
        state = engine.current_state()
        assert state.status == SyncIndicator.PENDING
        assert state.pending_count == 2

    def test_offline(self, seeded, remote, monitor, engine):
        """Test an offline device reports offline without calling the remote."""
        monitor.set_connected(False)

        result = engine.run_sync(SyncReason.MANUAL)

        assert result.ok is False
        assert result.message == "offline"
        assert remote.calls == []
        assert engine.current_state().status == SyncIndicator.OFFLINE

    def test_unknown_reason_is_rejected(self, seeded, remote, engine):
        """Test an unknown trigger raises before any work and leaves the engine usable."""
        with pytest.raises(ValueError):
            engine.run_sync("nightly")

        assert remote.calls == []
        assert engine.is_syncing is False
        assert engine.run_sync("auto").ok is True

    def test_second_call_during_cycle_is_rejected(self, seeded, remote, engine):
        """Test only one cycle runs; a call made mid-cycle returns at once."""
        nested = []

        def reenter(table):
            if not nested:
                calls_before = len(remote.calls)
                nested.append(engine.run_sync(SyncReason.AUTO))
                # the rejected call made no remote calls of its own
                assert len(remote.calls) == calls_before

        remote.before_fetch = reenter

        result = engine.run_sync(SyncReason.MANUAL)

        assert nested[0].ok is False
        assert nested[0].message == "sync already in progress"
        assert result.ok is True
        assert len(remote.calls_to("push_batch")) == 2

    def test_flag_set_during_cycle(self, seeded, remote, engine):
        """Test the projector sees syncing while a cycle is in flight."""
        seen = []
        remote.before_fetch = lambda table: seen.append(engine.current_state().status)

        engine.run_sync()

        assert set(seen) == {SyncIndicator.SYNCING}
        assert engine.is_syncing is False


class TestFullCycle:
    """End-to-end cycles against the in-memory remote."""

    def test_clean_sync(self, seeded, remote, engine):
        """Test a successful push and pull leaves everything synced."""
        result = engine.run_sync(SyncReason.LOGIN)

        assert result.ok is True
        assert result.reason == SyncReason.LOGIN
        assert result.pending_count == 0
        assert result.pushed[Table.USERS] == 1
        assert result.pushed[Table.SALES] == 1
        assert remote.get(Table.SALES, "s-1").created_by == "u-1"
        state = engine.current_state()
        assert state.status == SyncIndicator.SYNCED
        assert state.last_sync_time is not None
        assert seeded.get_record(Table.SALES, "s-1").sync_status == SyncStatus.SYNCED

    def test_steps_run_in_order(self, seeded, remote, engine):
        """Test deletions, pushes and pulls happen in that order."""
        seeded.enqueue_deletion(Table.EXPENSES, "e-old")

        engine.run_sync()

        kinds = [call[0] for call in remote.calls]
        first_push = kinds.index("push_batch")
        assert kinds.index("delete_by_id") < first_push
        pulls = [i for i, kind in enumerate(kinds) if kind == "fetch_all" and i > first_push]
        assert len(pulls) == len(Table)
        assert max(i for i, kind in enumerate(kinds) if kind == "push_batch") < min(pulls)

    def test_pulls_remote_records(self, seeded, remote, engine):
        """Test records created elsewhere arrive locally as synced."""
        remote.seed(Table.SALES, make_sale(id="s-remote", name="Afternoon", created_by="u-1"))

        engine.run_sync()

        sale = seeded.get_record(Table.SALES, "s-remote")
        assert sale.name == "Afternoon"
        assert sale.sync_status == SyncStatus.SYNCED

    def test_duplicate_category_scenario(self, temp_store, remote, engine):
        """Test a local "Snacks" folds into the remote "snacks " in one cycle."""
        temp_store.save_record(Table.USERS, make_user(id="u-1"))
        temp_store.save_record(Table.CATEGORIES, make_category(id="c-local", name="Snacks"))
        temp_store.save_record(Table.INVENTORY, make_item(category_id="c-local", created_by="u-1"))
        remote.seed(Table.CATEGORIES, make_category(id="c-srv", name="snacks "))

        result = engine.run_sync()

        assert result.ok is True
        snacks = [
            c for c in temp_store.list_records(Table.CATEGORIES)
            if normalize_category_name(c.name) == "snacks"
        ]
        assert [c.id for c in snacks] == ["c-srv"]
        assert temp_store.get_record(Table.INVENTORY, "i-1").category_id == "c-srv"
        # the stale local id never reached the remote
        assert remote.get(Table.CATEGORIES, "c-local") is None
        assert remote.get(Table.INVENTORY, "i-1").category_id == "c-srv"

    def test_pin_identity_scenario(self, temp_store, remote, engine):
        """Test a local user sharing a PIN with a server user is absorbed by it."""
        temp_store.save_record(Table.USERS, make_user(id="local-1", pin="1234", name="Maria (edited)"))
        temp_store.save_record(Table.SALES, make_sale(created_by="local-1"))
        remote.seed(Table.USERS, make_user(id="srv-9", pin="1234", name="Maria"))

        result = engine.run_sync()

        assert result.ok is True
        assert temp_store.get_record(Table.USERS, "local-1") is None
        assert temp_store.get_record(Table.SALES, "s-1").created_by == "srv-9"
        assert remote.get(Table.SALES, "s-1").created_by == "srv-9"
        # the server profile wins once the absorbed row is synced
        assert temp_store.get_record(Table.USERS, "srv-9").name == "Maria"
        assert remote.get(Table.USERS, "srv-9").name == "Maria"
        assert remote.get(Table.USERS, "local-1") is None

    def test_seeded_default_user_does_not_overwrite_server_user(self, temp_store, remote, engine):
        """Test a fresh device's default user never replaces the server's profile."""
        temp_store.save_record(Table.USERS, make_user(id="local-1", pin="1234", name="General Manager"))
        remote.seed(Table.USERS, make_user(id="srv-9", pin="1234", name="Maria", bio="Owner",
                                           sync_status=SyncStatus.SYNCED))

        result = engine.run_sync(SyncReason.LOGIN)

        assert result.ok is True
        assert [call for call in remote.calls_to("push_batch") if call[1] == Table.USERS] == []
        server_user = remote.get(Table.USERS, "srv-9")
        assert server_user.name == "Maria"
        assert server_user.bio == "Owner"
        assert temp_store.get_record(Table.USERS, "srv-9").sync_status == SyncStatus.SYNCED

    def test_pin_conflict_detected_at_push(self, temp_store, remote, engine):
        """Test the push-time PIN lookup absorbs the user and leaves it out of the batch."""
        temp_store.save_record(Table.USERS, make_user(id="local-1", pin="1234", name="Local"))
        temp_store.save_record(Table.SALES, make_sale(created_by="local-1"))
        remote.seed(Table.USERS, make_user(id="srv-9", pin="1234", name="Server"))
        remote.fail_fetch.add(Table.USERS)

        engine.run_sync()

        assert remote.calls_to("find_user_by_pin") == [("find_user_by_pin", "1234")]
        pushed_users = [call[2] for call in remote.calls_to("push_batch") if call[1] == Table.USERS]
        assert pushed_users == []
        assert remote.get(Table.USERS, "srv-9").name == "Server"
        assert temp_store.get_record(Table.USERS, "local-1") is None
        assert temp_store.get_record(Table.USERS, "srv-9").sync_status == SyncStatus.SYNCED
        assert temp_store.get_record(Table.SALES, "s-1").created_by == "srv-9"
        assert remote.get(Table.SALES, "s-1").created_by == "srv-9"

    def test_second_cycle_is_quiet(self, seeded, remote, engine):
        """Test a cycle right after a clean one pushes nothing."""
        engine.run_sync()
        remote.calls.clear()

        result = engine.run_sync()

        assert result.ok is True
        assert remote.calls_to("push_batch") == []


class TestFailures:
    """Partial failures and unexpected errors."""

    def test_partial_push_failure(self, seeded, remote, engine):
        """Test a failed table keeps everything pending but pull still runs."""
        remote.fail_push.add(Table.SALES)
        remote.seed(Table.EXPENSES, make_expense(id="e-remote", created_by="u-1"))

        result = engine.run_sync()

        assert result.ok is False
        assert result.pushed[Table.SALES] == 0
        assert Table.EXPENSES in result.pulled
        assert seeded.get_record(Table.EXPENSES, "e-remote") is not None
        assert seeded.get_record(Table.SALES, "s-1").sync_status == SyncStatus.PENDING
        assert engine.current_state().status == SyncIndicator.PENDING
        assert seeded.get_meta(LAST_SYNC_KEY) is None

        # next cycle resends the full pending set
        remote.fail_push.clear()
        remote.calls.clear()
        assert engine.run_sync().ok is True
        pushed_sales = [call[2] for call in remote.calls_to("push_batch") if call[1] == Table.SALES]
        assert pushed_sales == [["s-1"]]

    def test_pull_failure_is_not_fatal(self, seeded, remote, engine):
        """Test a failed fetch skips that table's merge only."""
        remote.fail_fetch.add(Table.ACTIVITIES)

        result = engine.run_sync()

        assert result.ok is True
        assert Table.ACTIVITIES not in result.pulled
        assert Table.SALES in result.pulled

    def test_unexpected_error_releases_engine(self, seeded, remote, engine):
        """Test an exception mid-cycle is reported and the engine is reusable."""
        def explode(table):
            raise RuntimeError("connection reset")

        remote.before_fetch = explode

        result = engine.run_sync()

        assert result.ok is False
        assert "connection reset" in result.message
        assert result.pending_count == 2
        assert engine.is_syncing is False

        remote.before_fetch = None
        assert engine.run_sync().ok is True

    def test_unreadable_state_does_not_escape(self, seeded, remote, engine, monkeypatch):
        """Test a store failure while notifying listeners is reported, not raised."""
        states = []
        engine.add_state_listener(states.append)

        def locked(table=None):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(seeded, "pending_count", locked)

        result = engine.run_sync()

        assert result.ok is False
        assert "database is locked" in result.message
        assert result.pending_count == 0
        assert states == []
        assert engine.is_syncing is False

    def test_unreadable_state_while_offline(self, seeded, remote, engine, monitor, monkeypatch):
        """Test the offline guard survives a store that cannot count."""
        engine.add_state_listener(lambda state: None)
        monitor.set_connected(False)
        monkeypatch.setattr(seeded, "pending_count", MagicMock(side_effect=RuntimeError("database is locked")))

        result = engine.run_sync()

        assert result.message == "offline"
        assert result.pending_count == 0


class TestDeletions:
    """Draining of the pending-deletion queue."""

    def test_queued_deletion_reaches_remote(self, temp_store, remote, engine):
        """Test a queued deletion is replayed remotely and cleared."""
        remote.seed(Table.SALES, make_sale(id="s-gone", created_by="u-1"))
        engine.queue_deletion(Table.SALES, "s-gone")

        engine.run_sync()

        assert remote.calls_to("delete_by_id") == [("delete_by_id", Table.SALES, "s-gone")]
        assert remote.get(Table.SALES, "s-gone") is None
        assert temp_store.list_pending_deletions() == []

    def test_failed_deletion_is_not_retried(self, temp_store, remote, engine):
        """Test the queue is cleared even when a remote delete fails."""
        remote.fail_delete.add("s-gone")
        engine.queue_deletion("sales", "s-gone")

        engine.run_sync()
        engine.run_sync()

        assert len(remote.calls_to("delete_by_id")) == 1
        assert temp_store.list_pending_deletions() == []


class TestReferentialRepair:
    """Dangling references found after the merge."""

    def test_orphan_is_repaired_and_pushed_next_cycle(self, temp_store, remote, engine):
        """Test an orphaned sale is reassigned, left pending, then pushed."""
        temp_store.save_record(Table.USERS, make_user(id="u-1", pin="2345"))
        temp_store.save_record(Table.SALES, make_sale(created_by="ghost"))

        first = engine.run_sync()

        assert first.ok is False
        assert first.pending_count == 1
        sale = temp_store.get_record(Table.SALES, "s-1")
        assert sale.created_by == "u-1"
        assert sale.sync_status == SyncStatus.PENDING

        second = engine.run_sync()

        assert second.ok is True
        assert remote.get(Table.SALES, "s-1").created_by == "u-1"

    def test_repair_local(self, temp_store, engine):
        """Test the remote-free repair pass."""
        temp_store.save_record(Table.USERS, make_user(id="u-1", pin="2345"))
        temp_store.save_record(Table.CATEGORIES, make_category(id="c-1", name="Cart"))
        temp_store.save_record(Table.CATEGORIES, make_category(id="c-2", name="cart"))
        temp_store.save_record(Table.INVENTORY, make_item(category_id="c-9", created_by="ghost"))

        result = engine.repair_local()

        assert result.duplicate_categories_removed == 1
        assert result.orphans.fixed_authors == {Table.INVENTORY: 1}
        assert result.orphans.detached_items == 1


class TestConnectivityWiring:
    """Automatic sync and state notifications."""

    def test_reconnect_triggers_auto_sync(self, seeded, remote):
        """Test regaining connectivity runs a cycle once attached."""
        monitor = ManualConnectivityMonitor(connected=False)
        engine = SyncEngine(seeded, remote, monitor)
        engine.attach()

        monitor.set_connected(True)

        assert len(remote.calls_to("push_batch")) == 2
        assert engine.current_state().status == SyncIndicator.SYNCED

    def test_detach_stops_auto_sync(self, seeded, remote):
        """Test a detached engine ignores connectivity changes."""
        monitor = ManualConnectivityMonitor(connected=False)
        engine = SyncEngine(seeded, remote, monitor)
        engine.attach()
        engine.detach()

        monitor.set_connected(True)

        assert remote.calls == []

    def test_listeners_see_each_transition(self, seeded, engine, monitor):
        """Test listeners receive syncing then synced, and offline on disconnect."""
        states = []
        engine.add_state_listener(states.append)
        engine.attach()

        engine.run_sync()
        monitor.set_connected(False)

        assert [s.status for s in states] == [
            SyncIndicator.SYNCING,
            SyncIndicator.SYNCED,
            SyncIndicator.OFFLINE,
        ]

    def test_removed_listener_is_not_called(self, seeded, engine):
        """Test the function returned by add_state_listener unsubscribes."""
        states = []
        remove = engine.add_state_listener(states.append)
        remove()

        engine.run_sync()

        assert states == []

    def test_reading_state_does_not_start_sync(self, seeded, remote, monkeypatch):
        """Test the indicator uses the last-known state; only run_sync checks the network."""
        create_connection = MagicMock()
        monkeypatch.setattr("cartsync.sync.connectivity.socket.create_connection", create_connection)
        monitor = ProbeConnectivityMonitor("cart.supabase.co")
        engine = SyncEngine(seeded, remote, monitor)
        engine.attach()

        assert engine.current_state().status == SyncIndicator.OFFLINE
        create_connection.assert_not_called()
        assert remote.calls == []

        result = engine.run_sync()

        assert result.ok is True
        assert create_connection.call_count == 1
        assert len(remote.calls_to("push_batch")) == 2
        assert engine.current_state().status == SyncIndicator.SYNCED

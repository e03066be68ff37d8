import threading

from site_monitor.evaluator.site_state_tracker import SiteStateTracker
from site_monitor.model.enum.site_state_enum import SiteState


class TestSiteStateTracker:

    def test_when_created_then_state_is_unknown(self):
        tracker = SiteStateTracker()

        assert tracker.current == SiteState.UNKNOWN
        assert tracker.changed_at is None

    def test_when_first_exchange_then_returns_unknown(self):
        """First cycle sees the initial pseudo-state"""
        # Arrange
        tracker = SiteStateTracker()

        # Act
        previous = tracker.exchange(SiteState.ONLINE)

        # Assert
        assert previous == SiteState.UNKNOWN
        assert tracker.current == SiteState.ONLINE

    def test_when_exchanged_repeatedly_then_returns_what_previous_cycle_stored(self):
        # Arrange
        tracker = SiteStateTracker()
        sequence = [SiteState.OFFLINE, SiteState.OFFLINE, SiteState.API_ERROR, SiteState.ONLINE]

        # Act
        previous_list = [tracker.exchange(state) for state in sequence]

        # Assert
        assert previous_list == [SiteState.UNKNOWN, SiteState.OFFLINE, SiteState.OFFLINE, SiteState.API_ERROR]

    def test_when_state_unchanged_then_changed_at_is_kept(self):
        # Arrange
        tracker = SiteStateTracker()
        tracker.exchange(SiteState.OFFLINE)
        first_change = tracker.changed_at

        # Act
        tracker.exchange(SiteState.OFFLINE)

        # Assert
        assert first_change is not None
        assert tracker.changed_at == first_change

    def test_when_trackers_are_independent_then_states_do_not_leak(self):
        tracker_a = SiteStateTracker()
        tracker_b = SiteStateTracker()

        tracker_a.exchange(SiteState.OFFLINE)

        assert tracker_b.current == SiteState.UNKNOWN

    def test_when_exchanged_concurrently_then_no_update_is_lost(self):
        """Every stored state is returned exactly once as someone's previous state"""
        # Arrange
        tracker = SiteStateTracker()
        states = [SiteState.ONLINE, SiteState.OFFLINE, SiteState.API_ERROR]
        returned: list[SiteState] = []
        returned_lock = threading.Lock()
        per_thread = 200

        def worker(state: SiteState):
            for _ in range(per_thread):
                previous = tracker.exchange(state)
                with returned_lock:
                    returned.append(previous)

        threads = [threading.Thread(target=worker, args=(state,)) for state in states]

        # Act
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Assert
        # Returned values = initial UNKNOWN + every stored value except the final one
        stored_counts = {state: per_thread for state in states}
        stored_counts[tracker.current] -= 1
        assert returned.count(SiteState.UNKNOWN) == 1
        for state in states:
            assert returned.count(state) == stored_counts[state]

"""Tests for sync outcome bookkeeping."""

from file_drive.sync.utils import MAX_RECENT_OUTCOMES, OutcomeStatus, SyncAction, SyncState


def test_record_counts():
    state = SyncState()
    state.record("a", SyncAction.PUT, OutcomeStatus.SUCCESS)
    state.record("b", SyncAction.PUT, OutcomeStatus.ERROR, "disk full")
    state.record("c", SyncAction.DELETE, OutcomeStatus.SKIPPED)

    assert state.write_count == 1
    assert state.error_count == 1
    assert state.last_error is not None
    assert [o.key for o in state.recent_outcomes] == ["c", "b", "a"]
    assert [o.error for o in state.failures()] == ["disk full"]


def test_recent_outcomes_are_capped():
    state = SyncState()
    for i in range(MAX_RECENT_OUTCOMES + 10):
        state.record(str(i), SyncAction.PUT, OutcomeStatus.SUCCESS)

    assert len(state.recent_outcomes) == MAX_RECENT_OUTCOMES
    assert state.recent_outcomes[0].key == str(MAX_RECENT_OUTCOMES + 9)
    assert state.write_count == MAX_RECENT_OUTCOMES + 10

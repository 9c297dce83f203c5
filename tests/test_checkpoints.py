"""
Tests for CheckpointStore (fil_last_count).
"""

from __future__ import annotations

import pytest

from conftest import OTHER, WATCHED


def test_missing_checkpoint_is_none(checkpoints):
    assert checkpoints.get_checkpoint(WATCHED) is None


def test_set_then_update(checkpoints):
    checkpoints.set_checkpoint(WATCHED, 120)
    assert checkpoints.get_checkpoint(WATCHED) == 120
    checkpoints.set_checkpoint(WATCHED, 180)
    assert checkpoints.get_checkpoint(WATCHED) == 180
    assert [c.account for c in checkpoints.list_checkpoints()] == [WATCHED]


def test_one_row_per_account(checkpoints):
    checkpoints.set_checkpoint(WATCHED, 1)
    checkpoints.set_checkpoint(OTHER, 2)
    checkpoints.set_checkpoint(WATCHED, 3)
    stored = {c.account: c.last_known_remote_count for c in checkpoints.list_checkpoints()}
    assert stored == {WATCHED: 3, OTHER: 2}


def test_negative_checkpoint_rejected(checkpoints):
    with pytest.raises(ValueError):
        checkpoints.set_checkpoint(WATCHED, -1)

"""Tests for parent/subservice block moves."""

from core.blocks import RowInfo, block_indices, insertion_index, is_valid_drop, split_block


def parent(key, kind=None):
    return RowInfo(key=key, kind=kind or key, is_subservice=False, parent=None)


def child(key, parent_kind, kind=None):
    return RowInfo(key=key, kind=kind or key, is_subservice=True, parent=parent_kind)


class TestBlockIndices:

    def test_subservice_moves_alone(self):
        rows = [parent("P"), child("a", "P"), child("b", "P")]
        assert block_indices(rows, 1) == [1]

    def test_single_parent_takes_all_its_subservices(self):
        """Even subservices that drifted away from it."""
        rows = [parent("P"), child("a", "P"), parent("Q"), child("b", "P")]
        assert block_indices(rows, 0) == [0, 1, 3]

    def test_repeated_parent_takes_contiguous_run_only(self):
        rows = [
            parent("p1", kind="P"), child("a", "P"),
            parent("p2", kind="P"), child("b", "P"), child("c", "P"),
        ]
        assert block_indices(rows, 2) == [2, 3, 4]
        assert block_indices(rows, 0) == [0, 1]

    def test_other_parents_children_not_taken(self):
        rows = [parent("P"), child("x", "Q"), child("a", "P")]
        assert block_indices(rows, 0) == [0, 2]


class TestIsValidDrop:

    def test_subservice_onto_sibling(self):
        assert is_valid_drop(child("a", "P"), child("b", "P"))

    def test_subservice_onto_own_parent(self):
        assert is_valid_drop(child("a", "P"), parent("P"))

    def test_subservice_onto_other_parent_rejected(self):
        assert not is_valid_drop(child("a", "P"), parent("Q"))

    def test_subservice_onto_foreign_subservice_rejected(self):
        assert not is_valid_drop(child("a", "P"), child("x", "Q"))

    def test_subservice_onto_drop_zone_rejected(self):
        assert not is_valid_drop(child("a", "P"), None)

    def test_parent_onto_parent_or_drop_zone(self):
        assert is_valid_drop(parent("P"), parent("Q"))
        assert is_valid_drop(parent("P"), None)

    def test_parent_onto_subservice_rejected(self):
        assert not is_valid_drop(parent("P"), child("x", "Q"))


class TestSplitBlock:

    def test_keeps_original_order(self):
        block, remaining = split_block(["a", "b", "c", "d"], [3, 1])
        assert block == ["b", "d"]
        assert remaining == ["a", "c"]


class TestInsertionIndex:

    def test_no_target_appends(self):
        rows = [parent("P"), parent("Q")]
        assert insertion_index(rows, None, parent("R"), False) == 2

    def test_before_target(self):
        rows = [parent("P"), parent("Q")]
        assert insertion_index(rows, "Q", parent("R"), False) == 1

    def test_after_target_skips_its_subservices(self):
        rows = [parent("P"), child("a", "P"), child("b", "P"), parent("Q")]
        assert insertion_index(rows, "P", parent("R"), True) == 3

    def test_subservice_onto_parent_goes_first_under_it(self):
        rows = [parent("P"), child("b", "P")]
        assert insertion_index(rows, "P", child("a", "P"), False) == 1
        assert insertion_index(rows, "P", child("a", "P"), True) == 1

    def test_after_sibling_subservice(self):
        rows = [parent("P"), child("a", "P"), child("b", "P")]
        assert insertion_index(rows, "a", child("c", "P"), True) == 2

import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from git_graph_data import WORKING_DIRECTORY_HASH, RewriteMode, RewriteSelection
from rewrite_selection import (
    CannotRewriteRootCommit,
    EmptySelection,
    InvalidSelection,
    NonContiguousSelection,
    RewriteSelectionError,
    SelectionMustIncludeHead,
    SquashRequiresMultipleCommits,
    validate_rewrite_selection,
)

# H0 is HEAD; H4 is the root. S1 is a side branch merged into H1 as second parent.
PARENTS = {
    "H0": ["H1"],
    "H1": ["H2", "S1"],
    "H2": ["H3"],
    "H3": ["H4"],
    "H4": [],
    "S1": ["H3"],
}


def first_parent(commit_hash):
    parents = PARENTS.get(commit_hash, [])
    return parents[0] if parents else None


def validate(hashes, mode=RewriteMode.SQUASH, head="H0", is_clean=True):
    return validate_rewrite_selection(hashes, head, is_clean, first_parent, mode)


class TestValidSelections(unittest.TestCase):
    def test_squash_head_chain(self):
        selection = validate(["H0", "H1"])
        self.assertEqual(selection, RewriteSelection(["H0", "H1"], "H2"))

    def test_unordered_input_is_sorted_along_chain(self):
        selection = validate(["H2", "H0", "H1"])
        self.assertEqual(selection.ordered_hashes, ["H0", "H1", "H2"])
        self.assertEqual(selection.base_hash, "H3")

    def test_round_trip_for_every_prefix(self):
        chain = ["H0", "H1", "H2", "H3"]
        for k in range(2, len(chain) + 1):
            with self.subTest(k=k):
                selection = validate(chain[:k])
                self.assertEqual(selection.ordered_hashes, chain[:k])
                self.assertEqual(selection.base_hash, first_parent(chain[k - 1]))

    def test_drop_single_head(self):
        selection = validate(["H0"], mode=RewriteMode.DROP)
        self.assertEqual(selection, RewriteSelection(["H0"], "H1"))

    def test_duplicates_and_working_directory_are_ignored(self):
        selection = validate([WORKING_DIRECTORY_HASH, "H0", "H1", "H0"])
        self.assertEqual(selection.ordered_hashes, ["H0", "H1"])

    def test_is_repeatable(self):
        self.assertEqual(validate(["H0", "H1"]), validate(["H1", "H0"]))


class TestRejectedSelections(unittest.TestCase):
    def test_dirty_tree(self):
        with self.assertRaises(InvalidSelection):
            validate(["H0", "H1"], is_clean=False)

    def test_empty(self):
        with self.assertRaises(EmptySelection) as ctx:
            validate([])
        self.assertFalse(ctx.exception.working_directory_selected)

    def test_only_working_directory(self):
        with self.assertRaises(EmptySelection) as ctx:
            validate([WORKING_DIRECTORY_HASH])
        self.assertTrue(ctx.exception.working_directory_selected)

    def test_missing_head(self):
        with self.assertRaises(SelectionMustIncludeHead) as ctx:
            validate(["H1"], mode=RewriteMode.DROP)
        self.assertEqual(ctx.exception.head, "H0")
        self.assertEqual(ctx.exception.hashes, ["H1"])

    def test_unborn_head(self):
        with self.assertRaises(SelectionMustIncludeHead):
            validate(["H1"], head=None)

    def test_gap_in_chain(self):
        with self.assertRaises(NonContiguousSelection) as ctx:
            validate(["H0", "H1", "H3"])
        self.assertEqual(ctx.exception.walked, ["H0", "H1"])
        self.assertEqual(ctx.exception.remaining, ["H3"])

    def test_second_parent_is_not_on_chain(self):
        with self.assertRaises(NonContiguousSelection) as ctx:
            validate(["H0", "H1", "S1"])
        self.assertEqual(ctx.exception.remaining, ["S1"])

    def test_root_commit(self):
        with self.assertRaises(CannotRewriteRootCommit) as ctx:
            validate(["H4"], mode=RewriteMode.DROP, head="H4")
        self.assertEqual(ctx.exception.root, "H4")

    def test_chain_reaching_root(self):
        with self.assertRaises(CannotRewriteRootCommit):
            validate(["H2", "H3", "H4"], head="H2")

    def test_squash_needs_two_commits(self):
        with self.assertRaises(SquashRequiresMultipleCommits) as ctx:
            validate(["H0"])
        self.assertEqual(ctx.exception.count, 1)

    def test_all_errors_share_base_class(self):
        with self.assertRaises(RewriteSelectionError):
            validate(["H1"])


if __name__ == "__main__":
    unittest.main()

import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from git_graph_data import COLOR_PALETTE
from git_graph_layout import AssignOnceMap, LaneAssigner, assign_lanes_and_colors
from git_log_parser import FIELD_SEP, parse_git_log
from ref_catalog import BranchColorCache, build_branch_catalog


def ref_line(short_name, commit_hash):
    prefix = "refs/remotes/" if "/" in short_name else "refs/heads/"
    return FIELD_SEP.join([prefix + short_name, short_name, "2024-01-01", "Alice", commit_hash, "subject"])


def log_line(commit_hash, parents="", refs=""):
    return FIELD_SEP.join([commit_hash, parents, "Alice", "2024-01-01T00:00:00+00:00", f"commit {commit_hash}", refs])


class TestAssignOnceMap(unittest.TestCase):
    def test_first_assignment_wins(self):
        lanes = AssignOnceMap()
        self.assertTrue(lanes.assign("c1", 0))
        self.assertFalse(lanes.assign("c1", 3))
        self.assertEqual(lanes["c1"], 0)
        self.assertEqual(len(lanes), 1)
        self.assertIn("c1", lanes)
        self.assertIsNone(lanes.get("c2"))


class LayoutTestCase(unittest.TestCase):
    def layout(self, ref_lines, log_lines, current_branch=None):
        self.cache = BranchColorCache()
        self.branches = build_branch_catalog(ref_lines, current_branch, self.cache)
        commits = parse_git_log(log_lines)
        self.assigner = assign_lanes_and_colors(commits, self.branches, self.cache)
        return {c.hash: c for c in commits}


class TestLaneAssignment(LayoutTestCase):
    def test_linear_history_on_main(self):
        commits = self.layout(
            [ref_line("main", "C3")],
            [log_line("C3", "C2", "HEAD -> main"), log_line("C2", "C1"), log_line("C1")],
            current_branch="main",
        )
        self.assertEqual([commits[h].lane for h in ("C3", "C2", "C1")], [0, 0, 0])
        self.assertEqual({commits[h].color for h in ("C3", "C2", "C1")}, {COLOR_PALETTE[0]})

    def test_fork_keeps_branch_lanes(self):
        commits = self.layout(
            [ref_line("feature", "F2"), ref_line("main", "C3")],
            [
                log_line("F2", "C2", "feature"),
                log_line("C3", "C2", "HEAD -> main"),
                log_line("C2", "C1"),
                log_line("C1"),
            ],
        )
        self.assertEqual(commits["F2"].lane, 0)
        self.assertEqual(commits["C3"].lane, 1)
        # C2 inherits from its first processed child
        self.assertEqual(commits["C2"].lane, 0)
        self.assertEqual(commits["C1"].lane, 0)
        self.assertEqual(commits["F2"].color, COLOR_PALETTE[0])
        self.assertEqual(commits["C3"].color, COLOR_PALETTE[1])
        self.assertEqual(commits["C2"].color, COLOR_PALETTE[0])

    def test_merge_propagates_to_every_parent(self):
        commits = self.layout(
            [ref_line("main", "M")],
            [log_line("M", "C2 F1", "HEAD -> main"), log_line("F1", "C1"), log_line("C2", "C1"), log_line("C1")],
        )
        self.assertEqual({c.lane for c in commits.values()}, {0})
        self.assertEqual({c.color for c in commits.values()}, {COLOR_PALETTE[0]})

    def test_propagated_lane_is_kept_over_own_decoration(self):
        commits = self.layout(
            [ref_line("main", "C3"), ref_line("old", "C2")],
            [log_line("C3", "C2", "main"), log_line("C2", "C1", "old"), log_line("C1")],
        )
        self.assertEqual(commits["C2"].lane, 0)
        self.assertEqual(commits["C2"].color, commits["C3"].color)

    def test_undecorated_tips_get_fresh_lanes(self):
        commits = self.layout(
            [ref_line("main", "C2")],
            [log_line("X", "C1"), log_line("C2", "C1", "main"), log_line("C1")],
        )
        self.assertEqual(commits["X"].lane, 1)
        self.assertEqual(commits["X"].color, COLOR_PALETTE[1])
        self.assertEqual(commits["C2"].lane, 0)
        self.assertEqual(commits["C1"].lane, 1)
        self.assertEqual(self.assigner.next_lane, 2)

    def test_unknown_ref_registers_next_lane(self):
        commits = self.layout(
            [ref_line("main", "C1")],
            [log_line("T", "C1", "topic"), log_line("C1", "", "main")],
        )
        self.assertEqual(commits["T"].lane, 1)
        self.assertEqual(self.assigner.branch_lanes["topic"], 1)
        # no registered color for topic: fall back to the lane's palette slot
        self.assertEqual(commits["T"].color, COLOR_PALETTE[1])

    def test_first_registered_ref_breaks_ties(self):
        commits = self.layout(
            [ref_line("main", "C1"), ref_line("dev", "C1")],
            [log_line("C1", "", "dev, main")],
        )
        self.assertEqual(commits["C1"].lane, 1)
        self.assertEqual(commits["C1"].color, COLOR_PALETTE[1])

    def test_pick_lane_without_refs_consumes_lane(self):
        assigner = LaneAssigner([], BranchColorCache())
        self.assertEqual(assigner.pick_lane([]), 0)
        self.assertEqual(assigner.pick_lane([]), 1)

    def test_deterministic(self):
        refs = [ref_line("feature", "F2"), ref_line("main", "C3"), ref_line("origin/main", "C2")]
        log = [
            log_line("F2", "F1", "feature"),
            log_line("C3", "C2 F1", "HEAD -> main"),
            log_line("F1", "C1"),
            log_line("C2", "C1", "origin/main"),
            log_line("C1"),
        ]
        first = {h: (c.lane, c.color) for h, c in self.layout(refs, log).items()}
        second = {h: (c.lane, c.color) for h, c in self.layout(refs, log).items()}
        self.assertEqual(first, second)

    def test_propagation_invariant(self):
        self.cache = BranchColorCache()
        branches = build_branch_catalog(
            [ref_line("feature", "F2"), ref_line("main", "C4"), ref_line("origin/main", "C2")], "main", self.cache
        )
        commits = parse_git_log(
            [
                log_line("F2", "F1", "feature"),
                log_line("C4", "C3 F2", "HEAD -> main"),
                log_line("C3", "C2"),
                log_line("F1", "C1"),
                log_line("C2", "C1", "origin/main"),
                log_line("C1"),
            ]
        )
        assigner = LaneAssigner(branches, self.cache)
        inherited = []
        for commit in commits:
            inherited.extend((commit, p) for p in commit.parent_hashes if p not in assigner.commit_lanes)
            assigner.assign(commit)

        self.assertTrue(inherited)
        for child, parent_hash in inherited:
            self.assertEqual(assigner.commit_lanes[parent_hash], child.lane)
            self.assertEqual(assigner.commit_colors[parent_hash], child.color)


if __name__ == "__main__":
    unittest.main()

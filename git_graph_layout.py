# git_graph_layout.py

from typing import Generic, Iterator, Optional, TypeVar

from git_graph_data import BranchInfo, CommitNode, palette_color
from ref_catalog import BranchColorCache

K = TypeVar("K")
V = TypeVar("V")


class AssignOnceMap(Generic[K, V]):
    """Mapping where each key can be given a value at most once.

    Later assignments to an already-set key are ignored, so the first writer
    always wins.
    """

    def __init__(self):
        self._values: dict[K, V] = {}

    def assign(self, key: K, value: V) -> bool:
        if key in self._values:
            return False
        self._values[key] = value
        return True

    def get(self, key: K) -> Optional[V]:
        return self._values.get(key)

    def __contains__(self, key: K) -> bool:
        return key in self._values

    def __getitem__(self, key: K) -> V:
        return self._values[key]

    def __iter__(self) -> Iterator[K]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


class LaneAssigner:
    """Assigns a lane and a color to each commit of one graph build.

    Commits must be fed in `git log --topo-order` order (children before
    parents). Branch tips anchor lanes and colors; undecorated commits take
    whatever their first processed child pushed down to them.
    """

    def __init__(self, branches: list[BranchInfo], color_cache: BranchColorCache):
        self.color_cache = color_cache
        self.branch_lanes: dict[str, int] = {}
        for index, branch in enumerate(branches):
            self.branch_lanes.setdefault(branch.name, index)
        self.commit_lanes: AssignOnceMap[str, int] = AssignOnceMap()
        self.commit_colors: AssignOnceMap[str, str] = AssignOnceMap()
        self.next_lane = len(branches)

    def _take_next_lane(self) -> int:
        lane = self.next_lane
        self.next_lane += 1
        return lane

    def pick_lane(self, refs: list[str]) -> int:
        # A ref that already owns a lane; first in decoration order wins
        for ref in refs:
            lane = self.branch_lanes.get(ref)
            if lane is not None:
                return lane

        for ref in refs:
            if ref not in self.branch_lanes:
                lane = self._take_next_lane()
                self.branch_lanes[ref] = lane
                return lane

        if refs:
            return self.branch_lanes.get(refs[0], 0)

        return self._take_next_lane()

    def pick_color(self, refs: list[str], lane: int) -> str:
        for ref in refs:
            color = self.color_cache.get(ref)
            if color:
                return color
        return palette_color(lane)

    def assign(self, commit: CommitNode):
        if commit.hash not in self.commit_lanes:
            self.commit_lanes.assign(commit.hash, self.pick_lane(commit.decorating_ref_names))
        lane = self.commit_lanes[commit.hash]
        for parent_hash in commit.parent_hashes:
            self.commit_lanes.assign(parent_hash, lane)

        if commit.hash not in self.commit_colors:
            self.commit_colors.assign(commit.hash, self.pick_color(commit.decorating_ref_names, lane))
        color = self.commit_colors[commit.hash]
        for parent_hash in commit.parent_hashes:
            self.commit_colors.assign(parent_hash, color)

        commit.lane = lane
        commit.color = color


def assign_lanes_and_colors(
    commits: list[CommitNode], branches: list[BranchInfo], color_cache: BranchColorCache
) -> LaneAssigner:
    """
    Sets `lane` and `color` on every commit, in place.
    `branches` must be the ref catalog listing (most recent first); its order
    seeds one lane per branch.
    """
    assigner = LaneAssigner(branches, color_cache)
    for commit in commits:
        assigner.assign(commit)
    return assigner

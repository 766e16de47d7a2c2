# git_graph_data.py

from enum import Enum
from typing import Optional

# Fixed branch/lane palette. Order matters: colors are picked by index.
COLOR_PALETTE = [
    "#38bdf8",
    "#a855f7",
    "#f97316",
    "#22d3ee",
    "#facc15",
    "#fb7185",
    "#34d399",
    "#60a5fa",
]

WORKING_DIRECTORY_HASH = "working-directory"
WORKING_DIRECTORY_COLOR = "#fbbf24"
WORKING_DIRECTORY_MESSAGE = "Working Directory"


def palette_color(index: int) -> str:
    return COLOR_PALETTE[index % len(COLOR_PALETTE)]


class BranchKind(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


class RewriteMode(str, Enum):
    SQUASH = "squash"
    DROP = "drop"


class BranchInfo:
    """A local or remote branch as listed by the ref catalog."""

    def __init__(
        self,
        name: str,
        full_ref_name: str,
        kind: BranchKind,
        is_current: bool,
        latest_subject: str,
        author: str,
        updated_at: str,
        color: str,
        commit_hash: str = "",
    ):
        self.name: str = name
        self.full_ref_name: str = full_ref_name
        self.kind: BranchKind = kind
        self.is_current: bool = is_current
        self.latest_subject: str = latest_subject
        self.author: str = author
        self.updated_at: str = updated_at
        self.color: str = color
        self.commit_hash: str = commit_hash

    @property
    def is_local(self) -> bool:
        return self.kind is BranchKind.LOCAL

    def __repr__(self) -> str:
        return (
            f"BranchInfo('{self.name}', ref='{self.full_ref_name}', kind={self.kind.value}, "
            f"current={self.is_current}, color={self.color})"
        )


class CommitNode:
    def __init__(self, hash: str, parent_hashes: list[str], author: str, date: str, message: str):
        self.hash: str = hash
        self.parent_hashes: list[str] = parent_hashes  # first entry is the first parent
        self.author: str = author
        self.date: str = date
        self.message: str = message
        self.decorating_ref_names: list[str] = []  # e.g. ['main', 'origin/main']

        # Filled in by the lane/color pass
        self.lane: int | None = None
        self.color: str | None = None

    @property
    def first_parent(self) -> Optional[str]:
        return self.parent_hashes[0] if self.parent_hashes else None

    @property
    def is_working_directory(self) -> bool:
        return self.hash == WORKING_DIRECTORY_HASH

    def __repr__(self) -> str:
        return (
            f"CommitNode(hash='{self.hash[:7]}', "
            f"parents={[p[:7] for p in self.parent_hashes]}, "
            f"refs={self.decorating_ref_names}, "
            f"message='{self.message[:20]}...', "
            f"lane={self.lane}, color={self.color})"
        )


class CommitEdge:
    """Child -> parent connection. Colored like the child (source) commit."""

    def __init__(self, source_hash: str, target_hash: str, color: str):
        self.source_hash: str = source_hash
        self.target_hash: str = target_hash
        self.color: str = color

    def __eq__(self, other) -> bool:
        if not isinstance(other, CommitEdge):
            return NotImplemented
        return (self.source_hash, self.target_hash, self.color) == (
            other.source_hash,
            other.target_hash,
            other.color,
        )

    def __repr__(self) -> str:
        return f"CommitEdge('{self.source_hash[:7]}' -> '{self.target_hash[:7]}', color={self.color})"


class GraphSnapshot:
    def __init__(self, nodes: list[CommitNode], edges: list[CommitEdge], head: Optional[str]):
        self.nodes: list[CommitNode] = nodes  # newest first, working directory node prepended
        self.edges: list[CommitEdge] = edges
        self.head: Optional[str] = head
        self._index = {node.hash: node for node in nodes}

    def node(self, commit_hash: str) -> Optional[CommitNode]:
        return self._index.get(commit_hash)

    def __contains__(self, commit_hash: str) -> bool:
        return commit_hash in self._index

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def has_working_directory(self) -> bool:
        return bool(self.nodes) and self.nodes[0].is_working_directory

    def __repr__(self) -> str:
        return f"GraphSnapshot(nodes={len(self.nodes)}, edges={len(self.edges)}, head={self.head})"


class RewriteSelection:
    """A validated HEAD-first run of commits and the commit that becomes the new HEAD."""

    def __init__(self, ordered_hashes: list[str], base_hash: str):
        self.ordered_hashes: list[str] = ordered_hashes
        self.base_hash: str = base_hash

    def __len__(self) -> int:
        return len(self.ordered_hashes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, RewriteSelection):
            return NotImplemented
        return self.ordered_hashes == other.ordered_hashes and self.base_hash == other.base_hash

    def __repr__(self) -> str:
        return f"RewriteSelection({[h[:7] for h in self.ordered_hashes]}, base='{self.base_hash[:7]}')"


class CommitDetails:
    def __init__(self, hash: str, message: str, author: str, date: str, files: list[tuple[str, str]]):
        self.hash: str = hash
        self.message: str = message
        self.author: str = author
        self.date: str = date
        self.files: list[tuple[str, str]] = files  # (status, path)

    def __repr__(self) -> str:
        return f"CommitDetails('{self.hash[:7]}', files={len(self.files)})"

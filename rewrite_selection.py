# rewrite_selection.py

from typing import Callable, Iterable, Optional

from git_graph_data import WORKING_DIRECTORY_HASH, RewriteMode, RewriteSelection

FirstParentLookup = Callable[[str], Optional[str]]


class RewriteSelectionError(Exception):
    """Base class for rejected squash/drop selections."""


class InvalidSelection(RewriteSelectionError):
    def __init__(self, reason: str = "working tree has uncommitted changes"):
        super().__init__(f"Cannot rewrite history: {reason}")
        self.reason = reason


class EmptySelection(RewriteSelectionError):
    def __init__(self, working_directory_selected: bool = False):
        if working_directory_selected:
            message = "The working directory cannot be part of a rewrite"
        else:
            message = "Select the commits to rewrite, starting from HEAD"
        super().__init__(message)
        self.working_directory_selected = working_directory_selected


class SelectionMustIncludeHead(RewriteSelectionError):
    def __init__(self, head: Optional[str], hashes: list[str]):
        super().__init__(f"Selection must include HEAD ({(head or 'unborn')[:7]})")
        self.head = head
        self.hashes = hashes


class NonContiguousSelection(RewriteSelectionError):
    def __init__(self, walked: list[str], remaining: list[str]):
        super().__init__(
            "Selected commits must form an unbroken first-parent chain from HEAD; "
            f"not reachable: {', '.join(h[:7] for h in remaining)}"
        )
        self.walked = walked
        self.remaining = remaining


class CannotRewriteRootCommit(RewriteSelectionError):
    def __init__(self, root: str):
        super().__init__(f"Cannot rewrite the root commit {root[:7]}")
        self.root = root


class SquashRequiresMultipleCommits(RewriteSelectionError):
    def __init__(self, count: int):
        super().__init__(f"Squash needs at least 2 commits, got {count}")
        self.count = count


def _sanitize(selected_hashes: Iterable[str]) -> list[str]:
    unique: list[str] = []
    for commit_hash in selected_hashes:
        if commit_hash == WORKING_DIRECTORY_HASH or not commit_hash:
            continue
        if commit_hash not in unique:
            unique.append(commit_hash)
    return unique


def validate_rewrite_selection(
    selected_hashes: Iterable[str],
    head: Optional[str],
    is_clean: bool,
    first_parent: FirstParentLookup,
    mode: RewriteMode,
) -> RewriteSelection:
    """
    Check that `selected_hashes` is exactly the first N commits of the
    first-parent chain starting at HEAD, and return them HEAD-first along
    with the commit the branch will be reset to.

    Raises a RewriteSelectionError subclass naming the violated condition.
    Pure function: nothing is changed in the repository.
    """
    selected_hashes = list(selected_hashes)
    if not is_clean:
        raise InvalidSelection()

    hashes = _sanitize(selected_hashes)
    if not hashes:
        raise EmptySelection(working_directory_selected=WORKING_DIRECTORY_HASH in selected_hashes)

    if head is None or head not in hashes:
        raise SelectionMustIncludeHead(head, hashes)

    remaining = set(hashes)
    ordered: list[str] = []
    current: Optional[str] = head
    while current is not None and current in remaining:
        remaining.discard(current)
        ordered.append(current)
        current = first_parent(current)

    if remaining:
        # keep the caller's order for a stable message
        raise NonContiguousSelection(ordered, [h for h in hashes if h in remaining])

    if current is None:
        raise CannotRewriteRootCommit(ordered[-1])

    if mode is RewriteMode.SQUASH and len(ordered) < 2:
        raise SquashRequiresMultipleCommits(len(ordered))

    return RewriteSelection(ordered, current)

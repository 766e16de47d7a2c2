# git_log_parser.py

import logging
from typing import Iterable

from git_graph_data import CommitNode

FIELD_SEP = "\x01"

# Git log format string
# %H: commit hash
# %P: parent hashes (space separated)
# %an: author name
# %ad: author date (use with --date=iso-strict)
# %s: subject
# %D: decorations without the surrounding " (...)", must stay last
GIT_LOG_FORMAT = FIELD_SEP.join(["%H", "%P", "%an", "%ad", "%s", "%D"])

HEAD_MARKER = "HEAD -> "
TAG_PREFIX = "tag:"


class MalformedCommitRecord(ValueError):
    def __init__(self, line: str, reason: str):
        super().__init__(f"Malformed commit record ({reason}): {line!r}")
        self.line = line
        self.reason = reason


def _parse_references(raw_refs_str: str) -> list[str]:
    """
    Parses the raw decoration string from git log %D.
    Example: "HEAD -> main, tag: v1.1, origin/main, origin/HEAD"
    Output: ['main', 'origin/main', 'origin/HEAD']
    """
    if not raw_refs_str.strip():
        return []

    refs: list[str] = []
    for ref in raw_refs_str.split(","):
        ref = ref.strip()
        if not ref or ref.startswith(TAG_PREFIX):
            continue
        if ref.startswith(HEAD_MARKER):
            ref = ref[len(HEAD_MARKER):].strip()
        elif ref == "HEAD":  # detached HEAD, not a branch
            continue
        if ref and ref not in refs:
            refs.append(ref)
    return refs


def parse_commit_line(line: str) -> CommitNode:
    head = line.split(FIELD_SEP, 4)
    if len(head) < 5:
        raise MalformedCommitRecord(line, f"expected 6 fields, got {len(head)}")
    sha, parent_hashes_str, author, date, rest = head
    # Subjects may contain the separator, decorations never do
    if FIELD_SEP not in rest:
        raise MalformedCommitRecord(line, "missing decorations field")
    subject, raw_refs = rest.rsplit(FIELD_SEP, 1)

    sha = sha.strip()
    if not sha:
        raise MalformedCommitRecord(line, "empty hash")

    node = CommitNode(
        hash=sha,
        parent_hashes=parent_hashes_str.split(),
        author=author,
        date=date,
        message=subject,
    )
    node.decorating_ref_names = _parse_references(raw_refs)
    return node


def parse_git_log(lines: Iterable[str]) -> list[CommitNode]:
    """
    Parses `git log --topo-order --pretty=format:GIT_LOG_FORMAT` output, one
    record per line, into CommitNode objects in emission order.
    Malformed lines are skipped; a repeated hash keeps its first record.
    """
    commit_list_ordered: list[CommitNode] = []
    seen: set[str] = set()

    for line in lines:
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        try:
            node = parse_commit_line(line)
        except MalformedCommitRecord as e:
            logging.debug("Skipping commit record: %s", e)
            continue
        if node.hash in seen:
            continue
        seen.add(node.hash)
        commit_list_ordered.append(node)

    return commit_list_ordered

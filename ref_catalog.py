# ref_catalog.py

import logging
from typing import Iterable, Optional

from git_graph_data import BranchInfo, BranchKind, palette_color

FIELD_SEP = "\x01"

# git for-each-ref format; the subject goes last because it may contain FIELD_SEP
REF_FORMAT = FIELD_SEP.join(
    [
        "%(refname)",
        "%(refname:short)",
        "%(authordate:iso8601)",
        "%(authorname)",
        "%(objectname)",
        "%(subject)",
    ]
)
REF_NAMESPACES = ["refs/heads", "refs/remotes"]
LOCAL_REF_PREFIX = "refs/heads/"


class MalformedRefRecord(ValueError):
    def __init__(self, line: str, reason: str):
        super().__init__(f"Malformed ref record ({reason}): {line!r}")
        self.line = line
        self.reason = reason


class RefRecord:
    def __init__(self, ref_name: str, short_name: str, iso_date: str, author: str, commit_hash: str, subject: str):
        self.ref_name = ref_name
        self.short_name = short_name
        self.iso_date = iso_date
        self.author = author
        self.commit_hash = commit_hash
        self.subject = subject

    @property
    def kind(self) -> BranchKind:
        return BranchKind.LOCAL if self.ref_name.startswith(LOCAL_REF_PREFIX) else BranchKind.REMOTE

    def __repr__(self) -> str:
        return f"RefRecord('{self.ref_name}', commit='{self.commit_hash[:7]}')"


class BranchColorCache:
    """Branch name -> color, kept for the lifetime of one repository session.

    Colors stay stable across graph refreshes of the same repository; call
    reset() when another repository is opened.
    """

    def __init__(self):
        self._colors: dict[str, str] = {}

    def get(self, branch_name: str) -> Optional[str]:
        return self._colors.get(branch_name)

    def __contains__(self, branch_name: str) -> bool:
        return branch_name in self._colors

    def __len__(self) -> int:
        return len(self._colors)

    def color_for(self, branch_name: str, running_index: int) -> str:
        existing = self._colors.get(branch_name)
        if existing is not None:
            return existing
        color = palette_color(running_index)
        self._colors[branch_name] = color
        return color

    def reset(self):
        self._colors.clear()


def parse_ref_line(line: str) -> RefRecord:
    parts = line.split(FIELD_SEP, 5)
    if len(parts) < 6:
        raise MalformedRefRecord(line, f"expected 6 fields, got {len(parts)}")
    ref_name, short_name, iso_date, author, commit_hash, subject = (part.strip() for part in parts)
    if not ref_name or not short_name:
        raise MalformedRefRecord(line, "empty ref name")
    return RefRecord(ref_name, short_name, iso_date, author, commit_hash, subject)


def parse_ref_records(lines: Iterable[str]) -> list[RefRecord]:
    records = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            records.append(parse_ref_line(line))
        except MalformedRefRecord as e:
            logging.debug("Skipping ref record: %s", e)
    return records


def build_branch_catalog(
    lines: Iterable[str], current_branch: Optional[str], color_cache: BranchColorCache
) -> list[BranchInfo]:
    """Turn for-each-ref output (newest commit first) into BranchInfo entries.

    The first occurrence of a full ref name wins. Each listed branch takes
    the next palette slot in list order; a name already in the session's
    color cache keeps its earlier color.
    """
    branches: list[BranchInfo] = []
    seen: set[str] = set()

    for record in parse_ref_records(lines):
        if record.ref_name in seen:
            continue
        seen.add(record.ref_name)

        color = color_cache.color_for(record.short_name, len(branches))

        kind = record.kind
        branches.append(
            BranchInfo(
                name=record.short_name,
                full_ref_name=record.ref_name,
                kind=kind,
                is_current=kind is BranchKind.LOCAL and record.short_name == current_branch,
                latest_subject=record.subject,
                author=record.author,
                updated_at=record.iso_date,
                color=color,
                commit_hash=record.commit_hash,
            )
        )

    return branches

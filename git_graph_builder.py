# git_graph_builder.py

import logging
from datetime import datetime, timezone
from typing import Optional

from git_graph_data import (
    WORKING_DIRECTORY_COLOR,
    WORKING_DIRECTORY_HASH,
    WORKING_DIRECTORY_MESSAGE,
    BranchInfo,
    CommitEdge,
    CommitNode,
    GraphSnapshot,
)
from git_graph_layout import assign_lanes_and_colors
from ref_catalog import BranchColorCache


def make_working_directory_node(head: str, lane: int, author: Optional[str] = None) -> CommitNode:
    node = CommitNode(
        hash=WORKING_DIRECTORY_HASH,
        parent_hashes=[head],
        author=author or "Unknown",
        date=datetime.now(timezone.utc).isoformat(),
        message=WORKING_DIRECTORY_MESSAGE,
    )
    node.lane = lane
    node.color = WORKING_DIRECTORY_COLOR
    return node


def assemble_graph(
    commits: list[CommitNode],
    branches: list[BranchInfo],
    color_cache: BranchColorCache,
    head: Optional[str],
    is_clean: Optional[bool],
    current_branch: Optional[str] = None,
) -> GraphSnapshot:
    """Build the renderable graph from parsed log records.

    `is_clean` is the working tree status; None means it could not be
    determined, in which case no working directory node is added. The same
    goes for an unresolved (unborn) HEAD.
    """
    assign_lanes_and_colors(commits, branches, color_cache)

    nodes: list[CommitNode] = list(commits)
    edges: list[CommitEdge] = []
    for commit in commits:
        for parent_hash in commit.parent_hashes:
            edges.append(CommitEdge(commit.hash, parent_hash, commit.color))

    if is_clean is False:
        if head:
            lane = nodes[0].lane if nodes else 0
            wd_node = make_working_directory_node(head, lane, current_branch)
            nodes.insert(0, wd_node)
            edges.append(CommitEdge(WORKING_DIRECTORY_HASH, head, WORKING_DIRECTORY_COLOR))
        else:
            logging.debug("HEAD is unresolved, not adding the working directory node")

    return GraphSnapshot(nodes, edges, head)

import logging
import os
from typing import Iterable, Optional

from git_graph_builder import assemble_graph
from git_graph_data import BranchInfo, CommitDetails, GraphSnapshot, RewriteMode, RewriteSelection
from git_log_parser import parse_git_log
from git_manager import GitManager
from ref_catalog import BranchColorCache, build_branch_catalog
from rewrite_selection import validate_rewrite_selection
from settings import Settings
from settings import settings as default_settings
from utils import timeit


class RepoSession:
    """One open repository: graph builds, branch listing and history rewrites.

    Branch colors are cached for the lifetime of the session so they stay put
    across refreshes. Graph builds for the same session must not overlap;
    see threads.GraphRefresher.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.color_cache = BranchColorCache()
        self.git_manager: Optional[GitManager] = None
        self.repo_path: Optional[str] = None

    def open_repository(self, repo_path: str):
        normalized = os.path.abspath(repo_path)
        if not os.path.isdir(normalized):
            raise ValueError(f"Repository path does not exist: {repo_path}")

        git_manager = GitManager(normalized)
        if not git_manager.initialize():
            raise ValueError(f"Not a git repository: {repo_path}")

        self.git_manager = git_manager
        self.repo_path = normalized
        self.color_cache.reset()
        self.settings.add_recent_folder(normalized)
        logging.info("Opened repository %s", normalized)

    @property
    def repo_name(self) -> str:
        return os.path.basename(self._require_repo().repo_path)

    def _require_repo(self) -> GitManager:
        if self.git_manager is None:
            raise RuntimeError("No repository is open")
        return self.git_manager

    def list_branches(self) -> list[BranchInfo]:
        git_manager = self._require_repo()
        return build_branch_catalog(git_manager.list_refs(), git_manager.current_branch(), self.color_cache)

    @timeit
    def build_graph(self, limit: Optional[int] = None) -> GraphSnapshot:
        git_manager = self._require_repo()
        if limit is None:
            limit = self.settings.get_graph_limit()

        # Branches first: they seed lanes and colors
        branches = self.list_branches()
        commits = parse_git_log(git_manager.log_commits(limit))
        snapshot = assemble_graph(
            commits,
            branches,
            self.color_cache,
            head=git_manager.current_head(),
            is_clean=git_manager.working_tree_is_clean(),
            current_branch=git_manager.current_branch(),
        )
        logging.debug("Built graph for %s: %r", self.repo_path, snapshot)
        return snapshot

    def validate_rewrite_selection(self, selected_hashes: Iterable[str], mode: RewriteMode) -> RewriteSelection:
        git_manager = self._require_repo()
        return validate_rewrite_selection(
            selected_hashes,
            head=git_manager.current_head(),
            is_clean=bool(git_manager.working_tree_is_clean()),
            first_parent=git_manager.first_parent,
            mode=mode,
        )

    def get_commit_details(self, commit_hash: str) -> Optional[CommitDetails]:
        return self._require_repo().get_commit_details(commit_hash)

    def squash_commits(self, selected_hashes: Iterable[str], message: str) -> Optional[str]:
        """Validate then squash. Returns None on success or the git error message."""
        if not message or not message.strip():
            raise ValueError("Squash needs a commit message")
        selection = self.validate_rewrite_selection(selected_hashes, RewriteMode.SQUASH)
        return self._require_repo().squash_commits(selection, message.strip())

    def drop_commits(self, selected_hashes: Iterable[str]) -> Optional[str]:
        selection = self.validate_rewrite_selection(selected_hashes, RewriteMode.DROP)
        return self._require_repo().drop_commits(selection)

import logging
from typing import List, Optional

import git
import git.exc
from git import GitCommandError

from git_graph_data import WORKING_DIRECTORY_HASH, WORKING_DIRECTORY_MESSAGE, CommitDetails, RewriteSelection
from git_log_parser import FIELD_SEP, GIT_LOG_FORMAT
from ref_catalog import REF_FORMAT, REF_NAMESPACES

SHOW_FORMAT = FIELD_SEP.join(["%H", "%an", "%ad", "%s"])


class GitManager:
    """Runs git for the graph engine and hands back plain text/records."""

    def __init__(self, repo_path: str):
        self.repo_path = repo_path
        self.repo: Optional[git.Repo] = None

    def initialize(self) -> bool:
        """初始化 Git 仓库"""
        try:
            self.repo = git.Repo(self.repo_path)
            return True
        except (git.InvalidGitRepositoryError, git.NoSuchPathError):
            return False

    def list_refs(self) -> List[str]:
        """Local and remote branches, most recently committed first, one record per line."""
        if not self.repo:
            return []
        try:
            output = self.repo.git.for_each_ref("--sort=-committerdate", f"--format={REF_FORMAT}", *REF_NAMESPACES)
        except GitCommandError:
            logging.exception("GitManager: failed to list refs")
            return []
        return [line for line in output.splitlines() if line.strip()]

    def current_branch(self) -> Optional[str]:
        """当前分支名称，detached HEAD 时返回 None"""
        if not self.repo:
            return None
        try:
            return self.repo.active_branch.name
        except TypeError:
            return None

    def log_commits(self, limit: int = 150) -> List[str]:
        """`git log --all --topo-order`, newest first, one record per line."""
        if not self.repo:
            return []
        try:
            output = self.repo.git.log(
                "--all",
                "--topo-order",
                f"-n{limit}",
                "--date=iso-strict",
                f"--pretty=format:{GIT_LOG_FORMAT}",
            )
        except GitCommandError as e:
            # An empty repository has nothing to log
            logging.warning(f"GitManager: git log failed: {e.stderr.strip() if e.stderr else e!s}")
            return []
        return [line for line in output.splitlines() if line.strip()]

    def current_head(self) -> Optional[str]:
        if not self.repo:
            return None
        try:
            return self.repo.head.commit.hexsha
        except (ValueError, GitCommandError):
            # unborn HEAD
            return None

    def working_tree_is_clean(self) -> Optional[bool]:
        """Untracked files count as changes. None when the status cannot be read."""
        if not self.repo:
            return None
        try:
            return not self.repo.is_dirty(untracked_files=True)
        except GitCommandError:
            logging.exception("GitManager: failed to read working tree status")
            return None

    def first_parent(self, commit_hash: str) -> Optional[str]:
        if not self.repo:
            return None
        try:
            commit = self.repo.commit(commit_hash)
        except (ValueError, git.exc.BadName, git.exc.BadObject, GitCommandError):
            logging.warning("GitManager: unknown revision %s", commit_hash)
            return None
        return commit.parents[0].hexsha if commit.parents else None

    def get_working_directory_files(self) -> List[tuple]:
        """(status, path) for every changed, staged or untracked file."""
        if not self.repo:
            return []
        files = []
        output = self.repo.git.status("--porcelain", "--untracked-files=all")
        for line in output.splitlines():
            if len(line) < 4:
                continue
            index_status, worktree_status, path = line[0], line[1], line[3:]
            if " -> " in path:
                path = path.split(" -> ", 1)[1]
            if index_status == "?":
                status = "?"
            elif index_status != " ":
                status = index_status
            else:
                status = worktree_status
            files.append((status, path))
        return files

    def get_commit_details(self, commit_hash: str) -> Optional[CommitDetails]:
        """获取提交详情（包括变更文件列表）"""
        if not self.repo:
            return None

        try:
            if commit_hash == WORKING_DIRECTORY_HASH:
                return CommitDetails(
                    hash=WORKING_DIRECTORY_HASH,
                    message=WORKING_DIRECTORY_MESSAGE,
                    author=self.current_branch() or "Unknown",
                    date="",
                    files=self.get_working_directory_files(),
                )

            raw = self.repo.git.show("--name-status", f"--pretty=format:{SHOW_FORMAT}", "--date=iso-strict", commit_hash)
        except GitCommandError:
            logging.exception("GitManager: failed to read commit %s", commit_hash)
            return None

        lines = [line for line in raw.splitlines() if line.strip()]
        if not lines:
            return None
        header, file_lines = lines[0], lines[1:]
        sha, author, date, message = (header.split(FIELD_SEP, 3) + ["", "", ""])[:4]

        files = []
        for line in file_lines:
            status, *path_parts = line.strip().split("\t")
            if not path_parts:
                continue
            # renames and copies list "old<TAB>new"; keep the new path
            files.append((status[:1], path_parts[-1]))

        return CommitDetails(hash=sha, message=message, author=author, date=date, files=files)

    def reset_branch(self, commit_hash: str, mode: str) -> Optional[str]:
        """重置当前分支到指定的提交。

        参数：
            commit_hash: 目标提交的哈希值。
            mode: 重置模式 ('soft', 'mixed', 'hard')。

        返回：
            None: 成功。
            str: 失败时的错误信息。
        """
        if not self.repo:
            return "Repository not initialized."

        if mode not in ["soft", "mixed", "hard"]:
            return f"Invalid reset mode: {mode}"

        try:
            self.repo.git.reset(commit_hash, f"--{mode}")
            return None
        except GitCommandError as e:
            logging.exception("Reset to %s failed", commit_hash)
            return f"Reset to {commit_hash} failed: {e.stderr.strip() if e.stderr else str(e)}"

    def squash_commits(self, selection: RewriteSelection, message: str) -> Optional[str]:
        """Replace the selected commits with a single commit on top of the base."""
        if not self.repo:
            return "Repository not initialized."

        error = self.reset_branch(selection.base_hash, "soft")
        if error:
            return error

        try:
            self.repo.git.commit("-m", message)
        except GitCommandError as e:
            tip = selection.ordered_hashes[0]
            logging.exception("Squash commit failed, restoring branch to %s", tip)
            detail = e.stderr.strip() if e.stderr else str(e)
            restore_error = self.reset_branch(tip, "soft")
            if restore_error:
                return f"Squash failed: {detail}; {restore_error}"
            return f"Squash failed: {detail}"
        logging.info("Squashed %d commits onto %s", len(selection), selection.base_hash[:7])
        return None

    def drop_commits(self, selection: RewriteSelection) -> Optional[str]:
        """Discard the selected commits by resetting hard to the base."""
        error = self.reset_branch(selection.base_hash, "hard")
        if error is None:
            logging.info("Dropped %d commits, HEAD is now %s", len(selection), selection.base_hash[:7])
        return error

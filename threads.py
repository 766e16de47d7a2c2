import logging
from typing import TYPE_CHECKING, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

if TYPE_CHECKING:
    from repo_session import RepoSession


class GraphRefreshThread(QThread):
    """在后台构建提交图的线程"""

    finished = pyqtSignal(object)  # GraphSnapshot
    error = pyqtSignal(str)

    def __init__(self, session: "RepoSession", limit: Optional[int] = None, parent=None):
        super().__init__(parent)
        self.session = session
        self.limit = limit

    def run(self):
        try:
            snapshot = self.session.build_graph(self.limit)
            self.finished.emit(snapshot)
        except Exception as e:
            logging.exception("Graph refresh failed")
            self.error.emit(str(e))


class GraphRefresher(QObject):
    """Keeps at most one graph build in flight for a session.

    Requests made while a build is running are folded into a single
    follow-up build that starts when the current one ends.
    """

    graph_ready = pyqtSignal(object)
    refresh_failed = pyqtSignal(str)

    def __init__(self, session: "RepoSession", parent=None):
        super().__init__(parent)
        self.session = session
        self._thread: Optional[GraphRefreshThread] = None
        self._pending = False
        self._pending_limit: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None

    @property
    def has_pending(self) -> bool:
        return self._pending

    def request(self, limit: Optional[int] = None) -> bool:
        """Start a refresh, or queue one if a refresh is running. Returns True if started now."""
        if self._thread is not None:
            self._pending = True
            self._pending_limit = limit
            return False
        self._start(limit)
        return True

    def _create_thread(self, limit: Optional[int]) -> GraphRefreshThread:
        return GraphRefreshThread(self.session, limit)

    def _start(self, limit: Optional[int]):
        thread = self._create_thread(limit)
        thread.finished.connect(self._on_finished)
        thread.error.connect(self._on_error)
        self._thread = thread
        thread.start()

    def _on_finished(self, snapshot):
        self._release()
        self.graph_ready.emit(snapshot)
        self._start_pending()

    def _on_error(self, message: str):
        self._release()
        self.refresh_failed.emit(message)
        self._start_pending()

    def _release(self):
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.wait()
            thread.deleteLater()

    def _start_pending(self):
        if self._pending and self._thread is None:
            self._pending = False
            limit, self._pending_limit = self._pending_limit, None
            self._start(limit)

import logging
import os
import sys

from PyQt6.QtCore import QCoreApplication

from repo_session import RepoSession
from threads import GraphRefresher


def format_node(node) -> str:
    refs = f" ({', '.join(node.decorating_ref_names)})" if node.decorating_ref_names else ""
    return f"{node.lane:>3} {node.color} {node.hash[:7]}{refs} {node.message}"


def main():
    repo_path = sys.argv[1] if len(sys.argv) > 1 else os.getcwd()
    app = QCoreApplication(sys.argv)

    session = RepoSession()
    try:
        session.open_repository(repo_path)
    except ValueError as e:
        logging.error(str(e))
        sys.exit(1)

    def on_graph_ready(snapshot):
        for node in snapshot.nodes:
            print(format_node(node))
        app.quit()

    def on_failed(message):
        logging.error("构建提交图失败：%s", message)
        app.exit(1)

    refresher = GraphRefresher(session)
    refresher.graph_ready.connect(on_graph_ready)
    refresher.refresh_failed.connect(on_failed)
    refresher.request()

    sys.exit(app.exec())


if __name__ == "__main__":
    # 根据环境变量设置日志级别
    log_level = logging.DEBUG if os.getenv("DEBUG") == "1" else logging.INFO

    # 配置日志
    logging.basicConfig(
        level=log_level, format="%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"
    )
    # add file handler
    if os.getenv("LOG_TO_FILE") == "1":
        file_handler = logging.FileHandler("commitgraph.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s")
        )
        logging.getLogger().addHandler(file_handler)
    main()

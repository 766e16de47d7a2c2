import json
import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_GRAPH_LIMIT = 150


def default_config_dir() -> str:
    return os.environ.get("COMMITGRAPH_HOME") or os.path.join(str(Path.home()), ".commitgraph")


class Settings:
    def __init__(self, config_dir: Optional[str] = None):
        # 创建配置目录
        self.config_dir = config_dir or default_config_dir()
        if not os.path.exists(self.config_dir):
            os.makedirs(self.config_dir)

        # 配置文件路径
        self.config_file = os.path.join(self.config_dir, "settings.json")

        # 默认设置
        self.settings = {
            "recent_folders": [],  # 最近打开的仓库列表
            "last_folder": None,  # 上次打开的仓库
            "max_recent": 10,  # 最大记录数
            "graph_limit": DEFAULT_GRAPH_LIMIT,  # 提交图最多显示的提交数
        }

        # 加载已有设置
        self.load_settings()

    def load_settings(self):
        """加载设置"""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r", encoding="utf-8") as f:
                    saved_settings = json.load(f)
                    self.settings.update(saved_settings)
        except (OSError, ValueError):
            logging.exception("Failed to load settings from %s", self.config_file)

    def save_settings(self):
        """保存设置"""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, ensure_ascii=False, indent=2)
        except OSError:
            logging.exception("Failed to save settings to %s", self.config_file)

    def add_recent_folder(self, folder_path):
        """添加最近打开的仓库"""
        self.settings["last_folder"] = folder_path

        recent = self.settings["recent_folders"]

        # 如果已经在列表中，先移除
        if folder_path in recent:
            recent.remove(folder_path)

        # 添加到列表开头
        recent.insert(0, folder_path)

        # 保持列表在最大长度以内
        self.settings["recent_folders"] = recent[: self.settings["max_recent"]]

        self.save_settings()

    def get_recent_folders(self, limit: Optional[int] = None):
        """获取最近仓库列表"""
        recent = self.settings["recent_folders"]
        return recent[:limit] if limit is not None else list(recent)

    def get_last_folder(self):
        """获取上次打开的仓库"""
        return self.settings["last_folder"]

    def get_graph_limit(self) -> int:
        try:
            limit = int(self.settings.get("graph_limit", DEFAULT_GRAPH_LIMIT))
        except (TypeError, ValueError):
            return DEFAULT_GRAPH_LIMIT
        return limit if limit > 0 else DEFAULT_GRAPH_LIMIT

    def set_graph_limit(self, limit: int):
        self.settings["graph_limit"] = limit
        self.save_settings()


# 创建全局settings实例
settings = Settings()

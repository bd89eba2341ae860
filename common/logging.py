"""
日志配置

基于标准库 logging：
- configure_logging() 在程序入口调用一次，设置级别和输出位置
- get_logger() 获取模块日志记录器
"""

import logging
import os
from typing import Optional


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    配置根日志记录器

    Args:
        level: 日志级别名称，例如 INFO、DEBUG
        log_file: 可选的日志文件路径，为空时只输出到控制台
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=logging.getLevelName(level.upper()),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """获取日志记录器"""
    return logging.getLogger(name)

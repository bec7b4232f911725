"""日志配置"""

import logging

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def get_logger(name):
    """获取日志记录器"""
    logger = logging.getLogger(name)
    return logger


def set_level(level) -> None:
    """Adjust the root level (CLI `--verbose`)."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)

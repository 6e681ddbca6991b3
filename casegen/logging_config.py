"""
ロガー設定。

casegen 名前空間のロガーにハンドラを取り付ける。各モジュールは
logging.getLogger(__name__) で子ロガーを取得するだけでよい。
"""

import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "casegen"


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    casegen 名前空間のロガーを構成する。

    引数:
        level: ログレベル（logging.DEBUG など、または "DEBUG" 等の文字列）
        log_file: 指定時はファイルにも出力する

    戻り値:
        構成済みのロガー
    """
    level = _coerce_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # 再設定時にハンドラが重複しないようにする
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger

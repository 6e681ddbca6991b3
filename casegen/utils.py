"""
出力ディレクトリと JSON 入出力の小さなヘルパー。
"""

import json
import os
import time


def ensure_dir(path):
    os.makedirs(path, exist_ok=True)
    return path


def _json_default(value):
    # Point3・numpy 配列・列挙値を JSON 化する
    if hasattr(value, "as_tuple"):
        return list(value.as_tuple())
    if hasattr(value, "tolist"):
        return value.tolist()
    if hasattr(value, "value"):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_json(path, data):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2, default=_json_default)


def read_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def new_run_id():
    """実行ごとの識別子（case_YYYYmmdd_HHMMSS）。"""
    return time.strftime("case_%Y%m%d_%H%M%S")

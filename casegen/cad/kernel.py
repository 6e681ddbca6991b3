"""
ソリッドモデリングカーネルの薄いアダプタ。

trimesh のプリミティブと manifold3d ブーリアンエンジンを、
box / cylinder / union / subtract / translate / rotate / transform の
値を返す純関数として公開する。入力メッシュは決して書き換えない。
"""

import logging
from typing import Sequence

import numpy as np
import trimesh

from ..errors import KernelError

logger = logging.getLogger(__name__)

BOOLEAN_ENGINE = "manifold"


def _is_solid(mesh) -> bool:
    return isinstance(mesh, trimesh.Trimesh) and len(mesh.faces) > 0


def empty() -> trimesh.Trimesh:
    """空のソリッドを返す。"""
    return trimesh.Trimesh()


def box(size: Sequence[float], center: Sequence[float] = (0.0, 0.0, 0.0)) -> trimesh.Trimesh:
    """center を中心とする直方体。size=(x, y, z) はmm。"""
    mesh = trimesh.creation.box(extents=np.asarray(size, dtype=float))
    mesh.apply_translation(np.asarray(center, dtype=float))
    return mesh


def cylinder(
    radius: float,
    height: float,
    center: Sequence[float] = (0.0, 0.0, 0.0),
    segments: int = 32,
) -> trimesh.Trimesh:
    """center を中心とし z 軸に沿う円柱。segments は円周の分割数。"""
    mesh = trimesh.creation.cylinder(radius=float(radius), height=float(height), sections=int(segments))
    mesh.apply_translation(np.asarray(center, dtype=float))
    return mesh


def translate(vector: Sequence[float], solid: trimesh.Trimesh) -> trimesh.Trimesh:
    moved = solid.copy()
    moved.apply_translation(np.asarray(vector, dtype=float))
    return moved


def rotation_matrix(euler_radians: Sequence[float]) -> np.ndarray:
    """x, y, z 軸の順に回転する4x4行列。"""
    rx, ry, rz = (float(a) for a in euler_radians)
    return trimesh.transformations.euler_matrix(rx, ry, rz, "sxyz")


def rotate(euler_radians: Sequence[float], solid: trimesh.Trimesh) -> trimesh.Trimesh:
    return transform(rotation_matrix(euler_radians), solid)


def transform(matrix, solid: trimesh.Trimesh) -> trimesh.Trimesh:
    moved = solid.copy()
    moved.apply_transform(np.asarray(matrix, dtype=float))
    return moved


def union(*solids: trimesh.Trimesh) -> trimesh.Trimesh:
    """
    ソリッドの和。引数の順序どおりに評価する。

    例外:
        KernelError: ブーリアンエンジンが失敗した場合
    """
    parts = [s for s in solids if _is_solid(s)]
    if not parts:
        return empty()
    if len(parts) == 1:
        return parts[0].copy()
    logger.debug("union of %d solids", len(parts))
    try:
        return trimesh.boolean.union(parts, engine=BOOLEAN_ENGINE, check_volume=False)
    except Exception as exc:
        raise KernelError(f"union of {len(parts)} solids failed: {exc}") from exc


def subtract(base: trimesh.Trimesh, *tools: trimesh.Trimesh) -> trimesh.Trimesh:
    """
    base から tools を差し引く。

    複数の工具は先に1つへ和を取り、差は1回だけ実行する。

    例外:
        KernelError: ブーリアンエンジンが失敗した場合
    """
    cutters = [t for t in tools if _is_solid(t)]
    if not _is_solid(base):
        return empty()
    if not cutters:
        return base.copy()
    tool = union(*cutters) if len(cutters) > 1 else cutters[0]
    logger.debug("subtract %d tools in one pass", len(cutters))
    try:
        return trimesh.boolean.difference([base, tool], engine=BOOLEAN_ENGINE, check_volume=False)
    except Exception as exc:
        raise KernelError(f"subtraction of {len(cutters)} tools failed: {exc}") from exc


def frame_matrix(u: Sequence[float], v: Sequence[float], origin: Sequence[float] = (0.0, 0.0, 0.0)) -> np.ndarray:
    """
    ローカル x を u、ローカル y を v、ローカル z を u×v へ写す剛体変換。

    u と v は直交する単位ベクトルであること。
    """
    ex = np.asarray(u, dtype=float)
    ey = np.asarray(v, dtype=float)
    ez = np.cross(ex, ey)
    matrix = np.eye(4)
    matrix[:3, 0] = ex
    matrix[:3, 1] = ey
    matrix[:3, 2] = ez
    matrix[:3, 3] = np.asarray(origin, dtype=float)
    return matrix

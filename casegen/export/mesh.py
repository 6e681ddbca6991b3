"""
表示用メッシュデータへの変換。

three.js の BufferGeometry にそのまま渡せる、平坦な vertices / normals /
indices 配列を作る。三角形ごとに頂点を持つフラットシェーディング形式。
"""

import numpy as np
import trimesh

from ..cad.anchors import GeometryWithAnchors
from ..standards import Appearance, get_catalog


def _solid_of(geometry):
    if isinstance(geometry, GeometryWithAnchors):
        return geometry.solid
    return geometry


def to_buffer_data(geometry):
    """
    ソリッドを BufferGeometry 用の配列に変換する。

    引数:
        geometry: trimesh.Trimesh または GeometryWithAnchors

    戻り値:
        {"vertices": [...], "normals": [...], "indices": [...]}
        vertices / normals は三角形ごと3頂点 x 3成分、indices は 0 からの連番
    """
    mesh = _solid_of(geometry)
    if not isinstance(mesh, trimesh.Trimesh) or len(mesh.faces) == 0:
        return {"vertices": [], "normals": [], "indices": []}

    triangles = np.asarray(mesh.triangles, dtype=float)
    normals = np.repeat(np.asarray(mesh.face_normals, dtype=float), 3, axis=0)
    return {
        "vertices": triangles.reshape(-1).tolist(),
        "normals": normals.reshape(-1).tolist(),
        "indices": list(range(len(triangles) * 3)),
    }


def material_appearance(material_key, catalog=None):
    """
    材料キーから描画用の外観（色・金属感・粗さ・透明度）を返す。

    未登録の材料は既定の外観を使う。
    """
    catalog = catalog or get_catalog()
    material = catalog.get_material(material_key)
    if material is None:
        appearance = Appearance()
    else:
        appearance = material.appearance
    return {
        "color": appearance.color,
        "metalness": appearance.metalness,
        "roughness": appearance.roughness,
        "opacity": appearance.opacity,
        "transparent": appearance.transparent,
    }

"""
STL 出力。
"""

import logging

from ..cad.anchors import GeometryWithAnchors

logger = logging.getLogger(__name__)


def export_stl(geometry, out_path=None, binary=True):
    """
    ソリッドを STL にする。

    引数:
        geometry: trimesh.Trimesh または GeometryWithAnchors
        out_path: 指定時はファイルにも書き出す
        binary: False ならアスキー STL

    戻り値:
        STL のバイト列
    """
    mesh = geometry.solid if isinstance(geometry, GeometryWithAnchors) else geometry
    data = mesh.export(file_type="stl" if binary else "stl_ascii")
    if isinstance(data, str):
        data = data.encode("utf-8")
    if out_path:
        with open(out_path, "wb") as f:
            f.write(data)
        logger.info("Wrote %s (%d faces)", out_path, len(mesh.faces))
    return data

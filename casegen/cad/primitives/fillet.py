"""
フィレット（稜線の丸め）用の除去工具。
"""

import logging
from typing import Sequence

import trimesh

from .. import kernel
from ..anchors import ORIGIN, Point3
from ..validators import require_positive

logger = logging.getLogger(__name__)

# 同一平面の面が残らないように工具をわずかに張り出させる量
OVERCUT_MM = 0.05


def create_fillet(
    radius: float,
    length: float,
    outward_u: Sequence[float] = (1.0, 0.0, 0.0),
    outward_v: Sequence[float] = (0.0, 1.0, 0.0),
    position=ORIGIN,
    segments: int = 32,
) -> trimesh.Trimesh:
    """
    1本の直線稜線を丸めるための除去工具を生成する。

    ローカル座標で稜線を z 軸に置き、radius x radius の角柱から
    中心 (-r, -r) の円柱を除いた「角の余肉」を作る。これを
    ローカル x を outward_u、ローカル y を outward_v に向けて回転し、
    稜線上の position へ移動する。

    引数:
        radius: フィレット半径
        length: 稜線の長さ
        outward_u, outward_v: 稜線に接する2面の外向き法線（直交単位ベクトル）
        position: 稜線の中点
        segments: 円周の分割数
    """
    r = require_positive("radius", radius)
    require_positive("length", length)

    span = length + 2.0 * OVERCUT_MM
    side = r + OVERCUT_MM
    corner = kernel.box((side, side, span), (-(r - OVERCUT_MM) / 2.0, -(r - OVERCUT_MM) / 2.0, 0.0))
    round_part = kernel.cylinder(r, span + 2.0 * OVERCUT_MM, (-r, -r, 0.0), segments)
    tool = kernel.subtract(corner, round_part)

    matrix = kernel.frame_matrix(outward_u, outward_v, Point3.of(position).as_tuple())
    return kernel.transform(matrix, tool)


def add_panel_fillets(
    panel: trimesh.Trimesh,
    width: float,
    height: float,
    thickness: float,
    radius: float,
    position=ORIGIN,
    segments: int = 32,
) -> trimesh.Trimesh:
    """
    矩形パネルの上下面の8稜線（幅方向4本・高さ方向4本）を丸める。

    radius <= 0 のときは何もせず panel をそのまま返す。
    厚みの半分を超える半径は厚みの半分に切り詰める。
    """
    if radius <= 0:
        return panel

    base = Point3.of(position)
    hw = width / 2.0
    hh = height / 2.0
    ht = thickness / 2.0
    limit = min(ht, hw, hh)
    r = radius
    if r > limit:
        logger.debug("fillet radius %g clamped to %g", radius, limit)
        r = limit

    tools = []
    # 幅方向（x 軸）の稜線: 上前・上後・下前・下後
    for sz, sy in ((1, 1), (1, -1), (-1, 1), (-1, -1)):
        tools.append(
            create_fillet(
                r, width,
                outward_u=(0.0, sy, 0.0),
                outward_v=(0.0, 0.0, sz),
                position=(base.x, base.y + sy * hh, base.z + sz * ht),
                segments=segments,
            )
        )
    # 高さ方向（y 軸）の稜線: 上左・上右・下左・下右
    for sz, sx in ((1, -1), (1, 1), (-1, -1), (-1, 1)):
        tools.append(
            create_fillet(
                r, height,
                outward_u=(sx, 0.0, 0.0),
                outward_v=(0.0, 0.0, sz),
                position=(base.x + sx * hw, base.y, base.z + sz * ht),
                segments=segments,
            )
        )

    return kernel.subtract(panel, kernel.union(*tools))

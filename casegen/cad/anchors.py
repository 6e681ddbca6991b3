"""
アンカー（名前付き基準点）のデータモデルと位置合わせ演算。

主な責務:
1. 不変の3D点 Point3 と、名前から点への不変写像 AnchorSet を定義する
2. 直方体ソリッド用の標準アンカー集合（15点）を生成する
3. 2つの形状をアンカー同士で一致させる align を提供する

形状とアンカーは GeometryWithAnchors としてまとめて扱い、移動・回転は
常に両者へ同時に適用する。値は決して書き換えず、変換のたびに新しい値を返す。
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

import numpy as np
import trimesh

from ..errors import AnchorNotFound

PATH_SEPARATOR = "."


@dataclass(frozen=True)
class Point3:
    """ミリメートル単位の不変な3D座標。"""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def of(cls, value) -> "Point3":
        """Point3・タプル・リスト・numpy配列から Point3 を生成する。"""
        if isinstance(value, Point3):
            return value
        x, y, z = value
        return cls(float(x), float(y), float(z))

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other) -> "Point3":
        o = Point3.of(other)
        return Point3(self.x + o.x, self.y + o.y, self.z + o.z)

    def __sub__(self, other) -> "Point3":
        o = Point3.of(other)
        return Point3(self.x - o.x, self.y - o.y, self.z - o.z)

    def __neg__(self) -> "Point3":
        return Point3(-self.x, -self.y, -self.z)

    def scaled(self, factor: float) -> "Point3":
        return Point3(self.x * factor, self.y * factor, self.z * factor)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


ORIGIN = Point3()


def translate_point(anchor, vector) -> Point3:
    """アンカーをベクトル分だけ平行移動する。"""
    return Point3.of(anchor) + vector


def anchor_path(*segments: str) -> str:
    """
    階層アンカー名を組み立てる。

    例:
        anchor_path("motherboard", "standoffs", "standoff_0")
        -> "motherboard.standoffs.standoff_0"
    """
    if not segments:
        raise ValueError("anchor path needs at least one segment")
    for segment in segments:
        if not isinstance(segment, str) or not segment:
            raise ValueError(f"Invalid anchor path segment: {segment!r}")
        if PATH_SEPARATOR in segment:
            raise ValueError(f"Anchor path segment must not contain '{PATH_SEPARATOR}': {segment!r}")
    return PATH_SEPARATOR.join(segments)


def split_anchor_path(name: str) -> Tuple[str, ...]:
    """階層アンカー名をセグメント列に分解する。"""
    return tuple(name.split(PATH_SEPARATOR))


class AnchorSet(Mapping):
    """
    アンカー名から Point3 への不変写像。

    名前は大文字小文字を区別する。入れ子になった組立品のアンカーは
    anchor_path() で作った階層名で保持する。
    """

    __slots__ = ("_points",)

    def __init__(self, points=None):
        data: Dict[str, Point3] = {}
        items = points.items() if isinstance(points, Mapping) else (points or [])
        for name, point in items:
            if not isinstance(name, str) or not name:
                raise ValueError(f"Invalid anchor name: {name!r}")
            data[name] = Point3.of(point)
        self._points = data

    def __getitem__(self, name: str) -> Point3:
        try:
            return self._points[name]
        except KeyError:
            raise AnchorNotFound(name, available=self._points.keys()) from None

    def __contains__(self, name) -> bool:
        return name in self._points

    def __iter__(self) -> Iterator[str]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"AnchorSet({len(self._points)} anchors)"

    def translated(self, vector) -> "AnchorSet":
        """全アンカーを同じベクトルで平行移動した新しい集合を返す。"""
        v = Point3.of(vector)
        return AnchorSet({name: p + v for name, p in self._points.items()})

    def transformed(self, matrix) -> "AnchorSet":
        """全アンカーに同じ4x4剛体変換を適用した新しい集合を返す。"""
        if not self._points:
            return AnchorSet()
        names = list(self._points)
        points = np.array([self._points[n].as_tuple() for n in names], dtype=float)
        moved = trimesh.transformations.transform_points(points, np.asarray(matrix, dtype=float))
        return AnchorSet(zip(names, moved))

    def merged(self, other: Mapping, namespace: Optional[str] = None) -> "AnchorSet":
        """
        別のアンカー集合を取り込んだ新しい集合を返す。

        引数:
            other: 取り込むアンカー集合
            namespace: 指定時は other の各名前をこの階層の下に置く

        例外:
            ValueError: 名前が既存のアンカーと衝突した場合
        """
        data = dict(self._points)
        prefix = split_anchor_path(namespace) if namespace else ()
        for name, point in other.items():
            key = anchor_path(*prefix, *split_anchor_path(name)) if prefix else name
            if key in data:
                raise ValueError(f"Anchor name collision: {key}")
            data[key] = Point3.of(point)
        return AnchorSet(data)

    def namespace(self, prefix: str) -> "AnchorSet":
        """prefix 配下のアンカーを、prefix を取り除いた名前で返す。"""
        head = prefix + PATH_SEPARATOR
        return AnchorSet(
            {name[len(head):]: p for name, p in self._points.items() if name.startswith(head)}
        )

    def to_dict(self) -> Dict[str, Tuple[float, float, float]]:
        return {name: p.as_tuple() for name, p in self._points.items()}


@dataclass(frozen=True)
class GeometryWithAnchors:
    """ソリッドと、その現在位置を表すアンカー集合の組。"""

    solid: trimesh.Trimesh
    anchors: AnchorSet

    def __post_init__(self):
        if not isinstance(self.anchors, AnchorSet):
            object.__setattr__(self, "anchors", AnchorSet(self.anchors))

    def translated(self, vector) -> "GeometryWithAnchors":
        """ソリッドとアンカーを同時に平行移動する。"""
        v = Point3.of(vector)
        solid = self.solid.copy()
        solid.apply_translation(v.as_tuple())
        return GeometryWithAnchors(solid, self.anchors.translated(v))

    def transformed(self, matrix) -> "GeometryWithAnchors":
        """ソリッドとアンカーに同じ剛体変換を適用する。"""
        solid = self.solid.copy()
        solid.apply_transform(np.asarray(matrix, dtype=float))
        return GeometryWithAnchors(solid, self.anchors.transformed(matrix))

    def with_solid(self, solid: trimesh.Trimesh) -> "GeometryWithAnchors":
        """
        アンカーはそのままにソリッドだけ差し替える。

        穴あけ・フィレットなど、公称外形を変えない加工結果に使う。
        """
        return GeometryWithAnchors(solid, self.anchors)


def rectangular_anchor_set(width: float, height: float, thickness: float, base_position=ORIGIN) -> AnchorSet:
    """
    直方体の標準アンカー15点を生成する。

    幅は x、高さは y（front が +y）、厚みは z（top が +z）に沿う。
    全ての箱形ソリッドはこの関数でアンカー名を決める。

    引数:
        width: x 方向の寸法
        height: y 方向の寸法
        thickness: z 方向の寸法
        base_position: 直方体の中心

    戻り値:
        8隅、6面中心、center からなる AnchorSet

    各点は base_position に半寸法を足した浮動小数点値なので、
    topCenter.z - bottomCenter.z などの差は thickness と丸め誤差の範囲で一致する。
    """
    base = Point3.of(base_position)
    hw = width / 2.0
    hh = height / 2.0
    ht = thickness / 2.0

    offsets = {
        # 上面の角
        "topFrontLeft": (-hw, hh, ht),
        "topFrontRight": (hw, hh, ht),
        "topBackLeft": (-hw, -hh, ht),
        "topBackRight": (hw, -hh, ht),
        # 下面の角
        "bottomFrontLeft": (-hw, hh, -ht),
        "bottomFrontRight": (hw, hh, -ht),
        "bottomBackLeft": (-hw, -hh, -ht),
        "bottomBackRight": (hw, -hh, -ht),
        # 面中心
        "center": (0.0, 0.0, 0.0),
        "topCenter": (0.0, 0.0, ht),
        "bottomCenter": (0.0, 0.0, -ht),
        "frontCenter": (0.0, hh, 0.0),
        "backCenter": (0.0, -hh, 0.0),
        "leftCenter": (-hw, 0.0, 0.0),
        "rightCenter": (hw, 0.0, 0.0),
    }
    return AnchorSet({name: translate_point(base, offset) for name, offset in offsets.items()})


def _require(anchors: AnchorSet, name: str, role: str) -> Point3:
    if name not in anchors:
        raise AnchorNotFound(name, role=role, available=anchors.keys())
    return anchors[name]


def alignment_vector(
    source: GeometryWithAnchors,
    source_anchor: str,
    target: GeometryWithAnchors,
    target_anchor: str,
) -> Point3:
    """source のアンカーを target のアンカーへ重ねるための移動量を返す。"""
    src = _require(source.anchors, source_anchor, "source")
    dst = _require(target.anchors, target_anchor, "target")
    return dst - src


def align(
    source: GeometryWithAnchors,
    source_anchor: str,
    target: GeometryWithAnchors,
    target_anchor: str,
) -> GeometryWithAnchors:
    """
    アンカー同士を一致させるように source を平行移動する。

    引数:
        source: 動かす形状
        source_anchor: source 側のアンカー名
        target: 基準となる形状
        target_anchor: target 側のアンカー名

    戻り値:
        ソリッドとアンカーを同じ量だけ移動した新しい GeometryWithAnchors

    例外:
        AnchorNotFound: いずれかのアンカー名が存在しない場合
    """
    vector = alignment_vector(source, source_anchor, target, target_anchor)
    moved = source.translated(vector)
    # 丸め誤差を残さず、基準アンカーは target の座標そのものにする
    anchors = dict(moved.anchors.items())
    anchors[source_anchor] = target.anchors[target_anchor]
    return GeometryWithAnchors(moved.solid, AnchorSet(anchors))


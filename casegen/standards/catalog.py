"""
PC部品規格（マザーボード・材料・ファン）を読み込むカタログモジュール。

主な責務:
1. standards/data/ の JSON から規格レコードを読み込む
2. キーから型付きレコードを引く API を提供する
3. 未登録キーには型付きの例外（UnknownFormFactor など）を返す

データはプロセス存続中は変化しない読み取り専用として扱う。
"""

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..errors import UnknownFan, UnknownFormFactor, UnknownMaterial

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "CASEGEN_STANDARDS_DIR"


class FormFactor(str, Enum):
    """対応するマザーボードフォームファクタ（閉じた列挙）。"""

    ATX = "ATX"
    MICRO_ATX = "microATX"
    MINI_ITX = "miniITX"

    @classmethod
    def parse(cls, key: Union[str, "FormFactor"]) -> "FormFactor":
        """
        文字列キーを列挙値へ変換する。

        例外:
            UnknownFormFactor: 未対応のキーの場合
        """
        if isinstance(key, cls):
            return key
        try:
            return cls(key)
        except ValueError:
            raise UnknownFormFactor(str(key), [f.value for f in cls]) from None


@dataclass(frozen=True)
class FormFactorSpec:
    """マザーボード規格。取付穴は基板左下を原点とする。"""

    key: FormFactor
    name: str
    width: float
    height: float
    thickness: float
    mounting_holes: Tuple[Tuple[float, float], ...]
    io_shield_width: float
    io_shield_height: float

    @classmethod
    def from_json(cls, key: str, data: dict) -> "FormFactorSpec":
        return cls(
            key=FormFactor.parse(key),
            name=data.get("name", key),
            width=float(data["width"]),
            height=float(data["height"]),
            thickness=float(data["thickness"]),
            mounting_holes=tuple((float(x), float(y)) for x, y in data["mounting_holes"]),
            io_shield_width=float(data["io_shield_width"]),
            io_shield_height=float(data["io_shield_height"]),
        )


@dataclass(frozen=True)
class Appearance:
    """描画用の外観情報。"""

    color: str = "#A9A9A9"
    metalness: float = 0.5
    roughness: float = 0.7
    opacity: float = 1.0

    @property
    def transparent(self) -> bool:
        return self.opacity < 1.0


@dataclass(frozen=True)
class MaterialSpec:
    """パネル材料。density は g/cm³。"""

    key: str
    name: str
    thickness: float
    density: float
    appearance: Appearance = field(default_factory=Appearance)

    @classmethod
    def from_json(cls, key: str, data: dict) -> "MaterialSpec":
        return cls(
            key=key,
            name=data.get("name", key),
            thickness=float(data["thickness"]),
            density=float(data.get("density", 0.0)),
            appearance=Appearance(**data.get("appearance", {})),
        )


@dataclass(frozen=True)
class FanSpec:
    """ケースファン規格。"""

    key: str
    name: str
    size: float
    thickness: float
    mounting_hole_distance: float
    mounting_hole_diameter: float

    @classmethod
    def from_json(cls, key: str, data: dict) -> "FanSpec":
        return cls(
            key=key,
            name=data.get("name", key),
            size=float(data["size"]),
            thickness=float(data["thickness"]),
            mounting_hole_distance=float(data["mounting_hole_distance"]),
            mounting_hole_diameter=float(data["mounting_hole_diameter"]),
        )


class StandardsCatalog:
    """
    規格データの読み取り専用カタログ。

    使用例:
        catalog = StandardsCatalog()
        catalog.load()

        atx = catalog.lookup_form_factor("ATX")
        material = catalog.get_material("acrylic3mm")  # 無ければ None
    """

    def __init__(self, data_dir: Optional[str] = None):
        if data_dir is None:
            data_dir = Path(__file__).parent / "data"
        self.data_dir = Path(data_dir)
        self._form_factors: Dict[FormFactor, FormFactorSpec] = {}
        self._materials: Dict[str, MaterialSpec] = {}
        self._fans: Dict[str, FanSpec] = {}

    def load(self) -> None:
        """JSON ファイルから規格を読み込む。"""
        self._form_factors.clear()
        self._materials.clear()
        self._fans.clear()

        for key, data in self._read("motherboards.json").items():
            spec = self._parse(FormFactorSpec, key, data)
            if spec is not None:
                self._form_factors[spec.key] = spec
        for key, data in self._read("materials.json").items():
            spec = self._parse(MaterialSpec, key, data)
            if spec is not None:
                self._materials[key] = spec
        for key, data in self._read("fans.json").items():
            spec = self._parse(FanSpec, key, data)
            if spec is not None:
                self._fans[key] = spec

        logger.debug(
            "Loaded %d form factors, %d materials, %d fans from %s",
            len(self._form_factors), len(self._materials), len(self._fans), self.data_dir,
        )

    def _read(self, filename: str) -> dict:
        path = self.data_dir / filename
        if not path.exists():
            logger.warning("Standards file not found: %s", path)
            return {}
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _parse(self, record_cls, key: str, data: dict):
        """単一レコードを読み込む。壊れたレコードは警告して読み飛ばす。"""
        try:
            return record_cls.from_json(key, data)
        except (KeyError, TypeError, ValueError, UnknownFormFactor) as e:
            logger.warning("Failed to load %s record %r: %s", record_cls.__name__, key, e)
            return None

    # --- 取得（未登録なら None） ---

    def get_form_factor(self, key) -> Optional[FormFactorSpec]:
        try:
            return self._form_factors.get(FormFactor.parse(key))
        except UnknownFormFactor:
            return None

    def get_material(self, key: str) -> Optional[MaterialSpec]:
        return self._materials.get(key)

    def get_fan(self, key: str) -> Optional[FanSpec]:
        return self._fans.get(key)

    # --- 参照（未登録なら例外） ---

    def lookup_form_factor(self, key) -> FormFactorSpec:
        """
        フォームファクタ規格を取得する。

        例外:
            UnknownFormFactor: キーが登録されていない場合
        """
        spec = self.get_form_factor(key)
        if spec is None:
            raise UnknownFormFactor(str(getattr(key, "value", key)), [f.value for f in self._form_factors])
        return spec

    def lookup_material(self, key: str) -> MaterialSpec:
        """
        材料規格を取得する。

        例外:
            UnknownMaterial: キーが登録されていない場合
        """
        spec = self.get_material(key)
        if spec is None:
            raise UnknownMaterial(key, self._materials.keys())
        return spec

    def lookup_fan(self, key: str) -> FanSpec:
        """
        ファン規格を取得する。

        例外:
            UnknownFan: キーが登録されていない場合
        """
        spec = self.get_fan(key)
        if spec is None:
            raise UnknownFan(key, self._fans.keys())
        return spec

    def form_factors(self) -> List[FormFactorSpec]:
        return list(self._form_factors.values())

    def materials(self) -> List[MaterialSpec]:
        return list(self._materials.values())

    def fans(self) -> List[FanSpec]:
        return list(self._fans.values())

    def summary(self) -> str:
        """CLI 表示用の一覧文字列を生成する。"""
        lines = ["Motherboard form factors:"]
        for spec in self._form_factors.values():
            lines.append(
                f"- {spec.key.value}: {spec.name} {spec.width:g} x {spec.height:g} mm, "
                f"{len(spec.mounting_holes)} mounting holes"
            )
        lines.append("\nMaterials:")
        for m in self._materials.values():
            lines.append(f"- {m.key}: {m.name} ({m.thickness:g} mm, {m.density:g} g/cm3)")
        lines.append("\nFans:")
        for fan in self._fans.values():
            lines.append(f"- {fan.key}: {fan.name} (holes {fan.mounting_hole_distance:g} mm apart)")
        return "\n".join(lines)


# グローバルシングルトン（読み込み完了後にのみ公開する）
_catalog: Optional[StandardsCatalog] = None
_catalog_lock = threading.Lock()


def _load_catalog() -> StandardsCatalog:
    catalog = StandardsCatalog(os.getenv(DATA_DIR_ENV) or None)
    catalog.load()
    return catalog


def get_catalog() -> StandardsCatalog:
    """グローバルなカタログインスタンスを取得または作成する。複数スレッドから呼んでよい。"""
    global _catalog
    if _catalog is None:
        with _catalog_lock:
            if _catalog is None:
                _catalog = _load_catalog()
    return _catalog


def reload_catalog() -> StandardsCatalog:
    """カタログを強制的に再読み込みする。読み込み中も古いカタログが使われる。"""
    global _catalog
    with _catalog_lock:
        _catalog = _load_catalog()
    return _catalog

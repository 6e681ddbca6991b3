"""
ケース生成で送出する例外の定義。

全ての例外は CaseGenError を基底に持ち、診断に必要な情報
（アンカー名、規格キー、フィールド名など）を属性として保持する。
"""

from typing import Iterable, Optional


class CaseGenError(Exception):
    """casegen 全体の基底例外。"""


class AnchorNotFound(CaseGenError, KeyError):
    """参照したアンカー名がアンカー集合に存在しない。"""

    def __init__(self, name: str, role: str = "lookup", available: Optional[Iterable[str]] = None):
        self.name = name
        self.role = role
        self.available = sorted(available) if available is not None else []
        super().__init__(name)

    def __str__(self) -> str:
        if self.role == "lookup":
            return f'Anchor "{self.name}" not found'
        return f'{self.role.capitalize()} anchor "{self.name}" not found'


class UnknownStandard(CaseGenError, LookupError):
    """規格レジストリに登録されていないキーを参照した。"""

    kind = "standard"

    def __init__(self, key: str, available: Optional[Iterable[str]] = None):
        self.key = key
        self.available = sorted(available) if available is not None else []
        super().__init__(key)

    def __str__(self) -> str:
        message = f"Unknown {self.kind}: {self.key}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        return message


class UnknownFormFactor(UnknownStandard):
    """未登録のマザーボードフォームファクタ。"""

    kind = "motherboard form factor"


class UnknownMaterial(UnknownStandard):
    """未登録の材料キー。"""

    kind = "material"


class UnknownFan(UnknownStandard):
    """未登録のファン規格。"""

    kind = "fan size"


class InvalidConfiguration(CaseGenError, ValueError):
    """構成値が受け付けられない。"""

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{field}: {reason} (got {value!r})")


class InvalidDimension(InvalidConfiguration):
    """寸法が正でない、または幾何的に成立しない。"""


class KernelError(CaseGenError, RuntimeError):
    """ブーリアン演算カーネルが失敗した。"""

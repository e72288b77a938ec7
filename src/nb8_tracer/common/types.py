"""
共通の型定義を提供するモジュール。
プロジェクト全体で使用される汎用的な型などを定義します。
"""
from typing import List, NamedTuple

# @intent:data_structure 単一のレジスタの表示定義。UIが動的にフィールドを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅 (8 or 16)

# @intent:data_structure レジスタグループの表示定義。関連するレジスタ（例: "General", "Pointers"）をまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]

# @intent:data_structure 8bit幅で常にラップアラウンドするスタックポインタ型。
# @intent:rationale スタックはメモリ先頭256バイトの窓に閉じ込められる。
#                  intのサブクラスとすることで、そのままバスのアドレスとして使用できる。
class StackPointer(int):
    """
    256を法として常に正規化される8bitスタックポインタ。
    StackPointer(0x00).decremented() == 0xFF のように、オーバーフロー/アンダーフローでラップします。
    """
    def __new__(cls, value: int = 0xFF):
        return super().__new__(cls, int(value) & 0xFF)

    def decremented(self) -> "StackPointer":
        return StackPointer(int(self) - 1)

    def incremented(self) -> "StackPointer":
        return StackPointer(int(self) + 1)

    def __repr__(self) -> str:
        return f"StackPointer({int(self):#04x})"

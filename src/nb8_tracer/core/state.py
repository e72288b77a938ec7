# nb8_tracer/core/state.py
"""
Core Layer (CPU状態)

全てのアーキテクチャに共通する最小限の状態（PC, SP, 実行フラグ）を定義します。
"""
from dataclasses import dataclass

# @intent:responsibility アーキテクチャ共通の状態を保持します。汎用レジスタやフラグはサブクラスが追加します。
@dataclass
class CpuState:
    pc: int = 0x0000
    sp: int = 0x0000
    # Falseの間、step()はフェッチを行わない。execute()は開始時にTrueへ戻す。
    running: bool = True

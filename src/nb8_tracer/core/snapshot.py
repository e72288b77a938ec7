# nb8_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、CPUとバスの状態を記録した不変のデータ構造を定義します。
UIへの情報提供と、デバッガの実行履歴（ステップバック）に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from nb8_tracer.core.state import CpuState
from nb8_tracer.transport.bus import BusAccessType, BusAccess

# @intent:responsibility 実行された命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    実行された命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str # 命令バイト。例: "10"
    mnemonic: str # 例: "LOAD"
    operands: List[str] = field(default_factory=list) # 例: ["R0", "#$05"]
    operand_bytes: List[int] = field(default_factory=list) # 生のオペランドバイト
    cycle_count: int = 1
    length: int = 1 # 命令のバイト長

    # @intent:responsibility 命令バイトの上位ニブル（オペコード）を返します。
    @property
    def opcode(self) -> int:
        return int(self.opcode_hex, 16) >> 4

    # @intent:responsibility 命令バイトの下位ニブル（オペランドフィールド）を返します。
    @property
    def operand(self) -> int:
        return int(self.opcode_hex, 16) & 0x0F

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    cycle_count: int
    symbol_info: Optional[str] = None # 例: "CALL $0040"

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    命令実行直後のCPU状態と、その命令が発生させたバスアクセスの記録。
    stateはCPUが保持する状態のコピーであり、以後の実行で変化しません。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)

    # @intent:responsibility 指定された種類のバスアクセスのみを抽出して返します。
    def accesses_of(self, access_type: BusAccessType) -> List[BusAccess]:
        return [a for a in self.bus_activity if a.access_type == access_type]

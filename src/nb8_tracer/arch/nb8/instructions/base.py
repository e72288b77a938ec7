# src/nb8_tracer/arch/nb8/instructions/base.py
"""
NB8命令実装用の共通ユーティリティ。
"""
from typing import Callable, Tuple

from nb8_tracer.transport.bus import Bus
from nb8_tracer.arch.nb8.state import Nb8CpuState

# @intent:data_structure PCを1進めながら1バイトを返すフェッチ関数の型。
Fetcher = Callable[[], int]

# @intent:utility_function 16ビットアドレスをリトルエンディアン（下位バイトが先）でフェッチします。
def fetch_addr16(fetch: Fetcher) -> Tuple[int, int, int]:
    """(address, low, high) を返します。"""
    low = fetch()
    high = fetch()
    return (high << 8) | low, low, high

def addr16(op_bytes) -> int:
    return (op_bytes[1] << 8) | op_bytes[0]

# @intent:utility_function スタックに1バイトをプッシュします。
# @intent:rationale 現在のSPへ書き込んでからSPをデクリメントします。popはこの逆順であり、
#                  CALL/RETの対称性はこの順序に依存しています。
def push(state: Nb8CpuState, bus: Bus, value: int) -> None:
    bus.write(state.sp, value & 0xFF)
    state.sp = state.sp.decremented()

# @intent:utility_function スタックから1バイトをポップします（SPをインクリメントしてから読み出し）。
def pop(state: Nb8CpuState, bus: Bus) -> int:
    state.sp = state.sp.incremented()
    return bus.read(state.sp)

def reg_name(index: int) -> str:
    return f"R{index}"

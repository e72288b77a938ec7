# src/nb8_tracer/arch/nb8/state.py
"""
NB8 CPU固有の状態定義。
"""
from dataclasses import dataclass, field
from typing import List

from nb8_tracer.core.state import CpuState
from nb8_tracer.common.errors import InvalidRegisterError
from nb8_tracer.common.types import StackPointer

# @intent:constant 汎用レジスタ(R0-R3)の本数とスタックポインタの初期値。
NUM_REGISTERS = 4
STACK_TOP = 0xFF

# @intent:responsibility NB8 CPUの全てのレジスタ（R0-R3, PC, SP）とゼロフラグ、実行フラグを保持します。
@dataclass
class Nb8CpuState(CpuState):
    """
    NB8 CPUのレジスタ状態を保持するデータクラス。

    spはStackPointer型に強制され、常に256を法としてラップします。
    そのためスタックとして使用できるのは主記憶の先頭256バイトのみです。
    """
    sp: int = StackPointer(STACK_TOP)
    regs: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    zero_flag: bool = False

    def __setattr__(self, name, value):
        if name == "sp" and not isinstance(value, StackPointer):
            value = StackPointer(value)
        super().__setattr__(name, value)

    # @intent:responsibility レジスタ番号の妥当性を検証します。
    # @intent:post-condition 0..3以外の番号はInvalidRegisterErrorとなり、CPUは状態を変えずに停止します。
    @staticmethod
    def check_register(index: int) -> int:
        if not 0 <= index < NUM_REGISTERS:
            raise InvalidRegisterError(index)
        return index

    def get_reg(self, index: int) -> int:
        return self.regs[self.check_register(index)]

    # @intent:responsibility レジスタに8bit値を書き込み、ゼロフラグを結果に合わせて更新します。
    # @intent:rationale レジスタに書き込む命令（LOAD/ADD/SUB/IN/DISK_READ）は全てゼロフラグを更新するため、
    #                  書き込みとフラグ更新を1か所にまとめています。
    def write_reg(self, index: int, value: int) -> None:
        self.regs[self.check_register(index)] = value & 0xFF
        self.zero_flag = self.regs[index] == 0

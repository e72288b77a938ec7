from typing import Tuple

from nb8_tracer.transport.bus import Bus, RAM
from nb8_tracer.transport.disk import DiskImage
from nb8_tracer.transport.console import InputChannel, OutputChannel
from nb8_tracer.arch.nb8.cpu import Nb8Cpu
from nb8_tracer.arch.nb8.state import Nb8CpuState
from nb8_tracer.common.errors import ConfigError
from .models import SystemConfig, CpuInitialState, REGISTER_NAMES

# @intent:responsibility システム構成（Config）に基づいて、Bus、メモリ、ディスク、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    # @intent:post-condition ディスクイメージを開けない場合、StoreUnavailableErrorがそのまま伝播します。
    # @intent:rationale DiskImageの所有権は呼び出し側（ホスト）に渡り、close()の責任もホストが負います。
    def build_system(self, config: SystemConfig, input_channel: InputChannel,
                     output_channel: OutputChannel) -> Tuple[Nb8Cpu, Bus, DiskImage]:
        bus = Bus()
        bus.register_device(0x0000, config.memory.size - 1, RAM(config.memory.size))

        bus.attach_console(input_channel, output_channel)

        cpu = Nb8Cpu(bus)
        self.apply_initial_state(cpu, config.initial_state)

        # ディスクイメージは初期状態の適用に成功した後に開く
        disk = DiskImage(config.disk.path, config.disk.size)
        bus.attach_storage(disk)
        return cpu, bus, disk

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Nb8Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        レジスタの初期値設定はゼロフラグに影響しません。
        """
        cpu.reset()
        state: Nb8CpuState = cpu.get_state()
        state.pc = config_state.pc & 0xFFFF
        state.sp = config_state.sp
        for reg_name, value in config_state.registers.items():
            name = reg_name.lower()
            if name not in REGISTER_NAMES:
                raise ConfigError(f"Unknown register in initial state: {reg_name}")
            state.regs[REGISTER_NAMES.index(name)] = value & 0xFF

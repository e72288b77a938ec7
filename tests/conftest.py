# tests/conftest.py
"""
テスト共通のフィクスチャ。
64KBの主記憶と一時ディレクトリ上の小容量ディスクを持つNB8マシンを構築します。
"""
from dataclasses import dataclass

import pytest

from nb8_tracer.arch.nb8.cpu import Nb8Cpu
from nb8_tracer.transport.bus import Bus, RAM
from nb8_tracer.transport.console import ScriptedInput, BufferedOutput
from nb8_tracer.transport.disk import DiskImage

TEST_DISK_SIZE = 0x10000

@dataclass
class Machine:
    cpu: Nb8Cpu
    bus: Bus
    disk: DiskImage
    input: ScriptedInput
    output: BufferedOutput

    # @intent:utility_function プログラムを主記憶の指定アドレスへ配置します。
    def load(self, program, address: int = 0x0000) -> None:
        for i, byte_data in enumerate(program):
            self.bus.load(address + i, byte_data)

    def run(self, program, address: int = 0x0000) -> None:
        self.load(program, address)
        self.cpu.get_state().pc = address
        self.cpu.execute()

@pytest.fixture
def disk_path(tmp_path):
    return str(tmp_path / "virtual_disk.bin")

# @intent:utility_function 入力値を指定してマシンを構築するファクトリを返します。
@pytest.fixture
def make_machine(disk_path):
    disks = []

    def _make(inputs=()):
        bus = Bus()
        bus.register_device(0x0000, 0xFFFF, RAM(0x10000))
        disk = DiskImage(disk_path, TEST_DISK_SIZE)
        disks.append(disk)
        bus.attach_storage(disk)
        input_channel = ScriptedInput(inputs)
        output_channel = BufferedOutput()
        bus.attach_console(input_channel, output_channel)
        return Machine(Nb8Cpu(bus), bus, disk, input_channel, output_channel)

    yield _make
    for disk in disks:
        disk.close()

@pytest.fixture
def machine(make_machine):
    return make_machine()

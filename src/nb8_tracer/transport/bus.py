# nb8_tracer/transport/bus.py
"""
Transport Layer (共通バス)

CPUから見た外部世界の窓口です。主記憶のアドレス空間をデバイスへ振り分けるほか、
ホストが所有する永続ストア（ディスク）とコンソールチャネルへの経路を借用し、
命令が起こした全てのアクセスをBusAccessとして記録します。
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple, TYPE_CHECKING
from dataclasses import dataclass
from enum import Enum

from nb8_tracer.common.errors import OutOfBoundsError

if TYPE_CHECKING:
    from nb8_tracer.transport.console import InputChannel, OutputChannel

# @intent:responsibility 記録されるアクセスの種類。IO_*のaddressはレジスタ番号（ポート）です。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"
    IO_READ = "IO_READ"
    IO_WRITE = "IO_WRITE"
    DISK_READ = "DISK_READ"
    DISK_WRITE = "DISK_WRITE"

@dataclass(frozen=True)
class BusAccess:
    """
    1回のアクセスの記録。WRITE/DISK_WRITEでは previous_data に上書き前の値が入り、
    デバッガはこれを使って書き込みを取り消します。
    """
    address: int
    data: int
    access_type: BusAccessType
    previous_data: Optional[int] = None

# @intent:responsibility バイト単位でアドレス指定できる記憶デバイスのインターフェースです。
# @intent:pre-condition addressはデバイス先頭からのオフセット、dataは0..255の値です。
class Device(ABC):
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

    @abstractmethod
    def get_size(self) -> int:
        pass

# @intent:responsibility 主記憶（メモリストア）。固定長でゼロ初期化されます。
class RAM(Device):
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._size = size
        self._memory = bytearray(size)

    # @intent:post-condition 範囲外のアドレスはOutOfBoundsErrorとなり、操作は行われません。
    def _check(self, address: int) -> None:
        if address < 0 or address >= self._size:
            raise OutOfBoundsError(f"Address {address} out of bounds for RAM of size {self._size}.")

    def read(self, address: int) -> int:
        self._check(address)
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        self._check(address)
        if data < 0 or data > 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    def get_size(self) -> int:
        return self._size

# @intent:responsibility 主記憶のアドレス空間を管理し、ディスク・コンソールへのアクセスを仲介する共通バス。
# @intent:rationale ストア本体とチャネルの所有権はホスト側にあり、バスは参照を借用するだけです。
class Bus:
    """
    メモリマップ上のデバイスへアクセスを振り分け、アクセスログを蓄積します。
    ログはCPUが1命令ごとに回収し、Snapshotに含めます。
    peek()/load()/restore_disk() はローダー・UI・デバッガ用で、ログを残しません。
    """
    def __init__(self):
        self._regions: List[Tuple[int, int, Device]] = []  # (start, end, device)
        self._log: List[BusAccess] = []
        self._storage: Optional[Device] = None
        self._input: Optional["InputChannel"] = None
        self._output: Optional["OutputChannel"] = None

    def _record(self, access_type: BusAccessType, address: int, data: int,
                previous_data: Optional[int] = None) -> None:
        self._log.append(BusAccess(address, data, access_type, previous_data))

    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log, self._log = self._log, []
        return log

    # --- 主記憶 ---

    # @intent:responsibility start..end（両端を含む）にデバイスを配置します。
    # @intent:pre-condition 範囲の大きさはデバイスの容量と一致する必要があります。重複は検査しません。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        if start_address < 0 or end_address < start_address:
            raise ValueError(f"Invalid address range {start_address:#x}..{end_address:#x}.")
        if not isinstance(device, Device):
            raise TypeError(f"{type(device).__name__} is not a Device.")
        span = end_address - start_address + 1
        if device.get_size() != span:
            raise ValueError(
                f"{type(device).__name__} of {device.get_size()} bytes cannot be mapped to a range of {span} bytes."
            )
        self._regions.append((start_address, end_address, device))

    def _resolve(self, address: int) -> Tuple[Device, int]:
        for start, end, device in self._regions:
            if start <= address <= end:
                return device, address - start
        raise OutOfBoundsError(f"Address {address:#06x} not mapped to any device.")

    def read(self, address: int) -> int:
        device, offset = self._resolve(address)
        data = device.read(offset)
        self._record(BusAccessType.READ, address, data)
        return data

    def write(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        previous = device.read(offset)
        device.write(offset, data)
        self._record(BusAccessType.WRITE, address, data, previous)

    def peek(self, address: int) -> int:
        device, offset = self._resolve(address)
        return device.read(offset)

    def load(self, address: int, data: int) -> None:
        device, offset = self._resolve(address)
        device.write(offset, data)

    # @intent:responsibility 主記憶の総容量（マップされた範囲の終端+1）を返します。
    def get_memory_size(self) -> int:
        return max((end + 1 for _, end, _ in self._regions), default=0)

    # --- 永続ストア ---

    def attach_storage(self, storage: Device) -> None:
        self._storage = storage

    def get_storage(self) -> Optional[Device]:
        return self._storage

    def _disk(self) -> Device:
        if self._storage is None:
            raise RuntimeError("No persistent store attached to the bus.")
        return self._storage

    def read_disk(self, address: int) -> int:
        data = self._disk().read(address)
        self._record(BusAccessType.DISK_READ, address, data)
        return data

    # @intent:post-condition 戻った時点で書き込みは永続化されています（DiskImage.writeの契約）。
    def write_disk(self, address: int, data: int) -> None:
        disk = self._disk()
        previous = disk.read(address)
        disk.write(address, data)
        self._record(BusAccessType.DISK_WRITE, address, data, previous)

    def restore_disk(self, address: int, data: int) -> None:
        self._disk().write(address, data)

    # --- コンソール I/O ---

    def attach_console(self, input_channel: "InputChannel", output_channel: "OutputChannel") -> None:
        self._input = input_channel
        self._output = output_channel

    # @intent:responsibility 入力チャネルから値を1つ読み、8bitに切り詰めて返します。
    # @intent:rationale 値が得られるまで呼び出しスレッドをブロックします。タイムアウトはありません。
    def read_io(self, port: int) -> int:
        if self._input is None:
            raise RuntimeError("No input channel attached to the bus.")
        data = self._input.read_value(port) & 0xFF
        self._record(BusAccessType.IO_READ, port, data)
        return data

    def write_io(self, port: int, data: int) -> None:
        if self._output is None:
            raise RuntimeError("No output channel attached to the bus.")
        self._output.write_value(port, data)
        self._record(BusAccessType.IO_WRITE, port, data)

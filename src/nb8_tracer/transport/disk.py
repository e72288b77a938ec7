# nb8_tracer/transport/disk.py
"""
Transport Layer (永続ストア)

ホストファイルをバッキングとする、バイト単位でアドレス指定可能な仮想ディスクを提供します。
書き込みは1バイトごとに同期的にフラッシュされ、戻った時点で永続化が保証されます。
"""
import os
from typing import Optional

from nb8_tracer.common.errors import OutOfBoundsError, StoreUnavailableError
from nb8_tracer.transport.bus import Device

DEFAULT_DISK_FILE = "virtual_disk.bin"
DEFAULT_DISK_SIZE = 100 * 1024 * 1024  # 100 MiB

# @intent:responsibility ファイルをバッキングとする永続ストアデバイスを提供します。
class DiskImage(Device):
    """
    固定容量の永続バイトストア。

    バッキングファイルが存在しない場合は容量分のゼロで埋めて作成し、
    存在する場合はその内容をそのまま再利用します（容量に満たない場合は末尾をゼロで拡張）。
    """
    # @intent:pre-condition sizeは正の整数である必要があります。
    # @intent:post-condition オープンに失敗した場合、StoreUnavailableErrorを発生させます。
    def __init__(self, path: str = DEFAULT_DISK_FILE, size: int = DEFAULT_DISK_SIZE):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("Disk size must be a positive integer.")
        self._path = path
        self._size = size
        self._file = None
        try:
            self._prepare_backing_file()
            self._file = open(path, "r+b")
        except OSError as e:
            raise StoreUnavailableError(f"Failed to open disk file '{path}': {e}") from e

    # @intent:responsibility バッキングファイルを容量分のゼロで作成、または不足分をゼロで拡張します。
    # @intent:rationale truncateによる拡張はゼロ埋めが保証されるため、100MiBの書き出しを避けられます。
    def _prepare_backing_file(self) -> None:
        if not os.path.exists(self._path):
            with open(self._path, "wb") as f:
                f.truncate(self._size)
                f.flush()
                os.fsync(f.fileno())
            return

        if os.path.getsize(self._path) < self._size:
            with open(self._path, "r+b") as f:
                f.truncate(self._size)
                f.flush()
                os.fsync(f.fileno())

    @property
    def path(self) -> str:
        return self._path

    def get_size(self) -> int:
        return self._size

    def _check_address(self, address: int) -> None:
        if not 0 <= address < self._size:
            raise OutOfBoundsError(f"Address {address} out of bounds for disk of size {self._size}.")

    def _require_open(self):
        if self._file is None or self._file.closed:
            raise StoreUnavailableError(f"Disk file '{self._path}' is closed.")
        return self._file

    def read(self, address: int) -> int:
        self._check_address(address)
        f = self._require_open()
        f.seek(address)
        data = f.read(1)
        if len(data) != 1:
            raise StoreUnavailableError(f"Short read at {address:#x} from disk file '{self._path}'.")
        return data[0]

    # @intent:responsibility 1バイトを書き込み、同期的にフラッシュします。
    # @intent:post-condition 戻った時点で書き込みは永続化されています。
    def write(self, address: int, data: int) -> None:
        self._check_address(address)
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        f = self._require_open()
        f.seek(address)
        f.write(bytes((data,)))
        f.flush()
        os.fsync(f.fileno())

    def close(self) -> None:
        if self._file is not None and not self._file.closed:
            self._file.close()

    def __enter__(self) -> "DiskImage":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None

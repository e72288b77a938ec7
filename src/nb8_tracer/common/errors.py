"""
NB8全体で共通して使用される例外階層を定義するモジュール。

境界違反・ストア利用不可は「契約違反」としてエンジン内部では捕捉されず、
不正命令（未定義オペコード・存在しないレジスタ番号）のみがエンジン内部で捕捉され、
クリーンな停止に変換されます。
"""


# @intent:responsibility NB8関連の全ての例外の基底クラスです。
class Nb8Error(Exception):
    pass


# @intent:responsibility ストアの有効範囲外へのアクセスを表します。
# @intent:rationale 既存の呼び出し側が IndexError として扱えるよう、IndexError も継承します。
class OutOfBoundsError(Nb8Error, IndexError):
    pass


# @intent:responsibility 実行できない命令を表します。CPUはこれを報告して停止します。
class IllegalInstructionError(Nb8Error):
    pass


# @intent:responsibility デコードしたオペコードに対応する命令が存在しないことを表します。
class UnrecognizedOpcodeError(IllegalInstructionError):
    def __init__(self, opcode: int, address: int):
        super().__init__(f"Unknown opcode: {opcode:#x}")
        self.opcode = opcode
        self.address = address


# @intent:responsibility 命令が存在しないレジスタ番号（R4以上）を指定したことを表します。
class InvalidRegisterError(IllegalInstructionError):
    def __init__(self, index: int):
        super().__init__(f"Invalid register: R{index}")
        self.index = index


# @intent:responsibility 永続ストア（ディスクイメージ）の作成・オープンに失敗したことを表します。
class StoreUnavailableError(Nb8Error, OSError):
    pass


# @intent:responsibility システム構成ファイルの内容が不正であることを表します。
class ConfigError(Nb8Error, ValueError):
    pass

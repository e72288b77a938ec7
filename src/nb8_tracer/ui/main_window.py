# src/nb8_tracer/ui/main_window.py
"""
メインウィンドウの実装。
バックエンド（CPU・バス・ディスク・デバッガ）を保持し、実行制御と各ビューの更新を管理します。
"""
from typing import Optional

from PySide6.QtCore import Qt, QThread, Signal, Slot
from PySide6.QtGui import QAction, QCloseEvent, QColor, QPalette
from PySide6.QtWidgets import (
    QApplication, QDockWidget, QFileDialog, QLabel, QMainWindow, QMessageBox, QToolBar
)

from nb8_tracer.common.errors import Nb8Error, OutOfBoundsError
from nb8_tracer.config.builder import SystemBuilder
from nb8_tracer.config.loader import ConfigLoader
from nb8_tracer.config.models import ProgramConfig, SystemConfig
from nb8_tracer.core.snapshot import Snapshot
from nb8_tracer.debugger.debugger import Debugger
from nb8_tracer.loader.loader import BinaryLoader, IntelHexLoader
from .console_view import ConsoleView
from .flag_view import FlagView
from .fonts import get_monospace_font_family
from .register_view import RegisterView

# @intent:responsibility デバッガの実行（連続実行または1ステップ）をバックグラウンドで行います。
# @intent:rationale IN命令は入力があるまでブロックするため、1ステップ実行もUIスレッド外で行います。
class DebuggerThread(QThread):
    execution_stopped = Signal(object)  # Optional[Snapshot]
    execution_failed = Signal(str)

    def __init__(self, debugger: Debugger):
        super().__init__()
        self.debugger = debugger
        self.single_step = False

    def run(self):
        try:
            if self.single_step:
                self.debugger.step_instruction()
            else:
                self.debugger.run()
        except (Nb8Error, EOFError) as e:
            # 境界違反などの中断はエンジンを停止させ、UIに報告する
            self.debugger.stop()
            self.execution_failed.emit(f"{type(e).__name__}: {e}")
            return
        self.execution_stopped.emit(self.debugger.get_last_snapshot())

# @intent:responsibility アプリケーションのメインウィンドウを定義し、UIの主要なコンポーネントを組み立てます。
class MainWindow(QMainWindow):
    def __init__(self, parent=None, config_path: Optional[str] = None):
        super().__init__(parent)
        self.setWindowTitle("NB8 Tracer")
        self.setGeometry(100, 100, 1000, 700)

        self.disk = None
        self.debugger_thread: Optional[DebuggerThread] = None
        self.console_view = ConsoleView()
        self.register_view = RegisterView()
        self.flag_view = FlagView()

        self.status_label = QLabel("Welcome to NB8 Tracer", self)
        self.status_label.setAlignment(Qt.AlignCenter)
        self.setCentralWidget(self.status_label)

        self._set_dark_theme()
        self._create_menus()
        self._create_toolbar()
        self._create_docks()

        config = ConfigLoader().load_from_file(config_path) if config_path else SystemConfig()
        self._setup_backend(config)
        self._update_ui_state(False)

    # @intent:responsibility Configからバックエンドを構築し、ビューとデバッガを接続し直します。
    # @intent:post-condition 構築に失敗した場合、既存のバックエンドはそのまま残ります。
    def _setup_backend(self, config: SystemConfig):
        cpu, bus, disk = SystemBuilder().build_system(
            config, self.console_view.input_channel, self.console_view.output_channel
        )
        if self.disk is not None:
            self.disk.close()

        self.config = config
        self.cpu, self.bus, self.disk = cpu, bus, disk
        self.debugger = Debugger(self.cpu)
        self.debugger_thread = DebuggerThread(self.debugger)
        self.debugger_thread.execution_stopped.connect(self._on_execution_stopped)
        self.debugger_thread.execution_failed.connect(self._on_execution_failed)

        if config.program is not None:
            self._load_program(config.program)

        self.register_view.set_cpu(self.cpu)
        self.flag_view.set_cpu(self.cpu)

    def _load_program(self, program: ProgramConfig):
        if program.format == "hex":
            IntelHexLoader().load_intel_hex(program.path, self.bus)
        else:
            BinaryLoader().load_binary(program.path, self.bus, program.address)

    def _create_menus(self):
        file_menu = self.menuBar().addMenu("File")

        self.load_config_action = QAction("Load System Config...", self)
        self.load_config_action.triggered.connect(self._load_system_config)
        file_menu.addAction(self.load_config_action)

        self.load_program_action = QAction("Load Program...", self)
        self.load_program_action.setShortcut("Ctrl+O")
        self.load_program_action.triggered.connect(self._load_program_file)
        file_menu.addAction(self.load_program_action)

    # @intent:responsibility 実行制御用のツールバーを作成します。
    def _create_toolbar(self):
        toolbar = QToolBar("Main Toolbar")
        self.addToolBar(toolbar)

        self.run_action = QAction("Run", self)
        self.run_action.triggered.connect(self._run_debugger)
        toolbar.addAction(self.run_action)

        self.stop_action = QAction("Stop", self)
        self.stop_action.triggered.connect(self._stop_debugger)
        toolbar.addAction(self.stop_action)

        self.step_action = QAction("Step", self)
        self.step_action.triggered.connect(self._step_debugger)
        toolbar.addAction(self.step_action)

        self.step_back_action = QAction("Step Back", self)
        self.step_back_action.triggered.connect(self._step_back_debugger)
        toolbar.addAction(self.step_back_action)

        self.reset_action = QAction("Reset", self)
        self.reset_action.triggered.connect(self._reset_cpu)
        toolbar.addAction(self.reset_action)

    def _create_docks(self):
        status_dock = QDockWidget("Registers", self)
        status_dock.setWidget(self.register_view)
        self.addDockWidget(Qt.RightDockWidgetArea, status_dock)

        flag_dock = QDockWidget("Flags", self)
        flag_dock.setWidget(self.flag_view)
        self.addDockWidget(Qt.RightDockWidgetArea, flag_dock)

        console_dock = QDockWidget("Console", self)
        console_dock.setWidget(self.console_view)
        self.addDockWidget(Qt.BottomDockWidgetArea, console_dock)

    # @intent:responsibility 実行状態に応じてUIコンポーネントの有効/無効を切り替えます。
    def _update_ui_state(self, is_running: bool):
        self.load_config_action.setEnabled(not is_running)
        self.load_program_action.setEnabled(not is_running)
        self.run_action.setEnabled(not is_running)
        self.step_action.setEnabled(not is_running)
        self.step_back_action.setEnabled(not is_running)
        self.reset_action.setEnabled(not is_running)
        self.stop_action.setEnabled(is_running)

    def _refresh_views(self):
        self.register_view.update_registers()
        self.flag_view.update_flags()

    @Slot()
    def _run_debugger(self):
        self._update_ui_state(True)
        self.status_label.setText("Running...")
        self.debugger_thread.single_step = False
        self.debugger_thread.start()

    @Slot()
    def _stop_debugger(self):
        self.status_label.setText("Stopping...")
        self.debugger.stop()

    @Slot()
    def _step_debugger(self):
        self._update_ui_state(True)
        self.debugger_thread.single_step = True
        self.debugger_thread.start()

    @Slot()
    def _step_back_debugger(self):
        self.debugger.step_back()
        snapshot = self.debugger.get_last_snapshot()
        self.status_label.setText(snapshot.metadata.symbol_info if snapshot else "Start of history")
        self._refresh_views()

    @Slot()
    def _reset_cpu(self):
        SystemBuilder().apply_initial_state(self.cpu, self.config.initial_state)
        self.debugger = Debugger(self.cpu)
        self.debugger_thread.debugger = self.debugger
        self.status_label.setText("Reset")
        self._refresh_views()

    @Slot(object)
    def _on_execution_stopped(self, snapshot: Optional[Snapshot]):
        self._update_ui_state(False)
        if snapshot is not None:
            state = "HALTED" if not self.cpu.is_running() else "STOPPED"
            self.status_label.setText(f"{state}  {snapshot.metadata.symbol_info}")
        self._refresh_views()

    @Slot(str)
    def _on_execution_failed(self, message: str):
        self._update_ui_state(False)
        self.status_label.setText("Machine fault")
        self._refresh_views()
        QMessageBox.critical(self, "Machine fault", message)

    @Slot()
    def _load_program_file(self):
        file_name, _ = QFileDialog.getOpenFileName(
            self, "Open Program", "", "Programs (*.bin *.hex *.ihx);;All Files (*)"
        )
        if not file_name:
            return
        fmt = "hex" if file_name.lower().endswith((".hex", ".ihx")) else "bin"
        try:
            self._load_program(ProgramConfig(path=file_name, format=fmt, address=0))
        except (OSError, ValueError, OutOfBoundsError) as e:
            QMessageBox.critical(self, "Error", f"Failed to load program: {e}")
            return
        self._reset_cpu()
        self.status_label.setText(f"Loaded {file_name}")

    @Slot()
    def _load_system_config(self):
        file_name, _ = QFileDialog.getOpenFileName(
            self, "Open System Config", "", "YAML Files (*.yaml *.yml);;All Files (*)"
        )
        if not file_name:
            return
        try:
            self._setup_backend(ConfigLoader().load_from_file(file_name))
        except (OSError, ValueError, OutOfBoundsError) as e:
            QMessageBox.critical(self, "Error", f"Failed to load system config: {e}")
            return
        self.status_label.setText(f"Loaded system config from {file_name}")

    def _set_dark_theme(self):
        dark_palette = QPalette()
        dark_palette.setColor(QPalette.Window, QColor(29, 29, 29))
        dark_palette.setColor(QPalette.WindowText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Base, QColor(30, 30, 30))
        dark_palette.setColor(QPalette.Text, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Button, QColor(53, 53, 53))
        dark_palette.setColor(QPalette.ButtonText, QColor(224, 224, 224))
        dark_palette.setColor(QPalette.Highlight, QColor(42, 130, 218))
        QApplication.setPalette(dark_palette)

        self.setStyleSheet(f"""
            QWidget {{ font-family: '{get_monospace_font_family()}', monospace; font-size: 10pt; }}
            QMainWindow, QToolBar {{ background-color: #1D1D1D; border: none; }}
            QDockWidget::title {{ text-align: left; background: #101010; padding: 4px; font-weight: bold; }}
        """)

    # @intent:responsibility ウィンドウ終了時にワーカースレッドを停止し、ディスクイメージを閉じます。
    def closeEvent(self, event: QCloseEvent):
        if self.debugger_thread is not None and self.debugger_thread.isRunning():
            self.debugger.stop()
            # IN命令で待機している場合に備えて入力待ちを解放する
            self.console_view.input_channel.close()
            self.debugger_thread.wait()
        if self.disk is not None:
            self.disk.close()
        event.accept()

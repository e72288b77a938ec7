# src/nb8_tracer/ui/app.py
"""
PySide6アプリケーションのエントリポイント。
アプリケーションを初期化し、メインウィンドウを起動します。
"""
import sys
from typing import Optional

from PySide6.QtWidgets import QApplication
from .main_window import MainWindow

def main(config_path: Optional[str] = None) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    main_win = MainWindow(config_path=config_path)
    main_win.show()
    return app.exec()

if __name__ == '__main__':
    sys.exit(main())

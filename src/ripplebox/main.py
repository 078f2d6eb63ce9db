import logging
import sys

from PySide6.QtWidgets import QApplication

from ripplebox.logging_config import setup_logging
from ripplebox.ui.main_window import RippleBoxWindow


def main():
    setup_logging(logging.INFO)

    app = QApplication(sys.argv)
    app.setStyle('Fusion')

    # Optional first argument: background image for the refraction view
    background_path = sys.argv[1] if len(sys.argv) > 1 else None
    window = RippleBoxWindow(background_path=background_path)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()

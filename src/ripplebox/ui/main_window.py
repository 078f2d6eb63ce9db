import logging
import time

import numpy as np
from PySide6.QtWidgets import (QMainWindow, QLabel, QVBoxLayout, QHBoxLayout, QWidget,
                               QPushButton, QComboBox, QCheckBox, QGroupBox, QFormLayout,
                               QFileDialog, QSizePolicy)
from PySide6.QtGui import QImage, QPainter
from PySide6.QtCore import Qt, QTimer, QRect, Signal, Slot

from ripplebox.core.config import ConfigManager, EdgeMode
from ripplebox.core.simulation import WaveSimulation
from ripplebox.core.state import BrushState, FrameInput
from ripplebox.modules.background import load_background

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 16


class FrameView(QWidget):
    """Shows an RGBA frame scaled to fit, and reports the mouse in image space."""
    # pressed, x, y with x, y as fractions of the image (may leave 0..1)
    brush_changed = Signal(bool, float, float)

    def __init__(self, placeholder="Awaiting Frames..."):
        super().__init__()
        self.image = None
        self.placeholder = placeholder
        self._target = QRect()
        self.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Ignored)
        self.setMinimumSize(160, 80)
        self.setStyleSheet("background-color: #111; border: 1px solid #444;")

    def set_frame(self, frame):
        frame = np.ascontiguousarray(frame)
        h, w, ch = frame.shape
        img = QImage(frame.data, w, h, ch * w, QImage.Format_RGBA8888)
        self.image = img.copy()
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        if self.image is None:
            painter.setPen(Qt.white)
            painter.drawText(self.rect(), Qt.AlignCenter, self.placeholder)
            return
        scaled = self.image.scaled(self.width(), self.height(), Qt.KeepAspectRatio,
                                   Qt.SmoothTransformation)
        x = (self.width() - scaled.width()) // 2
        y = (self.height() - scaled.height()) // 2
        self._target = QRect(x, y, scaled.width(), scaled.height())
        painter.drawImage(x, y, scaled)

    def _emit_brush(self, event):
        pressed = bool(event.buttons() & Qt.LeftButton)
        if self._target.isEmpty():
            self.brush_changed.emit(pressed, -1.0, -1.0)
            return
        pos = event.position()
        fx = (pos.x() - self._target.x()) / self._target.width()
        fy = (pos.y() - self._target.y()) / self._target.height()
        self.brush_changed.emit(pressed, fx, fy)

    # Touch input reaches these as synthesized mouse events
    def mousePressEvent(self, event):
        self._emit_brush(event)

    def mouseMoveEvent(self, event):
        self._emit_brush(event)

    def mouseReleaseEvent(self, event):
        self._emit_brush(event)


class RippleBoxWindow(QMainWindow):
    def __init__(self, config_manager=None, background_path=None):
        super().__init__()
        self.setWindowTitle("RippleBox")
        self.resize(1200, 800)
        self.setStyleSheet("QMainWindow { background-color: #333; color: #ccc; }")

        self.config_manager = config_manager if config_manager is not None else ConfigManager()
        self.sim = WaveSimulation(self.config_manager.load())
        self.brush = BrushState()
        self.last_tick = None

        self.init_ui()

        if background_path:
            self.load_background_file(background_path)

        self.timer = QTimer(self)
        self.timer.timeout.connect(self.update_frame)
        self.timer.start(FRAME_INTERVAL_MS)

    def init_ui(self):
        main_layout = QHBoxLayout()
        main_layout.setContentsMargins(0, 0, 0, 0)

        sidebar = QWidget()
        sidebar.setFixedWidth(260)
        side_layout = QVBoxLayout(sidebar)

        # --- Boundary ---
        gb_boundary = QGroupBox("Boundary")
        form = QFormLayout()
        self.edge_combos = {}
        for edge, mode in self.sim.boundary.edges().items():
            combo = QComboBox()
            combo.addItems([m.value for m in EdgeMode])
            combo.setCurrentText(mode.value)
            combo.currentTextChanged.connect(lambda text, e=edge: self.set_edge_mode(e, text))
            form.addRow(edge.capitalize(), combo)
            self.edge_combos[edge] = combo

        self.chk_circle = QCheckBox("Circular Border")
        self.chk_circle.setChecked(self.sim.boundary.circular)
        self.chk_circle.toggled.connect(self.set_circular)
        form.addRow(self.chk_circle)
        gb_boundary.setLayout(form)

        # --- Forcing & visuals ---
        self.chk_rain = QCheckBox("Enable Rain")
        self.chk_rain.setChecked(self.sim.rain_enabled)
        self.chk_rain.toggled.connect(self.sim.set_rain)

        self.cmap_combo = QComboBox()
        self.cmap_combo.addItems(self.sim.renderer.cmap_manager.get_names())
        self.cmap_combo.currentTextChanged.connect(self.sim.renderer.cmap_manager.set_map_by_name)

        self.bg_btn = QPushButton("Load Background")
        self.bg_btn.clicked.connect(self.choose_background)

        btn_calm = QPushButton("Calm Water")
        btn_calm.clicked.connect(self.sim.reset)

        btn_save = QPushButton("Save Settings")
        btn_save.clicked.connect(self.save_settings)

        side_layout.addWidget(gb_boundary)
        side_layout.addWidget(self.chk_rain)
        side_layout.addWidget(QLabel("Colour Map"))
        side_layout.addWidget(self.cmap_combo)
        side_layout.addSpacing(20)
        side_layout.addWidget(self.bg_btn)
        side_layout.addWidget(btn_calm)
        side_layout.addWidget(btn_save)
        side_layout.addStretch()

        # --- Views ---
        self.height_view = FrameView()
        self.refraction_view = FrameView("Load a background to see refraction")
        self.slice_view = FrameView()
        self.height_view.brush_changed.connect(self.update_brush)
        self.refraction_view.brush_changed.connect(self.update_brush)

        views = QVBoxLayout()
        top_row = QHBoxLayout()
        top_row.addWidget(self.height_view, 1)
        top_row.addWidget(self.refraction_view, 1)
        views.addLayout(top_row, 3)
        views.addWidget(self.slice_view, 1)

        main_layout.addWidget(sidebar)
        main_layout.addLayout(views, 1)

        container = QWidget()
        container.setLayout(main_layout)
        self.setCentralWidget(container)

    def set_edge_mode(self, edge, text):
        setattr(self.sim.boundary, edge, EdgeMode(text))

    def set_circular(self, enabled):
        self.sim.boundary.circular = enabled

    @Slot(bool, float, float)
    def update_brush(self, pressed, fx, fy):
        self.brush.pressed = pressed
        if pressed:
            self.brush.x = fx * self.sim.config.width
            self.brush.y = fy * self.sim.config.height

    def choose_background(self):
        fname, _ = QFileDialog.getOpenFileName(self, "Open Background", "",
                                               "Images (*.png *.jpg *.jpeg *.bmp)")
        if fname:
            self.load_background_file(fname)

    def load_background_file(self, path):
        config = self.sim.config
        try:
            background = load_background(path, config.grid_size, config.refraction_size)
        except FileNotFoundError as e:
            logger.error(str(e))
            return
        self.sim.set_background(background)
        self.bg_btn.setEnabled(False)

    def save_settings(self):
        self.config_manager.save(self.sim.config)

    @Slot()
    def update_frame(self):
        now = time.perf_counter()
        elapsed = None if self.last_tick is None else now - self.last_tick
        self.last_tick = now

        frame = self.sim.advance(FrameInput(brush=self.brush, elapsed=elapsed))

        self.height_view.set_frame(frame.height_map)
        self.slice_view.set_frame(frame.cross_section)
        if frame.refraction is not None:
            self.refraction_view.set_frame(frame.refraction)

    def closeEvent(self, event):
        self.timer.stop()
        logger.info("Closing RippleBox...")
        super().closeEvent(event)

import sys
import argparse
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from PySide6.QtWidgets import (
    QApplication,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QFormLayout,
    QGroupBox,
    QPushButton,
    QDoubleSpinBox,
    QCheckBox,
    QComboBox,
    QLineEdit,
    QLabel,
    QFileDialog,
    QMessageBox,
    QSizePolicy,
)
from PySide6.QtGui import QColor, QPainter
from PySide6.QtCore import QPointF, Qt

import localisation
import spirotrace_math as sm
from color_resolver import is_valid_color_string, normalize_color_string
from drawing import apply_view_transform, draw_guide_overlay
from frame_scheduler import QtFrameTicker
from guide_geometry import SHAPE_TYPES, guide_from_spec
from localisation import tr
from spirotrace_config import (
    DEFAULT_BACKGROUND,
    DEFAULT_CONFIG,
    DEFAULT_INK,
    DEFAULT_SETTINGS,
    GRADIENT_PRESETS,
    SHAPE_DEFAULTS,
    AnimationSettings,
    GradientSpec,
    RouletteConfig,
)
from surfaces import ImageSurface, render_full_trace
from trace_animator import OverlayFrame, OverlaySink, TraceAnimator
from view_transform import ViewTransform

_LOGGER = logging.getLogger(__name__)

SHAPE_ORDER = ["circle", "square", "star", "hexagon", "ellipse"]

# (champ, clé de libellé, min, max, pas)
SHAPE_PARAM_FIELDS: Dict[str, List[Tuple[str, str, float, float, float]]] = {
    "circle": [("radius", "label_radius", 50, 300, 10)],
    "square": [
        ("edge_length", "label_edge_length", 50, 300, 10),
        ("corner_radius", "label_corner_radius", 0, 50, 5),
    ],
    "star": [
        ("outer_radius", "label_outer_radius", 100, 300, 10),
        ("inner_radius", "label_inner_radius", 50, 150, 10),
        ("point_count", "label_points", 3, 12, 1),
    ],
    "hexagon": [
        ("side_length", "label_side_length", 50, 400, 10),
        ("corner_radius", "label_corner_radius", 0, 50, 5),
    ],
    "ellipse": [
        ("major_axis", "label_major_axis", 100, 400, 10),
        ("minor_axis", "label_minor_axis", 50, 300, 10),
        ("rotation_degrees", "label_rotation", 0, 360, 1),
    ],
}


def export_file_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"spirograph-{now.strftime('%Y-%m-%dT%H-%M-%S')}.png"


class SpiroCanvas(QWidget, OverlaySink):
    """
    Zone de dessin : couche de tracé persistante (QImage) + surcouche
    éphémère (guide, roue, stylo) redessinée à chaque paintEvent, avec
    la même transformation de vue pour les deux.
    """

    def __init__(
        self,
        config: RouletteConfig = DEFAULT_CONFIG,
        settings: AnimationSettings = DEFAULT_SETTINGS,
        parent=None,
    ):
        super().__init__(parent)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(300, 300)
        self.setCursor(Qt.OpenHandCursor)

        self.surface = ImageSurface()
        self.view = ViewTransform(settings=settings)
        self._overlay: Optional[OverlayFrame] = None
        self.ticker = QtFrameTicker(self, settings.frame_interval_ms)
        self.animator = TraceAnimator(
            config,
            self.surface,
            self.ticker,
            overlay=self,
            settings=settings,
        )

    @property
    def config(self) -> RouletteConfig:
        return self.animator.config

    # ----- Commandes -----

    def set_config(self, config: RouletteConfig):
        self.animator.set_config(config)
        self.update()

    def set_playing(self, playing: bool):
        self.animator.set_playing(playing)

    def clear(self):
        self.animator.clear()
        self.update()

    def reset_view(self):
        self.view.reset()
        self.update()

    def export_image(self):
        return self.surface.export_image(self.config.background_color)

    def teardown(self):
        self.animator.teardown()

    def show_overlay(self, frame: OverlayFrame) -> None:
        self._overlay = frame
        self.update()

    # ----- Événements Qt -----

    def resizeEvent(self, event):  # noqa: N802 - signature imposée par Qt
        super().resizeEvent(event)
        self.surface.resize(self.width(), self.height())

    def paintEvent(self, event):  # noqa: N802 - signature imposée par Qt
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing, True)
            bg = normalize_color_string(self.config.background_color) or DEFAULT_BACKGROUND
            painter.fillRect(self.rect(), QColor(bg))
            apply_view_transform(painter, self.width(), self.height(), self.view)
            image = self.surface.image
            if image is not None:
                painter.drawImage(QPointF(-image.width() / 2.0, -image.height() / 2.0), image)
            draw_guide_overlay(painter, self._overlay)
        finally:
            painter.end()

    def mousePressEvent(self, event):  # noqa: N802
        if event.button() == Qt.LeftButton:
            pos = event.position()
            self.view.begin_drag(pos.x(), pos.y())
            self.setCursor(Qt.ClosedHandCursor)

    def mouseMoveEvent(self, event):  # noqa: N802
        if not self.view.dragging:
            return
        pos = event.position()
        self.view.drag_to(pos.x(), pos.y())
        self.update()

    def mouseReleaseEvent(self, event):  # noqa: N802
        self.view.end_drag()
        self.setCursor(Qt.OpenHandCursor)

    def leaveEvent(self, event):  # noqa: N802
        self.view.end_drag()
        self.setCursor(Qt.OpenHandCursor)
        super().leaveEvent(event)

    def wheelEvent(self, event):  # noqa: N802
        # Molette vers soi (delta Qt négatif) = dézoom.
        pos = event.position()
        self.view.zoom(
            -event.angleDelta().y(),
            anchor=(pos.x(), pos.y()),
            size=(self.width(), self.height()),
        )
        _LOGGER.debug("Zoom level: %.3f", self.view.scale)
        self.update()
        event.accept()


class SpiroWindow(QWidget):
    def __init__(self, config: RouletteConfig = DEFAULT_CONFIG, language: str = "en"):
        super().__init__()
        self.language = localisation.resolve_language(language)
        self.config = config
        self._param_spins: Dict[str, QDoubleSpinBox] = {}

        main_layout = QHBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)

        self.canvas = SpiroCanvas(config)
        main_layout.addWidget(self.canvas, stretch=1)

        panel = QWidget()
        panel.setFixedWidth(360)
        panel_layout = QVBoxLayout(panel)
        main_layout.addWidget(panel)

        # ----- Forme guide -----
        self.guide_box = QGroupBox()
        self.guide_form = QFormLayout(self.guide_box)
        self.shape_combo = QComboBox()
        for shape_type in SHAPE_ORDER:
            self.shape_combo.addItem(shape_type, shape_type)
        self.shape_combo.setCurrentIndex(max(0, SHAPE_ORDER.index(config.guide.shape_type)))
        self.shape_combo.currentIndexChanged.connect(self._on_shape_type_changed)
        self.shape_label = QLabel()
        self.guide_form.addRow(self.shape_label, self.shape_combo)
        panel_layout.addWidget(self.guide_box)

        # ----- Roue mobile -----
        self.wheel_box = QGroupBox()
        wheel_form = QFormLayout(self.wheel_box)
        self.moving_spin = self._spin(10, 100, 1, config.moving_radius)
        self.pen_spin = self._spin(0, 150, 1, config.pen_distance)
        self.speed_spin = self._spin(0.1, 10.0, 0.1, config.angular_speed, decimals=2)
        self.moving_spin.valueChanged.connect(lambda v: self._update_config(moving_radius=v))
        self.pen_spin.valueChanged.connect(lambda v: self._update_config(pen_distance=v))
        self.speed_spin.valueChanged.connect(lambda v: self._update_config(angular_speed=v))
        self.moving_label = QLabel()
        self.pen_label = QLabel()
        self.speed_label = QLabel()
        wheel_form.addRow(self.moving_label, self.moving_spin)
        wheel_form.addRow(self.pen_label, self.pen_spin)
        wheel_form.addRow(self.speed_label, self.speed_spin)
        panel_layout.addWidget(self.wheel_box)

        # ----- Style -----
        self.style_box = QGroupBox()
        style_form = QFormLayout(self.style_box)
        self.width_spin = self._spin(1, 10, 0.5, config.stroke_width, decimals=1)
        self.width_spin.valueChanged.connect(lambda v: self._update_config(stroke_width=v))
        self.color_edit = QLineEdit(config.color if isinstance(config.color, str) else DEFAULT_INK)
        self.color_edit.editingFinished.connect(self._on_color_edited)
        self.gradient_combo = QComboBox()
        self.gradient_combo.currentIndexChanged.connect(self._on_gradient_changed)
        self.guides_check = QCheckBox()
        self.guides_check.setChecked(True)
        self.guides_check.toggled.connect(self.canvas.animator.set_show_guides)
        self.width_label = QLabel()
        self.color_label = QLabel()
        self.gradient_label = QLabel()
        style_form.addRow(self.width_label, self.width_spin)
        style_form.addRow(self.color_label, self.color_edit)
        style_form.addRow(self.gradient_label, self.gradient_combo)
        style_form.addRow(self.guides_check)
        panel_layout.addWidget(self.style_box)

        # ----- Langue -----
        lang_row = QHBoxLayout()
        self.lang_label = QLabel()
        self.lang_combo = QComboBox()
        for code in localisation.available_languages():
            self.lang_combo.addItem(localisation.language_display_name(code), code)
        idx = self.lang_combo.findData(self.language)
        if idx >= 0:
            self.lang_combo.setCurrentIndex(idx)
        self.lang_combo.currentIndexChanged.connect(
            lambda _i: self.set_language(self.lang_combo.currentData())
        )
        lang_row.addWidget(self.lang_label)
        lang_row.addWidget(self.lang_combo, stretch=1)
        panel_layout.addLayout(lang_row)

        # ----- Boutons -----
        btn_row = QHBoxLayout()
        self.play_btn = QPushButton()
        self.clear_btn = QPushButton()
        self.view_btn = QPushButton()
        self.export_btn = QPushButton()
        self.play_btn.clicked.connect(self._toggle_animation)
        self.clear_btn.clicked.connect(self.canvas.clear)
        self.view_btn.clicked.connect(self.canvas.reset_view)
        self.export_btn.clicked.connect(self.export_png)
        for btn in (self.play_btn, self.clear_btn, self.view_btn, self.export_btn):
            btn_row.addWidget(btn)
        panel_layout.addLayout(btn_row)
        panel_layout.addStretch(1)

        self._rebuild_shape_params()
        self._refresh_texts()

    @staticmethod
    def _spin(lo: float, hi: float, step: float, value: float, decimals: int = 0) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setRange(lo, hi)
        spin.setSingleStep(step)
        spin.setDecimals(decimals)
        spin.setValue(value)
        return spin

    # ----- Paramètres -----

    def _update_config(self, **changes):
        self.config = self.config.with_changes(**changes)
        self.canvas.set_config(self.config)

    def _on_shape_type_changed(self, _index: int):
        shape_type = self.shape_combo.currentData()
        self._update_config(guide=SHAPE_DEFAULTS.get(shape_type) or guide_from_spec(shape_type))
        self._rebuild_shape_params()
        self._refresh_texts()

    def _rebuild_shape_params(self):
        while self.guide_form.rowCount() > 1:
            self.guide_form.removeRow(1)
        self._param_spins.clear()
        guide = self.config.guide
        for name, label_key, lo, hi, step in SHAPE_PARAM_FIELDS.get(guide.shape_type, []):
            spin = self._spin(lo, hi, step, float(getattr(guide, name)))
            spin.valueChanged.connect(lambda _v: self._on_shape_param_changed())
            self.guide_form.addRow(QLabel(tr(self.language, label_key)), spin)
            self._param_spins[name] = spin

    def _on_shape_param_changed(self):
        params = {name: spin.value() for name, spin in self._param_spins.items()}
        self._update_config(guide=guide_from_spec(self.config.guide.shape_type, params))

    def _on_color_edited(self):
        text = self.color_edit.text()
        if not is_valid_color_string(text):
            self.color_edit.setStyleSheet("color: #f50057;")
            return
        self.color_edit.setStyleSheet("")
        self.gradient_combo.blockSignals(True)
        self.gradient_combo.setCurrentIndex(0)
        self.gradient_combo.blockSignals(False)
        self._update_config(color=normalize_color_string(text))

    def _on_gradient_changed(self, index: int):
        if index <= 0:
            self._on_color_edited()
            return
        preset: GradientSpec = GRADIENT_PRESETS[index - 1]
        self._update_config(color=preset)

    # ----- Animation -----

    def _toggle_animation(self):
        self.canvas.animator.toggle()
        self._refresh_texts()

    def set_language(self, lang: str):
        self.language = localisation.resolve_language(lang)
        self._rebuild_shape_params()
        self._refresh_texts()

    def _refresh_texts(self):
        lang = self.language
        self.setWindowTitle(tr(lang, "window_title"))
        self.guide_box.setTitle(tr(lang, "group_guide"))
        self.wheel_box.setTitle(tr(lang, "group_wheel"))
        self.style_box.setTitle(tr(lang, "group_style"))
        self.shape_label.setText(tr(lang, "label_shape"))
        for i, shape_type in enumerate(SHAPE_ORDER):
            self.shape_combo.setItemText(i, localisation.shape_label(shape_type, lang))
        self.moving_label.setText(tr(lang, "label_moving_radius"))
        self.pen_label.setText(tr(lang, "label_pen_distance"))
        self.speed_label.setText(tr(lang, "label_speed"))
        self.width_label.setText(tr(lang, "label_line_width"))
        self.color_label.setText(tr(lang, "label_color"))
        self.gradient_label.setText(tr(lang, "label_gradient"))
        self.lang_label.setText(tr(lang, "label_language"))

        current = self.gradient_combo.currentIndex()
        self.gradient_combo.blockSignals(True)
        self.gradient_combo.clear()
        self.gradient_combo.addItem(tr(lang, "gradient_solid"))
        for i in range(len(GRADIENT_PRESETS)):
            self.gradient_combo.addItem(f"{tr(lang, 'gradient_preset')} {i + 1}")
        self.gradient_combo.setCurrentIndex(max(0, current))
        self.gradient_combo.blockSignals(False)

        self.guides_check.setText(tr(lang, "show_guides"))
        start_key = "anim_pause" if self.canvas.animator.running else "anim_start"
        self.play_btn.setText(tr(lang, start_key))
        self.clear_btn.setText(tr(lang, "btn_clear"))
        self.view_btn.setText(tr(lang, "btn_reset_view"))
        self.export_btn.setText(tr(lang, "btn_export"))

    # ----- Export -----

    def export_png(self):
        image = self.canvas.export_image()
        if image is None:
            return
        filename, _ = QFileDialog.getSaveFileName(
            self,
            tr(self.language, "export_dialog_title"),
            export_file_name(),
            "PNG (*.png)",
        )
        if not filename:
            return
        if not image.save(filename, "PNG"):
            QMessageBox.critical(
                self, tr(self.language, "error_title"), tr(self.language, "export_failed")
            )

    def closeEvent(self, event):  # noqa: N802
        try:
            self.canvas.teardown()
        finally:
            super().closeEvent(event)


# ---------- Ligne de commande ----------


def _parse_param(text: str) -> Tuple[str, float]:
    key, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    try:
        return key.strip(), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Animated spirograph (roulette curve) drawing.")
    parser.add_argument("--render", metavar="PNG", help="Render the full curve to a PNG file and exit.")
    parser.add_argument("--shape", default="circle", help=f"Guide shape ({', '.join(SHAPE_ORDER)}).")
    parser.add_argument(
        "--param",
        action="append",
        type=_parse_param,
        default=[],
        metavar="KEY=VALUE",
        help="Guide shape parameter, e.g. radius=150 or corner_radius=20.",
    )
    parser.add_argument("--moving-radius", type=float, default=DEFAULT_CONFIG.moving_radius)
    parser.add_argument("--pen-distance", type=float, default=DEFAULT_CONFIG.pen_distance)
    parser.add_argument("--speed", type=float, default=DEFAULT_CONFIG.angular_speed)
    parser.add_argument("--stroke-width", type=float, default=DEFAULT_CONFIG.stroke_width)
    parser.add_argument("--color", default=DEFAULT_INK)
    parser.add_argument("--gradient", type=int, help=f"Gradient preset 1..{len(GRADIENT_PRESETS)}.")
    parser.add_argument("--background", default=DEFAULT_BACKGROUND)
    parser.add_argument("--width", type=int, default=1000)
    parser.add_argument("--height", type=int, default=1000)
    parser.add_argument("--turns", type=float, help="Guide turns to render (default: until closed).")
    parser.add_argument(
        "--backend",
        default=sm.get_backend_name(),
        help=f"Math backend ({', '.join(b.name for b in sm.list_backends())}).",
    )
    parser.add_argument("--lang", default="en")
    parser.add_argument("--log-level", default="WARNING")
    return parser


def config_from_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> RouletteConfig:
    if args.shape.strip().lower() in SHAPE_TYPES:
        guide = guide_from_spec(args.shape, dict(args.param))
    else:
        guide = guide_from_spec(args.shape, {}, fallback_radius=DEFAULT_SETTINGS.fallback_radius)
    if args.gradient is not None:
        if not 1 <= args.gradient <= len(GRADIENT_PRESETS):
            parser.error(f"--gradient must be between 1 and {len(GRADIENT_PRESETS)}")
        color = GRADIENT_PRESETS[args.gradient - 1]
    else:
        if not is_valid_color_string(args.color):
            parser.error(f"invalid color: {args.color!r}")
        color = normalize_color_string(args.color)
    if not is_valid_color_string(args.background):
        parser.error(f"invalid background color: {args.background!r}")
    return RouletteConfig(
        guide=guide,
        moving_radius=args.moving_radius,
        pen_distance=args.pen_distance,
        angular_speed=args.speed,
        stroke_width=args.stroke_width,
        color=color,
        background_color=normalize_color_string(args.background),
    )


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        sm.set_backend(args.backend)
    except ValueError as e:
        parser.error(str(e))
    config = config_from_args(parser, args)

    if args.render:
        surface = render_full_trace(config, args.width, args.height, turns=args.turns)
        if not surface.save_png(args.render, config.background_color):
            _LOGGER.error("Could not write %s", args.render)
            return 1
        return 0

    app = QApplication(sys.argv[:1])
    window = SpiroWindow(config, language=args.lang)
    window.resize(1280, 860)
    window.show()
    window.canvas.set_playing(True)
    window._refresh_texts()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())

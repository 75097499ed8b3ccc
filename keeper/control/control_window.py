# keeper/control/control_window.py
from __future__ import annotations

import dataclasses
from datetime import datetime
from pathlib import Path
from typing import Optional

from PyQt5 import QtCore, QtGui, QtWidgets
from PyQt5.QtCore import Qt

from ..config import TOOLTIPS, section
from ..diagnostics import warn
from ..errors import EmptyInputError, ExportError, KeeperError
from ..export import default_filename, record_gif, save_png
from ..parameters import EngineOptions
from ..session import MeditationSession, count_words, exceeds_word_limit, format_countdown
from ..view import KeeperViewWidget

FEATURE_LABELS = (
    ("parallax", "Parallax"),
    ("tilt3d", "3D tilt"),
    ("fold4d", "4D fold"),
    ("lissajous", "Lissajous"),
)


class ControlWindow(QtWidgets.QMainWindow):
    def __init__(self, app: QtWidgets.QApplication, session: MeditationSession):
        super().__init__(None)
        self.setWindowTitle("Intention Keeper")
        self.app = app
        self.session = session
        self._session_cfg = section(session.config, "session")
        self._apply_theme()

        toolbar = QtWidgets.QToolBar("Main")
        toolbar.setMovable(False)
        toolbar.setFloatable(False)
        toolbar.setIconSize(QtCore.QSize(18, 18))
        self.addToolBar(QtCore.Qt.TopToolBarArea, toolbar)
        style = self.style()

        act_quit = QtWidgets.QAction(style.standardIcon(QtWidgets.QStyle.SP_TitleBarCloseButton), "Quit", self)
        act_quit.setShortcut(QtGui.QKeySequence("Ctrl+Q"))
        act_quit.setShortcutContext(QtCore.Qt.ApplicationShortcut)
        act_quit.triggered.connect(app.quit)
        self.addAction(act_quit)
        toolbar.addAction(act_quit)
        toolbar.addSeparator()

        self.act_png = QtWidgets.QAction(style.standardIcon(QtWidgets.QStyle.SP_DialogSaveButton), "PNG", self)
        self.act_png.setShortcut(QtGui.QKeySequence("Ctrl+S"))
        self.act_png.setStatusTip("Save the current frame as PNG")
        self.act_png.triggered.connect(self.export_png)
        toolbar.addAction(self.act_png)

        self.act_gif = QtWidgets.QAction(style.standardIcon(QtWidgets.QStyle.SP_MediaPlay), "GIF", self)
        self.act_gif.setShortcut(QtGui.QKeySequence("Ctrl+Shift+S"))
        self.act_gif.setStatusTip("Record a short looping GIF")
        self.act_gif.triggered.connect(self.export_gif)
        toolbar.addAction(self.act_gif)

        self.act_mute = QtWidgets.QAction(style.standardIcon(QtWidgets.QStyle.SP_MediaVolume), "Mute", self)
        self.act_mute.setCheckable(True)
        self.act_mute.setShortcut(QtGui.QKeySequence("M"))
        self.act_mute.triggered.connect(self.toggle_mute)
        toolbar.addAction(self.act_mute)

        spacer = QtWidgets.QWidget()
        spacer.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Preferred)
        toolbar.addWidget(spacer)

        self.act_reset = QtWidgets.QAction(style.standardIcon(QtWidgets.QStyle.SP_DialogResetButton), "Reset", self)
        self.act_reset.setStatusTip("Stop the pattern and clear the canvas")
        self.act_reset.triggered.connect(self.reset_session)
        toolbar.addAction(self.act_reset)

        # view | panel
        self.view = KeeperViewWidget(session.controller, self)
        panel = QtWidgets.QWidget()
        panel.setMinimumWidth(320)
        lay = QtWidgets.QVBoxLayout(panel)

        lay.addWidget(QtWidgets.QLabel("Intention"))
        self.editor = QtWidgets.QPlainTextEdit()
        self.editor.setPlaceholderText("Write what you want to keep in mind…")
        self.editor.setMaximumHeight(120)
        self.editor.textChanged.connect(self._on_text_changed)
        lay.addWidget(self.editor)

        row = QtWidgets.QHBoxLayout()
        self.lbl_words = QtWidgets.QLabel("0 words")
        row.addWidget(self.lbl_words)
        row.addStretch(1)
        self.btn_generate = QtWidgets.QPushButton("Generate")
        self.btn_generate.setDefault(True)
        self.btn_generate.clicked.connect(self.generate)
        row.addWidget(self.btn_generate)
        lay.addLayout(row)

        box_style = QtWidgets.QGroupBox("Geometry")
        form = QtWidgets.QFormLayout(box_style)
        self.cb_style = QtWidgets.QComboBox()
        self.cb_style.addItems(["fixed", "evolving"])
        self.cb_style.setCurrentText(session.controller.options.style)
        self.cb_style.setToolTip(TOOLTIPS.get("animation.style", ""))
        self.cb_style.currentTextChanged.connect(self._apply_options)
        form.addRow("Style", self.cb_style)
        self.feature_boxes = {}
        features = section(session.config, "features")
        for key, label in FEATURE_LABELS:
            check = QtWidgets.QCheckBox(label)
            check.setChecked(bool(features.get(key, False)))
            check.setToolTip(TOOLTIPS.get(f"features.{key}", ""))
            check.toggled.connect(self._apply_options)
            self.feature_boxes[key] = check
            form.addRow(check)
        lay.addWidget(box_style)

        box_timer = QtWidgets.QGroupBox("Timer")
        timer_lay = QtWidgets.QVBoxLayout(box_timer)
        presets = QtWidgets.QHBoxLayout()
        for minutes in self._session_cfg.get("timerPresets", [5, 10, 15, 20, 30]):
            btn = QtWidgets.QPushButton(f"{minutes} min")
            btn.clicked.connect(lambda _checked=False, m=minutes: self.start_timer(m))
            presets.addWidget(btn)
        timer_lay.addLayout(presets)
        countdown_row = QtWidgets.QHBoxLayout()
        self.lbl_countdown = QtWidgets.QLabel(format_countdown(0))
        self.lbl_countdown.setAlignment(Qt.AlignCenter)
        font = self.lbl_countdown.font()
        font.setPointSize(font.pointSize() + 6)
        self.lbl_countdown.setFont(font)
        countdown_row.addWidget(self.lbl_countdown, 1)
        self.btn_cancel = QtWidgets.QPushButton("Cancel")
        self.btn_cancel.clicked.connect(self.session.cancel_timer)
        countdown_row.addWidget(self.btn_cancel)
        timer_lay.addLayout(countdown_row)
        lay.addWidget(box_timer)

        box_history = QtWidgets.QGroupBox("History")
        hist_lay = QtWidgets.QVBoxLayout(box_history)
        self.list_history = QtWidgets.QListWidget()
        self.list_history.itemDoubleClicked.connect(self._load_history_item)
        hist_lay.addWidget(self.list_history)
        hist_row = QtWidgets.QHBoxLayout()
        btn_delete = QtWidgets.QPushButton("Delete")
        btn_delete.clicked.connect(self.delete_history_item)
        btn_clear = QtWidgets.QPushButton("Clear")
        btn_clear.clicked.connect(self.clear_history)
        hist_row.addWidget(btn_delete)
        hist_row.addWidget(btn_clear)
        hist_lay.addLayout(hist_row)
        lay.addWidget(box_history, 1)

        splitter = QtWidgets.QSplitter(Qt.Horizontal)
        splitter.addWidget(self.view)
        splitter.addWidget(panel)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

        self.status = QtWidgets.QStatusBar()
        self.setStatusBar(self.status)

        session.countdownChanged.connect(self._on_countdown)
        session.sessionCompleted.connect(self._on_completed)
        session.warning.connect(lambda message: self.status.showMessage(message, 6000))
        session.audio.mutedChanged.connect(self.act_mute.setChecked)
        self.refresh_history()
        self._on_text_changed()

    # ------------------------------------------------------------------ theme
    def _apply_theme(self) -> None:
        self.setStyleSheet(
            """
            QMainWindow, QWidget { background: #10141c; color: #d7dde8; }
            QPlainTextEdit, QListWidget, QComboBox {
                background: #181e2a; border: 1px solid rgba(255,255,255,0.08); border-radius: 6px;
            }
            QPushButton {
                background: #1f2a3a; border: 1px solid rgba(255,255,255,0.1);
                border-radius: 8px; padding: 4px 10px;
            }
            QPushButton:hover { background: #2a3850; }
            QGroupBox { border: 1px solid rgba(255,255,255,0.08); border-radius: 8px; margin-top: 12px; }
            QGroupBox::title { subcontrol-origin: margin; left: 8px; }
            """
        )

    # ------------------------------------------------------------------ slots
    def _on_text_changed(self) -> None:
        text = self.editor.toPlainText()
        words = count_words(text)
        limit = self.session.word_limit
        over = exceeds_word_limit(text, limit)
        self.lbl_words.setText(f"{words} / {limit} words")
        self.lbl_words.setStyleSheet("color: #e74c3c;" if over else "color: #f39c12;")
        self.btn_generate.setEnabled(bool(text.strip()) and not over)

    def _options_from_widgets(self) -> EngineOptions:
        current = self.session.controller.options
        return dataclasses.replace(
            current,
            style=self.cb_style.currentText(),
            parallax=self.feature_boxes["parallax"].isChecked(),
            tilt_3d=self.feature_boxes["tilt3d"].isChecked(),
            fold_4d=self.feature_boxes["fold4d"].isChecked(),
            lissajous=self.feature_boxes["lissajous"].isChecked(),
        )

    def _apply_options(self, *_args) -> None:
        self.session.controller.set_options(self._options_from_widgets())

    def generate(self) -> None:
        try:
            pattern = self.session.generate(self.editor.toPlainText())
        except EmptyInputError as exc:
            self.status.showMessage(str(exc), 4000)
            return
        self.status.showMessage(f"{pattern.params.point_count} points · {pattern.params.ring_count} rings · {pattern.params.projection_name}")
        self.refresh_history()

    def start_timer(self, minutes: float) -> None:
        if not self.session.start_timer(minutes):
            self.status.showMessage("Generate a pattern before starting the timer", 4000)

    def _on_countdown(self, seconds: int) -> None:
        self.lbl_countdown.setText(format_countdown(seconds))

    def _on_completed(self) -> None:
        self.status.showMessage("Session complete")

    def toggle_mute(self) -> None:
        muted = self.session.toggle_mute()
        self.status.showMessage("Muted" if muted else "Sound on", 2000)

    def reset_session(self) -> None:
        self.session.reset()
        self.editor.clear()
        self.status.clearMessage()

    # ------------------------------------------------------------------ export
    def _ask_path(self, suffix: str, caption: str) -> Optional[Path]:
        name, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, caption, str(Path.home() / default_filename(suffix)), f"{suffix.upper()} (*.{suffix})"
        )
        return Path(name) if name else None

    def export_png(self) -> None:
        if self.session.pattern is None:
            self.status.showMessage("Nothing to export yet", 3000)
            return
        path = self._ask_path("png", "Save PNG")
        if path is None:
            return
        try:
            save_png(self.session.controller.surface.snapshot(), path)
        except ExportError as exc:
            warn(str(exc))
            self.status.showMessage(str(exc), 6000)
            return
        self.status.showMessage(f"Saved {path.name}", 4000)

    def export_gif(self) -> None:
        if self.session.pattern is None:
            self.status.showMessage("Nothing to export yet", 3000)
            return
        path = self._ask_path("gif", "Save GIF")
        if path is None:
            return
        self.status.showMessage("Recording GIF…")
        QtWidgets.QApplication.setOverrideCursor(Qt.WaitCursor)
        try:
            record_gif(
                self.session.controller,
                path,
                fps=int(self._session_cfg.get("gifFps", 20)),
                seconds=float(self._session_cfg.get("gifSeconds", 5)),
            )
        except KeeperError as exc:
            warn(str(exc))
            self.status.showMessage(str(exc), 6000)
            return
        finally:
            QtWidgets.QApplication.restoreOverrideCursor()
        self.status.showMessage(f"Saved {path.name}", 4000)

    # ------------------------------------------------------------------ history
    def refresh_history(self) -> None:
        self.list_history.clear()
        for entry in self.session.history.records():
            stamp = datetime.fromtimestamp(float(entry["timestamp"])).strftime("%Y-%m-%d %H:%M")
            item = QtWidgets.QListWidgetItem(f"{stamp}  {entry['text']}")
            item.setToolTip(str(entry["digest"]))
            item.setData(Qt.UserRole, entry["text"])
            self.list_history.addItem(item)

    def _load_history_item(self, item: QtWidgets.QListWidgetItem) -> None:
        self.editor.setPlainText(str(item.data(Qt.UserRole)))

    def delete_history_item(self) -> None:
        row = self.list_history.currentRow()
        if row < 0:
            return
        try:
            self.session.history.delete(row)
        except KeeperError as exc:
            self.status.showMessage(str(exc), 6000)
        self.refresh_history()

    def clear_history(self) -> None:
        reply = QtWidgets.QMessageBox.question(self, "Clear history", "Forget every saved intention?")
        if reply != QtWidgets.QMessageBox.Yes:
            return
        try:
            self.session.history.clear()
        except KeeperError as exc:
            self.status.showMessage(str(exc), 6000)
        self.refresh_history()

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.session.reset()
        super().closeEvent(event)

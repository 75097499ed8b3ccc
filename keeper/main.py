# -*- coding: utf-8 -*-
"""Application entry point.

``python -m keeper.main`` opens the control window. ``--render`` draws a
pattern offline (PNG, or GIF when the output ends in ``.gif``) and
``--headless`` only checks that the package imports and the engine renders.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, NoReturn, Optional


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    details = str(exc)
    message_lines = [
        "Cannot start Intention Keeper: importing PyQt5 failed.",
        "Check that PyQt5 is installed and that the system OpenGL libraries are present.",
    ]
    if "libGL.so.1" in details:
        message_lines.append("Hint: libGL.so.1 is missing. Install the Mesa/OpenGL packages for your system.")
    message_lines.append(f"Original error: {details}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtGui, QtWidgets
except ImportError as exc:  # pragma: no cover - environment dependent
    _handle_qt_import_error(exc)

from .animation import AnimationController
from .config import load_config, section
from .diagnostics import info, install_debug_silencer, warn
from .errors import KeeperError
from .export import record_gif, save_png
from .pattern import generate_pattern

ROOT = Path(__file__).resolve().parents[1]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="intention-keeper", description=__doc__.splitlines()[0])
    parser.add_argument("--headless", action="store_true", help="verify the engine without opening windows")
    parser.add_argument("--render", metavar="TEXT", help="render TEXT offline instead of opening the window")
    parser.add_argument("--out", metavar="PATH", default="intention-mandala.png", help="output file for --render")
    parser.add_argument("--frames", type=int, default=120, help="frames to advance before the PNG snapshot")
    parser.add_argument("--size", type=int, default=None, help="side of the square canvas in pixels")
    parser.add_argument("--style", choices=("fixed", "evolving"), default=None)
    parser.add_argument("--config", metavar="PATH", default=None, help="JSON file overriding the defaults")
    return parser


def _make_controller(cfg, size: Optional[int], style: Optional[str]) -> AnimationController:
    if style:
        cfg.setdefault("animation", {})["style"] = style
    side = int(size or section(cfg, "canvas").get("size", 600))
    return AnimationController(side, side, config=cfg)


def render_offline(text: str, out: Path, *, frames: int = 120, size: Optional[int] = None,
                   style: Optional[str] = None, cfg=None) -> Path:
    """Render ``text`` without a window. A ``.gif`` suffix records an animation."""

    cfg = cfg if cfg is not None else load_config()
    controller = _make_controller(cfg, size, style)
    controller.start(generate_pattern(text), run_timer=False)
    session_cfg = section(cfg, "session")
    if out.suffix.lower() == ".gif":
        return record_gif(
            controller,
            out,
            fps=int(session_cfg.get("gifFps", 20)),
            seconds=float(session_cfg.get("gifSeconds", 5)),
        )
    for _ in range(max(0, frames)):
        controller.tick()
    path = save_png(controller.surface.snapshot(), out)
    controller.stop()
    return path


def _verify_engine() -> None:
    controller = AnimationController(64, 64)
    controller.start(generate_pattern("headless check"), run_timer=False)
    controller.tick()
    controller.stop()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    install_debug_silencer()
    cfg = load_config(Path(args.config) if args.config else None)

    if args.headless or args.render:
        # fonts and images need a GUI application; keep it alive until we return
        app = QtCore.QCoreApplication.instance() or QtGui.QGuiApplication(sys.argv[:1])
        try:
            if args.render:
                path = render_offline(args.render, Path(args.out), frames=args.frames, size=args.size,
                                      style=args.style, cfg=cfg)
                info(f"wrote {path}")
            else:
                _verify_engine()
                info("headless check passed")
        except KeeperError as exc:
            warn(str(exc))
            return 1
        return 0

    def _write_unhandled(exc_type, exc_value, exc_tb):
        try:
            import traceback as _tb

            with (ROOT / "run_exception.txt").open("w", encoding="utf-8") as f:
                _tb.print_exception(exc_type, exc_value, exc_tb, file=f)
        except OSError:
            pass
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _write_unhandled
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication(sys.argv[:1])

    from .control import ControlWindow
    from .session import MeditationSession

    if args.style:
        cfg.setdefault("animation", {})["style"] = args.style
    if args.size:
        cfg.setdefault("canvas", {})["size"] = args.size
    session = MeditationSession(cfg)
    window = ControlWindow(app, session)
    window.resize(1200, 760)
    window.show()
    return app.exec_()


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()

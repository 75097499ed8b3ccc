from PIL import Image

from keeper.animation import AnimationController
from keeper.audio import AudioEngine
from keeper.history import IntentionHistory
from keeper.main import build_parser, main
from keeper.session import MeditationSession
from keeper.view import KeeperViewWidget
from keeper.view.view_widget import square_target
from tests.conftest import PEACE_TEXT


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert not args.headless
    assert args.render is None
    assert args.style is None


def test_render_writes_a_png(qapp, tmp_path, monkeypatch):
    monkeypatch.setenv("KEEPER_DEBUG", "1")
    out = tmp_path / "mandala.png"
    code = main(["--render", PEACE_TEXT, "--out", str(out), "--size", "120", "--frames", "3"])
    assert code == 0
    with Image.open(out) as image:
        assert image.size == (120, 120)


def test_headless_check(qapp, monkeypatch):
    monkeypatch.setenv("KEEPER_DEBUG", "1")
    assert main(["--headless"]) == 0


def test_blank_render_text_fails_cleanly(qapp, tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("KEEPER_DEBUG", "1")
    assert main(["--render", "   ", "--out", str(tmp_path / "x.png")]) == 1
    assert "[Keeper][WARN]" in capsys.readouterr().err


def test_square_target_centres_the_picture():
    assert square_target(800, 600) == (100, 0, 600)
    assert square_target(300, 500) == (0, 100, 300)


def test_view_factory_honours_forced_backend(qapp):
    controller = AnimationController(64, 64)
    widget = KeeperViewWidget(controller, force_backend="raster")
    assert widget.backend_name == "raster"
    assert widget.controller is controller


def test_control_window_generates_and_lists_history(qapp, config, tmp_path):
    from keeper.control import ControlWindow

    session = MeditationSession(
        config,
        controller=AnimationController(120, 120, config=config),
        audio=AudioEngine(config, sink=lambda data: None),
        history=IntentionHistory(tmp_path / "history.json"),
    )
    window = ControlWindow(qapp, session)
    assert not window.btn_generate.isEnabled()
    window.editor.setPlainText(PEACE_TEXT)
    assert window.btn_generate.isEnabled()
    window.generate()
    assert window.list_history.count() == 1
    window.feature_boxes["fold4d"].setChecked(True)
    assert session.controller.options.fold_4d
    window.cb_style.setCurrentText("evolving")
    assert session.controller.state.style == "evolving"
    window.reset_session()
    assert session.pattern is None
    window.close()

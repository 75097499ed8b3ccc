import json

from keeper.config import DEFAULTS, config_dir, default_config_path, load_config, section


def test_config_dir_follows_keeper_home(keeper_home):
    assert config_dir() == keeper_home
    assert default_config_path() == keeper_home / "config.json"


def test_missing_file_gives_defaults():
    cfg = load_config()
    assert cfg == DEFAULTS
    cfg["canvas"]["size"] = 1
    assert DEFAULTS["canvas"]["size"] == 600


def test_override_merges_per_section(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"audio": {"heartbeatHz": 6.0}, "features": {"fold4d": True}}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg["audio"]["heartbeatHz"] == 6.0
    assert cfg["audio"]["sampleRate"] == DEFAULTS["audio"]["sampleRate"]
    assert cfg["features"]["fold4d"] is True
    assert cfg["features"]["parallax"] is True


def test_unreadable_file_warns_and_falls_back(tmp_path, capsys):
    path = tmp_path / "config.json"
    path.write_text("[1, 2", encoding="utf-8")
    assert load_config(path) == DEFAULTS
    assert "Ignoring unreadable config" in capsys.readouterr().err


def test_section_falls_back_to_defaults():
    assert section({}, "audio") == DEFAULTS["audio"]
    assert section({"audio": "nonsense"}, "audio")["heartbeatHz"] == 7.83

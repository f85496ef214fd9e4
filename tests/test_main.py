import json
import logging
import shlex
import sys

import pytest

import main


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config(tmp_path, xdg_env, write_desktop):
    apps = tmp_path / "apps"
    write_desktop(apps, "org.example.Firefox", Name="Firefox", Exec="/nonexistent/bin/firefox")
    write_desktop(apps, "org.example.Python", Name="Python", Exec=f"{shlex.quote(sys.executable)} -c pass")
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "application_dirs": [str(apps)],
        "icon_theme": "hicolor",
        "log_level": "WARNING",
    }), encoding="utf-8")
    return path


def test_prints_ranked_matches(config, capsys):
    assert main.main(["firefx", "--config", str(config)]) == 0

    out = capsys.readouterr().out
    assert "Firefox" in out
    assert "[org.example.Firefox]" in out


def test_launches_top_match(config, capsys, xdg_env):
    assert main.main(["python", "--launch", "--config", str(config)]) == 0

    assert "Launched Python" in capsys.readouterr().out
    usage = json.loads((xdg_env.data_home / "launchdeck" / "usage.json").read_text(encoding="utf-8"))
    assert "org.example.Python" in usage["records"]


def test_failed_launch_exits_1(config, capsys):
    assert main.main(["firefox", "--launch", "--config", str(config)]) == 1
    assert "Launch failed" in capsys.readouterr().err


def test_no_applications_exits_1(tmp_path, xdg_env, capsys):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"application_dirs": [str(tmp_path / "empty")]}), encoding="utf-8")

    assert main.main(["--config", str(path)]) == 1
    assert "No applications found" in capsys.readouterr().err


def test_icons_flag_prints_icon_column(config, capsys):
    assert main.main(["python", "--icons", "--config", str(config)]) == 0
    assert "Python" in capsys.readouterr().out


def test_logs_go_to_stderr_and_log_file(config, capsys, xdg_env):
    settings = json.loads(config.read_text(encoding="utf-8"))
    settings["log_level"] = "INFO"
    config.write_text(json.dumps(settings), encoding="utf-8")

    assert main.main(["firefx", "--config", str(config)]) == 0

    captured = capsys.readouterr()
    assert "INFO - launchdeck.core - Rebuilding application index" in captured.err
    assert " - INFO - " not in captured.out
    assert captured.out.splitlines()[0].lstrip().startswith("1. Firefox")
    log_file = xdg_env.data_home / "launchdeck" / "logs" / "launchdeck.log"
    assert "Rebuilding application index" in log_file.read_text(encoding="utf-8")

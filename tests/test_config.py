from pathlib import Path

import pytest

from pollwatch.config import (
    ConfigError,
    DEFAULT_POLL_INTERVAL,
    load_config,
    merge_cli,
    parse_poll_interval,
)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "watch.yaml"
    path.write_text(text)
    return path


def test_load_full_config(tmp_path: Path):
    path = _write(
        tmp_path,
        "watch:\n"
        "  pattern: '*.c'\n"
        "  command: make %\n"
        "  poll_interval: 3\n"
        "  verbose: true\n",
    )
    assert load_config(path) == {
        "pattern": "*.c",
        "command": ["make", "%"],
        "poll_interval": 3,
        "verbose": True,
    }


def test_command_list_form(tmp_path: Path):
    path = _write(tmp_path, "watch:\n  command: [cat, '%']\n")
    assert load_config(path)["command"] == ["cat", "%"]


def test_empty_file_gives_no_defaults(tmp_path: Path):
    assert load_config(_write(tmp_path, "")) == {}


@pytest.mark.parametrize(
    "text,message",
    [
        ("- a\n- b\n", "root must be a mapping"),
        ("watch: 3\n", "'watch' section must be a mapping"),
        ("watch:\n  poll_interval: 0\n", "watch.poll_interval"),
        ("watch:\n  poll_interval: 1.5\n", "watch.poll_interval"),
        ("watch:\n  verbose: yes please\n", "watch.verbose"),
        ("watch:\n  command: []\n", "watch.command"),
        ("watch:\n  pattern: ''\n", "watch.pattern"),
        ("watch: [unclosed\n", "Failed to parse YAML"),
    ],
)
def test_invalid_config(tmp_path: Path, text: str, message: str):
    with pytest.raises(ConfigError, match=message):
        load_config(_write(tmp_path, text))


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.yaml")


def test_cli_overrides_file_defaults():
    defaults = {"pattern": "*.c", "command": ["make"], "poll_interval": 5}
    config = merge_cli(defaults, pattern="*.h", command=["cc", "%"], poll_interval="2", verbose=False)

    assert config.pattern == "*.h"
    assert config.command == ["cc", "%"]
    assert config.poll_interval == 2
    assert config.verbose is False


def test_file_defaults_fill_gaps():
    defaults = {"pattern": "*.c", "command": ["make"], "verbose": True}
    config = merge_cli(defaults, pattern=None, command=[], poll_interval=None, verbose=False)

    assert config.pattern == "*.c"
    assert config.command == ["make"]
    assert config.poll_interval == DEFAULT_POLL_INTERVAL
    assert config.verbose is True


def test_command_is_required():
    with pytest.raises(ConfigError, match="command"):
        merge_cli({}, pattern="*.c", command=[], poll_interval=None, verbose=False)


@pytest.mark.parametrize("value", ["0", "-1", "abc", "1.5", 2.5, True, None])
def test_bad_poll_interval(value):
    with pytest.raises(ConfigError):
        parse_poll_interval(value, "-d")


@pytest.mark.parametrize("value,expected", [("2", 2), (3, 3), (4.0, 4), (" 7 ", 7)])
def test_good_poll_interval(value, expected):
    assert parse_poll_interval(value, "-d") == expected

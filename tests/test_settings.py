from __future__ import annotations

from pathlib import Path

import pytest

from config import Settings
from utils.exceptions import ConfigurationError


VALID_TOML = """
interval = 15
reports_path = "{reports_path}"

[veracross]
username = "bot"
password = "secret"
school = "whitby"

[general]
request_timeout = 45

[[reports]]
id = 1
name = "alpha"

[[reports]]
id = 2
name = "beta"
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("VERACROSS_USERNAME", "VERACROSS_PASSWORD", "VERACROSS_SCHOOL"):
        monkeypatch.delenv(key, raising=False)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "axiom-query.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_valid_config(tmp_path: Path) -> None:
    path = _write(tmp_path, VALID_TOML.format(reports_path=(tmp_path / "out").as_posix()))

    settings = Settings.load_from_file(path)

    assert settings.interval == 15
    assert settings.interval_seconds == 900
    assert settings.reports_path == tmp_path / "out"
    assert [(r.id, r.name) for r in settings.reports] == [(1, "alpha"), (2, "beta")]
    assert settings.veracross.school == "whitby"
    assert settings.veracross.axiom_url == "https://axiom.veracross.com"
    assert settings.general.request_timeout == 45
    assert settings.general.max_concurrency is None
    assert settings.general.artifact_suffix == ".json"


def test_credentials_fall_back_to_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    text = """
interval = 1
reports_path = "out"

[veracross]
school = "whitby"

[[reports]]
id = 7
name = "grades"
"""
    monkeypatch.setenv("VERACROSS_USERNAME", "env-user")
    monkeypatch.setenv("VERACROSS_PASSWORD", "env-pass")

    settings = Settings.load_from_file(_write(tmp_path, text))

    assert settings.veracross.username == "env-user"
    assert settings.veracross.password == "env-pass"
    assert settings.veracross.school == "whitby"


def test_toml_values_win_over_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VERACROSS_PASSWORD", "from-env")
    path = _write(tmp_path, VALID_TOML.format(reports_path="out"))

    settings = Settings.load_from_file(path)

    assert settings.veracross.password == "secret"


def test_missing_file_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        Settings.load_from_file(tmp_path / "nope.toml")


def test_malformed_toml_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="malformed"):
        Settings.load_from_file(_write(tmp_path, "interval = = 3\n"))


@pytest.mark.parametrize("interval", ["0", "-5"])
def test_non_positive_interval_rejected(tmp_path: Path, interval: str) -> None:
    text = VALID_TOML.format(reports_path="out").replace("interval = 15", f"interval = {interval}")
    with pytest.raises(ConfigurationError, match="invalid"):
        Settings.load_from_file(_write(tmp_path, text))


def test_duplicate_report_names_rejected(tmp_path: Path) -> None:
    text = VALID_TOML.format(reports_path="out").replace('name = "beta"', 'name = "alpha"')
    with pytest.raises(ConfigurationError, match="duplicate report name"):
        Settings.load_from_file(_write(tmp_path, text))


def test_report_name_with_path_separator_rejected(tmp_path: Path) -> None:
    text = VALID_TOML.format(reports_path="out").replace('name = "beta"', 'name = "../beta"')
    with pytest.raises(ConfigurationError):
        Settings.load_from_file(_write(tmp_path, text))


def test_empty_report_list_rejected(tmp_path: Path) -> None:
    text = """
interval = 1
reports_path = "out"
reports = []

[veracross]
username = "bot"
password = "secret"
school = "whitby"
"""
    with pytest.raises(ConfigurationError):
        Settings.load_from_file(_write(tmp_path, text))


def test_missing_credentials_rejected(tmp_path: Path) -> None:
    text = """
interval = 1
reports_path = "out"

[[reports]]
id = 1
name = "alpha"
"""
    with pytest.raises(ConfigurationError, match="required"):
        Settings.load_from_file(_write(tmp_path, text))


def test_invalid_utf8_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "axiom-query.toml"
    path.write_bytes(b'interval = 1\nreports_path = "\xff\xfe"\n')

    with pytest.raises(ConfigurationError, match="malformed"):
        Settings.load_from_file(path)


def test_unprefixed_environment_does_not_fill_missing_keys(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REPORTS_PATH", "/from/env")
    text = VALID_TOML.format(reports_path="out").replace('reports_path = "out"\n', "")

    with pytest.raises(ConfigurationError, match="reports_path"):
        Settings.load_from_file(_write(tmp_path, text))


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    text = VALID_TOML.format(reports_path="out").replace("interval = 15", "interval = 15\nintervall = 15")

    with pytest.raises(ConfigurationError, match="intervall"):
        Settings.load_from_file(_write(tmp_path, text))


def test_flat_veracross_keys_are_accepted(tmp_path: Path) -> None:
    text = """
interval = 1
reports_path = "out"
veracross_username = "bot"
veracross_password = "secret"
veracross_school = "whitby"

[[reports]]
id = 1
name = "alpha"
"""
    settings = Settings.load_from_file(_write(tmp_path, text))

    assert settings.veracross.username == "bot"
    assert settings.veracross.password == "secret"
    assert settings.veracross.school == "whitby"


def test_log_level_is_validated(tmp_path: Path) -> None:
    base = VALID_TOML.format(reports_path="out")

    settings = Settings.load_from_file(_write(tmp_path, base + '\n[logging]\nlevel = "debug"\n'))
    assert settings.logging.level == "DEBUG"

    with pytest.raises(ConfigurationError, match="unknown log level"):
        Settings.load_from_file(_write(tmp_path, base + '\n[logging]\nlevel = "verbose"\n'))

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

import main as cli
from config import Settings
from utils.exceptions import SessionError
from veracross import VeracrossSession


CONFIG = """
interval = 1
reports_path = "{reports_path}"

[veracross]
username = "bot"
password = "secret"
school = "whitby"

[[reports]]
id = 1
name = "alpha"

[[reports]]
id = 2
name = "beta"
"""


def _config(tmp_path: Path) -> Path:
    path = tmp_path / "axiom-query.toml"
    path.write_text(CONFIG.format(reports_path=(tmp_path / "reports").as_posix()), encoding="utf-8")
    return path


def test_version_flag_prints_and_exits_zero(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--version"]) == 0
    assert capsys.readouterr().out.startswith("axiom-query - version ")


def test_missing_config_argument_is_fatal() -> None:
    assert cli.main([]) == cli.EXIT_FATAL


def test_unreadable_config_is_fatal(tmp_path: Path) -> None:
    assert cli.main(["--config", str(tmp_path / "missing.toml")]) == cli.EXIT_FATAL


def test_login_failure_is_fatal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    async def _refuse(settings, **kwargs):
        raise SessionError("login rejected")

    monkeypatch.setattr(cli, "establish_session", _refuse)

    assert cli.main(["--config", str(_config(tmp_path))]) == cli.EXIT_FATAL
    assert not (tmp_path / "reports").exists()


def test_run_saves_reports_for_one_round(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/query/1/result_data.json"):
            return httpx.Response(200, content=b'{"x":1}')
        return httpx.Response(500)

    async def _session(settings, **kwargs) -> VeracrossSession:
        return VeracrossSession(
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            school=settings.school,
            token="csrf-xyz",
            axiom_url=settings.axiom_url,
        )

    monkeypatch.setattr(cli, "establish_session", _session)
    settings = Settings.load_from_file(_config(tmp_path))

    asyncio.run(cli.run(settings, max_rounds=1))

    assert (tmp_path / "reports" / "alpha.json").read_bytes() == b'{"x":1}'
    assert not (tmp_path / "reports" / "beta.json").exists()


def test_undecodable_config_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "axiom-query.toml"
    path.write_bytes(b'interval = 1\nreports_path = "\xff\xfe"\n')

    assert cli.main(["--config", str(path)]) == cli.EXIT_FATAL

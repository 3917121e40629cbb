# ABOUTME: Tests for the command-line entry point.
# ABOUTME: Commands run against the fake client; uvicorn is patched out.

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from notion2md_server import __main__ as cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda level, log_path: None)


@pytest.fixture
def use_fake_client(monkeypatch, fake_client):
    monkeypatch.setattr(cli, "_client_from_env", lambda config: fake_client)
    return fake_client


class TestRender:
    def test_render_with_frontmatter(self, use_fake_client, capsys):
        cli.main(["render", "page-1", "--frontmatter"])
        out = capsys.readouterr().out
        assert out.startswith("---\nTitle: Sample Page\nCreated: 2024-01-01\n---\n\n# Sample Page\n")

    def test_render_plain(self, use_fake_client, capsys):
        cli.main(["render", "page-1"])
        assert capsys.readouterr().out.startswith("# Sample Page\n")

    def test_render_unknown_page_exits(self, use_fake_client):
        with pytest.raises(SystemExit) as exc:
            cli.main(["render", "missing"])
        assert exc.value.code == 1

    def test_missing_token_exits(self, monkeypatch):
        monkeypatch.delenv(cli.TOKEN_ENV, raising=False)
        with pytest.raises(SystemExit) as exc:
            cli.main(["render", "page-1"])
        assert exc.value.code == 1


class TestList:
    def test_list_prints_ids(self, use_fake_client, capsys):
        cli.main(["list", "db-1", "--offset", "1", "--limit", "2"])
        assert capsys.readouterr().out.split() == ["row-1", "row-2"]


class TestServe:
    def test_serve_uses_overrides(self, monkeypatch):
        run = MagicMock()
        monkeypatch.setattr(cli.uvicorn, "run", run)
        cli.main(["serve", "--host", "127.0.0.1", "--port", "8123"])
        _, kwargs = run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8123

    def test_bad_config_exits(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("port: 0\n")
        with pytest.raises(SystemExit) as exc:
            cli.main(["--config", str(path), "serve"])
        assert exc.value.code == 1

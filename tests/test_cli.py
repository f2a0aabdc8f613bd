#!/usr/bin/env python3
"""
Tests for CLI config building, backend selection and a full dry run.
"""

from pathlib import Path
import zipfile

import pytest
from PIL import Image

import icon_organizer.cli as cli
from conftest import StubOracle
from icon_organizer.oracle_client import NamingOracleClient
from icon_organizer.transports import GeminiTransport, OllamaTransport


def test_build_config_flags_override_config_file(tmp_path: Path):
	config_file = tmp_path / "cfg.yaml"
	config_file.write_text("chunk_size: 10\ncooldown_seconds: 4\n", encoding="utf-8")
	args = cli.parse_args(["-p", "icons", "-c", str(config_file), "--chunk-size", "25", "-d"])
	cfg = cli.build_config(args)
	assert cfg.chunk_size == 25
	assert cfg.cooldown_seconds == 4
	assert cfg.dry_run is True
	assert cfg.paths == [Path("icons")]


def test_build_config_rejects_zero_chunk():
	args = cli.parse_args(["-p", "icons", "--chunk-size", "0"])
	with pytest.raises(ValueError):
		cli.build_config(args)


def test_gemini_backend_requires_key(monkeypatch):
	monkeypatch.delenv("GEMINI_API_KEY", raising=False)
	monkeypatch.delenv("API_KEY", raising=False)
	cfg = cli.build_config(cli.parse_args(["-p", "icons"]))
	with pytest.raises(RuntimeError):
		cli.build_oracle(cfg)


def test_gemini_backend_default(monkeypatch):
	monkeypatch.setenv("GEMINI_API_KEY", "test-key")
	cfg = cli.build_config(cli.parse_args(["-p", "icons"]))
	oracle = cli.build_oracle(cfg)
	assert isinstance(oracle, NamingOracleClient)
	assert isinstance(oracle.transport, GeminiTransport)
	assert oracle.retry_policy.schedule() == [3.0, 6.0, 9.0]


def test_ollama_backend_unavailable_raises(monkeypatch):
	monkeypatch.setattr(OllamaTransport, "available", lambda self: False)
	cfg = cli.build_config(cli.parse_args(["-p", "icons", "--oracle-backend", "ollama"]))
	with pytest.raises(RuntimeError):
		cli.build_oracle(cfg)


def test_ollama_backend_available(monkeypatch):
	monkeypatch.setattr(OllamaTransport, "available", lambda self: True)
	cfg = cli.build_config(cli.parse_args(["-p", "icons", "--oracle-backend", "ollama", "-m", "tiny"]))
	oracle = cli.build_oracle(cfg)
	assert isinstance(oracle.transport, OllamaTransport)
	assert oracle.transport.model == "tiny"


def test_main_writes_archive(tmp_path: Path, monkeypatch):
	icons = tmp_path / "icons"
	icons.mkdir()
	for stem in ("icon1", "icon2"):
		Image.new("RGBA", (2, 2)).save(icons / f"{stem}.png", format="PNG")
	(icons / "notes.txt").write_text("skip me", encoding="utf-8")
	oracle = StubOracle({"icon1": ("Home", "首页", "app"), "icon2": ("Home", "首页", "app")})
	monkeypatch.setattr(cli, "build_oracle", lambda _cfg: oracle)
	output = tmp_path / "bundle.zip"

	exit_code = cli.main(["-p", str(icons), "-o", str(output), "--cooldown", "0"])

	assert exit_code == 0
	with zipfile.ZipFile(output) as bundle:
		assert sorted(bundle.namelist()) == [
			"renamed_icons/Home--首页--app.png",
			"renamed_icons/Home--首页--app_1.png",
		]
	assert len(oracle.calls) == 1


def test_main_reports_bad_config_value(tmp_path: Path, capsys):
	config_file = tmp_path / "cfg.yaml"
	config_file.write_text("chunk_size: lots\n", encoding="utf-8")
	exit_code = cli.main(["-p", str(tmp_path), "-c", str(config_file)])
	assert exit_code == 2
	assert "chunk_size" in capsys.readouterr().err


def test_build_config_converts_string_number(tmp_path: Path):
	config_file = tmp_path / "cfg.yaml"
	config_file.write_text('chunk_size: "10"\n', encoding="utf-8")
	cfg = cli.build_config(cli.parse_args(["-p", str(tmp_path), "-c", str(config_file)]))
	assert cfg.chunk_size == 10


def test_main_reports_unreadable_source(tmp_path: Path, monkeypatch, capsys):
	icons = tmp_path / "icons"
	icons.mkdir()
	for stem in ("icon1", "icon2"):
		Image.new("RGBA", (2, 2)).save(icons / f"{stem}.png", format="PNG")
	oracle = StubOracle()
	# source disappears while the batch is being named
	oracle.on_call = lambda _items: (icons / "icon2.png").unlink()
	monkeypatch.setattr(cli, "build_oracle", lambda _cfg: oracle)
	output = tmp_path / "bundle.zip"

	exit_code = cli.main(["-p", str(icons), "-o", str(output), "--cooldown", "0"])

	assert exit_code == 1
	assert not output.exists()
	assert "could not write archive" in capsys.readouterr().err

#!/usr/bin/env python3
"""
Tests for PNG-only upload filtering.
"""

from pathlib import Path

from PIL import Image

from icon_organizer.uploads import collect_candidates, filter_uploads


def _image(path: Path, fmt: str) -> Path:
	Image.new("RGB", (4, 4), color=(200, 30, 30)).save(path, format=fmt)
	return path


def test_only_real_pngs_survive(tmp_path: Path):
	good = _image(tmp_path / "icon.png", "PNG")
	jpeg = _image(tmp_path / "photo.jpg", "JPEG")
	fake = tmp_path / "fake.png"
	fake.write_text("not an image", encoding="utf-8")
	disguised = _image(tmp_path / "disguised.png", "JPEG")
	assert filter_uploads([good, jpeg, fake, disguised]) == [good]


def test_collect_candidates_expands_folders(tmp_path: Path):
	(tmp_path / "b.png").write_bytes(b"x")
	(tmp_path / "a.png").write_bytes(b"x")
	(tmp_path / ".hidden.png").write_bytes(b"x")
	nested = tmp_path / "sub"
	nested.mkdir()
	(nested / "c.png").write_bytes(b"x")

	flat = collect_candidates([tmp_path])
	assert [p.name for p in flat] == ["a.png", "b.png"]
	deep = collect_candidates([tmp_path], recursive=True)
	assert sorted(p.name for p in deep) == ["a.png", "b.png", "c.png"]


def test_collect_candidates_keeps_files_and_skips_missing(tmp_path: Path):
	single = tmp_path / "one.png"
	single.write_bytes(b"x")
	assert collect_candidates([single, tmp_path / "missing"]) == [single]

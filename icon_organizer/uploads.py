#!/usr/bin/env python3
"""
Upload surface: collect candidate files and keep only the accepted image type.
"""

from __future__ import annotations

# Standard Library
from pathlib import Path
import logging
import mimetypes
from typing import Iterable

# PIP3 modules
from PIL import Image, UnidentifiedImageError

# local repo modules
from .config import ACCEPTED_MIME_TYPE

logger = logging.getLogger(__name__)

#============================================


def collect_candidates(
	roots: Iterable[Path],
	recursive: bool = False,
	exclude_hidden: bool = True,
) -> list[Path]:
	"""
	Expand folders into files, keeping explicit file paths as given.

	Args:
		roots: Files or folders chosen by the user.
		recursive: Traverse subdirectories.
		exclude_hidden: Skip dotfiles.

	Returns:
		File paths in a stable (sorted per folder) order.
	"""
	paths: list[Path] = []
	for root in roots:
		if root.is_file():
			paths.append(root)
			continue
		if not root.is_dir():
			logger.warning("Skipping missing path: %s", root)
			continue
		candidates = root.rglob("*") if recursive else root.iterdir()
		for path in sorted(candidates):
			if path.is_dir():
				continue
			if exclude_hidden and path.name.startswith("."):
				continue
			paths.append(path)
	return paths


#============================================


def detect_mime_type(path: Path) -> str | None:
	"""
	MIME type from the file header, falling back to None when unreadable.
	"""
	try:
		with Image.open(path) as image:
			return Image.MIME.get(image.format or "")
	except (UnidentifiedImageError, OSError):
		return None


def is_accepted(path: Path, mime_type: str = ACCEPTED_MIME_TYPE) -> bool:
	guessed, _encoding = mimetypes.guess_type(path.name)
	if guessed != mime_type:
		return False
	return detect_mime_type(path) == mime_type


def filter_uploads(paths: Iterable[Path], mime_type: str = ACCEPTED_MIME_TYPE) -> list[Path]:
	"""
	Silently drop files that are not of the accepted MIME type.
	"""
	accepted: list[Path] = []
	for path in paths:
		if is_accepted(path, mime_type):
			accepted.append(path)
		else:
			logger.debug("Filtered out %s (not %s)", path.name, mime_type)
	return accepted

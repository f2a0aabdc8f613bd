#!/usr/bin/env python3
"""
Standardized filenames and case-insensitive collision handling.
"""

from __future__ import annotations

# Standard Library
from typing import Iterable

#============================================


NAME_SEPARATOR = "--"


class UsedNamesRegistry:
	"""
	Case-insensitive set of names already assigned during one merge.
	"""

	def __init__(self, names: Iterable[str] = ()) -> None:
		self._names: set[str] = set()
		for name in names:
			self.add(name)

	def __contains__(self, name: object) -> bool:
		if not isinstance(name, str):
			return False
		return name.lower() in self._names

	def __len__(self) -> int:
		return len(self._names)

	def add(self, name: str) -> None:
		self._names.add(name.lower())


#============================================


def split_extension(original_name: str) -> tuple[str, str]:
	"""
	Split a filename at its last dot.

	Args:
		original_name: Uploaded filename.

	Returns:
		(stem, extension) where extension keeps its leading dot or is "".
	"""
	dot_index = original_name.rfind(".")
	if dot_index == -1:
		return original_name, ""
	return original_name[:dot_index], original_name[dot_index:]


def build_base_name(english: str, chinese: str, domain: str, extension: str) -> str:
	return f"{english}{NAME_SEPARATOR}{chinese}{NAME_SEPARATOR}{domain}{extension}"


def _with_counter(base_name: str, counter: int, extension: str | None) -> str:
	if extension is None:
		stem, extension = split_extension(base_name)
	else:
		stem = base_name[: len(base_name) - len(extension)]
	return f"{stem}_{counter}{extension}"


def resolve_unique_name(base_name: str, registry: UsedNamesRegistry, extension: str | None = None) -> str:
	"""
	Pick the first free name among base, base_1, base_2, ... and reserve it.

	Args:
		base_name: Candidate filename including extension.
		registry: Names taken so far; updated with the chosen name.
		extension: Known extension of base_name ("" for none). When omitted
			the counter goes before the last dot.

	Returns:
		Name not previously present in the registry.
	"""
	candidate = base_name
	counter = 1
	while candidate in registry:
		candidate = _with_counter(base_name, counter, extension)
		counter += 1
	registry.add(candidate)
	return candidate

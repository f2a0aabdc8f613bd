#!/usr/bin/env python3
"""
Parsers for batch oracle responses.
"""

from __future__ import annotations

# Standard Library
from dataclasses import dataclass
import json
import re

#============================================


class ParseError(RuntimeError):
	"""
	Raised when an oracle response is not a usable JSON array.
	"""

	def __init__(self, message: str, raw_text: str = "") -> None:
		super().__init__(message)
		self.raw_text = raw_text


@dataclass(slots=True)
class OracleResult:
	id: str
	english: str
	chinese: str
	domain: str


_FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z0-9_+-]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")
_FIELD_KEYS = {
	"id": ("i", "id"),
	"english": ("e", "english"),
	"chinese": ("c", "chinese"),
	"domain": ("d", "domain"),
}


def strip_code_fences(text: str) -> str:
	if not text:
		return ""
	# opening and closing markers are stripped independently
	cleaned = _FENCE_OPEN_RE.sub("", text.strip(), count=1)
	cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
	return cleaned.strip()


def _field(entry: dict, name: str) -> str:
	for key in _FIELD_KEYS[name]:
		value = entry.get(key)
		if value is not None:
			return str(value)
	return ""


def parse_batch_response(text: str) -> list[OracleResult]:
	"""
	Parse a JSON array of labelled items.

	Accepts the short wire keys (i, e, c, d) or their long names. Entries
	without an id are skipped; the caller matches the rest by id.

	Args:
		text: Raw model output, possibly wrapped in a code fence.

	Returns:
		Parsed results in response order.
	"""
	cleaned = strip_code_fences(text)
	if not cleaned:
		return []
	try:
		data = json.loads(cleaned)
	except json.JSONDecodeError as exc:
		raise ParseError(f"Invalid JSON in oracle response: {exc}", text) from exc
	if isinstance(data, dict):
		# some models wrap the array in a single-key object
		lists = [value for value in data.values() if isinstance(value, list)]
		if len(lists) != 1:
			raise ParseError("Oracle response object does not hold one item list.", text)
		data = lists[0]
	if not isinstance(data, list):
		raise ParseError("Oracle response is not a JSON array.", text)
	results: list[OracleResult] = []
	for entry in data:
		if not isinstance(entry, dict):
			raise ParseError("Oracle response item is not an object.", text)
		item_id = _field(entry, "id")
		if not item_id:
			continue
		results.append(
			OracleResult(
				id=item_id,
				english=_field(entry, "english"),
				chinese=_field(entry, "chinese"),
				domain=_field(entry, "domain"),
			)
		)
	return results


def match_results(expected_ids: list[str], results: list[OracleResult]) -> tuple[dict[str, OracleResult], list[str]]:
	"""
	Index results by id for the requested ids.

	Returns:
		(mapping, missing_ids). Unknown ids are dropped and the first entry
		wins on duplicates.
	"""
	wanted = set(expected_ids)
	mapping: dict[str, OracleResult] = {}
	for result in results:
		if result.id in wanted and result.id not in mapping:
			mapping[result.id] = result
	missing = [item_id for item_id in expected_ids if item_id not in mapping]
	return mapping, missing

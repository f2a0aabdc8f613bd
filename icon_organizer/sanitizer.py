#!/usr/bin/env python3
"""
Filesystem-safe label tokens.
"""

from __future__ import annotations

# Standard Library
import re

#============================================


FALLBACK_TOKEN = "Unknown"
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9\u4e00-\u9fa5]")
_UNSAFE_DOTS_RE = re.compile(r"[^A-Za-z0-9\u4e00-\u9fa5.]")
_UNDERSCORE_RUN_RE = re.compile(r"_+")


def sanitize_label(label: str | None, allow_dots: bool = False) -> str:
	"""
	Normalize an oracle label into a filename token.

	Every character outside ASCII letters, digits and CJK ideographs (plus
	dots when allow_dots is set) becomes an underscore. Underscore runs are
	collapsed and trimmed, and so are leading/trailing dots when allowed.

	Args:
		label: Raw label text.
		allow_dots: Keep literal dots (used for domains like google.com).

	Returns:
		Safe token, or "Unknown" when nothing survives.
	"""
	if not label:
		return FALLBACK_TOKEN
	pattern = _UNSAFE_DOTS_RE if allow_dots else _UNSAFE_RE
	safe = pattern.sub("_", str(label))
	safe = _UNDERSCORE_RUN_RE.sub("_", safe)
	if allow_dots:
		# trimming dots can expose underscores and the reverse
		previous = None
		while previous != safe:
			previous = safe
			safe = safe.strip("_").strip(".")
	else:
		safe = safe.strip("_")
	return safe or FALLBACK_TOKEN

#!/usr/bin/env python3
"""
Prompt builder and response schema for batch filename inference.
"""

from __future__ import annotations

# Standard Library
from dataclasses import dataclass
import json

#============================================


@dataclass(slots=True, frozen=True)
class OracleItem:
	id: str
	stem: str


# wire keys: i=id, n=stem, e=english, c=chinese, d=domain
RESPONSE_SCHEMA: dict = {
	"type": "ARRAY",
	"items": {
		"type": "OBJECT",
		"properties": {
			"i": {"type": "STRING"},
			"n": {"type": "STRING"},
			"e": {"type": "STRING"},
			"c": {"type": "STRING"},
			"d": {"type": "STRING"},
		},
		"required": ["i", "n", "e", "c", "d"],
	},
}

BATCH_EXAMPLE_OUTPUT = (
	'[{"i": "k3f9", "n": "ic_home_24", "e": "Home", "c": "首页", "d": "app"}]'
)


def _wire_items(items: list[OracleItem]) -> list[dict[str, str]]:
	return [{"i": item.id, "n": item.stem} for item in items]


def build_batch_prompt(items: list[OracleItem]) -> str:
	lines: list[str] = []
	lines.append("Task: Rename icon filenames.")
	lines.append(f"Input: {json.dumps(_wire_items(items), ensure_ascii=False)}")
	lines.append("")
	lines.append("Rules:")
	lines.append("1. i: Keep exact ID.")
	lines.append("2. n: Keep exact original name.")
	lines.append("3. e: English name (Snake_Case, No hyphens).")
	lines.append("4. c: Chinese name (No hyphens, simplify if needed).")
	lines.append('5. d: Domain/Brand (e.g. "google.com", "wechat").')
	lines.append("")
	lines.append("Return a JSON array only, one object per input item, like:")
	lines.append(BATCH_EXAMPLE_OUTPUT)
	lines.append(f"IMPORTANT: Return exactly {len(items)} items.")
	return "\n".join(lines)

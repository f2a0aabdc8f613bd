"""
Pytest config to ensure local package imports work without installation.
"""

from __future__ import annotations

import sys
from pathlib import Path


def _add_repo_root_to_path() -> None:
	"""
	Insert the repo root into sys.path for local imports.
	"""
	repo_root = Path(__file__).resolve().parent.parent
	repo_root_str = str(repo_root)
	if repo_root_str not in sys.path:
		sys.path.insert(0, repo_root_str)


_add_repo_root_to_path()

from icon_organizer.oracle_parsers import OracleResult  # noqa: E402


class StubOracle:
	"""
	Test-only oracle answering from a stem -> (english, chinese, domain) table.
	"""

	def __init__(self, labels: dict | None = None, error: Exception | None = None) -> None:
		self.labels = dict(labels or {})
		self.error = error
		self.calls: list[list] = []
		self.skip_ids: set[str] = set()
		self.on_call = None

	def infer(self, items: list) -> list[OracleResult]:
		self.calls.append(list(items))
		if self.on_call is not None:
			self.on_call(items)
		if self.error:
			raise self.error
		results: list[OracleResult] = []
		for item in reversed(items):
			if item.id in self.skip_ids:
				continue
			english, chinese, domain = self.labels.get(item.stem, (item.stem, "图标", "app"))
			results.append(OracleResult(id=item.id, english=english, chinese=chinese, domain=domain))
		return results


class DummyTransport:
	name = "Dummy"

	def __init__(self, responses=None, errors=None):
		self.responses = list(responses or [])
		self.errors = list(errors or [])
		self.calls: list[tuple[str, str]] = []

	def generate(self, prompt: str, *, purpose: str, max_tokens: int) -> str:
		self.calls.append((purpose, prompt))
		if self.errors:
			raise self.errors.pop(0)
		if not self.responses:
			raise RuntimeError("No response queued")
		return self.responses.pop(0)

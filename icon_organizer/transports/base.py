#!/usr/bin/env python3
"""
Transport interface for naming oracle backends.
"""

from __future__ import annotations

from typing import Protocol


class OracleTransport(Protocol):
	name: str

	def generate(self, prompt: str, *, purpose: str, max_tokens: int) -> str:
		"""
		Send a prompt and return raw model text.
		"""

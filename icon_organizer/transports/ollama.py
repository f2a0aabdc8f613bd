#!/usr/bin/env python3
"""
Ollama chat transport.
"""

from __future__ import annotations

# Standard Library
import json
import urllib.request

# local repo modules
from ..config import DEFAULT_OLLAMA_MODEL, OLLAMA_BASE_URL


class OllamaTransport:
	name = "Ollama"

	def __init__(
		self,
		model: str = DEFAULT_OLLAMA_MODEL,
		base_url: str = OLLAMA_BASE_URL,
		timeout: float = 120,
	) -> None:
		self.model = model
		self.base_url = base_url.rstrip("/")
		self.timeout = timeout

	def generate(self, prompt: str, *, purpose: str, max_tokens: int) -> str:
		# each chunk is independent, so no chat history is kept
		payload: dict[str, object] = {
			"model": self.model,
			"messages": [{"role": "user", "content": prompt}],
			"stream": False,
			"format": "json",
			"options": {"num_predict": max_tokens, "temperature": 0.1},
		}
		request = urllib.request.Request(
			f"{self.base_url}/api/chat",
			data=json.dumps(payload).encode("utf-8"),
			headers={"Content-Type": "application/json"},
			method="POST",
		)
		with urllib.request.urlopen(request, timeout=self.timeout) as response:
			if response.status >= 400:
				raise RuntimeError(f"Ollama chat error: status {response.status}")
			response_body = response.read()
		parsed = json.loads(response_body.decode("utf-8"))
		return parsed.get("message", {}).get("content", "")

	def available(self) -> bool:
		"""
		Check if the Ollama service is up.
		"""
		try:
			request = urllib.request.Request(f"{self.base_url}/api/tags", method="GET")
			with urllib.request.urlopen(request, timeout=2) as response:
				return response.status < 400
		except Exception:
			return False

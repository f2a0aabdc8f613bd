#!/usr/bin/env python3
"""
Gemini generateContent transport.
"""

from __future__ import annotations

# Standard Library
import json
import os
import urllib.request

# local repo modules
from ..config import DEFAULT_GEMINI_MODEL, GEMINI_BASE_URL
from ..oracle_prompts import RESPONSE_SCHEMA

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


def api_key_from_env() -> str:
	for name in API_KEY_ENV_VARS:
		value = os.environ.get(name, "").strip()
		if value:
			return value
	return ""


class GeminiTransport:
	name = "Gemini"

	def __init__(
		self,
		model: str = DEFAULT_GEMINI_MODEL,
		api_key: str | None = None,
		base_url: str = GEMINI_BASE_URL,
		timeout: float = 120,
	) -> None:
		self.model = model
		self.api_key = api_key if api_key is not None else api_key_from_env()
		self.base_url = base_url.rstrip("/")
		self.timeout = timeout

	def build_payload(self, prompt: str, max_tokens: int) -> dict[str, object]:
		return {
			"contents": [{"role": "user", "parts": [{"text": prompt}]}],
			"generationConfig": {
				"responseMimeType": "application/json",
				"responseSchema": RESPONSE_SCHEMA,
				"temperature": 0.1,
				"maxOutputTokens": max_tokens,
			},
		}

	def generate(self, prompt: str, *, purpose: str, max_tokens: int) -> str:
		if not self.api_key:
			raise RuntimeError(
				f"Gemini API key missing; set one of {', '.join(API_KEY_ENV_VARS)}."
			)
		payload = self.build_payload(prompt, max_tokens)
		request = urllib.request.Request(
			f"{self.base_url}/models/{self.model}:generateContent",
			data=json.dumps(payload).encode("utf-8"),
			headers={
				"Content-Type": "application/json",
				"x-goog-api-key": self.api_key,
			},
			method="POST",
		)
		# HTTPError (429/503 included) propagates to the oracle client
		with urllib.request.urlopen(request, timeout=self.timeout) as response:
			response_body = response.read()
		parsed = json.loads(response_body.decode("utf-8"))
		candidates = parsed.get("candidates") or []
		if not candidates:
			return ""
		parts = candidates[0].get("content", {}).get("parts", [])
		return "".join(part.get("text", "") for part in parts)

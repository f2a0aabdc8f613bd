#!/usr/bin/env python3
from __future__ import annotations

from .gemini import GeminiTransport
from .ollama import OllamaTransport

__all__ = ["GeminiTransport", "OllamaTransport"]

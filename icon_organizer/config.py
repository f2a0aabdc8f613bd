#!/usr/bin/env python3
from __future__ import annotations

# Standard Library
from dataclasses import dataclass, field, fields
from pathlib import Path
import json

# PIP3 modules
import yaml

#============================================


CHUNK_SIZE = 50
COOLDOWN_SECONDS = 2.0
RETRY_ATTEMPTS = 3
RETRY_BASE_DELAY = 3.0
ACCEPTED_MIME_TYPE = "image/png"
DEFAULT_ORACLE_BACKEND = "gemini"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_OLLAMA_MODEL = "qwen2.5:7b-instruct"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
OLLAMA_BASE_URL = "http://localhost:11434"
ARCHIVE_NAME = "organized_icons.zip"
ARCHIVE_FOLDER = "renamed_icons"

#============================================


def _default_paths() -> list[Path]:
	return []


#============================================


@dataclass(slots=True)
class AppConfig:
	"""
	Runtime configuration settings.

	Attributes:
		paths: Files or folders to upload.
		output: Zip bundle written when the run finishes.
		dry_run: Only print the resolved names.
		recursive: Traverse subdirectories of folder paths.
		exclude_hidden: Skip dotfiles when True.
		chunk_size: Records sent per oracle call.
		cooldown_seconds: Idle interval between cycles.
		retry_attempts: Retries on rate limit or unavailable errors.
		retry_base_delay: First retry wait; later waits grow linearly.
		oracle_backend: Oracle transport selector ("gemini" or "ollama").
		model_override: Optional model name for the selected backend.
		base_url: Optional endpoint override for the selected backend.
		config_path: Optional user config path.
	"""
	paths: list[Path] = field(default_factory=_default_paths)
	output: Path = field(default_factory=lambda: Path(ARCHIVE_NAME))
	dry_run: bool = False
	recursive: bool = False
	exclude_hidden: bool = True
	chunk_size: int = CHUNK_SIZE
	cooldown_seconds: float = COOLDOWN_SECONDS
	retry_attempts: int = RETRY_ATTEMPTS
	retry_base_delay: float = RETRY_BASE_DELAY
	accepted_mime_type: str = ACCEPTED_MIME_TYPE
	oracle_backend: str = DEFAULT_ORACLE_BACKEND
	model_override: str | None = None
	base_url: str | None = None
	config_path: Path | None = None
	verbose: bool = False

	#============================================
	def normalized_paths(self) -> list[Path]:
		"""
		Normalize user upload paths.

		Returns:
			List of normalized Path objects.
		"""
		paths: list[Path] = [path.expanduser().resolve() for path in self.paths]
		return paths

	#============================================
	def model_name(self) -> str:
		if self.model_override:
			return self.model_override
		if self.oracle_backend == "ollama":
			return DEFAULT_OLLAMA_MODEL
		return DEFAULT_GEMINI_MODEL

	#============================================
	def endpoint(self) -> str:
		if self.base_url:
			return self.base_url
		if self.oracle_backend == "ollama":
			return OLLAMA_BASE_URL
		return GEMINI_BASE_URL

	#============================================
	def validate(self) -> None:
		"""
		Reject settings the orchestrator cannot run with.
		"""
		if self.chunk_size < 1:
			raise ValueError(f"chunk_size must be at least 1 (got {self.chunk_size}).")
		if self.cooldown_seconds < 0:
			raise ValueError("cooldown_seconds must not be negative.")
		if self.retry_attempts < 0:
			raise ValueError("retry_attempts must not be negative.")
		if self.oracle_backend not in {"gemini", "ollama"}:
			raise ValueError(f"Unknown oracle backend: {self.oracle_backend}")


#============================================


_INT_KEYS = {"chunk_size", "retry_attempts"}
_FLOAT_KEYS = {"cooldown_seconds", "retry_base_delay"}
_BOOL_KEYS = {"dry_run", "recursive", "exclude_hidden", "verbose"}
_PATH_KEYS = {"output", "config_path"}
_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}


def _to_int(key: str, value) -> int:
	if isinstance(value, bool):
		raise ValueError(f"{key} must be an integer (got {value!r}).")
	if isinstance(value, float) and not value.is_integer():
		raise ValueError(f"{key} must be an integer (got {value!r}).")
	try:
		return int(value)
	except (TypeError, ValueError) as exc:
		raise ValueError(f"{key} must be an integer (got {value!r}).") from exc


def _to_float(key: str, value) -> float:
	if isinstance(value, bool):
		raise ValueError(f"{key} must be a number (got {value!r}).")
	try:
		return float(value)
	except (TypeError, ValueError) as exc:
		raise ValueError(f"{key} must be a number (got {value!r}).") from exc


def _to_bool(key: str, value) -> bool:
	if isinstance(value, bool):
		return value
	word = str(value).strip().lower()
	if word in _TRUE_WORDS:
		return True
	if word in _FALSE_WORDS:
		return False
	raise ValueError(f"{key} must be true or false (got {value!r}).")


def _to_path(key: str, value) -> Path:
	if not isinstance(value, (str, Path)):
		raise ValueError(f"{key} must be a path (got {value!r}).")
	return Path(value).expanduser()


def _coerce(key: str, value):
	if key in _INT_KEYS:
		return _to_int(key, value)
	if key in _FLOAT_KEYS:
		return _to_float(key, value)
	if key in _BOOL_KEYS:
		return _to_bool(key, value)
	if key in _PATH_KEYS:
		return _to_path(key, value)
	if key == "paths":
		if isinstance(value, (str, Path)):
			value = [value]
		if not isinstance(value, list):
			raise ValueError(f"paths must be a list of paths (got {value!r}).")
		return [_to_path(key, item) for item in value]
	if not isinstance(value, str):
		raise ValueError(f"{key} must be a string (got {value!r}).")
	return value


#============================================


def load_user_config(config_path: Path | None) -> dict:
	"""
	Load user configuration from yaml or json.

	Args:
		config_path: Path to config file.

	Returns:
		Dictionary of loaded values or empty dict.

	Raises:
		ValueError: The file does not parse or does not hold a mapping.
	"""
	if not config_path:
		return {}
	if not config_path.exists():
		return {}
	with config_path.open("r", encoding="utf-8") as handle:
		if config_path.suffix.lower() in {".yml", ".yaml"}:
			try:
				loaded = yaml.safe_load(handle)
			except yaml.YAMLError as exc:
				raise ValueError(f"Cannot parse {config_path}: {exc}") from exc
		else:
			# json.JSONDecodeError is a ValueError
			loaded = json.load(handle)
	if loaded is None:
		return {}
	if not isinstance(loaded, dict):
		raise ValueError(f"{config_path} must hold a mapping of settings.")
	return loaded


#============================================


def apply_user_config(config: AppConfig, values: dict) -> AppConfig:
	"""
	Copy known keys from a user config mapping onto the config.

	Unknown keys and null values are ignored. Each value is converted to
	the type of its setting; ValueError names the first one that does not
	convert.
	"""
	known = {item.name for item in fields(AppConfig)}
	for key, value in values.items():
		if key not in known or value is None:
			continue
		setattr(config, key, _coerce(key, value))
	return config

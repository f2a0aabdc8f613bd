#!/usr/bin/env python3
"""
Command line interface for icon-organizer.
"""

# Standard Library
import argparse
import logging
from pathlib import Path
import sys

# local repo modules
from .archiver import NothingToArchive, build_archive
from .config import AppConfig, apply_user_config, load_user_config
from .file_queue import FileQueue, FileStatus
from .oracle_client import NamingOracleClient, RetryPolicy
from .orchestrator import BatchOrchestrator
from .transports import GeminiTransport, OllamaTransport
from .uploads import collect_candidates, filter_uploads

#============================================


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse CLI arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Rename PNG icons to English--Chinese--domain names using an LLM."
	)
	parser.add_argument(
		"-p",
		"--paths",
		dest="paths",
		nargs="+",
		required=True,
		help="PNG files or folders to upload (required).",
	)
	parser.add_argument(
		"-o",
		"--output",
		dest="output",
		help="Zip bundle to write (default organized_icons.zip).",
	)
	parser.add_argument(
		"-d",
		"--dry-run",
		dest="dry_run",
		action="store_true",
		help="Only print the resolved names; write no archive.",
	)
	parser.add_argument(
		"-r",
		"--recursive",
		dest="recursive",
		action="store_true",
		help="Scan folders recursively.",
	)
	parser.add_argument(
		"-c",
		"--config",
		dest="config_path",
		help="YAML or JSON file with setting overrides.",
	)
	parser.add_argument(
		"--chunk-size",
		dest="chunk_size",
		type=int,
		help="Files per oracle call (default 50).",
	)
	parser.add_argument(
		"--cooldown",
		dest="cooldown_seconds",
		type=float,
		help="Seconds to wait between oracle calls (default 2).",
	)
	parser.add_argument(
		"--oracle-backend",
		dest="oracle_backend",
		choices=["gemini", "ollama"],
		help="Choose naming backend: gemini (default) or ollama.",
	)
	parser.add_argument(
		"-m",
		"--model",
		dest="model",
		help="Override model name for the selected backend.",
	)
	parser.add_argument(
		"--base-url",
		dest="base_url",
		help="Override the backend endpoint.",
	)
	parser.add_argument(
		"-v",
		"--verbose",
		dest="verbose",
		action="store_true",
		help="Verbose logging.",
	)
	parser.set_defaults(dry_run=False, recursive=False, verbose=False)
	return parser.parse_args(argv)


#============================================


def build_config(args: argparse.Namespace) -> AppConfig:
	"""
	Build runtime config from the user config file, then CLI flags.
	"""
	config = AppConfig()
	if args.config_path:
		config.config_path = Path(args.config_path).expanduser()
		apply_user_config(config, load_user_config(config.config_path))
	config.paths = [Path(p).expanduser() for p in args.paths]
	if args.output:
		config.output = Path(args.output).expanduser()
	if args.dry_run:
		config.dry_run = True
	if args.recursive:
		config.recursive = True
	if args.chunk_size is not None:
		config.chunk_size = args.chunk_size
	if args.cooldown_seconds is not None:
		config.cooldown_seconds = args.cooldown_seconds
	if args.oracle_backend:
		config.oracle_backend = args.oracle_backend
	if args.model:
		config.model_override = args.model
	if args.base_url:
		config.base_url = args.base_url
	if args.verbose:
		config.verbose = True
	config.validate()
	return config


#============================================


def build_oracle(config: AppConfig) -> NamingOracleClient:
	"""
	Instantiate the naming oracle client for the configured backend.

	Args:
		config: Application configuration.

	Returns:
		NamingOracleClient instance.
	"""
	policy = RetryPolicy(attempts=config.retry_attempts, base_delay=config.retry_base_delay)
	if config.oracle_backend == "ollama":
		transport = OllamaTransport(model=config.model_name(), base_url=config.endpoint())
		if not transport.available():
			raise RuntimeError("Ollama backend selected but service is not reachable.")
		return NamingOracleClient(transport, policy)
	gemini = GeminiTransport(model=config.model_name(), base_url=config.endpoint())
	if not gemini.api_key:
		raise RuntimeError("Gemini backend selected but no API key is set (GEMINI_API_KEY or API_KEY).")
	return NamingOracleClient(gemini, policy)


#============================================


def _color(text: str, code: str) -> str:
	if sys.stdout.isatty():
		return f"\033[{code}m{text}\033[0m"
	return text


#============================================


def _print_progress(queue: FileQueue) -> None:
	progress = queue.progress()
	print(
		f"{_color('[BATCH]', '36')} {progress.processed}/{progress.total} processed "
		f"({progress.completed} ok, {progress.errors} error)"
	)


#============================================


def _wait(orchestrator: BatchOrchestrator, queue: FileQueue) -> None:
	last = None
	while not orchestrator.join(timeout=1.0):
		processed = queue.progress().processed
		if processed != last:
			_print_progress(queue)
			last = processed


#============================================


def _print_results(queue: FileQueue) -> None:
	for record in queue.records():
		if record.status == FileStatus.COMPLETED:
			print(f"{_color('[RENAME]', '32')} {record.original_name}")
			print(f"{' ' * 9}-> {record.new_name}")
		else:
			print(f"{_color('[WHY]', '35')} {record.original_name}: {record.status.value}")


#============================================


def main(argv: list[str] | None = None) -> int:
	"""
	Entry point for the CLI.
	"""
	args = parse_args(argv)
	try:
		config = build_config(args)
	except ValueError as exc:
		print(f"{_color('[WHY]', '35')} invalid configuration: {exc}", file=sys.stderr)
		return 2
	if config.verbose:
		logging.basicConfig(level=logging.INFO)
	else:
		logging.basicConfig(level=logging.WARNING)
	try:
		oracle = build_oracle(config)
	except RuntimeError as exc:
		print(f"{_color('[WHY]', '35')} {exc}", file=sys.stderr)
		return 2

	candidates = collect_candidates(config.normalized_paths(), config.recursive, config.exclude_hidden)
	uploads = filter_uploads(candidates, config.accepted_mime_type)
	print(f"{_color('[SCAN]', '34')} Found {len(uploads)} PNG file(s) of {len(candidates)} candidate(s).")
	if not uploads:
		return 0

	queue = FileQueue()
	queue.enqueue(uploads)
	orchestrator = BatchOrchestrator(queue, oracle, config)
	orchestrator.start()
	try:
		_wait(orchestrator, queue)
	except KeyboardInterrupt:
		reverted = orchestrator.stop()
		print(f"{_color('[STOP]', '33')} cancelled; {reverted} file(s) returned to pending")
		orchestrator.join()
	_print_progress(queue)
	_print_results(queue)

	if config.dry_run:
		return 0
	try:
		archive = build_archive(queue.records(), config.output)
	except NothingToArchive as exc:
		print(f"{_color('[WHY]', '35')} {exc}")
		return 0
	except OSError as exc:
		print(f"{_color('[WHY]', '35')} could not write archive: {exc}", file=sys.stderr)
		return 1
	print(f"{_color('[DONE]', '32')} Wrote {archive}")
	return 0


#============================================


if __name__ == "__main__":
	sys.exit(main())

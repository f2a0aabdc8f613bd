#!/usr/bin/env python3
"""
Batch orchestrator: chunk selection, serialized oracle calls, merge, cooldown.
"""

from __future__ import annotations

# Standard Library
from enum import Enum
import logging
import threading
import time
from typing import Callable, Protocol

# local repo modules
from .config import AppConfig
from .file_queue import FileQueue, FileRecord, IconMetadata, InvalidTransition, UnknownRecord
from .name_resolver import UsedNamesRegistry, build_base_name, resolve_unique_name, split_extension
from .oracle_client import OracleError
from .oracle_parsers import OracleResult
from .oracle_prompts import OracleItem
from .sanitizer import sanitize_label

logger = logging.getLogger(__name__)

#============================================


class NamingOracle(Protocol):
	def infer(self, items: list[OracleItem]) -> list[OracleResult]:
		"""
		Return at most one labelled result per requested id.
		"""


class CycleOutcome(str, Enum):
	SKIPPED = "skipped"
	HEALED = "healed"
	FINISHED = "finished"
	PROCESSED = "processed"


class ResetNotConfirmed(RuntimeError):
	"""
	Raised when reset() is called without explicit confirmation.
	"""


#============================================


class BatchOrchestrator:
	"""
	Drives cycles over the queue while processing is enabled.

	At most one oracle call is in flight: every cycle runs under a single
	non-blocking guard, and stop() never releases it.
	"""

	def __init__(
		self,
		queue: FileQueue,
		oracle: NamingOracle,
		config: AppConfig | None = None,
		sleep: Callable[[float], None] = time.sleep,
	) -> None:
		self.queue = queue
		self.oracle = oracle
		self.config = config or AppConfig()
		self._sleep = sleep
		self._in_flight = threading.Lock()
		self._processing = threading.Event()
		self._worker_lock = threading.Lock()
		self._worker: threading.Thread | None = None
		self.status_message = ""

	#============================================
	@property
	def is_processing(self) -> bool:
		return self._processing.is_set()

	#============================================
	@property
	def in_flight(self) -> bool:
		return self._in_flight.locked()

	#============================================
	def start(self) -> None:
		"""
		Enable processing and make sure the single worker thread runs.
		"""
		with self._worker_lock:
			self._processing.set()
			if self._worker is not None:
				return
			self._worker = threading.Thread(
				target=self._worker_main,
				name="batch-orchestrator",
				daemon=True,
			)
			self._worker.start()
		logger.info("Batch processing started")

	#============================================
	def run(self) -> None:
		"""
		Enable processing and run cycles on the calling thread until idle.
		"""
		self._processing.set()
		self._loop()

	#============================================
	def join(self, timeout: float | None = None) -> bool:
		"""
		Wait for the worker thread.

		Returns:
			True when no worker is running anymore.
		"""
		worker = self._worker
		if worker is None:
			return True
		worker.join(timeout)
		return not worker.is_alive()

	#============================================
	def stop(self) -> int:
		"""
		Cancel: stop new cycles and return unmerged records to pending.

		An oracle call already in flight finishes; its merge skips records
		that are no longer processing.

		Returns:
			Number of records reverted.
		"""
		self._processing.clear()
		self.status_message = ""
		reverted = self.queue.revert_processing()
		logger.info("Batch processing stopped (%d record(s) back to pending)", reverted)
		return reverted

	#============================================
	def reset(self, confirm: bool = False) -> None:
		"""
		Discard every record and clear all flags.
		"""
		if not confirm:
			raise ResetNotConfirmed("Reset discards all files; pass confirm=True.")
		self._processing.clear()
		self.status_message = ""
		self.queue.reset()
		logger.info("Queue reset")

	#============================================
	def run_cycle(self) -> CycleOutcome:
		"""
		Run one cycle if processing is enabled and no cycle is in flight.
		"""
		if not self._processing.is_set():
			return CycleOutcome.SKIPPED
		if not self._in_flight.acquire(blocking=False):
			return CycleOutcome.SKIPPED
		try:
			return self._cycle()
		finally:
			self._in_flight.release()

	#============================================
	def _worker_main(self) -> None:
		while True:
			self._loop()
			with self._worker_lock:
				# start() may have re-enabled processing while the loop was exiting
				if not self._processing.is_set():
					self._worker = None
					return

	#============================================
	def _loop(self) -> None:
		while self._processing.is_set():
			outcome = self.run_cycle()
			if outcome is CycleOutcome.SKIPPED and self._processing.is_set():
				with self._in_flight:
					pass

	#============================================
	def _cycle(self) -> CycleOutcome:
		if not self.queue.pending():
			zombies = self.queue.fail_processing()
			if zombies:
				logger.warning("Marked %d stuck record(s) as error", len(zombies))
				return CycleOutcome.HEALED
			self._processing.clear()
			self.status_message = ""
			progress = self.queue.progress()
			logger.info(
				"Batch processing finished: %d completed, %d error(s)",
				progress.completed,
				progress.errors,
			)
			return CycleOutcome.FINISHED

		done_before = self.queue.progress().processed
		chunk, lingering = self.queue.take_chunk(self.config.chunk_size)
		if lingering:
			logger.warning("Marked %d lingering record(s) as error", len(lingering))
		if not chunk:
			return CycleOutcome.HEALED
		total = len(self.queue)
		first = done_before + len(lingering) + 1
		self.status_message = f"Processing files {first} - {min(first + len(chunk) - 1, total)} of {total}"
		logger.info(self.status_message)

		items = [OracleItem(id=record.id, stem=split_extension(record.original_name)[0]) for record in chunk]
		try:
			results = self.oracle.infer(items)
		except OracleError as exc:
			logger.error("Batch of %d failed: %s", len(chunk), exc)
			self._fail_chunk(chunk)
		except Exception:
			logger.exception("Batch of %d failed unexpectedly", len(chunk))
			self._fail_chunk(chunk)
		else:
			try:
				self._merge(chunk, results)
			except Exception:
				# unmerged records stay processing and are healed next cycle
				logger.exception("Merge of batch results failed")
		self.status_message = "Cooling down before next batch..."
		self._sleep(self.config.cooldown_seconds)
		return CycleOutcome.PROCESSED

	#============================================
	def _fail_chunk(self, chunk: list[FileRecord]) -> None:
		for record in chunk:
			try:
				self.queue.mark_error(record.id)
			except (InvalidTransition, UnknownRecord):
				continue

	#============================================
	def _merge(self, chunk: list[FileRecord], results: list[OracleResult]) -> None:
		by_id: dict[str, OracleResult] = {}
		for result in results:
			by_id.setdefault(result.id, result)
		registry = UsedNamesRegistry(
			record.new_name for record in self.queue.completed() if record.new_name
		)
		for record in chunk:
			if not self.queue.is_processing(record.id):
				logger.debug("Skipping %s: no longer processing", record.original_name)
				continue
			result = by_id.get(record.id)
			try:
				if result is None:
					logger.warning("No oracle result for %s", record.original_name)
					self.queue.mark_error(record.id)
					continue
				metadata = IconMetadata(
					english_name=sanitize_label(result.english),
					chinese_name=sanitize_label(result.chinese),
					domain_or_note=sanitize_label(result.domain, allow_dots=True),
				)
				_stem, extension = split_extension(record.original_name)
				base_name = build_base_name(
					metadata.english_name,
					metadata.chinese_name,
					metadata.domain_or_note,
					extension,
				)
				new_name = resolve_unique_name(base_name, registry, extension)
				self.queue.mark_completed(record.id, new_name, metadata)
			except (InvalidTransition, UnknownRecord):
				# cancelled or deleted between the check and the transition
				logger.debug("Left %s untouched", record.original_name)

#!/usr/bin/env python3
"""
Ordered file records and their status transitions.
"""

from __future__ import annotations

# Standard Library
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
import logging
import secrets
import threading
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

#============================================


class FileStatus(str, Enum):
	PENDING = "pending"
	PROCESSING = "processing"
	COMPLETED = "completed"
	ERROR = "error"


class InvalidTransition(RuntimeError):
	"""
	Raised when a record is asked to move along an edge the state machine lacks.
	"""


class UnknownRecord(KeyError):
	"""
	Raised when an id is not in the queue.
	"""


@dataclass(slots=True, frozen=True)
class IconMetadata:
	english_name: str
	chinese_name: str
	domain_or_note: str


@dataclass(slots=True)
class FileRecord:
	"""
	One uploaded file.

	Attributes:
		id: Opaque token assigned at enqueue time.
		original_name: Uploaded filename (stem + extension).
		source: Where the bytes live; read only by the archiver.
		status: Current state.
		new_name: Set only together with COMPLETED.
		metadata: Sanitized labels, set only alongside new_name.
	"""
	id: str
	original_name: str
	source: Path | None = None
	status: FileStatus = FileStatus.PENDING
	new_name: str | None = None
	metadata: IconMetadata | None = None


@dataclass(slots=True, frozen=True)
class QueueProgress:
	total: int
	pending: int
	processing: int
	completed: int
	errors: int

	@property
	def processed(self) -> int:
		# errors count as processed so a run can terminate
		return self.completed + self.errors


QueueListener = Callable[[list[FileRecord]], None]

#============================================


def _new_record_id() -> str:
	return secrets.token_hex(8)


class FileQueue:
	"""
	Insertion-ordered record store exposing only transition operations.

	Readers get copies from records(); fields change only through the
	mark_* / revert / fail methods below.
	"""

	def __init__(self) -> None:
		self._records: dict[str, FileRecord] = {}
		self._lock = threading.RLock()
		self._listeners: list[QueueListener] = []
		# lowercase new_name -> record id, for completed records only
		self._completed_names: dict[str, str] = {}

	#============================================
	def __len__(self) -> int:
		with self._lock:
			return len(self._records)

	#============================================
	def subscribe(self, listener: QueueListener) -> Callable[[], None]:
		"""
		Register a callback receiving a snapshot after every change.

		Returns:
			Function that removes the listener.
		"""
		with self._lock:
			self._listeners.append(listener)

		def _unsubscribe() -> None:
			with self._lock:
				if listener in self._listeners:
					self._listeners.remove(listener)

		return _unsubscribe

	#============================================
	def _notify(self) -> None:
		with self._lock:
			if not self._listeners:
				return
			listeners = list(self._listeners)
			snapshot = self.records()
		for listener in listeners:
			listener(snapshot)

	#============================================
	def enqueue(self, paths: Iterable[Path | str]) -> list[FileRecord]:
		added: list[FileRecord] = []
		with self._lock:
			for path in paths:
				source = Path(path)
				record_id = _new_record_id()
				while record_id in self._records:
					record_id = _new_record_id()
				record = FileRecord(id=record_id, original_name=source.name, source=source)
				self._records[record_id] = record
				added.append(replace(record))
		if added:
			logger.debug("Enqueued %d file(s)", len(added))
			self._notify()
		return added

	#============================================
	def remove(self, record_id: str) -> None:
		with self._lock:
			if record_id not in self._records:
				raise UnknownRecord(record_id)
			record = self._records.pop(record_id)
			if record.status == FileStatus.COMPLETED and record.new_name:
				self._completed_names.pop(record.new_name.lower(), None)
		self._notify()

	#============================================
	def reset(self) -> None:
		with self._lock:
			self._records.clear()
			self._completed_names.clear()
		self._notify()

	#============================================
	def get(self, record_id: str) -> FileRecord:
		with self._lock:
			record = self._records.get(record_id)
			if record is None:
				raise UnknownRecord(record_id)
			return replace(record)

	#============================================
	def records(self) -> list[FileRecord]:
		with self._lock:
			return [replace(record) for record in self._records.values()]

	#============================================
	def _with_status(self, status: FileStatus) -> list[FileRecord]:
		with self._lock:
			return [replace(r) for r in self._records.values() if r.status == status]

	def pending(self) -> list[FileRecord]:
		return self._with_status(FileStatus.PENDING)

	def processing(self) -> list[FileRecord]:
		return self._with_status(FileStatus.PROCESSING)

	def completed(self) -> list[FileRecord]:
		return self._with_status(FileStatus.COMPLETED)

	#============================================
	def progress(self) -> QueueProgress:
		with self._lock:
			counts = {status: 0 for status in FileStatus}
			for record in self._records.values():
				counts[record.status] += 1
			return QueueProgress(
				total=len(self._records),
				pending=counts[FileStatus.PENDING],
				processing=counts[FileStatus.PROCESSING],
				completed=counts[FileStatus.COMPLETED],
				errors=counts[FileStatus.ERROR],
			)

	#============================================
	def take_chunk(self, limit: int) -> tuple[list[FileRecord], list[str]]:
		"""
		Capture the oldest pending records and move them to processing.

		Records still processing from an earlier, unreconciled cycle are
		failed in the same step so they cannot linger.

		Args:
			limit: Maximum chunk size.

		Returns:
			(chunk copies in enqueue order, ids of lingering records failed).
		"""
		chunk: list[FileRecord] = []
		healed: list[str] = []
		with self._lock:
			for record in self._records.values():
				if record.status == FileStatus.PROCESSING:
					record.status = FileStatus.ERROR
					healed.append(record.id)
			for record in self._records.values():
				if len(chunk) >= limit:
					break
				if record.status == FileStatus.PENDING:
					record.status = FileStatus.PROCESSING
					chunk.append(replace(record))
		if chunk or healed:
			self._notify()
		return chunk, healed

	#============================================
	def mark_completed(self, record_id: str, new_name: str, metadata: IconMetadata) -> None:
		with self._lock:
			record = self._records.get(record_id)
			if record is None:
				raise UnknownRecord(record_id)
			if record.status != FileStatus.PROCESSING:
				raise InvalidTransition(f"{record.original_name}: {record.status.value} -> completed")
			lowered = new_name.lower()
			if lowered in self._completed_names:
				raise InvalidTransition(f"Name already assigned: {new_name}")
			record.status = FileStatus.COMPLETED
			record.new_name = new_name
			record.metadata = metadata
			self._completed_names[lowered] = record_id
		self._notify()

	#============================================
	def mark_error(self, record_id: str) -> None:
		with self._lock:
			record = self._records.get(record_id)
			if record is None:
				raise UnknownRecord(record_id)
			if record.status != FileStatus.PROCESSING:
				raise InvalidTransition(f"{record.original_name}: {record.status.value} -> error")
			record.status = FileStatus.ERROR
		self._notify()

	#============================================
	def revert_processing(self) -> int:
		"""
		Return every processing record to pending (stop/cancel).
		"""
		count = 0
		with self._lock:
			for record in self._records.values():
				if record.status == FileStatus.PROCESSING:
					record.status = FileStatus.PENDING
					count += 1
		if count:
			self._notify()
		return count

	#============================================
	def fail_processing(self, exclude: Iterable[str] = ()) -> list[str]:
		"""
		Move processing records to error, except the excluded ids.

		Returns:
			Ids that were failed.
		"""
		keep = set(exclude)
		failed: list[str] = []
		with self._lock:
			for record in self._records.values():
				if record.status == FileStatus.PROCESSING and record.id not in keep:
					record.status = FileStatus.ERROR
					failed.append(record.id)
		if failed:
			self._notify()
		return failed

	#============================================
	def is_processing(self, record_id: str) -> bool:
		with self._lock:
			record = self._records.get(record_id)
			return record is not None and record.status == FileStatus.PROCESSING

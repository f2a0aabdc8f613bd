#!/usr/bin/env python3
"""
Zip bundle of completed records under their new names.
"""

from __future__ import annotations

# Standard Library
from pathlib import Path
import logging
import zipfile

# local repo modules
from .config import ARCHIVE_FOLDER
from .file_queue import FileRecord, FileStatus

logger = logging.getLogger(__name__)

#============================================


class NothingToArchive(RuntimeError):
	"""
	Raised when no completed file exists to bundle.
	"""


def build_archive(records: list[FileRecord], output_path: Path, folder: str = ARCHIVE_FOLDER) -> Path:
	"""
	Write every completed record into one zip file.

	Args:
		records: Queue snapshot; only completed records with a name are used.
		output_path: Zip file to create (parent folders are created). Left
			untouched when a source file cannot be read.
		folder: Folder name inside the archive.

	Returns:
		The written archive path.
	"""
	completed = [
		record for record in records
		if record.status == FileStatus.COMPLETED and record.new_name and record.source is not None
	]
	if not completed:
		raise NothingToArchive("No completed files to download.")
	output_path.parent.mkdir(parents=True, exist_ok=True)
	partial_path = output_path.with_name(output_path.name + ".part")
	try:
		with zipfile.ZipFile(partial_path, "w", compression=zipfile.ZIP_DEFLATED) as bundle:
			for record in completed:
				arcname = f"{folder}/{record.new_name}" if folder else record.new_name
				bundle.writestr(arcname, record.source.read_bytes())
	except OSError:
		partial_path.unlink(missing_ok=True)
		raise
	partial_path.replace(output_path)
	logger.info("Wrote %d file(s) to %s", len(completed), output_path)
	return output_path

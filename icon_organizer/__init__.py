"""
icon_organizer
==============

Batch renamer for PNG icon sets using an LLM naming oracle.
"""

__all__ = [
	"archiver",
	"config",
	"file_queue",
	"name_resolver",
	"oracle_client",
	"orchestrator",
	"sanitizer",
	"uploads",
]

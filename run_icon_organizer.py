#!/usr/bin/env python3
"""
Repo-root runner for icon_organizer.

Examples:
	python run_icon_organizer.py --paths ~/Downloads/icons --dry-run
	python run_icon_organizer.py --paths ~/Downloads/icons -o ~/Desktop/organized_icons.zip
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
	"""
	Run the CLI entrypoint with repo-root import behavior.
	"""
	repo_root = Path(__file__).resolve().parent
	if str(repo_root) not in sys.path:
		sys.path.insert(0, str(repo_root))

	from icon_organizer.cli import main as cli_main

	sys.exit(cli_main())


if __name__ == "__main__":
	main()

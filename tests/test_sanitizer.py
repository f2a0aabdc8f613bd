#!/usr/bin/env python3
"""
Tests for label sanitizing.
"""

import pytest

from icon_organizer.sanitizer import sanitize_label


def test_empty_and_none_become_unknown():
	assert sanitize_label("") == "Unknown"
	assert sanitize_label(None) == "Unknown"
	assert sanitize_label("---") == "Unknown"


def test_replaces_and_collapses_unsafe_characters():
	assert sanitize_label("Home Page!!") == "Home_Page"
	assert sanitize_label("  a / b  ") == "a_b"
	assert sanitize_label("Snake_Case") == "Snake_Case"


def test_keeps_cjk_ideographs():
	assert sanitize_label("首页 图标") == "首页_图标"


def test_dots_only_when_allowed():
	assert sanitize_label("google.com") == "google_com"
	assert sanitize_label("google.com", allow_dots=True) == "google.com"
	assert sanitize_label("..wechat..", allow_dots=True) == "wechat"
	assert sanitize_label("._x_.", allow_dots=True) == "x"
	assert sanitize_label("...", allow_dots=True) == "Unknown"


@pytest.mark.parametrize(
	"label",
	["", "Home", " _a__b_ ", "首页-app", "._x_.", "a..b", "Ünïcödé ✓", "_.._"],
)
@pytest.mark.parametrize("allow_dots", [False, True])
def test_sanitize_is_idempotent(label, allow_dots):
	once = sanitize_label(label, allow_dots)
	assert sanitize_label(once, allow_dots) == once

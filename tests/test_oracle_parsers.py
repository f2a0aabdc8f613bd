#!/usr/bin/env python3
"""
Strict parsing cases for oracle batch responses.
"""

import pytest

from icon_organizer.oracle_parsers import (
	OracleResult,
	ParseError,
	match_results,
	parse_batch_response,
	strip_code_fences,
)


def test_strip_json_code_fence():
	text = '```json\n[{"i": "a"}]\n```'
	assert strip_code_fences(text) == '[{"i": "a"}]'


def test_strip_bare_code_fence():
	assert strip_code_fences('```\n[]\n```') == "[]"
	assert strip_code_fences("  []  ") == "[]"


def test_strip_unbalanced_code_fence():
	assert strip_code_fences('```json\n[{"i": "a"}]') == '[{"i": "a"}]'
	assert strip_code_fences('[{"i": "a"}]\n```') == '[{"i": "a"}]'


def test_parse_response_with_unclosed_fence():
	text = '```json\n[{"i": "a1", "e": "Home", "c": "首页", "d": "app"}]'
	results = parse_batch_response(text)
	assert results == [OracleResult(id="a1", english="Home", chinese="首页", domain="app")]


def test_parse_short_keys():
	results = parse_batch_response('[{"i": "a1", "n": "ic_home", "e": "Home", "c": "首页", "d": "app"}]')
	assert results == [OracleResult(id="a1", english="Home", chinese="首页", domain="app")]


def test_parse_long_keys_inside_fence():
	text = '```json\n[{"id": "b2", "english": "Search", "chinese": "搜索", "domain": "web"}]\n```'
	results = parse_batch_response(text)
	assert results[0].id == "b2"
	assert results[0].domain == "web"


def test_parse_object_wrapping_single_list():
	results = parse_batch_response('{"items": [{"i": "a", "e": "X", "c": "Y", "d": "z"}]}')
	assert [r.id for r in results] == ["a"]


def test_parse_empty_text_is_empty_list():
	assert parse_batch_response("") == []


def test_entries_without_id_are_skipped():
	results = parse_batch_response('[{"e": "X"}, {"i": "b", "e": "Y"}]')
	assert [r.id for r in results] == ["b"]
	assert results[0].chinese == ""


@pytest.mark.parametrize(
	"text",
	["not json", '{"a": 1}', '"just a string"', "[1, 2]", '{"x": [], "y": []}'],
)
def test_parse_rejects_unusable_payloads(text):
	with pytest.raises(ParseError):
		parse_batch_response(text)


def test_match_results_reports_missing_and_ignores_unknown():
	results = [
		OracleResult(id="b", english="B", chinese="乙", domain="d"),
		OracleResult(id="zz", english="Z", chinese="Z", domain="d"),
		OracleResult(id="b", english="B2", chinese="乙", domain="d"),
	]
	mapping, missing = match_results(["a", "b"], results)
	assert set(mapping) == {"b"}
	assert mapping["b"].english == "B"
	assert missing == ["a"]

#!/usr/bin/env python3

import importlib
import sys
from pathlib import Path


sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

match_object = importlib.import_module("arrayuser.match").match_object


def test_subset_matches():
    record = {"username": "baz", "realm": "lab", "password": "x"}
    assert match_object({"username": "baz"}, record) is True
    assert match_object({"username": "baz", "realm": "lab"}, record) is True


def test_differing_value_does_not_match():
    record = {"username": "baz", "realm": "lab"}
    assert match_object({"username": "baz", "realm": "other"}, record) is False


def test_missing_key_does_not_match():
    assert match_object({"email": "a@b.c"}, {"username": "baz"}) is False


def test_missing_key_is_not_none():
    assert match_object({"email": None}, {"username": "baz"}) is False
    assert match_object({"email": None}, {"email": None}) is True


def test_empty_criteria_match_any_mapping():
    assert match_object({}, {"username": "baz"}) is True
    assert match_object({}, {}) is True


def test_nested_mappings_use_subset_rule():
    record = {"username": "baz", "meta": {"role": "admin", "team": "ops"}}
    assert match_object({"meta": {"role": "admin"}}, record) is True
    assert match_object({"meta": {"role": "user"}}, record) is False
    assert match_object({"meta": {"role": "admin"}}, {"meta": "admin"}) is False


def test_non_mapping_candidate():
    assert match_object({"username": "baz"}, None) is False
    assert match_object({}, ["username"]) is False


def test_lists_compare_by_equality():
    record = {"roles": ["a", "b"]}
    assert match_object({"roles": ["a", "b"]}, record) is True
    assert match_object({"roles": ["a"]}, record) is False

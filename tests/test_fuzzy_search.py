"""Tests for fuzzy place-name matching."""

import pytest

from voice_transit.domain.models import StopLocation
from voice_transit.nlp.fuzzy_search import (
    calculate_similarity,
    find_best_matches,
    levenshtein_distance,
    matches_any_word,
    normalize_text,
    normalize_words,
)


def test_german_letters_are_transliterated():
    assert normalize_text("Müller Straße") == "muellerstrasse"
    assert normalize_text("Mueller Strasse") == "muellerstrasse"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Frankfurt (Main) Hbf", "frankfurtmainhbf"),
        ("Gießen", "giessen"),
        ("Köln/Bonn Flughafen", "koelnbonnflughafen"),
        ("Bad Homburg v.d.Höhe", "badhomburgvdhoehe"),
        ("Montréal", "montreal"),
        ("", ""),
        ("  !!  ", ""),
    ],
)
def test_normalize_text(text, expected):
    assert normalize_text(text) == expected


@pytest.mark.parametrize("text", ["Müller Straße", "Frankfurt (Main) Hbf", "ÄÖÜ ß", "a  b"])
def test_normalize_is_idempotent(text):
    once = normalize_text(text)
    assert normalize_text(once) == once


def test_normalize_words_keeps_word_boundaries():
    assert normalize_words("Frankfurt (Main) Süd") == ["frankfurt", "main", "sued"]


def test_levenshtein_distance():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("mainz", "mainz") == 0


def test_identical_names_score_one():
    assert calculate_similarity("Wiesbaden", "wiesbaden") == 1.0
    assert calculate_similarity("", "") == 1.0


def test_one_empty_name_scores_zero():
    assert calculate_similarity("", "Mainz") == 0.0
    assert calculate_similarity("Mainz", "!!") == 0.0


def test_containment_scores_point_nine():
    assert calculate_similarity("Frankfurt", "Frankfurt (Main) Hbf") == 0.9
    assert calculate_similarity("Frankfurt (Main) Hbf", "Frankfurt") == 0.9


@pytest.mark.parametrize(
    "first, second",
    [("Wiesbaden", "Viesbaden"), ("Darmstadt", "Darmstat"), ("Mainz", "Hanau"), ("Offenbach", "Offenburg")],
)
def test_similarity_is_symmetric_and_bounded(first, second):
    score = calculate_similarity(first, second)
    assert score == calculate_similarity(second, first)
    assert 0.0 <= score <= 1.0


def test_shared_prefix_scores_higher():
    # Same edit distance, but only the first pair shares its beginning
    assert calculate_similarity("darmstadt", "darmstadx") > calculate_similarity(
        "darmstadt", "xarmstadt"
    )


def test_find_best_matches_ranks_frankfurt_entries_first():
    candidates = ["Wiesbaden Hbf", "Frankfurt (Main) Hbf", "Frankfurt (Main) Süd"]
    matches = find_best_matches("frankfurt", candidates)
    assert [m.item for m in matches] == ["Frankfurt (Main) Hbf", "Frankfurt (Main) Süd"]
    assert all(m.score == 0.9 for m in matches)


def test_find_best_matches_ties_keep_input_order():
    candidates = ["Mainz Nord", "Mainz Hbf", "Mainz Römisches Theater"]
    matches = find_best_matches("Mainz", candidates, threshold=0.0)
    assert [m.item for m in matches] == candidates


def test_find_best_matches_threshold_and_limit():
    candidates = ["Mainz", "Mainz Hbf", "Hanau", "Mainz-Kastel", "Mainz Nord"]
    matches = find_best_matches("mainz", candidates, threshold=0.5, limit=2)
    assert [m.item for m in matches] == ["Mainz", "Mainz Hbf"]
    assert matches[0].score == 1.0


def test_find_best_matches_with_key():
    stops = [StopLocation("1", "Hanau Hbf"), StopLocation("2", "Darmstadt Hbf")]
    matches = find_best_matches("Darmstadt", stops, key=lambda stop: stop.name)
    assert [m.item.id for m in matches] == ["2"]


def test_find_best_matches_empty_candidates():
    assert find_best_matches("Mainz", []) == []


def test_matches_any_word():
    assert matches_any_word("Hauptwache", "Frankfurt (Main) Hauptwache")
    assert matches_any_word("Hauptwahe", "Frankfurt (Main) Hauptwache")
    assert not matches_any_word("Wiesbaden", "Frankfurt (Main) Hauptwache")

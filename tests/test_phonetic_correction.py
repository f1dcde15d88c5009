"""Tests for phonetic variant generation."""

from voice_transit.nlp.phonetic_correction import apply_phonetic_corrections, umlaut_variants


def test_wiesbaden_variants():
    """Original first, then w->v, a->ä and the trailing-e variant."""
    assert apply_phonetic_corrections("Wiesbaden") == [
        "Wiesbaden",
        "Viesbaden",
        "Wiesbäden",
        "Wiesbadene",
    ]


def test_original_is_always_first_and_variants_are_unique():
    variants = apply_phonetic_corrections("Offenbach")
    assert variants[0] == "Offenbach"
    assert len(variants) == len(set(variants))


def test_case_is_kept_on_leading_capital():
    variants = apply_phonetic_corrections("Villingen")
    assert "Willingen" in variants
    assert "Vilingen" in variants


def test_ch_rules():
    variants = apply_phonetic_corrections("Bochum")
    assert "Boschum" in variants
    assert "Bokum" in variants


def test_sch_rule():
    assert "Chwalbach" in apply_phonetic_corrections("Schwalbach")


def test_z_and_ts_rules():
    assert "Maints" in apply_phonetic_corrections("Mainz")
    assert "Gozen" in apply_phonetic_corrections("Gotsen")


def test_trailing_e_is_removed_or_added():
    assert "Hanau" in apply_phonetic_corrections("Hanaue")
    assert "Hanaue" in apply_phonetic_corrections("Hanau")


def test_vowel_pairs():
    assert "Maintal" in apply_phonetic_corrections("Meintal")
    assert "Weinheim" in apply_phonetic_corrections("Wainheim")


def test_umlaut_variants():
    assert umlaut_variants("Muenchen") == ["muenchen", "münchen"]
    assert umlaut_variants("muenchen") == ["münchen"]
    assert umlaut_variants("Giessen") == ["giessen", "gießen"]


def test_umlaut_variants_of_plain_name():
    assert umlaut_variants("mainz") == []
    assert umlaut_variants("Mainz") == ["mainz"]


def test_empty_query_has_no_variants():
    assert apply_phonetic_corrections("") == [""]
    assert apply_phonetic_corrections("  ") == ["  "]

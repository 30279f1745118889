"""
Tests for the misconception table.

The bundled table is loaded from trustie/data/misconceptions.json.
"""

import json

import pytest

from trustie.services.trust.misconceptions import (
    MisconceptionTable,
    load_misconception_table,
    negation_scope,
)


@pytest.fixture(scope="module")
def table():
    return load_misconception_table()


def test_bundled_table_loads(table):
    assert table.version == "2025.06.1"
    assert len(table) == 20


@pytest.mark.parametrize(
    "claim, expected_id",
    [
        ("The Great Wall of China is visible from space.", "great-wall-visible-from-space"),
        ("THE GREAT WALL OF CHINA CAN BE SEEN FROM THE MOON", "great-wall-visible-from-space"),
        ("Humans only use 10% of their brains.", "ten-percent-brain"),
        ("Goldfish have a three-second memory.", "goldfish-three-second-memory"),
        ("Lightning never strikes the same place twice.", "lightning-never-strikes-twice"),
        ("Bats are blind.", "bats-are-blind"),
        ("Vikings wore horned helmets into battle.", "viking-horned-helmets"),
        ("Humans have five senses.", "five-senses-only"),
        ("You can see the Great Wall of China from space.", "great-wall-visible-from-space"),
    ],
)
def test_known_myths_match(table, claim, expected_id):
    hit = table.match(claim)
    assert hit is not None, f"No match for: {claim}"
    assert hit.id == expected_id


def test_great_wall_correction_says_not_visible(table):
    hit = table.match("The Great Wall of China is visible from space")
    assert "not visible" in hit.correction


@pytest.mark.parametrize(
    "claim",
    [
        "The Great Wall of China is not visible from space with the naked eye.",
        "It is a myth that lightning never strikes the same place twice.",
        "Bats are not blind.",
        "You cannot see the Great Wall of China from space.",
        "No one can see the Great Wall of China from space.",
        "The Great Wall of China isn't visible from orbit.",
        "The Great Wall of China is invisible from space.",
        "Water boils at 100 degrees Celsius at sea level.",
        "The Great Wall of China is over 21,000 kilometres long.",
        "",
    ],
)
def test_corrections_and_true_claims_do_not_match(table, claim):
    assert table.match(claim) is None


@pytest.mark.parametrize(
    "claim",
    [
        "The Great Wall of China is visible from space, no doubt about it.",
        "Not many people know that the Great Wall of China is visible from space.",
        "You can see the Great Wall of China from space, which is not surprising given its length.",
        "Never forget: goldfish have a three-second memory.",
    ],
)
def test_negation_outside_the_myth_does_not_hide_it(table, claim):
    assert table.match(claim) is not None, f"No match for: {claim}"


def test_negation_scope_is_the_phrase_and_its_lead_in():
    entry = MisconceptionTable.from_dict({
        "version": "test",
        "entries": [{"id": "x", "pattern": "moon.*cheese", "correction": "It is rock."}],
    }).entries[0]
    claim = "Honestly, some people say the moon is made of cheese, no kidding."

    assert negation_scope(claim, entry.pattern.search(claim)) == "people say the moon is made of cheese"


def test_entry_can_opt_out_of_negation():
    table = MisconceptionTable.from_dict({
        "version": "test",
        "default_negation": r"\bnever\b",
        "entries": [{"id": "x", "pattern": "never rains", "correction": "It does.", "negation": None}],
    })
    assert table.match("It never rains in California") is not None


def test_first_matching_entry_wins():
    table = MisconceptionTable.from_dict({
        "version": "test",
        "entries": [
            {"id": "first", "pattern": "sky", "correction": "one"},
            {"id": "second", "pattern": "sky is green", "correction": "two"},
        ],
    })
    assert table.match("The sky is green").id == "first"


def test_entry_without_unless_uses_default():
    table = MisconceptionTable.from_dict({
        "version": "test",
        "default_unless": r"\bnot\b",
        "entries": [{"id": "x", "pattern": "moon.*cheese", "correction": "It is rock."}],
    })
    assert table.match("The moon is made of cheese") is not None
    assert table.match("The moon is not made of cheese") is None


@pytest.mark.parametrize(
    "entry",
    [
        {"id": "broken", "pattern": "(unclosed", "correction": "x"},
        {"id": "missing-correction", "pattern": "x"},
    ],
)
def test_invalid_entries_are_rejected(entry):
    with pytest.raises(ValueError):
        MisconceptionTable.from_dict({"version": "bad", "entries": [entry]})


def test_load_from_custom_path(tmp_path):
    path = tmp_path / "table.json"
    path.write_text(json.dumps({
        "version": "custom-1",
        "entries": [{"id": "flat", "pattern": "earth is flat", "correction": "The Earth is round."}],
    }))

    table = load_misconception_table(path)

    assert table.version == "custom-1"
    assert table.match("They say the Earth is flat").correction == "The Earth is round."

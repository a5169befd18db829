"""Shared fixtures for calcbook tests."""

import pytest

from calcbook.items import ItemRecognizer, TakeoffRecord
from calcbook.pipeline import CalculationPipeline

SOLDIER_PILE = '9.625"Øx0.545" drilled soldier pile H=27\'-10" E=15\'-0"'
HP_PILE = 'HP12x63 soldier pile H=24\'-9"'
HEEL_BLOCK = 'Heel block (2\'-0"x2\'-0"x3\'-0")'


@pytest.fixture
def make_record():
    """Factory for takeoff records with sensible defaults."""
    def _make(description, category="", takeoff=None, unit="", page="", raw_row=2, **kwargs):
        return TakeoffRecord(
            description=description,
            estimate_category=category,
            takeoff=takeoff,
            unit=unit,
            page=page,
            raw_row=raw_row,
            **kwargs,
        )
    return _make


@pytest.fixture
def recognizer():
    return ItemRecognizer()


@pytest.fixture
def parse(make_record, recognizer):
    """Recognize a single description into its first ParsedItem."""
    def _parse(description, category="", takeoff=None, unit="", page="", row=None):
        items = recognizer.recognize(make_record(description, category, takeoff, unit, page))
        assert items, f"not recognized: {description}"
        item = items[0]
        return item.at_row(row) if row is not None else item
    return _parse


@pytest.fixture
def run():
    """Run the pipeline over records with the default configuration."""
    def _run(records):
        return CalculationPipeline().run(records)
    return _run


@pytest.fixture
def soldier_pile_records(make_record):
    return [
        make_record(SOLDIER_PILE, "SOE", 10, "EA", "SOE-101.00", raw_row=2),
        make_record(SOLDIER_PILE, "SOE", 5, "EA", "SOE-101.00", raw_row=3),
        make_record(HP_PILE, "SOE", 8, "EA", "SOE-101.00", raw_row=4),
    ]


@pytest.fixture
def heel_block_records(make_record):
    return [
        make_record(HEEL_BLOCK, "SOE", 4, "EA", "SOE-200", raw_row=2),
        make_record(HEEL_BLOCK, "SOE", 6, "EA", "SOE-200", raw_row=3),
    ]

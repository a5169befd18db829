"""Tests for the item classifier."""

import pytest

from calcbook.errors import SectionMismatchError, UnknownItemTypeError
from calcbook.formulas import BUILDERS, classify, verify_registry
from calcbook.items import ItemType, Section
from calcbook.items.types import section_of


def test_registry_covers_every_item_type():
    verify_registry()
    assert set(BUILDERS) == set(ItemType)


def test_classify_returns_builder():
    assert classify(Section.SOE, ItemType.HEEL_BLOCK) is BUILDERS[ItemType.HEEL_BLOCK]


@pytest.mark.parametrize("item_type", list(ItemType))
def test_classify_under_own_section(item_type):
    assert callable(classify(section_of(item_type), item_type))


def test_section_mismatch():
    with pytest.raises(SectionMismatchError):
        classify(Section.SOE, ItemType.MAT_SLAB)


def test_unknown_item_type():
    with pytest.raises(UnknownItemTypeError) as exc_info:
        classify(Section.SOE, "flying_buttress")
    assert exc_info.value.item_type == "flying_buttress"

"""
Item Classifier - maps every ItemType to its formula builder.

Dispatch is strict: a tag with no builder, or a tag dispatched under a
section it does not belong to, is a structural error and is never
caught by the pipeline.
"""

from typing import Dict

from ..errors import RegistryError, SectionMismatchError, UnknownItemTypeError
from ..items.types import ItemType, Section, section_of
from . import demolition, excavation, foundation, rock_excavation, soe, waterproofing
from .base import Builder

BUILDERS: Dict[ItemType, Builder] = {}
for _module in (demolition, excavation, rock_excavation, soe, foundation, waterproofing):
    BUILDERS.update(_module.BUILDERS)


def verify_registry() -> None:
    """Raise RegistryError if any ItemType lacks a builder."""
    missing = [t.value for t in ItemType if t not in BUILDERS]
    if missing:
        raise RegistryError(f"No formula builder for item types: {', '.join(missing)}")


def classify(section: Section, item_type: ItemType) -> Builder:
    """
    Resolve the builder for an item type under a section.

    Raises:
        UnknownItemTypeError: item_type has no registered builder
        SectionMismatchError: item_type belongs to a different section
    """
    builder = BUILDERS.get(item_type)
    if builder is None:
        raise UnknownItemTypeError(item_type, section)
    expected = section_of(item_type)
    if expected != section:
        raise SectionMismatchError(
            f"Item type {item_type.value!r} belongs to {expected.value}, not {section.value}"
        )
    return builder


verify_registry()

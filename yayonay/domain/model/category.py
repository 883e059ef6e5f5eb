"""Attribute facets offered per category."""

from yayonay.domain.value.common import ValueObject


class CategoryAttribute(ValueObject):
    """An attribute users can vote on, with the labels shown on the buttons."""

    name: str
    yay_text: str = "Yay!"
    nay_text: str = "Nay!"


_CATALOG: dict[str, list[CategoryAttribute]] = {
    "food": [
        CategoryAttribute(name="Taste"),
        CategoryAttribute(name="Presentation"),
        CategoryAttribute(name="Value"),
    ],
    "fruit": [
        CategoryAttribute(name="Taste"),
        CategoryAttribute(name="Texture"),
        CategoryAttribute(name="Freshness"),
    ],
    "drink": [
        CategoryAttribute(name="Taste"),
        CategoryAttribute(name="Aroma"),
        CategoryAttribute(name="Value"),
    ],
    "art": [
        CategoryAttribute(name="Creativity", yay_text="Creative!", nay_text="Basic"),
        CategoryAttribute(name="Technique", yay_text="Skilled!", nay_text="Amateur"),
        CategoryAttribute(name="Impact", yay_text="Powerful!", nay_text="Weak"),
    ],
    "travel": [
        CategoryAttribute(name="Beauty"),
        CategoryAttribute(name="Culture"),
        CategoryAttribute(name="Activities"),
    ],
    "sports": [
        CategoryAttribute(name="Excitement"),
        CategoryAttribute(name="Skill Level"),
        CategoryAttribute(name="Accessibility"),
    ],
}

_DEFAULT = [
    CategoryAttribute(name="Overall"),
    CategoryAttribute(name="Experience"),
]


def attributes_for_category(category_name: str) -> list[CategoryAttribute]:
    """Return the attribute facets for a category name (case-insensitive)."""
    return list(_CATALOG.get(category_name.strip().lower(), _DEFAULT))

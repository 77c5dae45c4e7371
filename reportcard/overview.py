"""Page 0 of a report card: school banner, school attributes, demographics."""
from __future__ import annotations

from typing import List, Tuple

from bs4 import Tag

from reportcard.extraction.rows import TableExtractionError, node_text

RACE_LABELS = [
    "Indian",
    "Asian",
    "Black",
    "Pacific Islander",
    "Hispanic",
    "White",
    "Mixed",
]


def _texts_by_class(node: Tag, name: str) -> List[str]:
    return [node_text(t) for t in node.find_all(class_=name)]


def _first_by_class(node: Tag, name: str) -> Tag:
    found = node.find(class_=name)
    if found is None:
        raise TableExtractionError(f"Overview page has no .{name} element")
    return found


def parse_school_banner(page: Tag) -> Tuple[str, str]:
    """(school name, school address) from the report-card masthead."""
    banner = _first_by_class(page, "report-card-mp")
    name = "".join(_texts_by_class(banner, "hdr-left"))
    address = "".join(_texts_by_class(banner, "schoolAddress"))
    return name, address


def parse_school_attributes(school: Tag) -> List[Tuple[str, str]]:
    return list(zip(_texts_by_class(school, "left-span"), _texts_by_class(school, "right-span")))


def parse_demographics(student: Tag) -> List[Tuple[str, str]]:
    """
    Race breakdown plus the qualifier/percentage pairs of the student block.

    The pie chart carries its percentages as one comma-separated text in a
    fixed race order.
    """
    pie = _first_by_class(student, "pie")
    shares = node_text(pie).replace(" ", "").split(",")
    if len(shares) != len(RACE_LABELS):
        raise TableExtractionError(
            f"Demographics pie has {len(shares)} values, expected {len(RACE_LABELS)}: {shares!r}"
        )
    races = list(zip(RACE_LABELS, shares))
    qualifiers = _texts_by_class(student, "col-left")
    percentages = _texts_by_class(student, "col-right")
    return races + list(zip(qualifiers, percentages))


def parse_overview(page: Tag) -> List[List[str]]:
    """Records [school name, address, attribute, value] for the overview page."""
    name, address = parse_school_banner(page)
    school = page.select_one("div.school")
    student = page.select_one("div.student")
    if school is None or student is None:
        raise TableExtractionError("Overview page is missing div.school or div.student")

    pairs = parse_school_attributes(school) + parse_demographics(student)
    return [[name, address, k, v] for k, v in pairs]

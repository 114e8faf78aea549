"""
Deck analytics.

Aggregates derived from a composition: mana curve, color and type
distributions, average mana value. Everything is recomputed on each call;
decks are small and nothing is cached.
"""

from dataclasses import dataclass, field

from decksmith.models.deck import Composition, CompositionEntry
from decksmith.services.format_rules import DEFAULT_RULES, FormatRules

# Highest curve bucket; it also collects every mana value above it
MAX_CURVE_BUCKET = 7

COLOR_ORDER = ("W", "U", "B", "R", "G", "C")

# Order matters: the first matching type claims the card
TYPE_GROUPS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("lands", ("land",)),
    ("creatures", ("creature",)),
    ("planeswalkers", ("planeswalker",)),
    ("spells", ("instant", "sorcery")),
    ("artifacts", ("artifact",)),
    ("enchantments", ("enchantment",)),
)


@dataclass(frozen=True, slots=True)
class CurveBucket:
    """Copies at one mana value (bucket 7 means 7 or more)."""

    bucket: int
    count: int


@dataclass
class DeckStatistics:
    """Summary statistics for a deck."""

    total_cards: int
    unique_cards: int
    is_legal: bool
    average_mana_value: float
    land_count: int
    mana_curve: list[CurveBucket] = field(default_factory=list)
    colors: dict[str, int] = field(default_factory=dict)
    types: dict[str, int] = field(default_factory=dict)


def curve_bucket(mana_value: float) -> int:
    """Curve bucket for a mana value."""
    if mana_value >= MAX_CURVE_BUCKET:
        return MAX_CURVE_BUCKET
    return int(mana_value)


def mana_curve(composition: Composition) -> list[CurveBucket]:
    """
    Copies per mana value, buckets 0 through 7.

    INVARIANT: sum of bucket counts == composition.total_count().
    """
    counts = [0] * (MAX_CURVE_BUCKET + 1)
    for entry in composition:
        counts[curve_bucket(entry.card.mana_value)] += entry.count
    return [CurveBucket(bucket=b, count=c) for b, c in enumerate(counts)]


def cards_at_mana_value(composition: Composition, bucket: int) -> list[CompositionEntry]:
    """Entries that fall in one curve bucket."""
    return [entry for entry in composition if curve_bucket(entry.card.mana_value) == bucket]


def color_distribution(composition: Composition) -> dict[str, int]:
    """
    Copies per color; colorless cards count under "C".

    A multicolor card counts once for each of its colors.
    """
    counts = dict.fromkeys(COLOR_ORDER, 0)
    for entry in composition:
        colors = entry.card.colors
        if not colors:
            counts["C"] += entry.count
            continue
        for color in colors:
            if color in counts:
                counts[color] += entry.count
    return counts


def type_of(type_line: str) -> str | None:
    """Type group for a type line, or None if no group matches."""
    lowered = type_line.lower()
    for group, markers in TYPE_GROUPS:
        if any(marker in lowered for marker in markers):
            return group
    return None


def type_distribution(composition: Composition) -> dict[str, int]:
    """Copies per type group."""
    counts = {group: 0 for group, _ in TYPE_GROUPS}
    for entry in composition:
        group = type_of(entry.card.type_line)
        if group is not None:
            counts[group] += entry.count
    return counts


def group_by_type(composition: Composition) -> dict[str, list[CompositionEntry]]:
    """Entries grouped for display; unmatched types go to "other"."""
    groups: dict[str, list[CompositionEntry]] = {group: [] for group, _ in TYPE_GROUPS}
    groups["other"] = []
    for entry in composition:
        groups[type_of(entry.card.type_line) or "other"].append(entry)
    return groups


def average_mana_value(composition: Composition) -> float:
    """Average mana value over non-land copies; 0.0 for a deck of only lands."""
    total = 0.0
    copies = 0
    for entry in composition:
        if "land" in entry.card.type_line.lower():
            continue
        total += entry.card.mana_value * entry.count
        copies += entry.count
    if copies == 0:
        return 0.0
    return round(total / copies, 2)


def deck_statistics(
    composition: Composition,
    rules: FormatRules = DEFAULT_RULES,
) -> DeckStatistics:
    """Collect every aggregate for one deck."""
    types = type_distribution(composition)
    return DeckStatistics(
        total_cards=composition.total_count(),
        unique_cards=composition.unique_count(),
        is_legal=rules.is_legal(composition),
        average_mana_value=average_mana_value(composition),
        land_count=types["lands"],
        mana_curve=mana_curve(composition),
        colors=color_distribution(composition),
        types=types,
    )

"""
Arena Deck Formatter.

Renders a composition as MTG Arena import text:

    Deck
    4 Lightning Bolt (M11) 149

Set codes are upper-cased and collector numbers lose leading zeros, as Arena
requires. Entries without a catalog match, set code or collector number
cannot be imported and are skipped.
"""

from decksmith.models.deck import Composition, CompositionEntry


class ExportError(Exception):
    """Raised when a deck has no entries that Arena can import."""


def is_exportable(entry: CompositionEntry) -> bool:
    identity = entry.card.identity
    return identity is not None and bool(identity.set_code) and bool(identity.collector_number)


def format_deck_for_arena(composition: Composition) -> str:
    """
    Format a deck as Arena import text.

    Raises:
        ExportError: If no entry carries set and collector number data
    """
    exportable = [entry for entry in composition if is_exportable(entry)]
    if not exportable:
        raise ExportError("No cards with set and collector number data to export")

    lines: list[str] = ["Deck"]
    for entry in exportable:
        lines.append(_format_card_line(entry))
    return "\n".join(lines)


def _format_card_line(entry: CompositionEntry) -> str:
    """Format a single card line in Arena format."""
    identity = entry.card.identity
    if identity is None or not identity.set_code or not identity.collector_number:
        msg = f"{entry.card.display_name} has no set and collector number data"
        raise ExportError(msg)
    collector_number = identity.collector_number.lstrip("0") or "0"
    return f"{entry.count} {identity.name} ({identity.set_code.upper()}) {collector_number}"

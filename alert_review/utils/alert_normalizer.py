"""
Alert Normalizer - Label Canonicalization and Aggregation

Turns raw alert labels (email subjects, incident service names) into
deduplicated, counted, sorted AggregatedAlert groups.

A raw label may carry a multiplier annotation meaning "this record stands
for N occurrences". Two bracket notations are recognized:

    [3x] Disk full        -> ("disk full", 3)
    [FIRING:2] cpu high   -> ("cpu high", 2)

Only the leftmost annotation in a label is honored; later ones are
stripped without adding to the count, so a normalized label never
carries an annotation.
"""

import logging
import re
from typing import Iterable

from alert_review.models.alert import AggregatedAlert, Multiplier, MultiplierTag, NoMultiplier

logger = logging.getLogger(__name__)


class AlertNormalizer:
    """
    Normalizes raw alert labels and aggregates them into counted groups.

    Stateless; one instance can be shared between sources.
    """

    # Ordered alternatives: group 1 is the "[Nx]" count, group 2 the "[FIRING:N]" count
    MULTIPLIER_PATTERN = re.compile(r"\[(\d+)x\]|\[firing:(\d+)\]", re.IGNORECASE)

    def _annotations(self, text: str) -> list[Multiplier]:
        """Every valid annotation token in ``text``, left to right."""
        tags = []
        for match in self.MULTIPLIER_PATTERN.finditer(text):
            digits = match.group(1) if match.group(1) is not None else match.group(2)
            value = int(digits, 10)
            if value < 1:
                logger.debug(f"Ignoring zero multiplier annotation {match.group(0)!r}")
                continue
            tags.append(Multiplier(value=value, start=match.start(), end=match.end()))
        return tags

    def parse_multiplier(self, text: str) -> MultiplierTag:
        """
        Find the leftmost valid multiplier annotation in ``text``.

        Args:
            text: Label text to search.

        Returns:
            Multiplier with the parsed value and token span, or NoMultiplier.
            A zero count is not a valid annotation and is skipped.
        """
        tags = self._annotations(text)
        return tags[0] if tags else NoMultiplier()

    def normalize(self, raw: str) -> tuple[str, int]:
        """
        Normalize a single raw label.

        Args:
            raw: Raw label (subject line or service name).

        Returns:
            Tuple of (label, multiplier). The label is lower-cased, trimmed
            and stripped of every valid annotation token; the multiplier is
            the value of the leftmost one.
        """
        text = raw.lower().strip()
        tags = self._annotations(text)

        if not tags:
            return text, NoMultiplier().value

        pieces = []
        position = 0
        for tag in tags:
            pieces.append(text[position : tag.start])
            position = tag.end
        pieces.append(text[position:])

        # pieces are joined with a space so no new token can form across a cut
        label = " ".join(piece.strip() for piece in pieces if piece.strip())
        return label, tags[0].value

    def aggregate(self, raws: Iterable[str]) -> list[AggregatedAlert]:
        """
        Aggregate raw labels into counted groups.

        Args:
            raws: Raw labels in encounter order.

        Returns:
            One AggregatedAlert per distinct normalized label, sorted by count
            descending. Equal counts keep first-encounter order.
        """
        totals: dict[str, int] = {}
        for raw in raws:
            label, multiplier = self.normalize(raw)
            totals[label] = totals.get(label, 0) + multiplier

        alerts = [AggregatedAlert(label=label, count=count) for label, count in totals.items()]
        # sorted() is stable, so ties stay in dict insertion order
        return sorted(alerts, key=lambda alert: alert.count, reverse=True)


_default_normalizer = AlertNormalizer()


def normalize(raw: str) -> tuple[str, int]:
    """Convenience wrapper around AlertNormalizer.normalize."""
    return _default_normalizer.normalize(raw)


def aggregate(raws: Iterable[str]) -> list[AggregatedAlert]:
    """
    Convenience function to aggregate a batch of raw labels.

    Args:
        raws: Raw labels.

    Returns:
        Sorted list of aggregated alerts.
    """
    return _default_normalizer.aggregate(raws)

"""
Report layout shared by the Doc and Sheet renderers.

Text of the table header, rows, footer and failure lines, plus the color
palette (Wikimedia brand colors, https://meta.wikimedia.org/wiki/Brand/colours).
"""

from alert_review.models.alert import ReportSection
from alert_review.utils.statistics import share_percentage

PALETTE = {
    "White": "#FFFFFF",
    "Black": "#000000",
    "Black75": "#404040",
    "Black50": "#7F7F7F",
    "Black25": "#BFBFBF",
    "BlueAAA": "#0C57A8",
}


def hex_to_rgb(hex_color: str) -> dict[str, float]:
    """'#0C57A8' -> {'red': 0.047, 'green': 0.341, 'blue': 0.659}"""
    value = hex_color.lstrip("#")
    red, green, blue = (int(value[i : i + 2], 16) / 255 for i in (0, 2, 4))
    return {"red": red, "green": green, "blue": blue}


def section_header(section: ReportSection) -> list[str]:
    return [f"Top {section.top_count} count", section.label_column]


def table_rows(section: ReportSection) -> list[list[str]]:
    """One ``["N (P%)", label]`` row per top alert; P is the share of the section total."""
    total = section.total_count
    return [
        [f"{alert.count} ({share_percentage(alert.count, total)}%)", alert.label]
        for alert in section.top_alerts
    ]


def footer_text(section: ReportSection) -> str:
    return (
        f"The top {section.top_count} alerts represent {section.top_percentage}% "
        f"of the total number of alerts ({section.total_count})."
    )


def failure_text(section: ReportSection) -> str:
    return f"Failed to fetch {section.title}: {section.error}"

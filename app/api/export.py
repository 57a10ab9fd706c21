"""Export functionality for the missing-links report."""

import io
import json
from typing import Dict, List, Any

import pandas as pd

from ..models.comparison import ComparisonResult


def missing_links_report(differences: Dict[str, Any]) -> Dict[str, List[str]]:
    """Flatten comparison differences to ``{page-slug: [missing links]}``.

    Pages without missing links are left out.

    Args:
        differences: The ``differences`` mapping of a comparison result

    Returns:
        Missing-links report

    Raises:
        ValueError: If the differences are not shaped like a comparison result
    """
    return ComparisonResult.from_dict(differences).missing_report()


def export_json(report: Dict[str, List[str]]) -> str:
    """Export a missing-links report as pretty-printed JSON."""
    return json.dumps(report, indent=2)


def export_csv(report: Dict[str, List[str]]) -> str:
    """Export a missing-links report to CSV format.

    Args:
        report: Missing-links report

    Returns:
        CSV content as string, one row per (page, missing link)
    """
    pages = []
    links = []
    for page, missing in report.items():
        for link in missing:
            pages.append(page)
            links.append(link)

    df = pd.DataFrame({
        'Page': pages,
        'Missing Link': links
    })

    output = io.StringIO()
    df.to_csv(output, index=False)
    return output.getvalue()

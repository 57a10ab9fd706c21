"""API routes for the Link Parity Checker."""

from .routes import router
from .export import missing_links_report, export_json, export_csv

__all__ = ['router', 'missing_links_report', 'export_json', 'export_csv']

"""
Report Module - Black Box Interface

Purpose: Render and persist per-container audit reports
Interface: ReportWriter.collect(), render_report()
Hidden: File naming, collision handling, ANSI to HTML conversion
"""

from .formats import HTML_FOOTER, HTML_HEADER, ansi_to_html, render_report
from .writer import ReportWriter

__all__ = ["HTML_FOOTER", "HTML_HEADER", "ReportWriter", "ansi_to_html", "render_report"]

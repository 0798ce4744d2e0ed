# File: fetch_window/report/__init__.py
"""fetch_window.report: генерация отчётов (JSON и HTML) для CLI и тестов."""

from fetch_window.report.html_report import render_html
from fetch_window.report.json_report import render_json

__all__ = ["render_json", "render_html"]

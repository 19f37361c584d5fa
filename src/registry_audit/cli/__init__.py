"""Command-line interface package for registry audits."""

from .app import build_parser, create_backend, create_service, main, run
from .reporting import render, render_csv, render_html, render_json, render_table

__all__ = [
    "build_parser",
    "create_backend",
    "create_service",
    "main",
    "render",
    "render_csv",
    "render_html",
    "render_json",
    "render_table",
    "run",
]

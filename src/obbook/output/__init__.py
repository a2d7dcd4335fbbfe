"""
Module: output

Purpose:
    Preview rendering of laid-out book pages.

Key Functions:
    - render(): Nodes -> PreviewPage
    - render_page(): PageLayout -> PIL image

Key Classes:
    - PreviewPage: Bitmap with BGRA export
"""

from .renderer import PreviewPage, render, render_page

__all__ = [
    "PreviewPage",
    "render",
    "render_page",
]

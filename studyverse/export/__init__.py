"""Export functionality for study artifacts."""

from .docx_generator import export_history_item

__all__ = ["export_history_item"]

"""Summary formatting for the /summary endpoint."""

from app.core.domain_types import Record


def format_summary(record: Record) -> str:
    return f"{record.name} - Height: {record.height}, Weight: {record.weight}"

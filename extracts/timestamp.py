"""Parsing of replication state files (``*.state.txt``)."""

from __future__ import annotations


def parse_state_timestamp(document: str | bytes) -> str | None:
    """
    Extract the snapshot timestamp from a timestamp marker document.

    The last non-blank line has the shape ``timestamp=2023-01-01T00\\:00\\:00Z``.
    The value after the final ``=`` is returned with every backslash removed,
    or None when the document has no non-blank line.
    """
    if isinstance(document, bytes):
        document = document.decode("utf-8", errors="replace")

    lines = [line for line in document.split("\n") if line.strip()]
    if not lines:
        return None

    value = lines[-1].rsplit("=", 1)[-1]
    return value.replace("\\", "").strip()

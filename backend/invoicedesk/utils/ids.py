"""
Identifier generation for new line items, time entries and materials.
"""
import uuid


def generate_id() -> str:
    """Random RFC 4122 version 4 identifier as a string."""
    return str(uuid.uuid4())

"""Data-access functions mapping the ORM models to queries."""
import math


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0

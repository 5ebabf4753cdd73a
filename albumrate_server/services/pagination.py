# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Page arithmetic shared by paginated endpoints."""

import math

# Largest value of a 32-bit INTEGER column. Ids, pages and offsets above it
# are rejected before they reach the database driver.
MAX_DB_INT = 2**31 - 1


def page_offset(page: int, limit: int) -> int:
    """Row offset of a 1-based page."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0

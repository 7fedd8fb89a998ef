"""
Standardized pagination parameters for consistent API pagination.
"""

from typing import Annotated

from fastapi import Query

# Question listings
PaginationSkip = Annotated[int, Query(ge=0, description="Number of records to skip")]
PaginationLimit = Annotated[
    int, Query(ge=1, le=100, description="Maximum number of records to return")
]

# Admin panels (moderation queue, administrators)
PaginationLimitLarge = Annotated[
    int, Query(ge=1, le=200, description="Maximum number of records to return")
]

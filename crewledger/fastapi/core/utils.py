"""
Utility functions for request boundary parsing and normalization.

This module converts presentation formats (``"YYYY-MM"`` strings, legacy
identifiers) into the types the payroll core works with.
"""

from typing import Optional
from uuid import NAMESPACE_URL, UUID, uuid5

from fastapi import HTTPException, status

from crewledger.payroll.exceptions import InvalidInputError
from crewledger.payroll.period import Period


# Namespace for identifiers derived from pre-UUID backups
LEGACY_ID_NAMESPACE = uuid5(NAMESPACE_URL, "https://crewledger.app/legacy-id")


def parse_period_param(value: str) -> Period:
    """
    Parse a ``YYYY-MM`` request value into a Period.
    
    Raises:
        HTTPException: 422 if the value is not a valid calendar month
    """
    try:
        return Period.parse(value)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc)
        )


def parse_optional_period(value: Optional[str]) -> Optional[Period]:
    if not value:
        return None
    return parse_period_param(value)


def legacy_uuid(value: str) -> UUID:
    """
    Map an identifier from a backup file to a UUID.
    
    UUID strings are kept as they are. Older backups used timestamp
    strings such as ``"1709625600000"``; those are mapped to a stable
    UUID5 so that references between records still line up.
    
    Examples:
        "123e4567-e89b-12d3-a456-426614174000" -> same UUID
        "1709625600000" -> uuid5(LEGACY_ID_NAMESPACE, "1709625600000")
    """
    try:
        return UUID(str(value))
    except ValueError:
        return uuid5(LEGACY_ID_NAMESPACE, str(value))


def normalize_name(name: str) -> str:
    """Strip and collapse internal whitespace in a display name."""
    if not name:
        return ""
    return " ".join(name.split())

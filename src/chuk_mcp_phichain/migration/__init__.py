"""
Schema migration - bring stored chart documents to the current format.

Usage:
    from chuk_mcp_phichain.migration import migrate

    document = migrate(json.loads(text))
    chart = Chart.from_dict(document)
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from chuk_mcp_phichain.constants import CURRENT_FORMAT
from chuk_mcp_phichain.errors import MigrationError, UnsupportedFormatError
from chuk_mcp_phichain.migration.steps import MIGRATIONS, Document, MigrationStep, snake_case

logger = logging.getLogger(__name__)


def get_format(document: Any) -> int:
    """Format of a document; a document without `format` is format 0."""
    if not isinstance(document, dict):
        raise MigrationError("migrate", "chart is not an object")
    version = document.get("format", 0)
    if not isinstance(version, int) or isinstance(version, bool) or version < 0:
        raise MigrationError("migrate", "format field is not a number")
    return version


def needs_migration(document: Any) -> bool:
    return get_format(document) != CURRENT_FORMAT


def migrate(document: Any) -> Document:
    """
    Migrate a chart document to CURRENT_FORMAT.

    The input is never modified; a current document is returned as a copy.

    Raises:
        UnsupportedFormatError: If the format is newer than current or unknown
        MigrationError: If a step meets a malformed document
    """
    version = get_format(document)
    if version > CURRENT_FORMAT or (version < CURRENT_FORMAT and version not in MIGRATIONS):
        raise UnsupportedFormatError(version)

    migrated: Document = copy.deepcopy(document)
    while version < CURRENT_FORMAT:
        step = MIGRATIONS.get(version)
        if step is None:
            raise UnsupportedFormatError(version)
        migrated = step(migrated)
        new_version = get_format(migrated)
        logger.debug("Migrated chart from format %d to %d", version, new_version)
        version = new_version
    return migrated


__all__ = [
    "CURRENT_FORMAT",
    "MIGRATIONS",
    "Document",
    "MigrationStep",
    "get_format",
    "migrate",
    "needs_migration",
    "snake_case",
]

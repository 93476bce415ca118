"""Parser for ``helm list`` tabular output.

Helm 2 has no machine-readable listing format. Its table aligns columns
with a mix of tabs and spaces that depends on terminal-width heuristics,
and packs chart name and version into a single CHART column. This module
turns that text into typed rows; nothing else in the package looks at
raw listing output.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime

import structlog

from release_reconciler.integrations.helm.exceptions import NotExistError, ParseError
from release_reconciler.integrations.helm.models import (
    KNOWN_STATUSES,
    ObservedRelease,
    ReleaseListingRow,
)

logger = structlog.get_logger()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

LEFT_SPACES = re.compile(r"^[ ]+", re.MULTILINE)
MIDDLE_SPACES = re.compile(r"[ ]*\t+[ ]*")
RIGHT_SPACES = re.compile(r"[ ]+$", re.MULTILINE)

CHART_PATTERN = re.compile(r"^([a-z]([-a-z0-9]*[a-z0-9])?)-([0-9]+\.[0-9]+\.[0-9]+.*)$")

UPDATED_FORMAT = "%a %b %d %H:%M:%S %Y"

# Listing column header -> ReleaseListingRow field
COLUMNS = {
    "NAME": "name",
    "REVISION": "revision",
    "UPDATED": "updated",
    "STATUS": "status",
    "CHART": "chart",
    "NAMESPACE": "namespace",
}


# ---------------------------------------------------------------------------
# Whitespace
# ---------------------------------------------------------------------------


def normalize_listing_whitespace(text: str) -> str:
    """Reduce listing output to single-tab separated columns.

    Strips leading spaces on every line, collapses spaces around tab
    runs into one tab, and strips trailing spaces on every line.

    Args:
        text: Raw ``helm list`` output.

    Returns:
        Cleaned text. Empty if the listing had no content.
    """
    trimmed = LEFT_SPACES.sub("", text)
    slimmed = MIDDLE_SPACES.sub("\t", trimmed)
    return RIGHT_SPACES.sub("", slimmed)


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def parse_listing_rows(text: str) -> Iterator[ReleaseListingRow]:
    """Yield listing rows in the order the tool printed them.

    The first line is the header; columns are located by header name so
    extra columns (``APP VERSION`` on newer Helm 2 releases) are skipped.

    Args:
        text: Listing output, already whitespace-normalized.

    Yields:
        One ReleaseListingRow per data line.

    Raises:
        ParseError: If the header lacks a required column or a row has a
            different number of fields than the header.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return

    header = lines[0].split("\t")
    missing = [name for name in COLUMNS if name not in header]
    if missing:
        raise ParseError(
            message=f"Listing header is missing columns {', '.join(missing)}: `{lines[0]}`",
            field="header",
            value=lines[0],
        )
    positions = {field: header.index(column) for column, field in COLUMNS.items()}

    for line in lines[1:]:
        fields = line.split("\t")
        if len(fields) != len(header):
            raise ParseError(
                message=(
                    f"Listing row has {len(fields)} columns, header has {len(header)}: `{line}`"
                ),
                release_name=fields[positions["name"]] if positions["name"] < len(fields) else None,
                field="row",
                value=line,
            )
        yield ReleaseListingRow(**{field: fields[index] for field, index in positions.items()})


# ---------------------------------------------------------------------------
# Fields
# ---------------------------------------------------------------------------


def parse_chart_field(release_name: str, value: str) -> tuple[str, str]:
    """Split a composite CHART column into chart name and version.

    ``nginx-ingress-1.2.3`` -> (``nginx-ingress``, ``1.2.3``);
    ``my-app-0.1.0-rc.1`` -> (``my-app``, ``0.1.0-rc.1``).

    Raises:
        ParseError: If the value has no semantic-version suffix.
    """
    match = CHART_PATTERN.match(value)
    if match is None:
        raise ParseError(
            message=(
                f"Couldn't parse chart name from version in release `{release_name}`: `{value}`"
            ),
            release_name=release_name,
            field="chart",
            value=value,
        )
    return match.group(1), match.group(3)


def parse_updated(release_name: str, value: str) -> datetime:
    """Parse the UPDATED column in the process's local timezone.

    Single-digit days are padded with an extra space by the tool, so
    runs of whitespace inside the value are collapsed first.

    Raises:
        ParseError: If the value does not match ``Mon Jan 2 15:04:05 2006``.
    """
    try:
        naive = datetime.strptime(" ".join(value.split()), UPDATED_FORMAT)
    except ValueError as e:
        raise ParseError(
            message=f"Couldn't read updated time for release {release_name}: {e}",
            release_name=release_name,
            field="updated",
            value=value,
        ) from e
    return naive.astimezone()


def parse_revision(release_name: str, value: str) -> int:
    """Parse the REVISION column as a non-negative integer.

    Raises:
        ParseError: If the value is not a non-negative integer.
    """
    if not value.isascii() or not value.isdigit():
        raise ParseError(
            message=f"Couldn't read revision for release {release_name}: `{value}`",
            release_name=release_name,
            field="revision",
            value=value,
        )
    return int(value)


def parse_release_row(row: ReleaseListingRow) -> ObservedRelease:
    """Convert a raw listing row into typed release state.

    Raises:
        ParseError: If revision, timestamp or chart column is malformed.
    """
    revision = parse_revision(row.name, row.revision)
    last_updated = parse_updated(row.name, row.updated)
    chart_name, chart_version = parse_chart_field(row.name, row.chart)
    if row.status not in KNOWN_STATUSES:
        logger.debug("unknown_release_status", release=row.name, status=row.status)
    return ObservedRelease(
        name=row.name,
        revision=revision,
        last_updated=last_updated,
        status=row.status,
        chart_name=chart_name,
        chart_version=chart_version,
        namespace=row.namespace,
    )


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def find_release(text: str, name: str) -> ObservedRelease:
    """Find the observed state of one release in raw listing output.

    Args:
        text: Raw ``helm list -a`` output.
        name: Release name to look for (exact match).

    Returns:
        State of the first row whose NAME equals ``name``.

    Raises:
        NotExistError: If the listing is empty or has no matching row.
        ParseError: If the listing or the matching row is malformed.
    """
    clean = normalize_listing_whitespace(text)
    logger.debug("helm_listing_normalized", output=clean)
    if not clean.strip():
        raise NotExistError(release_name=name)

    for row in parse_listing_rows(clean):
        if row.name == name:
            return parse_release_row(row)

    raise NotExistError(release_name=name)

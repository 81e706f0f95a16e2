"""Record-id batch planning and batch result stitching.

Exporting or importing a very large project in a single request can hit
server timeouts or memory limits. ``plan_batches`` splits an ordered list of
record ids into consecutive batches that are requested one at a time;
``stitch_batch_results`` joins the per-batch exports back together.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence, Union

import structlog

from redcap_client.validation import Format, validate_format, validate_positive_int

logger = structlog.get_logger(__name__)


def unique_in_order(record_ids: Iterable[str]) -> list[str]:
    """Drop repeated ids (one per event in longitudinal projects), keeping order."""
    seen = set()
    ordered = []
    for record_id in record_ids:
        if record_id not in seen:
            seen.add(record_id)
            ordered.append(record_id)
    return ordered


def plan_batches(record_ids: Sequence[str], batch_size: int) -> Iterator[list[str]]:
    """Return a lazy iterator over batches of at most ``batch_size`` ids.

    ``batch_size`` is validated immediately, so an invalid size raises
    before any batch exists. The batches cover ``record_ids`` exactly once,
    in order, with only the last one possibly shorter.

    Example:
        >>> list(plan_batches([str(i) for i in range(1, 11)], 3))
        [['1', '2', '3'], ['4', '5', '6'], ['7', '8', '9'], ['10']]
    """
    batch_size = validate_positive_int(batch_size, "batch_size")
    universe = unique_in_order(record_ids)
    batch_count = -(-len(universe) // batch_size)
    logger.debug("batches_planned", record_count=len(universe), batch_size=batch_size, batch_count=batch_count)
    return _iter_batches(universe, batch_size)


def _iter_batches(universe: list[str], batch_size: int) -> Iterator[list[str]]:
    for start in range(0, len(universe), batch_size):
        yield universe[start:start + batch_size]


def strip_header(result: str) -> str:
    """Remove the header line (up to and including the first newline)."""
    newline = result.find("\n")
    if newline == -1:
        return ""
    return result[newline + 1:]


def stitch_batch_results(results: Iterable[Any], format: Union[str, Format] = Format.PHP) -> Union[str, list]:
    """Concatenate per-batch export results.

    CSV results keep only the first batch's header line. Decoded (php)
    results are joined into one list. JSON, XML and ODM strings are
    concatenated as separate documents; merging them into one document is
    left to the caller.
    """
    fmt = validate_format(format)
    if fmt is Format.PHP:
        records: list = []
        for result in results:
            records.extend(result)
        return records

    parts = []
    for index, result in enumerate(results):
        if fmt is Format.CSV and index > 0:
            result = strip_header(result)
        parts.append(result)
    return "".join(parts)

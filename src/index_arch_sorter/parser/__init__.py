"""Operator index parsing: decode the catalog stream, extract architecture support."""

import logging
from pathlib import Path
from typing import IO, List, Union

from pydantic import BaseModel, Field

from index_arch_sorter.models import ArchitectureSupport
from index_arch_sorter.parser.decoder import IndexDecoder, IndexReadError, decode
from index_arch_sorter.parser.extract import extract_architecture_support

logger = logging.getLogger(__name__)


class ParseResult(BaseModel):
    """Architecture support records in catalog order, plus decode statistics."""
    results: List[ArchitectureSupport] = Field(default_factory=list)
    entries_processed: int = 0  # values decoded, any schema
    entries_failed: int = 0  # values skipped as malformed
    bundles_seen: int = 0  # olm.bundle entries, with or without architecture labels


def parse_stream(stream: Union[IO[bytes], IO[str]]) -> ParseResult:
    """Parse an already-open operator index stream.

    Raises:
        IndexReadError: If reading the stream fails. No partial result is returned.
    """
    decoder = decode(stream)
    results: List[ArchitectureSupport] = []
    for entry in decoder:
        support = extract_architecture_support(entry)
        if support is not None:
            results.append(support)

    logger.info(
        "Processed %d entries (%d failed, %d bundles, %d with architecture labels)",
        decoder.decoded_count, decoder.failed_count, decoder.bundle_count, len(results),
    )
    return ParseResult(
        results=results,
        entries_processed=decoder.decoded_count,
        entries_failed=decoder.failed_count,
        bundles_seen=decoder.bundle_count,
    )


def parse_operator_index(path: Union[str, Path]) -> ParseResult:
    """Parse the operator index file at ``path``.

    Raises:
        IndexReadError: If the file cannot be opened or read.
    """
    index_path = Path(path)
    try:
        stream = open(index_path, "rb")
    except OSError as e:
        raise IndexReadError(f"failed to open file: {e}") from e
    with stream:
        return parse_stream(stream)


__all__ = [
    "IndexDecoder",
    "IndexReadError",
    "ParseResult",
    "decode",
    "extract_architecture_support",
    "parse_operator_index",
    "parse_stream",
]

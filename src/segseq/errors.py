"""Exception hierarchy for segseq.

Configuration problems surface at setup time; storage and overflow
problems surface per ``generate`` call. Update conflicts on the segment
row never appear here: they are retried inside the storage protocol.
"""

from __future__ import annotations


class SegseqError(Exception):
    """Base class for every error raised by segseq."""

    code = "SEGSEQ_ERROR"


class ConfigurationError(SegseqError):
    """Generator options cannot be resolved into a usable configuration."""

    code = "CONFIGURATION_ERROR"


class StorageAccessError(SegseqError):
    """The segment table could not be read, initialized or updated."""

    code = "STORAGE_ERROR"


class IdentifierOverflowError(SegseqError):
    """A counter value left the range of its identifier type."""

    code = "IDENTIFIER_OVERFLOW"


class GeneratorStateError(SegseqError):
    """A generator was used before its schema requirements were exposed."""

    code = "GENERATOR_STATE"

"""Failure kinds raised by the receipt capture pipeline."""

from __future__ import annotations


class ReceiptScanError(Exception):
    """Base class for recoverable scan pipeline failures."""


class ImageDecodeError(ReceiptScanError):
    """The captured image could not be decoded."""


class ExtractionError(ReceiptScanError):
    """Base class for extraction service failures."""


class ExtractionServiceError(ExtractionError):
    """The extraction service call failed."""


class ExtractionEmptyResponseError(ExtractionError):
    """The extraction service returned no content."""


class ExtractionParseError(ExtractionError):
    """The extraction response was not a valid receipt JSON object."""


class PersistenceError(ReceiptScanError):
    """Reading or writing the receipt store failed."""

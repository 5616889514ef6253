"""
Exception types shared by the parser, exporter and session.
"""


class TableDiffError(Exception):
    """Base class for all comparison errors."""
    pass


class FormatError(TableDiffError):
    """Content cannot be interpreted as tabular data for its format."""
    pass


class CodecUnavailableError(FormatError):
    """The spreadsheet codec is missing or failed while reading or writing."""
    pass


class ComparisonPreconditionError(TableDiffError):
    """The caller asked for a comparison before it was possible."""
    pass


class KeyFieldMissingError(ComparisonPreconditionError):
    """No key field was chosen for the comparison."""
    pass


class SourceNotLoadedError(ComparisonPreconditionError):
    """One side of the comparison has not been parsed successfully."""
    pass

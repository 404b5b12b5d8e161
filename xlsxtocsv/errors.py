"""xlsxtocsv.errors

Error types raised by the conversion steps. Fatal errors abort the run with
exit code 1; step warnings are caught where the best-effort steps are called.
"""


class XlsxToCsvError(Exception):
    """Base error."""


class UsageError(XlsxToCsvError):
    """Raised for missing or unknown command line arguments."""


class ConfigError(XlsxToCsvError):
    """Raised when the YAML configuration is missing or invalid."""


class NotFoundError(XlsxToCsvError):
    """Raised when the input workbook does not exist."""


class FormatError(XlsxToCsvError):
    """Raised when the input file does not carry the .xlsx suffix."""


class ConversionError(XlsxToCsvError):
    """Raised when the spreadsheet converter fails."""


class ColumnNotFoundError(XlsxToCsvError):
    """Raised when the state column is missing from the header."""


class OutputWriteError(XlsxToCsvError):
    """Raised when the filtered CSV cannot be written."""


class StepWarning(XlsxToCsvError):
    """Failure of a best-effort step. Never changes the exit code."""


class TransferWarning(StepWarning):
    pass


class IndexWarning(StepWarning):
    pass

"""Domain models for the litigation case importer."""

from .case_record import CaseBatch, CaseRecord
from .config_models import CsvOptions, DatabaseConfig, ImportConfig, ImportLimits
from .error_record import ErrorRecord
from .import_row import ImportRow
from .processing_result import FileStatus, ImportResult, ProcessingResult

__all__ = [
    # Configuration models
    "CsvOptions",
    "DatabaseConfig",
    "ImportConfig",
    "ImportLimits",
    # Processing models
    "CaseBatch",
    "CaseRecord",
    "ErrorRecord",
    "ImportRow",
    # Results
    "FileStatus",
    "ImportResult",
    "ProcessingResult",
]

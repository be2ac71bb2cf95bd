"""
Shared utilities: exceptions, logging, configuration, validation and ID mapping.
"""

from .exceptions import (
    NetworkAnalysisError,
    ValidationError,
    MissingDataError,
    DataFormatError,
    GraphConstructionError,
    ComputationError,
    DegenerateNormalizationError,
    ConfigurationError,
)
from .id_mapper import IDMapper
from .config import PipelineConfig
from .logging_config import setup_logging, get_logger

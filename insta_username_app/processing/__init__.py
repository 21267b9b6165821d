"""
Processing Module

Contains all processing logic:
- extraction_client: Username extraction using Gemini via OpenRouter
- batch: Concurrent per-image extraction with all-or-nothing results
- result_store: Editable per-user result state
- links: Instagram profile link aggregation
"""

from .config import Settings, load_settings
from .errors import (
    BatchError,
    ClipboardError,
    ConfigurationError,
    ExtractionError,
    InstaExtractorError,
    UnknownError,
)
from .models import (
    EntryState,
    ExtractionResult,
    InputFile,
    ResultSet,
    UsernameEntry,
    UsernameRef,
    normalize_username,
    normalize_usernames,
)
from .intake import is_image_type, select_input_files, load_input_file
from .extraction_client import ExtractionClient, parse_usernames
from .batch import process_batch, classify_error
from .result_store import ResultStore, ResultStoreRegistry
from .links import profile_url, build_links_text, copy_all_links

__all__ = [
    # Configuration
    'Settings',
    'load_settings',
    # Errors
    'BatchError',
    'ClipboardError',
    'ConfigurationError',
    'ExtractionError',
    'InstaExtractorError',
    'UnknownError',
    # Models
    'EntryState',
    'ExtractionResult',
    'InputFile',
    'ResultSet',
    'UsernameEntry',
    'UsernameRef',
    'normalize_username',
    'normalize_usernames',
    # Input filter
    'is_image_type',
    'select_input_files',
    'load_input_file',
    # Extraction
    'ExtractionClient',
    'parse_usernames',
    'process_batch',
    'classify_error',
    # Results
    'ResultStore',
    'ResultStoreRegistry',
    'profile_url',
    'build_links_text',
    'copy_all_links',
]

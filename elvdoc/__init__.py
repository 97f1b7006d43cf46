"""
elvdoc - build and validate elv archives.

An elv archive is a gzip-compressed tar file bundling the four assets of
an elvdoc document under a single directory:

    elvdoc/template.html   HTML template
    elvdoc/style.css       stylesheet
    elvdoc/function.js     script
    elvdoc/config.yaml     configuration (version + elvdoc)

Example:
    >>> import elvdoc
    >>> path = elvdoc.create_archive_from_dir("invoice.elv", "format/elvdoc")
    >>> elvdoc.validate(path)
    True

Invariants:
    - An archive is valid iff elvdoc/config.yaml has a non-empty version
      and a non-null elvdoc value
    - Validation never raises
    - Building is all-or-nothing with respect to source files

How to change safely:
    - The entry layout is part of the file format; do not rename entries
    - Keep validation a single forward pass over the archive
"""

from ._version import __version__
from .archive import (
    build_and_verify,
    create_archive,
    create_archive_from_dir,
    create_archive_from_files,
    expand_extension,
    read_asset,
    read_elvdoc_files,
    validate,
)
from .bundle import CONFIG_ENTRY, ENTRY_PREFIX, AssetRole, Bundle
from .codec import (
    ARCHIVE_EXTENSION,
    ConfigPayload,
    encode_archive,
    is_valid_archive,
    load_config,
    read_archive,
)
from .document import Document, DocumentReader, DocumentWriter, read_document, write_document
from .errors import (
    ArchiveReadError,
    ArchiveWriteError,
    AssetReadError,
    ConfigError,
    ElvDocError,
    InvalidArchiveError,
)

__all__ = [
    # Version
    "__version__",
    # Bundle model
    "AssetRole",
    "Bundle",
    "ENTRY_PREFIX",
    "CONFIG_ENTRY",
    # Codec
    "ARCHIVE_EXTENSION",
    "ConfigPayload",
    "encode_archive",
    "is_valid_archive",
    "load_config",
    "read_archive",
    # Archive operations
    "create_archive",
    "create_archive_from_files",
    "create_archive_from_dir",
    "read_elvdoc_files",
    "read_asset",
    "validate",
    "expand_extension",
    "build_and_verify",
    # Document extension point
    "Document",
    "DocumentReader",
    "DocumentWriter",
    "read_document",
    "write_document",
    # Errors
    "ElvDocError",
    "AssetReadError",
    "ArchiveWriteError",
    "ArchiveReadError",
    "ConfigError",
    "InvalidArchiveError",
]

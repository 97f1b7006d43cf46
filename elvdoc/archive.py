"""
Public archive operations for elvdoc.

Thin layer over the codec that maps asset roles to files on disk:
- create_archive: four payload strings -> archive
- create_archive_from_files: four file paths -> archive
- create_archive_from_dir: directory with the four fixed filenames -> archive
- read_elvdoc_files: directory -> Bundle
- validate: archive path -> bool
- build_and_verify: directory -> archive, validated after writing

Destinations ending in the short ``.elv`` extension are rewritten to
``.tar.gz`` before anything is written. validate() does not rewrite; it
only accepts the long form.

Invariants:
    - Sources are read completely before the destination is opened
    - A missing source file aborts the build with AssetReadError
    - create_* return the path that was actually written
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

from .bundle import AssetRole, Bundle
from .codec import ARCHIVE_EXTENSION, encode_archive, is_valid_archive
from .errors import AssetReadError, InvalidArchiveError

logger = logging.getLogger(__name__)

SHORT_EXTENSION = ".elv"

PathLike = Union[str, "os.PathLike[str]"]


def expand_extension(path: PathLike) -> Path:
    """Rewrite a trailing .elv (any case) to .tar.gz.

    Example:
        >>> expand_extension("invoice.elv")
        PosixPath('invoice.tar.gz')
    """
    text = os.fspath(path)
    if text.lower().endswith(SHORT_EXTENSION):
        text = text[: -len(SHORT_EXTENSION)] + ARCHIVE_EXTENSION
    return Path(text)


def read_asset(path: PathLike, role: AssetRole | None = None) -> str:
    """Read one asset file as UTF-8 text.

    Raises:
        AssetReadError: If the file is missing, unreadable or not UTF-8
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise AssetReadError(
            os.fspath(path),
            role=role.value if role else None,
            reason=str(e),
        ) from e


def create_archive(
    destination: PathLike,
    template: str,
    style: str,
    script: str,
    config: str,
    *,
    mtime: int | None = None,
    compresslevel: int = 9,
) -> Path:
    """Create an archive from in-memory payloads.

    Args:
        destination: Output path (.elv is expanded to .tar.gz)
        template: HTML template markup
        style: Stylesheet text
        script: Script text
        config: YAML configuration text
        mtime: Optional fixed timestamp for reproducible output
        compresslevel: gzip compression level

    Returns:
        Path of the written archive

    Raises:
        ArchiveWriteError: If the destination cannot be written
    """
    target = expand_extension(destination)
    bundle = Bundle(template=template, style=style, script=script, config=config)
    encode_archive(target, bundle, mtime=mtime, compresslevel=compresslevel)
    return target


def create_archive_from_files(
    destination: PathLike,
    template_path: PathLike,
    style_path: PathLike,
    script_path: PathLike,
    config_path: PathLike,
    **options,
) -> Path:
    """Create an archive from four asset files.

    All four files are read before the destination is touched, so a
    missing source never leaves a partial archive behind.

    Raises:
        AssetReadError: If any source file cannot be read
        ArchiveWriteError: If the destination cannot be written
    """
    sources = {
        AssetRole.TEMPLATE: template_path,
        AssetRole.STYLE: style_path,
        AssetRole.SCRIPT: script_path,
        AssetRole.CONFIG: config_path,
    }
    payloads = {role: read_asset(path, role) for role, path in sources.items()}
    bundle = Bundle.from_roles(payloads)
    return create_archive(
        destination,
        bundle.template,
        bundle.style,
        bundle.script,
        bundle.config,
        **options,
    )


def create_archive_from_dir(destination: PathLike, source_dir: PathLike, **options) -> Path:
    """Create an archive from a directory holding the four bundle files."""
    base = Path(source_dir)
    return create_archive_from_files(
        destination,
        *(base / role.filename for role in AssetRole),
        **options,
    )


def read_elvdoc_files(source_dir: PathLike) -> Bundle:
    """Read template.html, style.css, function.js and config.yaml from a directory.

    Raises:
        AssetReadError: On the first file that cannot be read
    """
    base = Path(source_dir)
    return Bundle.from_roles({role: read_asset(base / role.filename, role) for role in AssetRole})


def validate(path: PathLike) -> bool:
    """Return True if path is a valid elv archive. Never raises."""
    return is_valid_archive(path)


def build_and_verify(destination: PathLike, source_dir: PathLike, **options) -> Path:
    """Build an archive from a directory and validate the result.

    Raises:
        AssetReadError: If a source file cannot be read
        ArchiveWriteError: If the destination cannot be written
        InvalidArchiveError: If the written archive fails validation
    """
    target = create_archive_from_dir(destination, source_dir, **options)
    if not is_valid_archive(target):
        raise InvalidArchiveError(str(target))
    logger.info("Built and verified elv archive", extra={"path": str(target)})
    return target

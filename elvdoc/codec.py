"""
Container codec for elv archives.

An elv archive is a gzip-compressed tar stream holding exactly four entries
under the ``elvdoc/`` prefix (see bundle.py for the layout). This module
encodes a Bundle into that container and decodes/validates containers.

Archive format:
    <name>.tar.gz
        elvdoc/template.html
        elvdoc/style.css
        elvdoc/function.js
        elvdoc/config.yaml   <- gates validity

config.yaml is a YAML mapping:
    version: "1.0.0"     # required, non-empty string
    elvdoc: {...}        # required, any non-null value
    <other keys>         # ignored

Invariants:
    - encode_archive always writes all four entries
    - is_valid_archive never raises; every failure is False
    - Validation reads entries forward only and stops at the first
      elvdoc/config.yaml; only that entry's body is buffered
    - Every opened stream is closed on every exit path

How to change safely:
    - Keep validation single-pass; do not add random access
    - New required config fields break every archive already written
"""

from __future__ import annotations

import gzip
import io
import logging
import os
import tarfile
import time
import zlib
from typing import Any, BinaryIO, Dict, Union

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .bundle import CONFIG_ENTRY, AssetRole, Bundle
from .errors import ArchiveReadError, ArchiveWriteError, ConfigError

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".tar.gz"
ENTRY_MODE = 0o644

PathLike = Union[str, "os.PathLike[str]"]

# Everything a corrupt or truncated container can raise while being read
_READ_ERRORS = (OSError, EOFError, ValueError, zlib.error, tarfile.TarError)

_NULL_TAG = "tag:yaml.org,2002:null"


class ConfigPayload(BaseModel):
    """Decoded contents of elvdoc/config.yaml.

    Attributes:
        version: Bundle version, must be non-empty
        elvdoc: Document description of unspecified shape, must be non-null
    """

    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    version: str
    elvdoc: Any

    @field_validator("version")
    @classmethod
    def version_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("version must not be empty")
        return value

    @field_validator("elvdoc")
    @classmethod
    def elvdoc_not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("elvdoc must not be null")
        return value


def load_config(data: Union[bytes, str]) -> ConfigPayload:
    """Parse a config.yaml body.

    Only the first YAML document is considered.

    Args:
        data: Raw config.yaml content

    Returns:
        The validated ConfigPayload

    Raises:
        ConfigError: If the body is not YAML, not a mapping, or misses
            a required field
    """
    try:
        node, document = _load_first_document(data)
    except (yaml.YAMLError, RecursionError) as e:
        raise ConfigError(f"config.yaml is not valid YAML: {e}") from e

    if not isinstance(document, dict):
        raise ConfigError("config.yaml must be a YAML mapping")

    # version is kept as written ("1.10", "yes", "2024-01-01"), not as the resolved value
    raw_version = _scalar_text(node, "version")
    if raw_version is not None:
        document["version"] = raw_version

    try:
        return ConfigPayload.model_validate(document)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigError("config.yaml is not a valid elvdoc config", errors=errors) from e


def _load_first_document(data: Union[bytes, str]) -> tuple:
    """Compose and construct the first YAML document; later documents are not parsed."""
    loader = yaml.SafeLoader(data)
    try:
        if not loader.check_node():
            return None, None
        node = loader.get_node()
        _reject_duplicate_keys(node)
        return node, loader.construct_document(node)
    finally:
        loader.dispose()


def _reject_duplicate_keys(root: yaml.Node) -> None:
    """Raise ConfigError if any mapping repeats a scalar key."""
    pending = [root]
    seen_nodes = set()
    while pending:
        node = pending.pop()
        if id(node) in seen_nodes:
            continue
        seen_nodes.add(id(node))
        if isinstance(node, yaml.MappingNode):
            keys = set()
            for key_node, value_node in node.value:
                if isinstance(key_node, yaml.ScalarNode):
                    if key_node.value in keys:
                        raise ConfigError(
                            f"config.yaml defines key '{key_node.value}' more than once"
                        )
                    keys.add(key_node.value)
                pending.extend((key_node, value_node))
        elif isinstance(node, yaml.SequenceNode):
            pending.extend(node.value)


def _scalar_text(node: yaml.Node, key: str) -> str | None:
    """Source text of a non-null scalar stored under key in a mapping node."""
    if not isinstance(node, yaml.MappingNode):
        return None
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
            if isinstance(value_node, yaml.ScalarNode) and value_node.tag != _NULL_TAG:
                return value_node.value
            return None
    return None


def encode_archive(
    destination: PathLike,
    bundle: Bundle,
    *,
    mtime: int | None = None,
    compresslevel: int = 9,
) -> None:
    """Write a bundle to destination as a gzip-compressed tar archive.

    All four entries share one modification time and mode 0644. The
    destination is created or overwritten; on failure its contents are
    undefined.

    Args:
        destination: Output file path
        bundle: The four payloads to write
        mtime: Unix timestamp for entries and gzip header (default: now)
        compresslevel: gzip compression level, 1-9

    Raises:
        ArchiveWriteError: If the destination cannot be opened or written
    """
    path = os.fspath(destination)
    stamp = int(time.time()) if mtime is None else int(mtime)

    # Encode up front so an unencodable payload never opens the destination
    try:
        entries = list(bundle.entries())
    except UnicodeEncodeError as e:
        raise ArchiveWriteError(path, f"payload is not encodable as UTF-8: {e}") from e

    try:
        with open(path, "wb") as raw, gzip.GzipFile(
            fileobj=raw, mode="wb", compresslevel=compresslevel, mtime=stamp
        ) as gz, tarfile.open(fileobj=gz, mode="w") as tar:
            for name, payload in entries:
                info = tarfile.TarInfo(name)
                info.size = len(payload)
                info.mode = ENTRY_MODE
                info.mtime = stamp
                tar.addfile(info, io.BytesIO(payload))
    except (OSError, tarfile.TarError) as e:
        raise ArchiveWriteError(path, str(e)) from e

    logger.info(
        "Wrote elv archive",
        extra={"path": path, "entries": len(AssetRole), "mtime": stamp},
    )


def is_valid_archive(source: Union[PathLike, BinaryIO]) -> bool:
    """Check whether source is a well-formed elv archive.

    A path must end in ``.tar.gz`` (case-insensitive) or it is rejected
    without being opened. A binary file object skips that check and is
    read from its current position.

    Args:
        source: Archive path or readable binary stream

    Returns:
        True if elvdoc/config.yaml exists and has a non-empty version and
        a non-null elvdoc value, False on any other outcome
    """
    if isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        if not str(path).lower().endswith(ARCHIVE_EXTENSION):
            logger.debug("Rejected archive with wrong extension", extra={"path": str(path)})
            return False
        try:
            with open(path, "rb") as f:
                return _scan_for_config(f, str(path))
        except OSError as e:
            logger.debug(f"Cannot open archive {path}: {e}")
            return False

    return _scan_for_config(source, str(getattr(source, "name", "<stream>")))


def _scan_for_config(fileobj: BinaryIO, label: str) -> bool:
    """Stream tar entries until the config entry is found and checked."""
    try:
        with tarfile.open(fileobj=fileobj, mode="r|gz") as tar:
            for member in tar:
                if member.name != CONFIG_ENTRY:
                    continue
                body = tar.extractfile(member)
                if body is None:
                    logger.debug(f"{CONFIG_ENTRY} in {label} is not a regular file")
                    return False
                load_config(body.read())
                return True
    except ConfigError as e:
        logger.debug(f"Invalid config in {label}: {e.message}", extra={"errors": e.errors})
        return False
    except _READ_ERRORS as e:
        logger.debug(f"Cannot decode archive {label}: {e}")
        return False
    except Exception as e:
        logger.debug(f"Unexpected error validating {label}: {e}", exc_info=True)
        return False

    logger.debug(f"No {CONFIG_ENTRY} in {label}")
    return False


def read_archive(source: Union[PathLike, BinaryIO]) -> Bundle:
    """Decode a whole archive into a Bundle.

    Entries outside the bundle layout are ignored; for duplicated names
    the first occurrence wins. The config payload is returned as text and
    is not validated here.

    Args:
        source: Archive path or readable binary stream

    Returns:
        The four payloads as a Bundle

    Raises:
        ArchiveReadError: If the archive cannot be opened or decoded, or
            an entry is missing
    """
    if isinstance(source, (str, os.PathLike)):
        label = str(os.fspath(source))
        try:
            with open(label, "rb") as f:
                payloads = _collect_entries(f, label)
        except OSError as e:
            raise ArchiveReadError(label, str(e)) from e
    else:
        label = str(getattr(source, "name", "<stream>"))
        payloads = _collect_entries(source, label)

    missing = [role.entry_name for role in AssetRole if role not in payloads]
    if missing:
        raise ArchiveReadError(label, f"missing entries: {', '.join(missing)}")

    return Bundle.from_roles(payloads)


def _collect_entries(fileobj: BinaryIO, label: str) -> Dict[AssetRole, str]:
    payloads: Dict[AssetRole, str] = {}
    try:
        with tarfile.open(fileobj=fileobj, mode="r|gz") as tar:
            for member in tar:
                role = AssetRole.from_entry_name(member.name)
                if role is None or role in payloads:
                    continue
                body = tar.extractfile(member)
                if body is None:
                    raise ArchiveReadError(label, f"{member.name} is not a regular file")
                payloads[role] = body.read().decode("utf-8")
    except _READ_ERRORS as e:
        raise ArchiveReadError(label, str(e)) from e
    return payloads

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from implementor.encoding import UnicodeEscapingWriter
from implementor.errors import DestinationError
from implementor.renderer import GeneratedUnit

logger = logging.getLogger("implgen.sink")


def package_dir(root: Path, package: Optional[str]) -> Path:
    if not package:
        return root
    return root.joinpath(*package.split("."))


def unit_path(root: Path, unit: GeneratedUnit, suffix: Optional[str] = None) -> Path:
    """
    $root/a/b/FooImpl.java for a unit in package a.b (or .class with suffix).
    """
    file_name = unit.file_name if suffix is None else unit.class_name + suffix
    return package_dir(Path(root), unit.package) / file_name


def _prepare_parent(directory: Path) -> None:
    # best effort, a failure shows up when the file is opened
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.debug("could not create %s: %s", directory, e)


@contextmanager
def atomic_destination(path: Path, mode: str = "w") -> Iterator:
    """
    Yields a file object for a temporary sibling of ``path``. The target is
    replaced only when the block finishes; on any error the temporary file
    is removed and ``path`` is left untouched.
    """
    path = Path(path)
    _prepare_parent(path.parent)
    try:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise DestinationError(f"Error while opening output file {path}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        if "b" in mode:
            with os.fdopen(fd, mode) as f:
                yield f
        else:
            with os.fdopen(fd, mode, encoding="ascii", newline="") as f:
                yield f
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise DestinationError(f"Error while writing to output file {path}: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def write_unit(unit: GeneratedUnit, root: Path) -> Path:
    """
    Writes the unit below ``root`` with every non-ASCII character escaped.
    """
    path = unit_path(root, unit)
    with atomic_destination(path) as raw:
        UnicodeEscapingWriter(raw).write(unit.text)
    logger.info("wrote %s", path)
    return path

import logging
import os
import shutil
import subprocess
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import config
from implementor.errors import CompilationError, PackagingError
from implementor.sink import atomic_destination

logger = logging.getLogger("implgen.toolchain")

MANIFEST_NAME = "META-INF/MANIFEST.MF"


@dataclass
class CompileResult:
    ok: bool
    returncode: int
    diagnostics: str = ""


def _which(cmd: str) -> Optional[str]:
    return shutil.which(cmd)


def compile_source(
    source_file: Path,
    out_dir: Path,
    classpath: Sequence[Path],
    javac: str = config.JAVAC,
    timeout: int = config.JAVAC_TIMEOUT_SECONDS,
) -> CompileResult:
    """
    javac -d <out_dir> -implicit:none -cp <classpath> <source_file>

    Sources found on the classpath are only used for type checking; no class
    files are written for them.
    """
    exe = _which(javac)
    if not exe:
        raise CompilationError(f"Error while compiling generated class: `{javac}` not found on PATH")

    cmd: List[str] = [
        exe, "-encoding", "ascii",
        "-d", str(out_dir),
        "-implicit:none",
        "-cp", os.pathsep.join(str(p) for p in classpath),
        str(source_file),
    ]
    logger.info("RUN: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
            timeout=timeout, check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("javac timed out after %ss", timeout)
        return CompileResult(ok=False, returncode=124, diagnostics=f"javac timed out after {timeout}s")
    except OSError as e:
        raise CompilationError(f"Error while compiling generated class: {e}") from e

    diagnostics = proc.stdout.decode(errors="ignore")
    logger.info("EXIT: %s", proc.returncode)
    return CompileResult(ok=proc.returncode == 0, returncode=proc.returncode, diagnostics=diagnostics)


def manifest_text(version: str = config.MANIFEST_VERSION, vendor: str = config.IMPLEMENTATION_VENDOR) -> str:
    return f"Manifest-Version: {version}\r\nImplementation-Vendor: {vendor}\r\n\r\n"


def package_jar(
    class_file: Path,
    entry_name: str,
    jar_file: Path,
    vendor: str = config.IMPLEMENTATION_VENDOR,
) -> Path:
    """
    Single-entry jar holding ``class_file`` as ``entry_name`` plus a manifest.
    """
    try:
        data = Path(class_file).read_bytes()
    except OSError as e:
        raise PackagingError(f"Error while reading compiled class {class_file}: {e}") from e

    try:
        with atomic_destination(Path(jar_file), mode="wb") as raw:
            with zipfile.ZipFile(raw, "w", compression=zipfile.ZIP_DEFLATED) as jar:
                jar.writestr(MANIFEST_NAME, manifest_text(vendor=vendor))
                jar.writestr(entry_name, data)
    except Exception as e:
        raise PackagingError(f"Error while writing to jar file: {e}") from e

    logger.info("packaged %s into %s", entry_name, jar_file)
    return Path(jar_file)

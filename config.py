from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv  # type: ignore

load_dotenv()

IMPL_SUFFIX = "Impl"
SOURCE_EXT = ".java"
CLASS_EXT = ".class"

INDENT = " " * 4
LINE_SEPARATOR = os.linesep

MANIFEST_VERSION = "1.0"
IMPLEMENTATION_VENDOR = (os.getenv("IMPLGEN_VENDOR") or "").strip() or "impl-gen"

JAVAC = (os.getenv("IMPLGEN_JAVAC") or "").strip() or "javac"
JAVAC_TIMEOUT_SECONDS = int(os.getenv("IMPLGEN_JAVAC_TIMEOUT", "120"))

# os.pathsep separated list of Java source roots
SOURCE_PATH = [
    Path(p) for p in (os.getenv("IMPLGEN_SOURCE_PATH") or ".").split(os.pathsep) if p.strip()
]

LOG_LEVEL = (os.getenv("IMPLGEN_LOG_LEVEL") or "INFO").strip().upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

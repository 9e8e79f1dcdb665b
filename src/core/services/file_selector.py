"""Selección de ficheros de la distribución.

Recorre la raíz de distribución y produce los `CandidateFile` subibles:
- solo ficheros regulares con extensión en la allowlist (sin distinguir mayúsculas),
- nunca nada bajo `.git` o `node_modules`, a cualquier profundidad,
- en orden determinista (lexicográfico por directorio) para que los tests
  y los logs sean reproducibles.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator

from core.domain.errors import PreconditionError
from core.domain.models import CandidateFile

ALLOWED_EXTENSIONS: frozenset[str] = frozenset(
    {
        # HTML/CSS/JS
        "html",
        "css",
        "js",
        "mjs",
        # Images
        "png",
        "jpg",
        "jpeg",
        "gif",
        "svg",
        "webp",
        "avif",
        "ico",
        "bmp",
        "tif",
        "tiff",
        # Fonts
        "woff",
        "woff2",
        "ttf",
        "otf",
        "eot",
    }
)

EXCLUDED_DIRS: frozenset[str] = frozenset({".git", "node_modules"})


def ensure_distribution_root(root: Path) -> PreconditionError | None:
    if not root.is_dir():
        return PreconditionError(f"Distribution directory '{root}' does not exist!")
    return None


def has_allowed_extension(name: str, extensions: frozenset[str] = ALLOWED_EXTENSIONS) -> bool:
    _, dot, ext = name.rpartition(".")
    if not dot or not ext:
        return False
    return ext.lower() in extensions


def relative_key(root: Path, path: Path) -> str:
    """Ruta del objeto remoto: relativa a `root`, con '/' y sin './' inicial.

    `relative_key(Path("./"), Path("./assets/app.js")) == "assets/app.js"`
    """

    try:
        rel = path.relative_to(root)
    except ValueError:
        rel = path.resolve().relative_to(root.resolve())
    key = rel.as_posix()
    while key.startswith("./"):
        key = key[2:]
    key = key.lstrip("/")
    if not key or key == ".":
        raise ValueError(f"{path} is the distribution root itself, not a file under it")
    return key


def _walk(directory: Path, root: Path, allowed: frozenset[str]) -> Iterator[CandidateFile]:
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)

    subdirs: list[os.DirEntry[str]] = []
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            if entry.name not in EXCLUDED_DIRS:
                subdirs.append(entry)
            continue
        if not entry.is_file(follow_symlinks=False):
            continue
        if not has_allowed_extension(entry.name, allowed):
            continue
        path = directory / entry.name
        yield CandidateFile(path=path, relative_path=relative_key(root, path))

    for entry in subdirs:
        yield from _walk(directory / entry.name, root, allowed)


def select_files(
    root: Path,
    extensions: Iterable[str] = ALLOWED_EXTENSIONS,
) -> Iterator[CandidateFile]:
    """Devuelve un iterador (una sola pasada) de ficheros subibles bajo `root`.

    La raíz se valida aquí, no en la primera iteración: una raíz inexistente
    es un `PreconditionError` inmediato para el llamador.
    """

    error = ensure_distribution_root(root)
    if error is not None:
        raise error
    allowed = frozenset(e.lower().lstrip(".") for e in extensions)
    return _walk(root, root, allowed)

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from .errors import PathError, WriteError


OUTPUT_EXT = ".webp"

PathLike = Union[str, Path]


def mirror(source_root: PathLike, source_path: PathLike, output_root: PathLike) -> Path:
    """
    Map a file under source_root to its WebP twin under output_root.

        mirror("/src", "/src/a/b/cat.png", "/out") -> /out/a/b/cat.webp

    Only the last suffix is replaced ("x.tar.png" -> "x.tar.webp"); a file
    without one gets ".webp" appended.
    """
    source_root = Path(source_root)
    source_path = Path(source_path)

    try:
        rel = source_path.relative_to(source_root)
    except ValueError:
        raise PathError(f"{source_path} is not under {source_root}") from None

    if rel == Path("."):
        raise PathError(f"{source_path} is the source root itself, not a file under it")

    return Path(output_root) / rel.with_suffix(OUTPUT_EXT)


def ensure_parent_dirs(output_path: PathLike) -> List[Path]:
    """
    Create every missing ancestor of output_path.

    Idempotent. Returns the directories that were actually created,
    outermost first (empty when they all existed already).
    """
    parent = Path(output_path).parent

    missing: List[Path] = []
    p = parent
    while not p.exists():
        missing.append(p)
        if p.parent == p:
            break
        p = p.parent
    missing.reverse()

    try:
        parent.mkdir(parents=True, exist_ok=True)
    except FileExistsError as e:
        # Something that is not a directory sits where a directory must go.
        raise WriteError(f"path collision creating {parent}: {e}", path=parent) from e
    except OSError as e:
        raise WriteError(f"cannot create {parent}: {e}", path=parent) from e

    return missing

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterator, Optional, Union


logger = logging.getLogger(__name__)

OnError = Callable[[Path, OSError], None]


def walk(
    source_root: Union[str, Path],
    exclude_dir: Optional[Path] = None,
    onerror: Optional[OnError] = None,
) -> Iterator[Path]:
    """
    Yield every regular file under source_root, depth-first.

    Entries in each directory are visited in lexicographic name order, so two
    walks over an unchanged tree yield the same sequence. Each call starts a
    fresh walk.

    - Symlinks to directories are not descended into (no cycles).
    - Symlinks to regular files are yielded like regular files.
    - A root that is missing or not a directory yields nothing.

    exclude_dir:
        Directory whose contents are never yielded. Used to keep the output
        root out of the walk when it sits inside the source root.

    onerror:
        Called with (directory, exception) when a directory cannot be listed.
        The walk then carries on with the next sibling. Without it the
        error is only logged.
    """
    root = Path(source_root)
    if not root.is_dir():
        return

    exclude_resolved = exclude_dir.resolve() if exclude_dir else None
    yield from _walk_dir(root, exclude_resolved, onerror)


def _walk_dir(
    directory: Path,
    exclude_resolved: Optional[Path],
    onerror: Optional[OnError],
) -> Iterator[Path]:
    if exclude_resolved and directory.resolve().is_relative_to(exclude_resolved):
        return

    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        if onerror is not None:
            onerror(directory, e)
        else:
            logger.warning("Cannot list %s: %s", directory, e)
        return

    for entry in entries:
        path = directory / entry.name
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file(follow_symlinks=True)
        except OSError as e:
            if onerror is not None:
                onerror(path, e)
            else:
                logger.warning("Cannot stat %s: %s", path, e)
            continue

        if is_dir:
            yield from _walk_dir(path, exclude_resolved, onerror)
        elif is_file:
            yield path

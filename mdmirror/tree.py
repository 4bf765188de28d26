from __future__ import annotations

import fnmatch
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from loguru import logger

from mdmirror.errors import PreconditionError, ReplicationError
from mdmirror.pandoc import PandocConverter

MARKDOWN_SUFFIX = ".md"
HTML_SUFFIX = ".html"
INDEX_NAME = "index.html"


@dataclass(frozen=True)
class PublishOptions:
    input_root: Path
    output_root: Path
    index_glob: str | None = None
    extra_args: tuple[str, ...] = ()
    overwrite: bool = False
    make_output: bool = False
    page_title: bool = False


def is_convertible(path: Path) -> bool:
    return path.name.endswith(MARKDOWN_SUFFIX)


def matches_index(name: str, index_glob: str | None) -> bool:
    if not index_glob:
        return False
    # Shell globs accept [^...] as negation; fnmatch only knows [!...].
    return fnmatch.fnmatchcase(name, index_glob.replace("[^", "[!"))


def map_output_path(rel: Path, output_root: Path, index_glob: str | None = None) -> Path:
    target = output_root / rel
    if not is_convertible(rel):
        return target
    if matches_index(rel.name, index_glob):
        return target.with_name(INDEX_NAME)
    return target.with_name(rel.name[: -len(MARKDOWN_SUFFIX)] + HTML_SUFFIX)


def _raise_walk_error(exc: OSError) -> None:
    raise ReplicationError(f"could not read directory {exc.filename}: {exc.strerror}") from exc


def iter_regular_files(root: Path) -> Iterator[Path]:
    # Symlinked directories are listed but never descended into.
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_symlink() or not path.is_file():
                continue
            yield path


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


def check_preconditions(options: PublishOptions) -> None:
    input_root = options.input_root
    output_root = options.output_root

    if not input_root.is_dir() or not os.access(input_root, os.R_OK | os.X_OK):
        raise PreconditionError(f"source directory is not readable or does not exist: {input_root}")

    if _is_within(output_root.resolve(), input_root.resolve()):
        raise PreconditionError(f"destination directory must not be inside the source directory: {output_root}")

    if options.make_output and not output_root.exists():
        try:
            output_root.mkdir(parents=True)
        except OSError as exc:
            raise PreconditionError(f"could not create destination directory {output_root}: {exc}") from exc
        logger.debug(f"created destination directory: {output_root}")

    if not output_root.is_dir() or not os.access(output_root, os.W_OK | os.X_OK):
        raise PreconditionError(f"destination directory is not writable or does not exist: {output_root}")

    if not options.overwrite and any(output_root.iterdir()):
        raise PreconditionError("destination directory is not empty, use -o to enable overwrite")


def replicate_tree(options: PublishOptions, converter: PandocConverter) -> dict[str, object]:
    converted = 0
    copied = 0

    for source in iter_regular_files(options.input_root):
        rel = source.relative_to(options.input_root)
        target = map_output_path(rel, options.output_root, options.index_glob)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ReplicationError(f"could not create directory {target.parent}: {exc}") from exc

        if is_convertible(source):
            if matches_index(source.name, options.index_glob):
                logger.debug(f"index pattern match ({options.index_glob}): {source} -> {target}")
            converter.convert(source, target)
            converted += 1
        else:
            try:
                shutil.copyfile(source, target)
                shutil.copymode(source, target)
            except OSError as exc:
                raise ReplicationError(f"could not copy {source} to {target}: {exc}") from exc
            copied += 1

        logger.debug(f"{source} -> {target}")

    return {
        "converted": converted,
        "copied": copied,
        "output_dir": str(options.output_root),
    }

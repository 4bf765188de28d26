from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger

from mdmirror.errors import PublishError
from mdmirror.pandoc import PandocConverter
from mdmirror.settings import default_home, ensure_config_home, load_settings
from mdmirror.tree import PublishOptions, check_preconditions, replicate_tree

VERSION = "0.3.0"
BANNER = "mdmirror: publish a tree of markdown on the web with pandoc"
VALUE_FLAGS = ("-i", "-p")


def _attach_flag_values(argv: list[str]) -> list[str]:
    # -i and -p always take the next word, even one starting with "-".
    args: list[str] = []
    tokens = iter(argv)
    for token in tokens:
        if token == "--":
            args.append(token)
            args.extend(tokens)
            break
        if token in VALUE_FLAGS:
            value = next(tokens, None)
            if value is None:
                args.append(token)
                break
            args.append(f"{token}={value}")
            continue
        args.append(token)
    return args


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mdmirror",
        description=(
            "Mirror <input directory> into <output directory>, converting Markdown "
            "files to HTML with pandoc and copying everything else verbatim."
        ),
        epilog="Example: mdmirror -i '000_*' -p --toc docs site",
    )
    parser.add_argument("-d", "-v", dest="verbose", action="store_true", help="display verbose debugging output")
    parser.add_argument(
        "-i",
        dest="index",
        metavar="GLOB",
        help="file name pattern to become index.html (shell glob, [^...] negates like [!...])",
    )
    parser.add_argument("-o", dest="overwrite", action="store_true", help="confirm overwrite of output directory")
    parser.add_argument(
        "-p",
        dest="pandoc_args",
        metavar="ARG",
        action="append",
        default=[],
        help="pass an additional argument to pandoc (repeatable)",
    )
    parser.add_argument("-m", dest="make_output", action="store_true", help="create the output directory if missing")
    parser.add_argument("-t", dest="page_title", action="store_true", help="set each page title from its file name")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("input", help="input directory")
    parser.add_argument("output", help="output directory")
    return parser


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format="{message}")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(_attach_flag_values(argv))
    _configure_logging(args.verbose)
    logger.debug(BANNER)
    logger.debug("debug output enabled")

    options = PublishOptions(
        input_root=Path(args.input).expanduser().resolve(),
        output_root=Path(args.output).expanduser().resolve(),
        index_glob=args.index,
        extra_args=tuple(args.pandoc_args),
        overwrite=args.overwrite,
        make_output=args.make_output,
        page_title=args.page_title,
    )
    if options.index_glob:
        logger.debug(f"index: {options.index_glob}")
    if options.overwrite:
        logger.debug("overwrite warning acknowledged")

    try:
        home = default_home()
        ensure_config_home(home)
        settings = load_settings(home)
        converter = PandocConverter.from_settings(
            settings,
            extra_args=options.extra_args,
            page_title=options.page_title,
        )
        for option in converter.options:
            logger.debug(f"pandoc: {option}")

        check_preconditions(options)
        summary = replicate_tree(options, converter)
    except PublishError as exc:
        logger.error(f"error - exit {exc.exit_status}: {exc}")
        return exc.exit_status

    print(
        f"Converted {summary['converted']} files, copied {summary['copied']} files "
        f"-> {summary['output_dir']}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

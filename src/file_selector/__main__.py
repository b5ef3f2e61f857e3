from __future__ import annotations

import argparse
import configparser
import contextlib
import logging

from file_selector.selector import FileSelector
from file_selector.selectorconfig import SelectorConfig
from file_selector.selectorconfig import write_new_config
from file_selector.selectoremitter import SelectorEmitter
from file_selector.selectormodel import DateProperty
from file_selector.selectorretention import RetentionCleaner
from file_selector.selectorrule import All
from file_selector.selectorrule import DateRange
from file_selector.selectorrule import InvalidRule
from file_selector.selectorrule import Newest
from file_selector.selectorrule import Oldest
from file_selector.selectorrule import RelativePeriod
from file_selector.selectorrule import SelectionRule
from file_selector.selectorrule import SkipNewest
from file_selector.selectorrule import SkipOldest
from file_selector.selectorrule import parse_date
from file_selector.selectorsearch import ContentSearcher
from file_selector.selectortranscript import DATE_FORMAT
from file_selector.selectortranscript import LOG_FORMAT
from file_selector.selectortranscript import Transcript
from file_selector.selectorwalker import FileWalker

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2

logger = logging.getLogger("file_selector")


def _add_walk_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        type=str,
        help="The directory to enumerate.",
    )
    parser.add_argument(
        "--recurse",
        help="Descend into subdirectories. Default: False.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--filter",
        help="Glob matched against file names, case-insensitive. Default: *",
        default="*",
    )
    parser.add_argument(
        "--exclude-directories",
        help="Regular expression matched against directory paths to skip.",
        default=None,
    )
    parser.add_argument(
        "--date-property",
        help="The file timestamp to compare. Default: last_write",
        choices=[prop.value for prop in DateProperty],
        default=DateProperty.LAST_WRITE.value,
    )
    parser.add_argument(
        "--output",
        help="Also append results to this file.",
        default=None,
    )


def _add_rule_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--oldest", type=int, metavar="N", help="Keep the N oldest files.")
    group.add_argument("--newest", type=int, metavar="N", help="Keep the N newest files.")
    group.add_argument("--skip-oldest", type=int, metavar="N", help="Drop the N oldest files.")
    group.add_argument("--skip-newest", type=int, metavar="N", help="Drop the N newest files.")
    group.add_argument(
        "--period",
        metavar="EXPR",
        help=(
            "Relative period such as 30d (older than 30 days) or -2h (within the "
            "last 2 hours). Units: s, m, h, d. Use --period=-2h for negative values."
        ),
    )
    group.add_argument(
        "--between",
        nargs=2,
        metavar=("START", "END"),
        help="Keep files strictly between two ISO-8601 dates.",
    )


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="List, search and clean up files selected by age, date range or count.",
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--transcript",
        metavar="DIR",
        help="Record this run to a transcript log file in DIR.",
        default=None,
    )
    parser.add_argument(
        "--transcript-keep",
        metavar="N",
        type=int,
        help="The number of transcripts to keep in DIR. Default: 10",
        default=10,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List files matching a rule.")
    _add_walk_arguments(list_parser)
    _add_rule_arguments(list_parser)

    search_parser = subparsers.add_parser("search", help="Search the contents of files matching a rule.")
    _add_walk_arguments(search_parser)
    search_parser.add_argument("pattern", type=str, help="Regular expression to search for.")
    search_parser.add_argument(
        "--ignore-case",
        help="Match the pattern case-insensitively.",
        default=False,
        action="store_true",
    )
    _add_rule_arguments(search_parser)

    cleanup_parser = subparsers.add_parser("cleanup", help="Apply the configured log retention.")
    cleanup_parser.add_argument("config", type=str, help="The path to the configuration file.")
    cleanup_parser.add_argument(
        "--dry-run",
        help="Report the files that would be removed without removing them.",
        default=False,
        action="store_true",
    )
    cleanup_parser.add_argument(
        "--make-config",
        help="Create a default configuration file.",
        default=False,
        action="store_true",
    )
    return parser.parse_args(args)


def build_rule(args: argparse.Namespace) -> SelectionRule:
    """
    Build the selection rule from the mutually exclusive rule arguments.

    Raises:
        InvalidRule
    """
    if args.oldest is not None:
        return Oldest(args.oldest)

    if args.newest is not None:
        return Newest(args.newest)

    if args.skip_oldest is not None:
        return SkipOldest(args.skip_oldest)

    if args.skip_newest is not None:
        return SkipNewest(args.skip_newest)

    if args.period is not None:
        return RelativePeriod.parse(args.period)

    if args.between is not None:
        start, end = args.between
        return DateRange(parse_date(start), parse_date(end))

    return All()


def run_list(args: argparse.Namespace) -> int:
    """List the files the rule selects."""
    rule = build_rule(args)
    date_property = DateProperty(args.date_property)

    records = FileSelector(date_property).select(_walker_from_args(args).walk(), rule)

    emitter = SelectorEmitter(output_file=args.output)
    for record in records:
        emitter.add_record(record, date_property)
    emitter.emit()

    logger.info("Listed %s files", len(records))
    return EXIT_OK


def run_search(args: argparse.Namespace) -> int:
    """Search the contents of the files the rule selects."""
    rule = build_rule(args)
    searcher = ContentSearcher(args.pattern, ignore_case=args.ignore_case)

    records = FileSelector(DateProperty(args.date_property)).select(_walker_from_args(args).walk(), rule)
    matches = searcher.search(records)

    emitter = SelectorEmitter(output_file=args.output)
    for match in matches:
        emitter.add_match(match)
    emitter.emit()

    logger.info("Found %s matches in %s files", len(matches), len(records))
    return EXIT_OK


def run_cleanup(args: argparse.Namespace, config: SelectorConfig) -> int:
    """Apply retention to every configured directory, each independently."""
    try:
        keep_rule = config.keep_rule
        date_property = config.date_property
        walkers = [
            FileWalker(
                directory,
                recurse=config.recurse,
                name_filter=config.name_filter,
                exclude_directory_pattern=config.exclude_directory_pattern,
            )
            for directory in config.directories
        ]

    except (ValueError, configparser.Error) as error:
        logger.error("Invalid configuration: %s", error)
        return EXIT_INVALID

    cleaner = RetentionCleaner(FileSelector(date_property), dry_run=args.dry_run)
    exit_code = EXIT_OK

    for walker in walkers:
        logger.info("Applying retention to %s (keep %s)", walker.root, keep_rule)

        try:
            result = cleaner.clean(walker.walk(), keep_rule)

        except FileNotFoundError as error:
            logger.error("Skipping %s: %s", walker.root, error)
            exit_code = EXIT_FAILURE
            continue

        if result.failed:
            exit_code = EXIT_FAILURE

    return exit_code


def _walker_from_args(args: argparse.Namespace) -> FileWalker:
    return FileWalker(
        args.root,
        recurse=args.recurse,
        name_filter=args.filter,
        exclude_directory_pattern=args.exclude_directories,
    )


def _build_transcript(
    args: argparse.Namespace,
    config: SelectorConfig | None,
) -> Transcript | None:
    """Return the transcript for this run, from the CLI or the config file."""
    if args.transcript:
        return Transcript(args.transcript, keep_count=args.transcript_keep)

    if config is not None and config.transcript_directory:
        return Transcript(
            config.transcript_directory,
            prefix=config.transcript_prefix,
            keep_count=config.transcript_keep_count,
        )

    return None


def _run_command(args: argparse.Namespace, config: SelectorConfig | None) -> int:
    try:
        if args.command == "cleanup" and config is not None:
            return run_cleanup(args, config)

        if args.command == "search":
            return run_search(args)

        return run_list(args)

    except InvalidRule as error:
        logger.error("Invalid rule: %s", error)
        return EXIT_INVALID

    except FileNotFoundError as error:
        logger.error("%s", error)
        return EXIT_FAILURE


def main(*, cli_args: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(cli_args)

    if args.command == "cleanup" and args.make_config:
        write_new_config(args.config)
        return EXIT_OK

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    config = None
    try:
        if args.command == "cleanup":
            config = SelectorConfig(args.config)

        transcript = _build_transcript(args, config)

    except (ValueError, configparser.Error) as error:
        logger.error("%s", error)
        return EXIT_INVALID

    with transcript or contextlib.nullcontext():
        return _run_command(args, config)


if __name__ == "__main__":
    raise SystemExit(main())

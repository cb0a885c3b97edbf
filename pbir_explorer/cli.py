"""CLI for pbir-explorer."""

import argparse
import logging
import os
import sys

from pbir_explorer.domain.models import ResolveOptions
from pbir_explorer.file_locator import FileLocator
from pbir_explorer.host import JSONFileLastFolderStore, StaticFolderPicker, open_project
from pbir_explorer.output.json_dumper import JSONDumper, render_overview_text, render_page_text
from pbir_explorer.resolution.project_index import ProjectIndex
from pbir_explorer.run_context import ResolutionInterrupted

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_BOOKMARKS = 2


def _options_from_args(args: argparse.Namespace) -> ResolveOptions:
    return ResolveOptions(
        report_suffix=args.report_suffix,
        max_workers=args.max_workers,
        deadline_seconds=args.deadline,
    )


def _emit(args: argparse.Namespace, data: dict, text: str) -> None:
    dumper = JSONDumper(pretty=not args.no_pretty)
    if args.output:
        dumper.write(args.output, data)
        print(f"Output: {args.output}")
    elif args.json:
        print(dumper.dumps(data))
    else:
        print(text)


def _cmd_overview(args: argparse.Namespace, store: JSONFileLastFolderStore) -> int:
    folder = args.folder or store.get()
    if not folder:
        print("Error: no folder given and no last opened folder stored", file=sys.stderr)
        return EXIT_ERROR
    if not os.path.isdir(folder):
        print(f"Error: {folder} not found", file=sys.stderr)
        return EXIT_ERROR

    index = ProjectIndex(_options_from_args(args))
    overview = open_project(StaticFolderPicker(folder), store, index)
    if not overview.found:
        print(f"No bookmarks found under {folder}", file=sys.stderr)
        return EXIT_NO_BOOKMARKS

    _emit(args, JSONDumper.overview_to_dict(overview), render_overview_text(overview))
    return EXIT_OK


def _cmd_page(args: argparse.Namespace) -> int:
    if not os.path.isdir(args.folder):
        print(f"Error: {args.folder} not found", file=sys.stderr)
        return EXIT_ERROR

    index = ProjectIndex(_options_from_args(args))
    overview = index.build_overview(args.folder)
    if not overview.found:
        print(f"No bookmarks found under {args.folder}", file=sys.stderr)
        return EXIT_NO_BOOKMARKS
    if args.bookmark not in overview.bookmarks:
        print(f"Error: unknown bookmark {args.bookmark}", file=sys.stderr)
        return EXIT_ERROR

    detail = index.page_detail(overview, args.bookmark)
    _emit(args, JSONDumper.page_detail_to_dict(detail), render_page_text(detail))
    return EXIT_OK


def _cmd_reports(args: argparse.Namespace) -> int:
    found = False
    for path in FileLocator(args.report_suffix).locate_all(args.folder):
        found = True
        print(path)
    return EXIT_OK if found else EXIT_NO_BOOKMARKS


def _add_resolve_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--json', action='store_true', help='Print JSON instead of a text tree')
    parser.add_argument('--output', help='Write JSON to this file')
    parser.add_argument('--no-pretty', action='store_true', help='Disable pretty printing')
    parser.add_argument('--max-workers', type=int, default=8, help='Concurrent file loads (default: 8)')
    parser.add_argument('--deadline', type=float, help='Give up after this many seconds')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pbir-explorer', description='PBIR bookmark and visual explorer')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('--report-suffix', default='.Report', help='Report folder suffix (default: .Report)')
    parser.add_argument('--state-file', help='Last-folder state file (default: ~/.pbir_explorer/state.json)')
    subparsers = parser.add_subparsers(dest='command')

    # overview command
    overview_parser = subparsers.add_parser('overview', help='Bookmarks grouped by page')
    overview_parser.add_argument('folder', nargs='?', help='Project folder (default: last opened)')
    _add_resolve_flags(overview_parser)

    # page command
    page_parser = subparsers.add_parser('page', help='Visuals of the page a bookmark targets')
    page_parser.add_argument('folder', help='Project folder')
    page_parser.add_argument('bookmark', help='Bookmark id')
    _add_resolve_flags(page_parser)

    # reports command
    reports_parser = subparsers.add_parser('reports', help='List bookmarks files in a folder')
    reports_parser.add_argument('folder', help='Project folder')

    # last command
    subparsers.add_parser('last', help='Show the last opened folder')

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    store = JSONFileLastFolderStore(args.state_file)

    try:
        if args.command == 'overview':
            return _cmd_overview(args, store)
        if args.command == 'page':
            return _cmd_page(args)
        if args.command == 'reports':
            return _cmd_reports(args)
        if args.command == 'last':
            last = store.get()
            if last:
                print(last)
            return EXIT_OK if last else EXIT_ERROR
    except ResolutionInterrupted as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    parser.print_help()
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())

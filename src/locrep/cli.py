"""
Command-line entry point.

    locrep run DOCUMENT MANIFEST [--config CFG] [--root NAME] [--output PATH] [--dry-run] [--json] [-v]
    locrep dot DOCUMENT ROOT [-o FILE]

DOCUMENT is a JSON/YAML in-memory document (see `locrep.serialization`).

Exit codes:
    0  run completed without failures
    1  run completed, some rows failed (see the report)
    2  nothing was done: bad input, missing root, bad configuration
"""

import argparse
import logging
import sys
from typing import List, Optional

from locrep import __version__
from locrep.backends import generate_dot, save_dot_file
from locrep.config import EngineConfig, load_config
from locrep.engine import plan, run
from locrep.errors import ConfigError, GraphError, ManifestError
from locrep.manifest import parse_manifest_file
from locrep.serialization import load_document, report_to_json, save_document

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="locrep",
        description="Duplicate a master composition per locale and substitute localized content.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="replicate and localize every root named in a manifest")
    p_run.add_argument("document", help="document file (.json, .yaml, .yml)")
    p_run.add_argument("manifest", help="CSV manifest")
    p_run.add_argument("--config", help="YAML engine configuration")
    p_run.add_argument("--root", help="master container for a manifest without a root column")
    p_run.add_argument("--output", help="where to save the document (default: in place)")
    p_run.add_argument("--dry-run", action="store_true", help="print the plan and stop")
    p_run.add_argument("--json", action="store_true", help="print the report as JSON")
    p_run.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    p_run.set_defaults(func=cmd_run)

    p_dot = sub.add_parser("dot", help="render the graph below a container as Graphviz DOT")
    p_dot.add_argument("document", help="document file (.json, .yaml, .yml)")
    p_dot.add_argument("root", help="container name")
    p_dot.add_argument("-o", "--out", help="write to this file instead of stdout")
    p_dot.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    p_dot.set_defaults(func=cmd_dot)

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_run(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config) if args.config else EngineConfig()
        manifest = parse_manifest_file(args.manifest, default_kind=config.default_kind, root_name=args.root)
        doc = load_document(args.document)
        run_plan = plan(doc, manifest)
    except (ManifestError, GraphError, ConfigError, FileNotFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FATAL

    plan_out = sys.stderr if args.json else sys.stdout
    print(run_plan.describe(config.precomp_folder), file=plan_out)
    if args.dry_run:
        return EXIT_OK

    report = run(doc, manifest, config, run_plan)
    output = args.output or args.document
    save_document(doc, output)
    logger.info("Saved document to %s", output)

    if args.json:
        print(report_to_json(report))
    else:
        print()
        print(report.summary())
        print(f"\nCheck '{config.output_folder}' in {output}.")
    return EXIT_OK if report.failed == 0 else EXIT_FAILURES


def cmd_dot(args: argparse.Namespace) -> int:
    try:
        doc = load_document(args.document)
    except (FileNotFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FATAL

    root = doc.find_container(args.root)
    if root is None:
        print(f"error: container '{args.root}' not found", file=sys.stderr)
        return EXIT_FATAL

    if args.out:
        save_dot_file(doc, root, args.out)
    else:
        print(generate_dot(doc, root))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

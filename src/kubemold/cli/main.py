#!/usr/bin/env python3
"""
KUBEMOLD CLI
------------
Command line front end for the manifest engine.

    kubemold generate            read kubemold.yaml, write manifests
    kubemold generate --dry-run  print the manifests instead
    kubemold classify FILE...    show what filenames say about their content

Author: KubeMold Team
Date: 2026-10-18
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.logging import RichHandler

from kubemold.cli.formatter import ManifestFormatter, console
from kubemold.core.config import DEFAULT_CONFIG_FILE, FORMATS, EngineConfig
from kubemold.core.engine import ManifestEngine
from kubemold.core.errors import KubeMoldError
from kubemold.core.kinds import KindTable
from kubemold.fragments.classifier import FilenameClassifier

VERSION = "0.1.0"


class KubeMoldCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="kubemold",
            description="KubeMold - complete Kubernetes manifests from resource fragments",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = ManifestFormatter()
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("--version", action="version", version=f"kubemold v{VERSION}")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        gen_parser = subparsers.add_parser("generate", help="Generate manifests from fragments")
        gen_parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE,
                                help=f"Configuration file (default: {DEFAULT_CONFIG_FILE})")
        gen_parser.add_argument("--fragments", help="Directory holding resource fragments")
        gen_parser.add_argument("--output", help="Directory to write manifests to")
        gen_parser.add_argument("--app-name", help="Default resource name")
        gen_parser.add_argument("--format", choices=FORMATS, help="Output format")
        gen_parser.add_argument("--dry-run", action="store_true", help="Print manifests without writing")

        cls_parser = subparsers.add_parser("classify", help="Show how fragment filenames are read")
        cls_parser.add_argument("files", nargs="+", help="Fragment file names")

    def _configure_logging(self, verbose: bool):
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    def _run_generate(self, args: argparse.Namespace) -> int:
        overrides = {
            "fragments_dir": str(Path(args.fragments).resolve()) if args.fragments else None,
            "output_dir": str(Path(args.output).resolve()) if args.output else None,
            "app_name": args.app_name,
            "format": args.format,
        }
        try:
            config = EngineConfig.load(args.config, **overrides)
            report = ManifestEngine(config).generate(dry_run=args.dry_run)
        except KubeMoldError as e:
            self.formatter.show_error(e)
            return 1

        if args.dry_run:
            for file_name, text in report.rendered.items():
                self.formatter.show_manifest(file_name, text, config.format)
        self.formatter.print_report(report, dry_run=args.dry_run)
        return 0

    def _run_classify(self, args: argparse.Namespace) -> int:
        classifier = FilenameClassifier(KindTable.default())
        rows = []
        failed = False
        for file_name in args.files:
            try:
                rows.append((file_name, classifier.classify(Path(file_name).name)))
            except KubeMoldError as e:
                rows.append((file_name, str(e)))
                failed = True
        self.formatter.print_classifications(rows)
        return 1 if failed else 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        self._configure_logging(args.verbose)
        if args.command == "generate":
            return self._run_generate(args)
        if args.command == "classify":
            return self._run_classify(args)
        self.parser.print_help()
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeMoldCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()

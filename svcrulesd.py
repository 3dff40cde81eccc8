#!/usr/bin/env python3
"""service-rules - rule-based service instance classifier.

Entry point for the command-line interface.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from servicerules import __version__
from servicerules.classification.engine import PLUGIN_NAME, RuleFilter
from servicerules.classification.signatures import load_service_signatures
from servicerules.core.config import FilterConfig, load_config, save_config
from servicerules.core.errors import ServiceRulesError
from servicerules.core.logging_config import get_logger, setup_logging
from servicerules.discovery.static import StaticInstanceSource


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="svcrulesd",
        description="Classify discovered service instances with declarative rules",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase verbosity (use -vv for debug)",
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress console logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Classify command
    classify_parser = subparsers.add_parser("classify", help="Classify service instances")
    classify_parser.add_argument(
        "instances",
        type=Path,
        help="JSON file with discovered instances",
    )
    classify_parser.add_argument(
        "--rules", "-r",
        action="append",
        help="Rule file to load, in priority order (can be repeated, overrides config)",
    )
    classify_parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    classify_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write results to file",
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate rule files")
    validate_parser.add_argument("files", type=Path, nargs="+", help="Rule files to check")

    # Config command
    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Create default configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    return parser


def get_log_level(verbose: int) -> int:
    """Get logging level from verbosity count."""
    if verbose >= 2:
        return logging.DEBUG
    elif verbose >= 1:
        return logging.INFO
    return logging.WARNING


def run_classify(args: argparse.Namespace, config: FilterConfig) -> int:
    """Execute the classify command."""
    logger = get_logger("main")

    if args.rules:
        config.services_files = list(args.rules)

    try:
        rule_filter = RuleFilter(PLUGIN_NAME, config)
        instances = StaticInstanceSource(args.instances).discover()
        decisions = rule_filter.classify_with_details(instances)
    except (ServiceRulesError, OSError, ValueError) as e:
        logger.error(f"Classification failed: {e}")
        return 1

    if args.json:
        output = {
            "total_instances": len(instances),
            "matched": len(decisions),
            "services": [
                {
                    **decision.instance.to_dict(),
                    "matched_by": {
                        "source": decision.source_name,
                        "ruleset": decision.ruleset_name,
                    },
                }
                for decision in decisions
            ],
        }
        text = json.dumps(output, indent=2)
    else:
        lines = [f"Matched {len(decisions)} of {len(instances)} instances"]
        for decision in decisions:
            container = decision.instance.container
            name = container.names[0] if container.names else container.id
            lines.append(
                f"  {name} ({container.image}) -> {decision.service_type}"
                f" [{decision.source_name}: {decision.ruleset_name}]"
            )
        text = "\n".join(lines)

    if args.output:
        args.output.write_text(text, encoding="utf-8")
        print(f"Results written to {args.output}")
    else:
        print(text)

    return 0


def run_validate(args: argparse.Namespace) -> int:
    """Execute the validate command."""
    failed = 0
    for file_path in args.files:
        try:
            signatures = load_service_signatures(file_path)
        except ServiceRulesError as e:
            print(f"FAIL {file_path}: {e}")
            failed += 1
            continue
        print(f"OK   {file_path}: {signatures.count} rulesets ({signatures.name})")

    return 1 if failed else 0


def run_config(args: argparse.Namespace, config: FilterConfig) -> int:
    """Execute the config command."""
    if args.init:
        config_path = args.config or config.config_dir / "config.json"
        save_config(config, config_path)
        print(f"Configuration saved to {config_path}")
        return 0

    if args.show:
        print(json.dumps(config.to_dict(), indent=2))
        return 0

    print("Use --init to create config or --show to display current config")
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else load_config()

    setup_logging(
        config.logs_dir,
        log_level=get_log_level(args.verbose),
        console_output=not args.quiet,
    )

    if args.command == "classify":
        return run_classify(args, config)
    elif args.command == "validate":
        return run_validate(args)
    elif args.command == "config":
        return run_config(args, config)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

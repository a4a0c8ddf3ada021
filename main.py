#!/usr/bin/env python3
"""
Main entry point for the shift rule engine command line.
"""

import argparse
import logging
import sys

from scheduler_service import SchedulerService
from coverage_validation import primary_reason
from logger import get_logger, setup_logging

logger = get_logger('main')


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Shift scheduling rule engine")
    parser.add_argument('--config', help="Path to the YAML config file (default: config.yaml next to main.py)")
    parser.add_argument('--verbose', action='store_true', help="Log at DEBUG level")

    subparsers = parser.add_subparsers(dest='command', required=True)

    generate = subparsers.add_parser('generate', help="Auto-generate a draft for a cycle")
    generate.add_argument('cycle_id')
    generate.add_argument('--dry-run', action='store_true', help="Report without saving the draft")

    validate = subparsers.add_parser('validate', help="Run the publish checks for a cycle")
    validate.add_argument('cycle_id')
    validate.add_argument('--override-weekly-rules', action='store_true')

    publish = subparsers.add_parser('publish', help="Publish a cycle if it passes the checks")
    publish.add_argument('cycle_id')
    publish.add_argument('--override-weekly-rules', action='store_true')

    return parser


def _report_check(check) -> None:
    if check.weekly is not None:
        print(f"Weekly rule: {check.weekly.under_count} under, {check.weekly.over_count} over")
    else:
        print("Weekly rule: overridden")
    counts = check.slots.counts()
    print(
        f"Slots: {counts['under_coverage']} under coverage, {counts['over_coverage']} over coverage, "
        f"{counts['missing_lead']} missing lead, {counts['multiple_leads']} multiple leads, "
        f"{counts['ineligible_lead']} ineligible lead"
    )
    for issue in check.slots.issues:
        print(f"  {issue.date.isoformat()} {issue.shift_type}: {primary_reason(issue)} ({', '.join(issue.reasons)})")


def main(argv=None) -> int:
    """Run one CLI command and return the process exit code."""
    args = _build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_to_file=True)
    service = SchedulerService(config_path=args.config)

    try:
        if args.command == 'generate':
            result = service.generate_draft(args.cycle_id, persist=not args.dry_run)
            if not result.success:
                print(result.error_message)
                return 1
            print(f"Added {result.added} shifts, {result.unfilled} seat(s) unfilled, {result.lead_missing} slot(s) without a lead")
            for slot_key, missing in result.unfilled_slots.items():
                print(f"  {slot_key}: {missing} open")
            if not args.dry_run:
                service.save_config()
            return 0

        if args.command == 'validate':
            check = service.check_publish_readiness(args.cycle_id, override_weekly_rules=args.override_weekly_rules)
            _report_check(check)
            return 0 if check.can_publish else 2

        if args.command == 'publish':
            check = service.publish(args.cycle_id, override_weekly_rules=args.override_weekly_rules)
            _report_check(check)
            if not check.can_publish:
                print("Publish blocked.")
                return 2
            service.save_config()
            print("Published.")
            return 0
    except ValueError as e:
        logger.error(f"{args.command} failed: {e}")
        print(str(e))
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())

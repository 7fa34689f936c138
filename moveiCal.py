#!/usr/bin/env python3
"""iCalendar event mover.

Reads a calendar, moves its events onto the working days of a new date
range and writes the result as a new iCalendar (.ics) file.
"""

import argparse
import logging
import os
import sys
from datetime import date, datetime
from typing import Optional

from reader import CalendarReader, HolidayFeedError, HolidayFetcher
from reader.reader import resolve_timezone
from scheduler import (
    ConfigurationError,
    RecurrenceParseError,
    SchedulerConfig,
    UnresolvedConstraintError,
    reschedule,
)
from transformer import ICalTransformer


def parse_date(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format."""
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: '{date_str}'. Expected YYYY-MM-DD."
        )


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def default_output_path(input_path: str) -> str:
    """Derive the output path from the input path: calendar.ics -> calendar-moved.ics."""
    root, ext = os.path.splitext(input_path)
    return f"{root}-moved{ext or '.ics'}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Move calendar events onto the working days of a new date range.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 moveiCal.py calendar.ics 2021-08-23 2021-09-03
  python3 moveiCal.py calendar.ics 2021-08-23 2021-09-03 --holidays-url <URL> --output moved.ics
        """
    )
    
    parser.add_argument("input", help="Input .ics file")
    
    parser.add_argument(
        "start_date",
        type=parse_date,
        help="First day of the new date range (format: YYYY-MM-DD)"
    )
    
    parser.add_argument(
        "end_date",
        type=parse_date,
        help="Last day of the new date range, inclusive (format: YYYY-MM-DD)"
    )
    
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output file path (default: <input>-moved.ics). Existing files are never overwritten"
    )
    
    parser.add_argument(
        "--filler-label",
        default="Filler",
        help="Title of events filling unused time slots (default: Filler)"
    )
    
    parser.add_argument(
        "--no-fillers",
        action="store_true",
        help="Do not generate filler events"
    )
    
    parser.add_argument(
        "--holidays-url",
        default=None,
        help="URL of an .ics holiday feed; holidays are skipped when scheduling"
    )
    
    parser.add_argument(
        "--holiday-label",
        default="Holiday",
        help="Title prefix of generated holiday events (default: Holiday)"
    )
    
    parser.add_argument(
        "--timezone",
        default=None,
        help="IANA timezone to use instead of the calendar's declared timezone"
    )
    
    parser.add_argument(
        "--strict-recurrence",
        action="store_true",
        help="Abort on invalid recurrence rules instead of skipping the event"
    )
    
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging"
    )
    
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the event mover."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)
    
    output_path = args.output or default_output_path(args.input)
    
    try:
        if args.end_date < args.start_date:
            raise ConfigurationError("End date must not be before start date.")
        
        if os.path.exists(output_path):
            raise ConfigurationError(f"Output file at {output_path} already exists!")
        
        timezone_override = None
        if args.timezone:
            timezone_override = resolve_timezone(args.timezone)
            if timezone_override is None:
                raise ConfigurationError(f"Unknown timezone: '{args.timezone}'")
        
        config = SchedulerConfig(
            filler_label=None if args.no_fillers else args.filler_label,
            holiday_label=args.holiday_label,
            skip_invalid_recurrence=not args.strict_recurrence,
        )
        
        parsed = CalendarReader(timezone_override=timezone_override).read_file(args.input)
        print(f"Found {len(parsed.events)} events in {args.input}.")
        
        holidays = []
        if args.holidays_url:
            print(f"Fetching holidays from: {args.holidays_url}")
            fetcher = HolidayFetcher(args.holidays_url)
            holidays = fetcher.fetch(args.start_date, args.end_date, parsed.timezone)
            print(f"Found {len(holidays)} holidays.")
        
        result = reschedule(
            parsed.events,
            args.start_date,
            args.end_date,
            parsed.timezone,
            holidays=holidays,
            config=config,
        )
        
        transformer = ICalTransformer()
        transformer.transform(result.events, result.timezone)
        transformer.save(output_path)
        
        print(f"Moved {len(result.scheduled)} events, added {len(result.fillers)} fillers "
              f"and {len(result.holidays)} holidays; "
              f"{len(result.dropped)} events could not be scheduled.")
        print(f"Calendar saved to: {output_path}")
        print(f"Period: {args.start_date} to {args.end_date}")
        
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except (ConfigurationError, UnresolvedConstraintError, RecurrenceParseError, HolidayFeedError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except FileExistsError:
        print(f"Error: Output file at {output_path} already exists!", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    
    return 0


if __name__ == "__main__":
    sys.exit(main())

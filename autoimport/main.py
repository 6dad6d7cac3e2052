"""
Main entry point for JavaScript Auto Import.
Adds imports for configured global identifiers to JavaScript modules.
"""

import sys
import argparse
from pathlib import Path

from autoimport.config.config_manager import ConfigManager, ConfigValidationError
from autoimport.core.file_scanner import FileScanner
from autoimport.core.import_engine import ImportEngine
from autoimport.core.import_merger import ORDERINGS
from autoimport.core.output_manager import OutputManager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='js-autoimport',
        description="JavaScript Auto Import - Add imports for configured global identifiers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s config.json src/
  %(prog)s config.json src/app.js
  %(prog)s config.json . --dry-run
        """
    )

    parser.add_argument(
        'config',
        help='Path to JSON configuration file'
    )

    parser.add_argument(
        'target',
        help='Target file or directory to process'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show which imports would be added without modifying files'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--ordering',
        choices=ORDERINGS,
        default=None,
        help='Placement of added imports (overrides the configuration)'
    )

    return parser


def main(argv=None):
    """Main entry point for JavaScript Auto Import."""
    args = build_parser().parse_args(argv)

    try:
        if args.verbose:
            print(f"Loading configuration from: {args.config}")

        config_manager = ConfigManager(args.config)
        file_scanner = FileScanner(config_manager)
        engine = ImportEngine(config_manager, ordering=args.ordering, verbose=args.verbose)
        output_manager = OutputManager(config_manager)
        to_stdout = config_manager.get_output_mode() == 'stdout'

        pattern_errors = file_scanner.validate_patterns()
        if pattern_errors:
            print("Configuration errors in file patterns:")
            for error in pattern_errors:
                print(f"  - {error}")
            sys.exit(1)

        target_path = Path(args.target)
        if not target_path.exists():
            print(f"Error: Target path does not exist: {target_path}")
            sys.exit(1)

        files_to_process = file_scanner.scan(str(target_path))

        if not files_to_process:
            print("No JavaScript files found matching the configured patterns.")
            sys.exit(0)

        if args.verbose:
            print(f"Found {len(files_to_process)} files to process:")
            for file_path in files_to_process:
                print(f"  - {file_path}")
            print()

        if not to_stdout:
            print(f"Processing {len(files_to_process)} files...")

        processing_results = engine.process_files(files_to_process)

        for result in processing_results:
            if not result.success:
                print(f"Error processing {result.file_path}: {result.error_message}", file=sys.stderr)

        if args.dry_run:
            print("\n" + "="*60)
            print("DRY RUN - No files were modified")
            print("="*60)

            changes_found = False
            for result in processing_results:
                if result.success and result.changes_made:
                    changes_found = True
                    print(f"\nFile: {result.file_path}")
                    print("Imports that would be added:")
                    for change in result.changes_made:
                        print(f"  - {change}")

            if not changes_found:
                print("No changes would be made to any files.")

            failed = any(not r.success for r in processing_results)
            sys.exit(1 if failed else 0)

        output_results = output_manager.process_results(processing_results)

        if not to_stdout:
            output_manager.print_summary(output_results)

        failed_count = len([r for r in output_results if not r.success])
        sys.exit(1 if failed_count > 0 else 0)

    except ConfigValidationError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except FileNotFoundError as e:
        print(f"File not found: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()

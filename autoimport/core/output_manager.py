"""
Output Manager for JavaScript Auto Import.
Applies processing results: confirmation, diffs, writing and the run summary.
"""

import difflib
from typing import Callable, List, Optional
from pathlib import Path
from dataclasses import dataclass

from autoimport.config.config_manager import ConfigManager
from .file_writer import FileWriter
from .import_engine import ProcessingResult


@dataclass
class OutputResult:
    """Result of applying one file's transformation."""
    file_path: Path
    success: bool
    output_path: Optional[Path]
    error_message: Optional[str]
    changes_made: List[str]
    user_skipped: bool = False


class OutputManager:
    """Writes transformed files and reports what happened."""

    def __init__(self, config_manager: ConfigManager, input_func: Callable[[str], str] = input,
                 file_writer: Optional[FileWriter] = None):
        """
        Initialize with configuration.

        Args:
            config_manager: ConfigManager instance with loaded configuration
            input_func: Prompt function used for confirmations
            file_writer: Writer to use instead of one built from the configuration
        """
        self.confirm_changes = config_manager.should_confirm_changes()
        self.show_diffs = config_manager.should_show_diffs()
        self.file_writer = file_writer or FileWriter(config_manager)
        self.input_func = input_func

        self.apply_to_all = False
        self.quit_requested = False

    @staticmethod
    def has_actual_changes(result: ProcessingResult) -> bool:
        """Check if a result carries code different from the original."""
        return (
            result.success
            and result.transformed_code is not None
            and result.transformed_code != result.original_code
        )

    def process_results(self, results: List[ProcessingResult]) -> List[OutputResult]:
        """
        Apply processing results according to the output configuration.

        Args:
            results: ProcessingResult objects from the import engine

        Returns:
            One OutputResult per failed or changed file
        """
        output_results = []

        for result in results:
            if not result.success:
                output_results.append(OutputResult(
                    file_path=result.file_path,
                    success=False,
                    output_path=None,
                    error_message=f"Processing failed: {result.error_message}",
                    changes_made=[]
                ))

        changed = [r for r in results if self.has_actual_changes(r)]
        if not changed:
            print("ℹ️  No files need changes")
            return output_results

        for result in changed:
            if self.quit_requested:
                break
            output_results.append(self._apply(result))

        return output_results

    def _apply(self, result: ProcessingResult) -> OutputResult:
        if self.show_diffs:
            print(self.format_diff(result))

        if self.confirm_changes and not self.apply_to_all:
            decision = self._console_confirmation(result)
            if decision is None:
                self.quit_requested = True
            if not decision:
                print(f"⏩ Skipped {result.file_path.name}")
                return OutputResult(
                    file_path=result.file_path,
                    success=True,
                    output_path=None,
                    error_message=None,
                    changes_made=result.changes_made,
                    user_skipped=True
                )

        write_result = self.file_writer.write_transformed_code(result.file_path, result.transformed_code)
        if not write_result.success:
            print(f"❌ Could not write {result.file_path}: {write_result.error_message}")

        return OutputResult(
            file_path=result.file_path,
            success=write_result.success,
            output_path=write_result.output_path,
            error_message=write_result.error_message,
            changes_made=result.changes_made
        )

    @staticmethod
    def format_diff(result: ProcessingResult) -> str:
        """
        Build a unified diff between a file's original and transformed code.

        Args:
            result: Successful ProcessingResult

        Returns:
            Unified diff text
        """
        diff = difflib.unified_diff(
            result.original_code.splitlines(keepends=True),
            (result.transformed_code or "").splitlines(keepends=True),
            fromfile=f"a/{result.file_path.name}",
            tofile=f"b/{result.file_path.name}"
        )
        return "".join(line if line.endswith('\n') else line + '\n' for line in diff)

    def _console_confirmation(self, result: ProcessingResult) -> Optional[bool]:
        """
        Ask whether to apply a file's changes.

        Returns:
            True to apply, False to skip, None to stop processing
        """
        print(f"\n📄 Apply changes to {result.file_path}?")
        for change in result.changes_made:
            print(f"  {change}")

        while True:
            response = self.input_func("\nApply changes? [y/n/a/q] (yes/no/all/quit): ").lower().strip()
            if response in ['y', 'yes']:
                return True
            elif response in ['n', 'no']:
                return False
            elif response in ['a', 'all']:
                self.apply_to_all = True
                return True
            elif response in ['q', 'quit']:
                return None
            else:
                print("Please enter 'y', 'n', 'a' or 'q'")

    def print_summary(self, results: List[OutputResult]) -> None:
        """Print summary of the run."""
        written = [r for r in results if r.success and not r.user_skipped]
        failed = [r for r in results if not r.success]
        skipped = [r for r in results if r.user_skipped]

        print(f"\n{'='*60}")
        print("AUTO IMPORT SUMMARY")
        print(f"{'='*60}")
        print(f"Files changed: {len(written)}")
        if failed:
            print(f"Failed: {len(failed)}")
        if skipped:
            print(f"Skipped by user: {len(skipped)}")

        if written:
            print("\n✅ Updated files:")
            for result in written:
                target = result.output_path or result.file_path
                print(f"  📝 {target} ({len(result.changes_made)} import changes)")

        if failed:
            print("\n❌ Failed files:")
            for result in failed:
                print(f"  {result.file_path}: {result.error_message}")

        print(f"{'='*60}")

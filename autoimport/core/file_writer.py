"""
File Writer for JavaScript Auto Import.
Writes transformed modules in place, to sibling files, or to standard output.
"""

import sys
import shutil
from typing import Optional, TextIO
from pathlib import Path
from dataclasses import dataclass

from autoimport.config.config_manager import ConfigManager


OUTPUT_MODES = ('in_place', 'new_files', 'stdout')


@dataclass
class WriteResult:
    """Result of writing a file."""
    success: bool
    output_path: Optional[Path]
    error_message: Optional[str] = None


class FileWriter:
    """Writes transformed code according to the configured output mode."""

    def __init__(self, config_manager: ConfigManager, stream: Optional[TextIO] = None):
        """
        Initialize FileWriter with configuration.

        Args:
            config_manager: ConfigManager instance with loaded configuration
            stream: Stream used by the 'stdout' mode (defaults to sys.stdout)
        """
        self.output_mode = config_manager.get_output_mode()
        self.new_files_suffix = config_manager.get_new_files_suffix()
        self.stream = stream

    def write_transformed_code(self, file_path: Path, transformed_code: str) -> WriteResult:
        """
        Write transformed code according to configuration.

        Args:
            file_path: Original file path
            transformed_code: Transformed code to write

        Returns:
            WriteResult with operation result
        """
        if self.output_mode not in OUTPUT_MODES:
            return WriteResult(
                success=False,
                output_path=None,
                error_message=f"Unknown output mode: {self.output_mode}"
            )

        try:
            if self.output_mode == "in_place":
                output_path = self._write_in_place(file_path, transformed_code)
            elif self.output_mode == "new_files":
                output_path = self._write_new_file(file_path, transformed_code)
            else:
                output_path = self._write_stdout(file_path, transformed_code)

            return WriteResult(success=True, output_path=output_path)

        except OSError as e:
            return WriteResult(
                success=False,
                output_path=None,
                error_message=str(e)
            )

    def _write_in_place(self, file_path: Path, transformed_code: str) -> Path:
        """
        Overwrite the original file, restoring a backup copy if the write fails.

        Args:
            file_path: Original file path
            transformed_code: Code to write

        Returns:
            Path to the written file
        """
        backup_path = file_path.with_suffix(file_path.suffix + '.backup')
        shutil.copy2(file_path, backup_path)

        try:
            with open(file_path, 'w', encoding='utf-8', newline='') as f:
                f.write(transformed_code)
        except OSError:
            shutil.copy2(backup_path, file_path)
            raise
        finally:
            backup_path.unlink()

        return file_path

    def _write_new_file(self, original_path: Path, transformed_code: str) -> Path:
        """
        Write to a sibling file named with the configured suffix.

        `app.js` becomes `app_autoimport.js`, then `app_autoimport_1.js` and so
        on when that name is taken.

        Args:
            original_path: Original file path
            transformed_code: Code to write

        Returns:
            Path to the new file
        """
        stem, suffix = original_path.stem, original_path.suffix

        new_path = original_path.with_name(f"{stem}{self.new_files_suffix}{suffix}")
        counter = 1
        while new_path.exists():
            new_path = original_path.with_name(f"{stem}{self.new_files_suffix}_{counter}{suffix}")
            counter += 1

        with open(new_path, 'w', encoding='utf-8', newline='') as f:
            f.write(transformed_code)

        return new_path

    def _write_stdout(self, file_path: Path, transformed_code: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(f"// {file_path}\n")
        stream.write(transformed_code)
        if not transformed_code.endswith('\n'):
            stream.write('\n')

"""
Import engine for JavaScript Auto Import.
Orchestrator that runs the auto import pass over files on disk.
"""

from typing import List, Optional
from pathlib import Path
from dataclasses import dataclass

from autoimport.config.config_manager import ConfigManager
from autoimport.config.resolution import ResolutionConfigError, build_resolution
from .auto_import_pass import AutoImportPass
from .code_generator import CodeGenerator
from .js_parser import JSParser
from .program import Program


@dataclass
class ProcessingResult:
    """Result of processing a single file."""
    file_path: Path
    success: bool
    original_code: str
    transformed_code: Optional[str]
    changes_made: List[str]
    error_message: Optional[str]


class ImportEngine:
    """Runs the auto import pass over JavaScript files."""

    def __init__(self, config_manager: ConfigManager, ordering: Optional[str] = None, verbose: bool = False):
        """
        Initialize ImportEngine with configuration.

        Args:
            config_manager: ConfigManager instance with loaded configuration
            ordering: Overrides the configured import ordering when given
            verbose: Print per-file progress

        Raises:
            ResolutionConfigError: If the configured imports are malformed
        """
        self.config = config_manager
        self.verbose = verbose
        self.base_dir = config_manager.get_base_dir()

        self.parser = JSParser()
        self.generator = CodeGenerator()
        self.auto_import = AutoImportPass(
            build_resolution(config_manager.get_resolution_option()),
            ordering or config_manager.get_ordering()
        )

    def process_files(self, file_paths: List[Path]) -> List[ProcessingResult]:
        """
        Process files independently of each other.

        Args:
            file_paths: JavaScript files to process

        Returns:
            One ProcessingResult per file, in order
        """
        return [self.process_file(file_path) for file_path in file_paths]

    def process_file(self, file_path: Path) -> ProcessingResult:
        """
        Add the configured imports a single JavaScript file needs.

        Args:
            file_path: Path to the JavaScript file to process

        Returns:
            ProcessingResult with transformation results

        Raises:
            ResolutionConfigError: If the configuration cannot be applied to the file
        """
        if self.verbose:
            print(f"🔄 Processing {file_path}...")

        parse_result = self.parser.parse_file(file_path)
        if not parse_result.success:
            return ProcessingResult(
                file_path=file_path,
                success=False,
                original_code=parse_result.source_code,
                transformed_code=None,
                changes_made=[],
                error_message=parse_result.error_message
            )

        original_code = parse_result.source_code

        try:
            program = Program(parse_result)
            pass_result = self.auto_import.run(program, filename=str(file_path), cwd=self.base_dir)
            transformed_code = self.generator.generate(program)

        except ResolutionConfigError:
            raise
        except Exception as e:
            return ProcessingResult(
                file_path=file_path,
                success=False,
                original_code=original_code,
                transformed_code=None,
                changes_made=[],
                error_message=f"Error applying imports: {e}"
            )

        changes = pass_result.changes if pass_result.modified else []

        if self.verbose:
            if changes:
                print(f"🎯 Applied {len(changes)} import changes to {file_path}")
                for change in changes:
                    print(f"   • {change}")
            else:
                print(f"✓ No imports needed for {file_path}")

        return ProcessingResult(
            file_path=file_path,
            success=True,
            original_code=original_code,
            transformed_code=transformed_code,
            changes_made=changes,
            error_message=None
        )

"""
Line-oriented access to scalar-valued files such as sysfs attributes.

``ScalarFile`` wraps one path; ``FileCollection`` wraps every path matched
by a glob pattern and addresses them by index. Read and write failures
surface as IO ``LimiterError``s.
"""

import glob
import logging
from pathlib import Path
from typing import Callable, Generic, List, Sequence, TypeVar, Union

from ..validation.exceptions import argument_error, io_error

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ScalarFile(Generic[T]):
    """A single file holding one value per line."""

    def __init__(self, path: Union[str, Path], parser: Callable[[str], T]):
        self.path = Path(path)
        self.parser = parser

    def read_lines(self) -> List[str]:
        """
        Read the file and return its non-empty lines, without newlines.

        Raises:
            LimiterError: IO if the file cannot be read
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise io_error(self.path, "read", str(e))
        return [line for line in text.splitlines() if line.strip()]

    def read(self) -> List[T]:
        """Read and parse every line of the file."""
        return [self.parser(line) for line in self.read_lines()]

    def overwrite(self, value: T) -> None:
        """
        Replace the file contents with ``value``.

        Raises:
            LimiterError: IO if the file cannot be written
        """
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(f"{value}\n")
        except OSError as e:
            raise io_error(self.path, "write", str(e))

    def exists(self) -> bool:
        return self.path.exists()

    def __repr__(self) -> str:
        return f"ScalarFile({str(self.path)!r})"


class FileCollection(Generic[T]):
    """
    An ordered collection of ``ScalarFile`` objects sharing one parser.
    """

    def __init__(self, paths: Sequence[Union[str, Path]], parser: Callable[[str], T]):
        if not paths:
            raise argument_error(
                "No file paths provided to the file collection.", field_name="paths", value=paths
            )
        self.files: List[ScalarFile[T]] = [ScalarFile(path, parser) for path in paths]

    @classmethod
    def from_pattern(cls, pattern: str, parser: Callable[[str], T]) -> "FileCollection[T]":
        """
        Build a collection from every path matching a glob pattern, sorted.

        Raises:
            LimiterError: ARGUMENT if nothing matches the pattern
        """
        paths = sorted(glob.glob(pattern))
        if not paths:
            raise argument_error(
                "No files found matching the pattern.", field_name="pattern", value=pattern
            )
        logger.debug(f"Pattern {pattern} matched {len(paths)} files")
        return cls(paths, parser)

    def __len__(self) -> int:
        return len(self.files)

    def read(self) -> List[T]:
        """Read and parse every line of every file, concatenated in order."""
        values: List[T] = []
        for scalar_file in self.files:
            values.extend(scalar_file.read())
        return values

    def read_lines(self) -> List[str]:
        """Read every raw line of every file, concatenated in order."""
        lines: List[str] = []
        for scalar_file in self.files:
            lines.extend(scalar_file.read_lines())
        return lines

    def overwrite(self, index: int, value: T) -> None:
        """
        Overwrite the file at ``index`` with ``value``.

        Raises:
            LimiterError: ARGUMENT if the index is out of range, IO if the write fails
        """
        if not 0 <= index < len(self.files):
            raise argument_error(
                f"File index must be less than collection size {len(self.files)}.",
                field_name="index",
                value=index,
            )
        self.files[index].overwrite(value)

    def max_value(self) -> T:
        """Return the greatest value read from any file."""
        values = self.read()
        if not values:
            raise argument_error("File collection produced no values to compare.")
        return max(values)

    def __repr__(self) -> str:
        return f"FileCollection({[str(f.path) for f in self.files]!r})"

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

from infra.errors import FileNotFound


@dataclass(frozen=True, order=True)
class SourceFile:
    """An input file and where it sits under the input it was found through.

    `relative` is the path below a directory argument, or just the file name
    for an explicit file argument. Outputs mirror it under the output dir.
    """
    path: Path
    relative: Path

    @classmethod
    def standalone(cls, path) -> "SourceFile":
        path = Path(path)
        return cls(path=path, relative=Path(path.name))


def normalize_extensions(extensions: Iterable[str]) -> List[str]:
    return [e.strip().lower().lstrip('.') for e in extensions if e.strip()]


def has_extension(path: Path, extensions: Iterable[str]) -> bool:
    return path.suffix.lower().lstrip('.') in set(normalize_extensions(extensions))


def collect_sources(inputs: Iterable, extensions: Iterable[str]) -> List[SourceFile]:
    """Expand files and directories (recursively) into sorted, de-duplicated SourceFiles.

    Explicit file arguments are filtered by extension too, so
    `inkwell convert notes.docx scan.pdf` processes only scan.pdf.
    A file reached through several inputs keeps the first one's relative path.
    A path that doesn't exist raises FileNotFound.
    """
    extensions = normalize_extensions(extensions)
    found: Dict[Path, Path] = {}

    for raw in inputs:
        path = Path(os.path.expanduser(str(raw)))
        if path.is_dir():
            for candidate in path.rglob('*'):
                if candidate.is_file() and has_extension(candidate, extensions):
                    found.setdefault(candidate.resolve(), candidate.relative_to(path))
        elif path.is_file():
            if has_extension(path, extensions):
                found.setdefault(path.resolve(), Path(path.name))
        else:
            raise FileNotFound(path)

    return sorted(SourceFile(path, relative) for path, relative in found.items())


def collect_files(inputs: Iterable, extensions: Iterable[str]) -> List[Path]:
    return [source.path for source in collect_sources(inputs, extensions)]

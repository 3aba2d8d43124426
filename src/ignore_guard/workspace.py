"""
Workspace folders and path relativisation
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

PathLike = Union[str, Path]


def normalize_path(path: PathLike) -> Path:
    """Absolute, symlink-resolved form used for every cache and state key"""
    return Path(path).expanduser().resolve()


@dataclass(frozen=True)
class Workspace:
    """One or more workspace folders; the first folder is the primary one"""
    folders: Tuple[Path, ...]

    @classmethod
    def from_paths(cls, paths: Iterable[PathLike]) -> "Workspace":
        folders = tuple(normalize_path(p) for p in paths)
        if not folders:
            raise ValueError("a workspace needs at least one folder")
        return cls(folders=folders)

    @property
    def root(self) -> Path:
        return self.folders[0]

    def folder_for(self, path: PathLike) -> Optional[Path]:
        """Deepest workspace folder containing path, or None"""
        path = normalize_path(path)
        best = None
        for folder in self.folders:
            if path == folder or folder in path.parents:
                if best is None or len(folder.parts) > len(best.parts):
                    best = folder
        return best

    def contains(self, path: PathLike) -> bool:
        return self.folder_for(path) is not None

    def relative_path(self, path: PathLike) -> str:
        """
        Path relative to its workspace folder in POSIX form.

        Paths outside every folder are returned unchanged, the way editor
        hosts render them.
        """
        absolute = normalize_path(path)
        folder = self.folder_for(absolute)
        if folder is None:
            return str(path)
        return absolute.relative_to(folder).as_posix()

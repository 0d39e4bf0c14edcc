"""Reading HTML inputs and writing workbooks for the command line."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from openpyxl.workbook.workbook import Workbook

from .constants import DEFAULT_MAX_FILE_SIZE, HTML_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "HTML2XLSX_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the input size limit, honouring ``HTML2XLSX_MAX_FILE_SIZE``.

    Args:
        default: Limit in bytes used when the variable is unset.

    Raises:
        ValueError: If the variable is set to anything but a positive integer.

    Examples:
        os.environ["HTML2XLSX_MAX_FILE_SIZE"] = "1048576"
        get_max_file_size()  # 1048576
    """
    raw = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw is None:
        return default

    try:
        limit = int(raw.strip())
    except ValueError:
        limit = 0
    if limit <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {raw!r}.")
    return limit


def _traverses_symlink(path: Path) -> bool:
    try:
        return any(candidate.is_symlink() for candidate in (path, *path.parents))
    except OSError:
        return True


def resolve_input_path(raw_path: str, base_dir: Path) -> Path:
    """Resolve an HTML input given on the command line.

    The file must exist, be a regular ``.html``/``.htm`` file inside
    `base_dir`, and be reached without going through a symlink.

    Args:
        raw_path: Path as typed by the user.
        base_dir: Resolved directory the input must live under.

    Returns:
        Path: Absolute, resolved path.

    Raises:
        ValueError: Describing the first check the path fails.

    Examples:
        resolve_input_path("pages/summary.html", Path.cwd().resolve())
    """
    path = Path(raw_path).expanduser()
    if _traverses_symlink(path):
        raise ValueError(f"Symlinks are not supported for input files: {path}")

    if not path.exists():
        raise ValueError(f"{path} does not exist.")
    resolved = path.resolve()
    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")
    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}.")
    if resolved.suffix.lower() not in HTML_EXTENSIONS:
        supported = ", ".join(HTML_EXTENSIONS)
        raise ValueError(f"{resolved} is not an HTML file (expected one of: {supported}).")
    return resolved


def read_markup(filepath: Path, max_size: int) -> str:
    """Read an HTML file as text once it passes the size limit.

    Bytes that are not valid UTF-8 become U+FFFD and a leading byte order
    mark is dropped.

    Raises:
        IOError: If the file cannot be read, is no longer a regular file, or
            is larger than `max_size` bytes.
    """
    try:
        file_stat = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error

    if not stat.S_ISREG(file_stat.st_mode):
        raise IOError(f"{filepath} is not a regular file.")
    if file_stat.st_size > max_size:
        raise IOError(f"{filepath} exceeds the maximum allowed size of {max_size} bytes.")

    try:
        data = filepath.read_bytes()
    except OSError as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error
    return data.decode("utf-8-sig", errors="replace")


def save_workbook(workbook: Workbook, filepath: Path) -> None:
    """Save `workbook` to `filepath` without ever leaving a partial file.

    The workbook goes to a temporary file beside the target, which is synced
    and then renamed over it.

    Raises:
        IOError: If `filepath` is a symlink or writing fails.

    Examples:
        save_workbook(workbook, Path("report.xlsx"))
    """
    if filepath.is_symlink():
        raise IOError(f"Refusing to overwrite symlink: {filepath}")

    descriptor = None
    temp_name = None
    try:
        descriptor, temp_name = tempfile.mkstemp(
            prefix=f".{filepath.stem}-", suffix=".xlsx", dir=filepath.parent
        )
        with os.fdopen(descriptor, "wb") as stream:
            descriptor = None
            workbook.save(stream)
            stream.flush()
            os.fsync(stream.fileno())
        os.replace(temp_name, filepath)
        temp_name = None
    except OSError as error:
        raise IOError(f"Error writing {filepath}: {error}") from error
    finally:
        if descriptor is not None:
            os.close(descriptor)
        if temp_name is not None:
            Path(temp_name).unlink(missing_ok=True)

"""File effects and templating.

These functions perform real changes and are only called by the execution
gateway; providers describe file changes as actions instead.
"""

import grp
import os
import pwd
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .paths import TEMPLATES_DIR

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


def render_template(name: str, context: dict) -> str:
    """
    Render a template shipped in bootlib/templates.

    Args:
        name: Template file name (e.g. "sysctl.conf.j2")
        context: Variables available to the template

    Returns:
        Rendered content
    """
    return _env.get_template(name).render(**context)


def read_file(path: Union[str, Path]) -> str:
    """Read file content, or "" if the file does not exist."""
    path = Path(path)
    if not path.exists():
        return ""
    return path.read_text()


def set_permissions(
    path: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: Optional[int] = None,
) -> bool:
    """
    Set ownership and permissions on a file or directory.

    Returns:
        True if any changes were made
    """
    path = Path(path)
    changed = False

    if owner or group:
        stat = path.stat()
        current_owner = pwd.getpwuid(stat.st_uid).pw_name
        current_group = grp.getgrgid(stat.st_gid).gr_name

        target_owner = owner or current_owner
        target_group = group or current_group

        if current_owner != target_owner or current_group != target_group:
            shutil.chown(path, user=target_owner, group=target_group)
            changed = True

    if mode is not None:
        current_mode = path.stat().st_mode & 0o777
        if current_mode != mode:
            path.chmod(mode)
            changed = True

    return changed


def ensure_dir(
    path: Union[str, Path],
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: Optional[int] = None,
) -> bool:
    """
    Idempotently ensure a directory exists with correct permissions.

    Returns:
        True if any changes were made
    """
    path = Path(path)
    changed = False

    if not path.is_dir():
        path.mkdir(parents=True, exist_ok=True)
        changed = True

    if owner or group or mode is not None:
        if set_permissions(path, owner=owner, group=group, mode=mode):
            changed = True

    return changed


def write_file(
    path: Union[str, Path],
    content: str,
    mode: Optional[int] = None,
) -> bool:
    """
    Atomically write a file if its content differs.

    Writes to a temp file in the same directory, then renames it over the
    target. An existing file keeps its mode unless one is given.

    Returns:
        True if the file was written
    """
    path = Path(path)
    if path.exists() and read_file(path) == content:
        if mode is not None:
            return set_permissions(path, mode=mode)
        return False

    if mode is None and path.exists():
        mode = path.stat().st_mode & 0o777

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as tmp:
            tmp.write(content)
            tmp_path = tmp.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        Path(tmp_path).rename(path)
        tmp_path = None
    finally:
        if tmp_path and Path(tmp_path).exists():
            Path(tmp_path).unlink()

    return True


def copy_file(source: Union[str, Path], dest: Union[str, Path]) -> bool:
    """Copy a file with its metadata, overwriting dest."""
    source = Path(source)
    dest = Path(dest)
    if not source.is_file():
        raise FileNotFoundError(f"{source} not found")
    shutil.copy2(source, dest)
    return True

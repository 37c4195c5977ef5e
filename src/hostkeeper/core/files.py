"""File changes that can be undone."""

from __future__ import annotations

import shutil
from pathlib import Path

from hostkeeper.models.reconcile import ChangeSet
from hostkeeper.utils.errors import ApplyError
from hostkeeper.utils.logging import get_logger

logger = get_logger(__name__)


def read_text(path: Path | str) -> str | None:
    """File content, or None if the file does not exist."""
    path = Path(path)
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def write_file(path: Path | str, content: str, changes: ChangeSet, mode: int | None = None) -> None:
    """Write ``content`` to ``path``, keeping the previous content in ``changes``.

    Only the first write of a path in one change set is backed up, so the
    backup is always the state before the apply step began.

    Raises:
        ApplyError: If the file cannot be written
    """
    path = Path(path)
    key = str(path)
    try:
        if key not in changes.backups:
            changes.backups[key] = read_text(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if mode is not None:
            path.chmod(mode)
    except OSError as e:
        raise ApplyError(f"Cannot write {path}: {e}") from e
    changes.actions.append(f"wrote {path}")


def make_dir(path: Path | str, changes: ChangeSet) -> None:
    """Create a directory (and parents) if absent, recording it for rollback.

    Raises:
        ApplyError: If the directory cannot be created
    """
    path = Path(path)
    if path.is_dir():
        return
    try:
        path.mkdir(parents=True)
    except OSError as e:
        raise ApplyError(f"Cannot create {path}: {e}") from e
    changes.created_dirs.append(str(path))
    changes.actions.append(f"created {path}")


def make_link(link: Path | str, target: Path | str, changes: ChangeSet) -> None:
    """Create a symlink if nothing exists at ``link``.

    Raises:
        ApplyError: If the link cannot be created
    """
    link = Path(link)
    if link.is_symlink() or link.exists():
        return
    try:
        link.parent.mkdir(parents=True, exist_ok=True)
        link.symlink_to(target)
    except OSError as e:
        raise ApplyError(f"Cannot link {link}: {e}") from e
    changes.created_links.append(str(link))
    changes.actions.append(f"linked {link}")


def chown_tree(path: Path | str, owner: str) -> None:
    """Recursively give ``path`` to ``owner`` (user and group of the same name).

    Raises:
        ApplyError: If the owner does not exist or ownership cannot change
    """
    path = Path(path)
    try:
        shutil.chown(path, user=owner, group=owner)
        for child in path.rglob("*"):
            shutil.chown(child, user=owner, group=owner)
    except (LookupError, OSError) as e:
        raise ApplyError(f"Cannot chown {path} to {owner}: {e}") from e


def restore(changes: ChangeSet) -> bool:
    """Undo the filesystem effects recorded in ``changes``.

    Links go first, then file contents, then created directories (newest
    first). Returns False if anything could not be restored.
    """
    restored = True

    for link in changes.created_links:
        try:
            Path(link).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Cannot remove link {link}: {e}")
            restored = False

    for key, previous in changes.backups.items():
        path = Path(key)
        try:
            if previous is None:
                path.unlink(missing_ok=True)
            else:
                path.write_text(previous, encoding="utf-8")
        except OSError as e:
            logger.error(f"Cannot restore {path}: {e}")
            restored = False

    for directory in reversed(changes.created_dirs):
        try:
            shutil.rmtree(directory)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Cannot remove {directory}: {e}")
            restored = False

    return restored

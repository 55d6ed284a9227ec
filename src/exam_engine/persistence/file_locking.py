"""
Module: persistence.file_locking

Purpose:
    Cross-platform file locking for the JSON record store. Uses
    portalocker for Mac, Windows, and Linux compatibility, so two hosts
    sharing a data directory cannot interleave writes.

Key Functions:
    - locked_file: Context manager for locked file access
    - locked_read_json: Read a JSON document under a shared lock
    - locked_read_modify_write_json: Read-modify-write JSON with lock
    - locked_append_jsonl_unique: Append to JSONL unless the key exists
    - locked_read_jsonl: Read every JSONL record under a shared lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - persistence.json_store.JsonFileGateway
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List

import portalocker

logger = logging.getLogger(__name__)


@contextmanager
def locked_file(
    path: Path,
    mode: str = 'r',
    lock_type: int = portalocker.LOCK_EX,
) -> Generator:
    """
    Context manager for cross-platform locked file access.
    
    Args:
        path: Path to file.
        mode: File open mode ('r', 'r+', 'a+', etc.).
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).
        
    Yields:
        Open file handle with lock held.
        
    Example:
        >>> with locked_file(path, 'a+') as f:
        ...     f.write('data')
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    
    # Ensure file exists for read modes without truncating a concurrent writer's data
    if 'r' in mode:
        path.touch(exist_ok=True)
    
    with open(path, mode, encoding='utf-8') as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def locked_read_json(
    path: Path,
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read a JSON document under a shared lock.
    
    Returns:
        Parsed document, or default() if the file is missing or empty.
    """
    if not path.exists():
        return default()
    with locked_file(path, 'r', portalocker.LOCK_SH) as f:
        content = f.read()
    return json.loads(content) if content.strip() else default()


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read JSON, apply modifier, write back - all with exclusive lock.
    
    If the modifier raises, the file is left untouched.
    
    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for default data if file doesn't exist.
        
    Returns:
        The modified data that was written.
        
    Example:
        >>> def add_row(existing):
        ...     existing[row["id"]] = row
        ...     return existing
        >>> locked_read_modify_write_json(attempts_path, add_row)
    """
    with locked_file(path, 'r+', portalocker.LOCK_EX) as f:
        # Read existing
        f.seek(0)
        content = f.read()
        existing = json.loads(content) if content.strip() else default()
        
        # Modify
        modified = modifier(existing)
        
        # Write back
        f.seek(0)
        f.truncate()
        json.dump(modified, f, indent=2, ensure_ascii=False)
        f.flush()
        
        return modified


def locked_append_jsonl_unique(path: Path, record: Dict[str, Any], key: str = "id") -> bool:
    """
    Append a record to a JSONL file unless one with the same key exists.
    
    Thread/process-safe; makes insert-only tables tolerant of retries.
    
    Args:
        path: Path to JSONL file.
        record: Dictionary to append as JSON line.
        key: Field that identifies a record.
        
    Returns:
        True if the record was appended, False if it was already present.
    """
    with locked_file(path, 'a+', portalocker.LOCK_EX) as f:
        f.seek(0)
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                if json.loads(line).get(key) == record[key]:
                    return False
            except json.JSONDecodeError:
                logger.warning(f"Skipping corrupt line in {path.name}")
        f.seek(0, 2)
        f.write(json.dumps(record, ensure_ascii=False) + '\n')
        f.flush()
    
    logger.debug(f"Appended record to {path.name}")
    return True


def locked_read_jsonl(path: Path) -> List[Dict[str, Any]]:
    """
    Read all records from a JSONL file under a shared lock.
    
    Corrupt lines are skipped with a warning.
    """
    if not path.exists():
        return []
    records = []
    with locked_file(path, 'r', portalocker.LOCK_SH) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON at {path.name}:{line_num}: {e}")
    return records

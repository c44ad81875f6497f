"""File operation executor.

Paths are substituted, resolved against the project folder and, when the
node requires it, confined to that folder. Filesystem calls run in the
default thread pool.
"""

from __future__ import annotations

import asyncio
import json
import shutil
from pathlib import Path
from typing import Any, Callable

from nodeweave.core.context import ExecutionContext, project_folder_of, scope_of
from nodeweave.core.nodes import FileOperationNode
from nodeweave.core.types import NodeExecutionResult
from nodeweave.errors.exceptions import (
    FileOperationError,
    NodeValidationError,
    SecurityViolationError,
)
from nodeweave.executors.base import NodeExecutor
from nodeweave.logging import get_logger

SOURCE_OPERATIONS = ("read", "delete", "exists", "copy", "move")
TARGET_OPERATIONS = ("write", "copy", "move")
BINARY_ENCODINGS = ("binary", "buffer")


def _read(path: Path, encoding: str) -> dict[str, Any]:
    try:
        if encoding in BINARY_ENCODINGS:
            content: Any = path.read_bytes()
            size = len(content)
        else:
            content = path.read_text(encoding=encoding)
            size = path.stat().st_size
    except FileNotFoundError as e:
        raise FileOperationError(f"File not found: {path}", path=str(path)) from e
    except PermissionError as e:
        raise FileOperationError(f"Permission denied: {path}", path=str(path)) from e
    except IsADirectoryError as e:
        raise FileOperationError(f"Path is a directory: {path}", path=str(path)) from e
    return {"fileContent": content, "encoding": encoding, "size": size}


def _write(path: Path, content: str | bytes, encoding: str, overwrite: bool) -> dict[str, Any]:
    existed = path.exists()
    if existed and not overwrite:
        raise FileOperationError(f"File already exists: {path}", path=str(path))

    data = content if isinstance(content, bytes) else content.encode(
        "utf-8" if encoding in BINARY_ENCODINGS else encoding
    )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except PermissionError as e:
        raise FileOperationError(f"Permission denied: {path}", path=str(path)) from e
    return {"bytesWritten": len(data), "path": str(path), "existed": existed}


def _transfer(source: Path, target: Path, overwrite: bool, move: bool) -> dict[str, Any]:
    if not source.exists():
        raise FileOperationError(f"Source file not found: {source}", path=str(source))
    if target.exists() and not overwrite:
        raise FileOperationError(f"File already exists: {target}", path=str(target))

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if move:
            if target.exists():
                _remove(target)
            shutil.move(str(source), str(target))
        elif source.is_dir():
            shutil.copytree(source, target, dirs_exist_ok=True)
        else:
            shutil.copy2(source, target)
    except PermissionError as e:
        raise FileOperationError(f"Permission denied: {e.filename}", path=e.filename) from e
    return {"sourcePath": str(source), "targetPath": str(target)}


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _delete(path: Path) -> dict[str, Any]:
    if not path.exists() and not path.is_symlink():
        return {"existed": False, "path": str(path), "message": "File did not exist"}
    try:
        _remove(path)
    except PermissionError as e:
        raise FileOperationError(f"Permission denied: {path}", path=str(path)) from e
    return {"existed": True, "path": str(path)}


def _exists(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {"exists": False, "path": str(path)}
    return {
        "exists": True,
        "path": str(path),
        "isFile": path.is_file(),
        "isDirectory": path.is_dir(),
        "size": path.stat().st_size,
    }


class FileOperationExecutor(NodeExecutor):
    """Executes ``file`` nodes: read, write, copy, move, delete, exists.

    Relative paths are taken relative to the project folder.
    """

    node_class = FileOperationNode

    @staticmethod
    def _paths(node: FileOperationNode) -> tuple[str | None, str | None]:
        source, target = node.source_path, node.target_path
        if node.path:
            if node.operation == "write":
                target = target or node.path
            else:
                source = source or node.path
        return source, target

    @staticmethod
    def _resolve(raw: str, base: Path | None) -> Path:
        path = Path(raw).expanduser()
        if not path.is_absolute() and base is not None:
            path = base / path
        return path.resolve()

    def _check_jail(self, node: FileOperationNode, label: str, path: Path, root: Path) -> None:
        # Both sides are fully resolved, so ".." segments and symlinks cannot escape
        if not path.is_relative_to(root):
            message = (
                f'Security violation: {label} path "{path}" is outside '
                f'project folder "{root}"'
            )
            get_logger().security_block(node.name, message)
            raise SecurityViolationError(message, node_id=node.id)

    def _content(self, node: FileOperationNode, scope: Any, substitute: Callable[[str], str]) -> str | bytes:
        if node.content is not None:
            return substitute(node.content)
        fallback = scope.get("content") if hasattr(scope, "get") else None
        if fallback is None:
            raise NodeValidationError("No content provided for write operation", node_id=node.id)
        if isinstance(fallback, (str, bytes)):
            return fallback
        return json.dumps(fallback, indent=2, default=str)

    async def _execute(
        self, node: FileOperationNode, context: ExecutionContext
    ) -> NodeExecutionResult:
        operation = node.operation
        if operation not in SOURCE_OPERATIONS and operation not in TARGET_OPERATIONS:
            raise NodeValidationError(
                f"Unsupported file operation: {operation}", node_id=node.id
            )

        scope = scope_of(context)

        def substitute(text: str) -> str:
            return self.context_manager.substitute(text, scope)

        folder = project_folder_of(context)
        if node.require_project_folder and not folder:
            raise NodeValidationError(
                "Project folder not defined in context, but requireProjectFolder is enabled",
                node_id=node.id,
            )
        root = Path(folder).expanduser().resolve() if folder else None

        raw_source, raw_target = self._paths(node)
        source = target = None
        if operation in SOURCE_OPERATIONS:
            if not raw_source:
                raise NodeValidationError(
                    f"Source path is required for {operation} operation", node_id=node.id
                )
            source = self._resolve(substitute(raw_source), root)
        if operation in TARGET_OPERATIONS:
            if not raw_target:
                raise NodeValidationError(
                    f"Target path is required for {operation} operation", node_id=node.id
                )
            target = self._resolve(substitute(raw_target), root)

        if node.require_project_folder and root is not None:
            if source is not None:
                self._check_jail(node, "Source", source, root)
            if target is not None:
                self._check_jail(node, "Target", target, root)

        if operation == "read":
            call: Callable[[], dict[str, Any]] = lambda: _read(source, node.encoding)
        elif operation == "write":
            content = self._content(node, scope, substitute)
            call = lambda: _write(target, content, node.encoding, node.overwrite)
        elif operation in ("copy", "move"):
            call = lambda: _transfer(source, target, node.overwrite, operation == "move")
        elif operation == "delete":
            call = lambda: _delete(source)
        else:
            call = lambda: _exists(source)

        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, call)

        return self.success(
            node,
            output={"operation": operation, **data},
            variables={"operation": operation, **data},
        )

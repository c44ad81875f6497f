"""Unit tests for the file operation executor."""

from __future__ import annotations

import pytest

from nodeweave.core.nodes import FileOperationNode
from nodeweave.core.types import NodeStatus
from nodeweave.executors.file import FileOperationExecutor


def _node(operation: str, **kwargs) -> FileOperationNode:
    return FileOperationNode(id="file-1", name="Files", operation=operation, **kwargs)


@pytest.fixture
def executor(settings) -> FileOperationExecutor:
    return FileOperationExecutor(settings=settings)


@pytest.fixture
def project(tmp_path):
    folder = tmp_path / "project"
    folder.mkdir()
    return folder


@pytest.fixture
def context(project) -> dict:
    return {"projectFolder": str(project), "variables": {"name": "notes"}}


class TestReadWrite:
    """Tests for read and write."""

    @pytest.mark.asyncio
    async def test_write_then_read(self, executor, context, project) -> None:
        """Written content reads back unchanged."""
        write = await executor.execute(
            _node("write", target_path="out/{{name}}.txt", content="hello {{name}}"), context
        )
        read = await executor.execute(_node("read", source_path="out/notes.txt"), context)

        assert write.status == NodeStatus.SUCCESS
        assert write.output["bytesWritten"] == len("hello notes")
        assert write.output["existed"] is False
        assert (project / "out" / "notes.txt").read_text() == "hello notes"
        assert read.status == NodeStatus.SUCCESS
        assert read.variables["fileContent"] == "hello notes"
        assert read.variables["operation"] == "read"
        assert read.output["size"] == len("hello notes")

    @pytest.mark.asyncio
    async def test_read_binary(self, executor, context, project) -> None:
        """Binary encoding returns bytes."""
        (project / "blob.bin").write_bytes(b"\x00\x01")

        result = await executor.execute(
            _node("read", source_path="blob.bin", encoding="binary"), context
        )

        assert result.output["fileContent"] == b"\x00\x01"

    @pytest.mark.asyncio
    async def test_read_missing(self, executor, context) -> None:
        """Reading a missing file fails."""
        result = await executor.execute(_node("read", source_path="nope.txt"), context)

        assert result.status == NodeStatus.FAILED
        assert result.error.startswith("File not found")

    @pytest.mark.asyncio
    async def test_write_without_overwrite(self, executor, context, project) -> None:
        """Existing files are kept when overwrite is off."""
        (project / "keep.txt").write_text("original")

        result = await executor.execute(
            _node("write", target_path="keep.txt", content="new", overwrite=False), context
        )

        assert result.status == NodeStatus.FAILED
        assert result.error.startswith("File already exists")
        assert (project / "keep.txt").read_text() == "original"

    @pytest.mark.asyncio
    async def test_write_overwrites_by_default(self, executor, context, project) -> None:
        """Overwriting reports that the file existed."""
        (project / "keep.txt").write_text("original")

        result = await executor.execute(
            _node("write", target_path="keep.txt", content="new"), context
        )

        assert result.output["existed"] is True
        assert (project / "keep.txt").read_text() == "new"

    @pytest.mark.asyncio
    async def test_write_content_from_context(self, executor, context, project) -> None:
        """Without node content, the context's content is written as JSON."""
        context["content"] = {"a": 1}

        await executor.execute(_node("write", target_path="data.json"), context)

        assert (project / "data.json").read_text() == '{\n  "a": 1\n}'

    @pytest.mark.asyncio
    async def test_write_without_content(self, executor, context) -> None:
        """Writing needs some content."""
        result = await executor.execute(_node("write", target_path="x.txt"), context)

        assert result.error == "No content provided for write operation"

    @pytest.mark.asyncio
    async def test_legacy_path_field(self, executor, context, project) -> None:
        """A single path serves as target for write and source otherwise."""
        await executor.execute(_node("write", path="legacy.txt", content="x"), context)
        result = await executor.execute(_node("read", path="legacy.txt"), context)

        assert result.output["fileContent"] == "x"


class TestCopyMoveDelete:
    """Tests for copy, move, delete and exists."""

    @pytest.mark.asyncio
    async def test_copy(self, executor, context, project) -> None:
        """Copy leaves the source in place."""
        (project / "a.txt").write_text("A")

        result = await executor.execute(
            _node("copy", source_path="a.txt", target_path="sub/b.txt"), context
        )

        assert result.status == NodeStatus.SUCCESS
        assert (project / "a.txt").exists()
        assert (project / "sub" / "b.txt").read_text() == "A"

    @pytest.mark.asyncio
    async def test_copy_directory(self, executor, context, project) -> None:
        """Directories are copied recursively."""
        (project / "dir").mkdir()
        (project / "dir" / "f.txt").write_text("F")

        await executor.execute(_node("copy", source_path="dir", target_path="dir2"), context)

        assert (project / "dir2" / "f.txt").read_text() == "F"

    @pytest.mark.asyncio
    async def test_move(self, executor, context, project) -> None:
        """Move removes the source."""
        (project / "a.txt").write_text("A")

        await executor.execute(_node("move", source_path="a.txt", target_path="b.txt"), context)

        assert not (project / "a.txt").exists()
        assert (project / "b.txt").read_text() == "A"

    @pytest.mark.asyncio
    async def test_copy_missing_source(self, executor, context) -> None:
        """A missing source fails."""
        result = await executor.execute(
            _node("copy", source_path="ghost.txt", target_path="b.txt"), context
        )

        assert result.error.startswith("Source file not found")

    @pytest.mark.asyncio
    async def test_delete(self, executor, context, project) -> None:
        """Delete removes the file."""
        (project / "a.txt").write_text("A")

        result = await executor.execute(_node("delete", source_path="a.txt"), context)

        assert result.output["existed"] is True
        assert not (project / "a.txt").exists()

    @pytest.mark.asyncio
    async def test_delete_missing_succeeds(self, executor, context) -> None:
        """Deleting a missing file is not an error."""
        result = await executor.execute(_node("delete", source_path="ghost.txt"), context)

        assert result.status == NodeStatus.SUCCESS
        assert result.output["existed"] is False
        assert result.output["message"] == "File did not exist"

    @pytest.mark.asyncio
    async def test_exists(self, executor, context, project) -> None:
        """exists reports file details."""
        (project / "a.txt").write_text("AB")

        found = await executor.execute(_node("exists", source_path="a.txt"), context)
        missing = await executor.execute(_node("exists", source_path="b.txt"), context)

        assert found.output["exists"] is True
        assert found.output["isFile"] is True
        assert found.output["size"] == 2
        assert missing.output["exists"] is False


class TestProjectFolderJail:
    """Tests for confinement to the project folder."""

    @pytest.mark.asyncio
    async def test_traversal_blocked(self, executor, context, tmp_path) -> None:
        """.. cannot leave the project folder."""
        (tmp_path / "secret.txt").write_text("s")

        result = await executor.execute(_node("read", source_path="../secret.txt"), context)

        assert result.status == NodeStatus.FAILED
        assert result.error.startswith('Security violation: Source path "')
        assert "is outside project folder" in result.error

    @pytest.mark.asyncio
    async def test_absolute_path_outside_blocked(self, executor, context, tmp_path) -> None:
        """Absolute targets outside the folder are rejected before writing."""
        outside = tmp_path / "escape.txt"

        result = await executor.execute(
            _node("write", target_path=str(outside), content="x"), context
        )

        assert result.error.startswith("Security violation: Target path")
        assert not outside.exists()

    @pytest.mark.asyncio
    async def test_symlink_escape_blocked(self, executor, context, project, tmp_path) -> None:
        """Symlinks pointing outside are resolved and rejected."""
        (tmp_path / "secret.txt").write_text("s")
        (project / "link.txt").symlink_to(tmp_path / "secret.txt")

        result = await executor.execute(_node("read", source_path="link.txt"), context)

        assert result.status == NodeStatus.FAILED
        assert "Security violation" in result.error

    @pytest.mark.asyncio
    async def test_project_folder_required(self, executor) -> None:
        """Without a project folder the node fails."""
        result = await executor.execute(_node("read", source_path="a.txt"), {})

        assert result.error == (
            "Project folder not defined in context, but requireProjectFolder is enabled"
        )

    @pytest.mark.asyncio
    async def test_unconfined_node(self, executor, tmp_path) -> None:
        """Nodes may opt out of the project folder requirement."""
        target = tmp_path / "free.txt"

        result = await executor.execute(
            _node("write", target_path=str(target), content="ok", require_project_folder=False),
            {},
        )

        assert result.status == NodeStatus.SUCCESS
        assert target.read_text() == "ok"

    @pytest.mark.asyncio
    async def test_workflow_context_folder(self, executor, workflow_context, tmp_path) -> None:
        """The project folder is taken from a workflow context too."""
        (tmp_path / "a.txt").write_text("A")

        result = await executor.execute(_node("read", source_path="a.txt"), workflow_context)

        assert result.output["fileContent"] == "A"


class TestValidation:
    """Tests for node validation."""

    @pytest.mark.asyncio
    async def test_unsupported_operation(self, executor, context) -> None:
        """Unknown operations fail."""
        result = await executor.execute(_node("chmod", source_path="a"), context)

        assert result.error == "Unsupported file operation: chmod"

    @pytest.mark.asyncio
    async def test_missing_source(self, executor, context) -> None:
        """Source operations need a source path."""
        result = await executor.execute(_node("read"), context)

        assert result.error == "Source path is required for read operation"


_ESCAPE = "../../etc/passwd"


@pytest.mark.parametrize(
    "fields",
    [
        {"operation": "read", "source_path": _ESCAPE},
        {"operation": "write", "target_path": _ESCAPE, "content": "x"},
        {"operation": "copy", "source_path": _ESCAPE, "target_path": "copy.txt"},
        {"operation": "copy", "source_path": "a.txt", "target_path": _ESCAPE},
        {"operation": "move", "source_path": _ESCAPE, "target_path": "moved.txt"},
        {"operation": "delete", "source_path": _ESCAPE},
        {"operation": "exists", "source_path": _ESCAPE},
    ],
)
@pytest.mark.asyncio
async def test_traversal_blocked_for_every_operation(executor, context, project, fields) -> None:
    """Escaping the project folder fails whatever the operation."""
    (project / "a.txt").write_text("A")

    result = await executor.execute(
        FileOperationNode(id="file-1", name="Files", **fields), context
    )

    assert result.status == NodeStatus.FAILED
    assert "Security violation" in result.error

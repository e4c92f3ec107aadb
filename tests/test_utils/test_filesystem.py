from __future__ import annotations

import pytest
from pathlib import Path
from unittest.mock import patch

from phpkeeper.utils.filesystem import (
    _validated_file,
    _atomic_write,
    safe_read_file,
    safe_write_file,
    create_backup,
    restore_backup,
    find_composer_json,
)
from phpkeeper.exceptions import FileOperationError


MANIFEST = '{\n    "require": {\n        "monolog/monolog": "^2.9"\n    }\n}\n'


@pytest.fixture
def composer_json(tmp_path: Path) -> Path:
    """Create a composer.json with sample content."""
    path = tmp_path / "composer.json"
    path.write_text(MANIFEST, encoding="utf-8")
    return path


@pytest.mark.unit
class TestValidatedFile:
    """Tests for _validated_file path validation."""

    def test_validates_existing_file(self, composer_json: Path) -> None:
        result = _validated_file(composer_json)
        assert result == composer_json.resolve()
        assert result.is_absolute()

    def test_rejects_nonexistent_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            _validated_file(tmp_path / "missing.json")

        assert "not found" in str(exc_info.value).lower()
        assert exc_info.value.operation == "read"

    def test_rejects_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            _validated_file(tmp_path)

        assert "Not a file" in str(exc_info.value)


@pytest.mark.unit
class TestAtomicWrite:
    """Tests for _atomic_write."""

    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "composer.json"
        _atomic_write(target, MANIFEST)
        assert target.read_text(encoding="utf-8") == MANIFEST

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "cache" / "packagist" / "entry.json"
        _atomic_write(target, "{}")
        assert target.read_text(encoding="utf-8") == "{}"

    def test_newlines_are_not_translated(self, tmp_path: Path) -> None:
        target = tmp_path / "composer.json"
        _atomic_write(target, "{\r\n}\r\n")
        assert target.read_bytes() == b"{\r\n}\r\n"

    def test_no_temp_file_left_on_success(self, tmp_path: Path) -> None:
        _atomic_write(tmp_path / "composer.json", MANIFEST)
        assert list(tmp_path.glob(".*.tmp")) == []

    def test_cleans_up_temp_file_on_failure(self, tmp_path: Path) -> None:
        target = tmp_path / "composer.json"

        with patch.object(Path, "replace", side_effect=OSError("Mock error")):
            with pytest.raises(FileOperationError) as exc_info:
                _atomic_write(target, MANIFEST)

        assert exc_info.value.operation == "write"
        assert isinstance(exc_info.value.original_error, OSError)
        assert list(tmp_path.glob(".*.tmp")) == []
        assert not target.exists()


@pytest.mark.unit
class TestSafeReadFile:
    """Tests for safe_read_file."""

    def test_reads_file_content(self, composer_json: Path) -> None:
        assert safe_read_file(composer_json) == MANIFEST

    def test_accepts_string_path(self, composer_json: Path) -> None:
        assert safe_read_file(str(composer_json)) == MANIFEST

    def test_enforces_size_limit(self, composer_json: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(composer_json, max_size=10)

        assert "too large" in str(exc_info.value).lower()

    def test_no_size_limit_when_none(self, composer_json: Path) -> None:
        assert safe_read_file(composer_json, max_size=None) == MANIFEST

    def test_raises_on_nonexistent_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError):
            safe_read_file(tmp_path / "composer.json")

    def test_handles_unicode_content(self, tmp_path: Path) -> None:
        path = tmp_path / "composer.json"
        path.write_text('{"description": "Bibliothèque für ✓"}', encoding="utf-8")
        assert "Bibliothèque" in safe_read_file(path)

    def test_handles_decode_error(self, tmp_path: Path) -> None:
        path = tmp_path / "composer.json"
        path.write_bytes(b"\xff\xfe\x00invalid")

        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(path)

        assert isinstance(exc_info.value.original_error, UnicodeDecodeError)


@pytest.mark.unit
class TestSafeWriteFile:
    """Tests for safe_write_file."""

    def test_writes_new_file(self, tmp_path: Path) -> None:
        target = tmp_path / "composer.json"

        assert safe_write_file(target, MANIFEST) is None
        assert target.read_text(encoding="utf-8") == MANIFEST

    def test_no_backup_by_default(self, composer_json: Path) -> None:
        assert safe_write_file(composer_json, "{}") is None
        assert list(composer_json.parent.glob("composer.json.*.backup")) == []

    def test_backup_keeps_previous_content(self, composer_json: Path) -> None:
        backup = safe_write_file(composer_json, "{}", backup=True)

        assert backup is not None
        assert backup.read_text(encoding="utf-8") == MANIFEST
        assert composer_json.read_text(encoding="utf-8") == "{}"

    def test_no_backup_for_new_file(self, tmp_path: Path) -> None:
        assert safe_write_file(tmp_path / "composer.json", "{}", backup=True) is None

    def test_restores_backup_on_write_failure(self, composer_json: Path) -> None:
        with patch(
            "phpkeeper.utils.filesystem._atomic_write",
            side_effect=FileOperationError(
                "Mock error", file_path=str(composer_json), operation="write"
            ),
        ):
            with pytest.raises(FileOperationError):
                safe_write_file(composer_json, "{}", backup=True)

        assert composer_json.read_text(encoding="utf-8") == MANIFEST

    def test_restore_failure_still_raises_write_error(self, composer_json: Path) -> None:
        with patch(
            "phpkeeper.utils.filesystem._atomic_write",
            side_effect=FileOperationError("Mock error", operation="write"),
        ), patch(
            "phpkeeper.utils.filesystem.restore_backup",
            side_effect=FileOperationError("Restore failed", operation="restore"),
        ):
            with pytest.raises(FileOperationError) as exc_info:
                safe_write_file(composer_json, "{}", backup=True)

        assert exc_info.value.operation == "write"


@pytest.mark.unit
class TestBackups:
    """Tests for create_backup and restore_backup."""

    def test_create_backup_name(self, composer_json: Path) -> None:
        backup = create_backup(composer_json)

        assert backup.parent == composer_json.resolve().parent
        assert backup.name.startswith("composer.json.")
        assert backup.name.endswith(".backup")
        assert backup.read_text(encoding="utf-8") == MANIFEST

    def test_create_backup_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError):
            create_backup(tmp_path / "composer.json")

    def test_restore_backup(self, composer_json: Path) -> None:
        backup = create_backup(composer_json)
        composer_json.write_text("{}", encoding="utf-8")

        restore_backup(backup, composer_json)

        assert composer_json.read_text(encoding="utf-8") == MANIFEST

    def test_restore_missing_backup(self, composer_json: Path, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError) as exc_info:
            restore_backup(tmp_path / "nope.backup", composer_json)

        assert exc_info.value.operation == "restore"


@pytest.mark.unit
class TestFindComposerJson:
    """Tests for find_composer_json."""

    def test_finds_in_start_directory(self, composer_json: Path) -> None:
        assert find_composer_json(composer_json.parent) == composer_json.resolve()

    def test_searches_parents(self, composer_json: Path) -> None:
        nested = composer_json.parent / "src" / "Service"
        nested.mkdir(parents=True)

        assert find_composer_json(nested) == composer_json.resolve()

    def test_parent_search_disabled(self, composer_json: Path) -> None:
        nested = composer_json.parent / "src"
        nested.mkdir()

        assert find_composer_json(nested, search_parents=False) is None

    def test_directory_named_composer_json_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "composer.json").mkdir()
        assert find_composer_json(tmp_path, search_parents=False) is None

    def test_defaults_to_cwd(self, composer_json: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(composer_json.parent)
        assert find_composer_json() == composer_json.resolve()

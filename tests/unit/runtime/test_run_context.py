"""
Unit tests for the run context and internal storage
"""

import pytest

from weavesync.core.exceptions.custom_exceptions import ConfigurationError, StorageError
from weavesync.runtime.context import RunContext
from weavesync.runtime.storage import LocalStorage


class TestRendering:
    """Test option rendering"""

    def test_plain_strings_pass_through(self, run_context):
        assert run_context.render("Movies") == "Movies"

    def test_renders_variables(self, run_context):
        assert run_context.render("{{ vars.cls }}") == "Movies"

    def test_renders_nested_structures(self, run_context):
        value = {"{{ vars.cls }}": ["{{ vars.api_key }}", 3, None, True]}
        assert run_context.render(value) == {"Movies": ["secret-key", 3, None, True]}

    def test_keeps_trailing_newline(self, run_context):
        assert run_context.render("{{ vars.cls }}\n") == "Movies\n"

    def test_undefined_variable_fails(self, run_context):
        with pytest.raises(ConfigurationError) as exc_info:
            run_context.render("{{ vars.missing }}")
        assert exc_info.value.error_code == "CONFIG_UNDEFINED_VARIABLE"

    def test_invalid_template_fails(self, run_context):
        with pytest.raises(ConfigurationError):
            run_context.render("{{ vars.cls ")


class TestTempFilesAndStorage:
    """Test temp files and internal storage"""

    def test_temp_files_removed_on_close(self, storage):
        context = RunContext(storage=storage)
        path = context.temp_file(".jsonl")
        assert path.exists()

        context.close()

        assert not path.exists()

    def test_put_temp_file_moves_into_storage(self, run_context, storage):
        path = run_context.temp_file(".txt")
        path.write_text("hello", encoding="utf-8")

        uri = run_context.put_temp_file(path)

        assert uri == f"storage:///exec/test/{path.name}"
        assert not path.exists()
        assert storage.exists(uri)
        with run_context.open_uri(uri) as stream:
            assert stream.read() == "hello"

    def test_open_file_uri_and_path(self, run_context, tmp_path):
        source = tmp_path / "input.jsonl"
        source.write_text("{}\n", encoding="utf-8")

        with run_context.open_uri(source.as_uri()) as stream:
            assert stream.read() == "{}\n"
        with run_context.open_uri(str(source)) as stream:
            assert stream.read() == "{}\n"

    def test_unsupported_scheme(self, run_context):
        with pytest.raises(StorageError):
            run_context.open_uri("s3://bucket/key")

    def test_missing_file(self, run_context, tmp_path):
        with pytest.raises(StorageError):
            run_context.open_uri(str(tmp_path / "missing.jsonl"))
        with pytest.raises(StorageError):
            run_context.open_uri("storage:///missing.jsonl")

    def test_storage_rejects_escaping_uris(self, tmp_path):
        storage = LocalStorage(tmp_path / "root")
        with pytest.raises(StorageError):
            storage.resolve("storage:///../outside.txt")
        with pytest.raises(StorageError):
            storage.resolve("file:///etc/passwd")

    def test_default_storage_uses_settings(self, isolated_storage):
        assert RunContext().storage.root == isolated_storage.resolve()

import pytest

from kubediff.core.errors import InputReadError
from kubediff.core.loader import is_dir, list_yaml_files, load_file


def test_load_file_returns_raw_bytes(tmp_path):
    target = tmp_path / "svc.yaml"
    target.write_bytes(b"kind: Service\n")
    assert load_file(target) == b"kind: Service\n"
    assert load_file(str(target)) == b"kind: Service\n"


def test_missing_file_is_an_input_error(tmp_path):
    with pytest.raises(InputReadError) as exc:
        load_file(tmp_path / "absent.yaml")
    assert "absent.yaml" in str(exc.value)


def test_listing_is_flat_sorted_and_yaml_only(tmp_path):
    for name in ("b.yml", "a.yaml", "C.YAML", "notes.txt", "yaml"):
        (tmp_path / name).write_text("kind: Pod\n")
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "deep.yaml").write_text("kind: Pod\n")

    assert list_yaml_files(tmp_path) == ["C.YAML", "a.yaml", "b.yml"]


def test_listing_a_missing_directory_is_an_input_error(tmp_path):
    with pytest.raises(InputReadError):
        list_yaml_files(tmp_path / "nowhere")


def test_is_dir(tmp_path):
    (tmp_path / "f.yaml").write_text("")
    assert is_dir(tmp_path) is True
    assert is_dir(tmp_path / "f.yaml") is False
    with pytest.raises(InputReadError):
        is_dir(tmp_path / "missing")

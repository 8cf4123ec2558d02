from pathlib import Path

import pytest

from ps_i18n.properties import (
    PluginDetails,
    generate_header,
    load_properties,
    merge_properties,
    parse_properties,
    render_key_file,
    split_property,
    write_key_file,
)


def test_parse_properties_splits_on_first_equals_and_skips_noise() -> None:
    content = "# Demo - Version: 1.0\n\nk1=Hello\nk2=a=b\nnot a pair\n=orphan\n  k3 = spaced  \n"

    assert parse_properties(content) == {"k1": "Hello", "k2": "a=b", "k3": "spaced"}


def test_split_property_ignores_comment_with_equals() -> None:
    assert split_property("# a=b") is None
    assert split_property("key=") == ("key", "")


def test_merge_keeps_old_only_keys_and_prefers_new_values() -> None:
    existing = {"old": "Kept", "shared": "Stale"}
    new = {"shared": "Fresh", "added": "New"}

    merged = merge_properties(existing, new)

    assert merged == {"old": "Kept", "shared": "Fresh", "added": "New"}
    assert set(existing) <= set(merged)


def test_render_key_file_layout() -> None:
    header = generate_header(PluginDetails("Demo", "2.0"), "page", "US_en")

    content = render_key_file(header, {"a": "One", "b": "Two"})

    assert content == "# Demo - Version: 2.0\n# MessageKeys for: page (US_en)\n\na=One\nb=Two\n"


def test_write_key_file_creates_parent_directories(tmp_path: Path) -> None:
    destination = tmp_path / "nested" / "keys" / "page.US_en.properties"

    write_key_file(destination, PluginDetails("Demo", "1.0"), "page", "US_en", {"k": "v"})

    assert destination.read_text(encoding="utf-8").endswith("\nk=v\n")


def test_write_key_file_merges_existing_destination(tmp_path: Path) -> None:
    destination = tmp_path / "page.US_en.properties"
    destination.write_text("# Old header\n\nmanual=Curated\nk=Stale\n", encoding="utf-8")

    merged = write_key_file(destination, PluginDetails("Demo", "1.1"), "page", "US_en", {"k": "Fresh"})

    assert merged == {"manual": "Curated", "k": "Fresh"}
    assert destination.read_text(encoding="utf-8") == (
        "# Demo - Version: 1.1\n# MessageKeys for: page (US_en)\n\nmanual=Curated\nk=Fresh\n"
    )


def test_load_properties_handles_bom_and_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "bom.properties"
    path.write_bytes(b"\xef\xbb\xbfk=v\n")

    assert load_properties(path) == {"k": "v"}
    assert load_properties(tmp_path / "missing.properties") == {}


def test_read_text_reports_undecodable_file_as_os_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.properties"
    path.write_bytes(b"k1=\xc3\x28\n")

    with pytest.raises(OSError) as excinfo:
        load_properties(path)

    assert excinfo.value.filename == str(path)

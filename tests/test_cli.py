from pathlib import Path

import pytest

from ps_i18n.cli import build_parser, main


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "plugin.xml").write_text('<plugin name="Demo Plugin" version="1.0"/>', encoding="utf-8")
    (tmp_path / "test.html").write_text(
        "<html>\n<body>\n<div>[msg:K1]Hello[/msg]</div>\n<div>\t[msg:K2]Goodbye[/msg]</div>\n</body>\n</html>",
        encoding="utf-8",
    )
    return tmp_path


def test_flags_are_accepted_before_or_after_the_command() -> None:
    parser = build_parser()

    before = parser.parse_args(["-Y", "--test-mode", "create-keys", "page.html", "US_en"])
    after = parser.parse_args(["create-keys", "page.html", "US_en", "-Y", "-d"])

    assert before.yes and before.test_mode and not before.debug
    assert after.yes and after.debug and not after.test_mode
    assert after.source_file == Path("page.html")


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 0
    output = capsys.readouterr().out
    assert "CLI for translation and internationalization" in output
    assert "create-keys" in output and "translate" in output


def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])

    assert excinfo.value.code == 0
    assert "ps-i18n" in capsys.readouterr().out


def test_create_keys_then_translate_in_test_mode(workspace: Path) -> None:
    assert main(["create-keys", "test.html", "US_en", "-Y"]) == 0

    keys_dir = workspace / "src" / "powerschool" / "MessageKeys"
    source_keys = (keys_dir / "test.US_en.properties").read_text(encoding="utf-8")
    assert "K1=Hello" in source_keys and "K2=Goodbye" in source_keys
    assert "~[text:K1]" in (workspace / "test.html").read_text(encoding="utf-8")
    assert (workspace / "original_files_backup" / "test.html").exists()

    assert main(["translate", "--test-mode"]) == 0

    assert (workspace / "languages.json").exists()
    spanish = (keys_dir / "test.US_es.properties").read_text(encoding="utf-8")
    hindi = (keys_dir / "test.US_hi.properties").read_text(encoding="utf-8")
    assert "K1=Hola" in spanish and "K2=Goodbye" in spanish
    assert "K1=नमस्ते" in hindi
    assert not (keys_dir / "test.US_en.US_en.properties").exists()


def test_create_keys_missing_source_exits_non_zero(workspace: Path) -> None:
    assert main(["create-keys", "absent.html", "US_en", "-Y"]) == 1


def test_create_keys_missing_plugin_file_exits_non_zero(workspace: Path) -> None:
    (workspace / "plugin.xml").unlink()

    assert main(["create-keys", "test.html", "US_en", "-Y"]) == 1
    assert "[msg:K1]" in (workspace / "test.html").read_text(encoding="utf-8")


def test_translate_without_message_keys_dir(workspace: Path) -> None:
    assert main(["translate", "es", "--test-mode"]) == 1


def test_create_keys_undecodable_source_exits_non_zero(workspace: Path, caplog: pytest.LogCaptureFixture) -> None:
    (workspace / "broken.html").write_bytes(b"<p>[msg:K1]\xc3\x28[/msg]</p>")

    assert main(["-Y", "create-keys", "broken.html", "US_en"]) == 1
    assert "broken.html" in caplog.text

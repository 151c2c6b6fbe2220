"""Tests for NTP= line editing in timesyncd.conf."""
import pytest

from timewarden.core import timesyncd

from conftest import EXPECTED_LINE


class TestAppendLine:
    """Plain append keeps the old cron-script behaviour."""

    def test_append_twice_duplicates(self, conf_file):
        timesyncd.append_line(conf_file, EXPECTED_LINE)
        timesyncd.append_line(conf_file, EXPECTED_LINE)

        assert timesyncd.count_lines(conf_file, EXPECTED_LINE) == 2
        assert conf_file.read_text().endswith(EXPECTED_LINE + "\n")

    def test_append_creates_file(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        timesyncd.append_line(path, EXPECTED_LINE)
        assert path.read_text() == EXPECTED_LINE + "\n"

    def test_append_after_missing_newline(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        path.write_text("[Time]")
        timesyncd.append_line(path, EXPECTED_LINE)
        assert path.read_text() == f"[Time]\n{EXPECTED_LINE}\n"


class TestUpsertLine:
    """Upsert leaves exactly one active NTP= line."""

    def test_upsert_twice_is_idempotent(self, conf_file):
        assert timesyncd.upsert_line(conf_file, EXPECTED_LINE) is True
        assert timesyncd.upsert_line(conf_file, EXPECTED_LINE) is False
        assert timesyncd.count_lines(conf_file, EXPECTED_LINE) == 1

    def test_upsert_keeps_commented_defaults(self, conf_file):
        timesyncd.upsert_line(conf_file, EXPECTED_LINE)
        lines = conf_file.read_text().splitlines()
        assert "#NTP=" in lines
        assert lines[-1] == EXPECTED_LINE

    def test_upsert_replaces_and_collapses_duplicates(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        path.write_text(
            "[Time]\n"
            "NTP=10.0.0.1\n"
            "FallbackNTP=ntp.ubuntu.com\n"
            "NTP=10.0.0.1\n"
            f"{EXPECTED_LINE}\n"
        )

        timesyncd.upsert_line(path, EXPECTED_LINE)

        assert path.read_text() == (
            "[Time]\n"
            f"{EXPECTED_LINE}\n"
            "FallbackNTP=ntp.ubuntu.com\n"
        )

    def test_upsert_inserts_inside_time_section(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        path.write_text("[Time]\nFallbackNTP=ntp.ubuntu.com\n\n[Other]\nKey=value\n")

        timesyncd.upsert_line(path, EXPECTED_LINE)

        assert path.read_text() == (
            "[Time]\n"
            "FallbackNTP=ntp.ubuntu.com\n"
            f"{EXPECTED_LINE}\n"
            "\n"
            "[Other]\n"
            "Key=value\n"
        )

    def test_upsert_adds_time_section(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        path.write_text("# no sections here\n\n")

        timesyncd.upsert_line(path, EXPECTED_LINE)

        assert path.read_text() == f"# no sections here\n[Time]\n{EXPECTED_LINE}\n"

    def test_upsert_creates_missing_file(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        timesyncd.upsert_line(path, EXPECTED_LINE)
        assert path.read_text() == f"[Time]\n{EXPECTED_LINE}\n"


class TestReading:
    def test_contains_line(self, conf_file):
        assert timesyncd.contains_line(conf_file, EXPECTED_LINE) is False
        timesyncd.append_line(conf_file, EXPECTED_LINE)
        assert timesyncd.contains_line(conf_file, EXPECTED_LINE) is True

    def test_missing_file(self, tmp_path):
        path = tmp_path / "absent.conf"
        assert timesyncd.read_config(path) is None
        assert timesyncd.contains_line(path, EXPECTED_LINE) is False
        assert timesyncd.count_lines(path, EXPECTED_LINE) == 0

    def test_directory_path_raises_os_error(self, tmp_path):
        with pytest.raises(OSError):
            timesyncd.read_config(tmp_path)


class TestNonUtf8Content:
    """Bytes outside UTF-8 are carried through untouched."""

    def test_read_does_not_fail(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        path.write_bytes(b"# caf\xe9\n[Time]\n")
        assert "[Time]" in timesyncd.read_config(path)

    def test_upsert_preserves_other_bytes(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        path.write_bytes(b"# caf\xe9\n[Time]\n")

        assert timesyncd.upsert_line(path, EXPECTED_LINE) is True
        assert path.read_bytes() == b"# caf\xe9\n[Time]\n" + EXPECTED_LINE.encode() + b"\n"

    def test_append_preserves_other_bytes(self, tmp_path):
        path = tmp_path / "timesyncd.conf"
        path.write_bytes(b"# caf\xe9")

        timesyncd.append_line(path, EXPECTED_LINE)

        assert path.read_bytes() == b"# caf\xe9\n" + EXPECTED_LINE.encode() + b"\n"

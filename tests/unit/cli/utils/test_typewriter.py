"""Tests for the typewriter text reveal."""

import pytest

from project_insights.cli.utils.typewriter import Typewriter, stream_text


def no_sleep(seconds):
    pass


class TestTypewriter:
    """Tests for Typewriter."""

    def test_prefixes(self):
        assert list(Typewriter("abc", sleep=no_sleep)) == ["a", "ab", "abc"]

    def test_chunk_size(self):
        assert list(Typewriter("abcde", chunk_size=2, sleep=no_sleep)) == ["ab", "abcd", "abcde"]

    def test_empty_text(self):
        assert list(Typewriter("", sleep=no_sleep)) == []

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            Typewriter("abc", chunk_size=0)

    def test_sleeps_between_steps_only(self):
        sleeps = []

        list(Typewriter("abc", delay=0.01, sleep=sleeps.append))

        assert sleeps == [0.01, 0.01]

    def test_restartable(self):
        typewriter = Typewriter("ab", sleep=no_sleep)

        assert list(typewriter) == list(typewriter) == ["a", "ab"]

    def test_cancel_stops_iteration(self):
        typewriter = Typewriter("abcdef", sleep=no_sleep)
        seen = []

        for prefix in typewriter:
            seen.append(prefix)
            if len(prefix) == 2:
                typewriter.cancel()

        assert seen == ["a", "ab"]
        assert typewriter.cancelled

    def test_restart_replaces_text_and_ends_old_iteration(self):
        typewriter = Typewriter("old text", sleep=no_sleep)
        iterator = iter(typewriter)
        assert next(iterator) == "o"

        typewriter.restart("new")

        assert list(iterator) == []
        assert list(typewriter) == ["n", "ne", "new"]
        assert not typewriter.cancelled


class TestStreamText:
    """Tests for stream_text."""

    def test_echoes_new_characters(self):
        calls = []

        shown = stream_text(
            Typewriter("hey", sleep=no_sleep),
            echo=lambda text, nl=True: calls.append((text, nl)),
        )

        assert shown == "hey"
        assert calls == [("h", False), ("e", False), ("y", False), ("", True)]

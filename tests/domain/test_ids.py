"""Tests for ID generation helpers."""

from __future__ import annotations

import pytest

from obzctl.domain import ids
from obzctl.domain.ids import ID_ALPHABET, ID_LENGTH, generate_id, generate_unique_id, is_id_used
from obzctl.domain.schema import Button


class TestGenerateId:
    def test_shape(self) -> None:
        value = generate_id()
        assert len(value) == ID_LENGTH
        assert set(value) <= set(ID_ALPHABET)

    def test_distinct(self) -> None:
        assert len({generate_id() for _ in range(200)}) == 200


class TestUniqueness:
    def test_is_id_used(self) -> None:
        buttons = [Button(id="a"), Button(id="b")]
        assert is_id_used("a", buttons)
        assert not is_id_used("c", buttons)
        assert not is_id_used("a", [])

    def test_generate_unique_id_skips_taken(self, monkeypatch: pytest.MonkeyPatch) -> None:
        candidates = iter(["a", "b", "fresh"])
        monkeypatch.setattr(ids, "generate_id", lambda: next(candidates))
        assert generate_unique_id([Button(id="a"), Button(id="b")]) == "fresh"

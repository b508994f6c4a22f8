"""Unit tests for the typing-style reveal animator."""

import pytest

from core.reveal import RevealAnimator


class TestRevealAnimator:
    """Prefix growth, settling and cancellation."""

    def test_frames_grow_to_full_text(self):
        anim = RevealAnimator(step_chars=3, interval_s=0)
        anim.start("s1", 1, "Photosynthesis")

        frames = list(anim.frames())

        assert frames[-1] == "Photosynthesis"
        assert all(len(a) < len(b) for a, b in zip(frames, frames[1:]))
        assert all("Photosynthesis".startswith(f) for f in frames)
        assert frames[0] == "Pho"
        assert anim.target is None

    def test_step_larger_than_text_is_one_frame(self):
        anim = RevealAnimator(step_chars=100)
        anim.start("s1", 0, "short")
        assert list(anim.frames()) == ["short"]

    def test_empty_text_settles_immediately(self):
        anim = RevealAnimator()
        anim.start("s1", 0, "")
        assert list(anim.frames()) == []
        assert anim.target is None

    def test_visible_text_only_truncates_revealing_message(self):
        anim = RevealAnimator(step_chars=2)
        anim.start("s1", 3, "abcdef")
        anim.advance()

        assert anim.visible_text("s1", 3, "abcdef") == "ab"
        assert anim.visible_text("s1", 1, "older") == "older"
        assert anim.visible_text("s2", 3, "other") == "other"

    def test_cancel_mid_reveal_shows_full_text(self):
        anim = RevealAnimator(step_chars=1)
        anim.start("s1", 0, "hello")
        frames = anim.frames()
        assert next(frames) == "h"

        anim.cancel()

        assert list(frames) == []
        assert anim.visible_text("s1", 0, "hello") == "hello"

    def test_new_start_replaces_previous(self):
        anim = RevealAnimator()
        anim.start("s1", 1, "first")
        anim.start("s1", 3, "second")
        assert not anim.is_revealing("s1", 1)
        assert anim.is_revealing("s1", 3)
        assert anim.shown == 0

    def test_drop_if_stale(self):
        anim = RevealAnimator()
        anim.start("gone", 1, "text")
        anim.drop_if_stale(["s1", "s2"])
        assert anim.target is None

        anim.start("s1", 1, "text")
        anim.drop_if_stale(["s1"])
        assert anim.is_revealing("s1", 1)

    def test_step_must_be_positive(self):
        with pytest.raises(ValueError):
            RevealAnimator(step_chars=0)

"""
Tests for script composition and avatar presets.
"""

import pytest
from pydantic import ValidationError

from shortsbot.models.enums import TopicSource
from shortsbot.schemas.script import Script, ScriptScene
from shortsbot.schemas.topic import TrendTopic
from shortsbot.services.scripting import (
    AVATAR_PRESETS,
    DEFAULT_PRESET,
    ScriptComposer,
    get_avatar_prompt_hint,
)


@pytest.fixture
def topic() -> TrendTopic:
    return TrendTopic(
        id="vid-1",
        keyword="ai",
        title="Short title",
        summary="A summary that is long enough. " * 5,
        source=TopicSource.YOUTUBE,
        score=70,
    )


class TestScriptComposer:
    """Tests for ScriptComposer.compose."""

    def test_three_scenes_with_fixed_durations(self, topic: TrendTopic) -> None:
        script = ScriptComposer().compose(topic)

        assert [s.scene_index for s in script.scenes] == [1, 2, 3]
        assert [s.duration_seconds for s in script.scenes] == [3, 4, 2]
        assert script.total_duration_seconds == 9
        assert script.topic_id == "vid-1"
        assert script.topic_title == "Short title"

    def test_short_title_hook_has_no_ellipsis(self, topic: TrendTopic) -> None:
        script = ScriptComposer().compose(topic)

        assert script.hook.startswith("Short title ")
        assert "…" not in script.hook
        assert script.scenes[0].text == script.hook

    def test_long_title_truncated_with_ellipsis(self, topic: TrendTopic) -> None:
        long_topic = topic.model_copy(update={"title": "T" * 45})
        script = ScriptComposer().compose(long_topic)

        assert script.hook.startswith("T" * 30 + "…")
        assert "T" * 31 not in script.hook

    def test_body_truncated_to_80(self, topic: TrendTopic) -> None:
        script = ScriptComposer().compose(topic)
        assert script.scenes[1].text == topic.summary[:80]

    def test_character_hint_in_every_prompt(self, topic: TrendTopic) -> None:
        script = ScriptComposer().compose(topic, character_hint="comic")
        hint = get_avatar_prompt_hint("comic")

        assert script.character.image_prompt_hint == hint
        assert all(scene.image_prompt.startswith(hint) for scene in script.scenes)

    def test_compose_is_deterministic(self, topic: TrendTopic) -> None:
        composer = ScriptComposer()
        assert composer.compose(topic, "vtuber") == composer.compose(topic, "vtuber")


class TestAvatarPresets:
    def test_known_presets(self) -> None:
        assert [p.id for p in AVATAR_PRESETS] == ["shortsbot", "vtuber", "3d", "comic"]

    @pytest.mark.parametrize("preset_id", [None, "", "unknown"])
    def test_unknown_falls_back_to_default(self, preset_id: str | None) -> None:
        assert get_avatar_prompt_hint(preset_id) == DEFAULT_PRESET.image_prompt_hint


class TestScriptValidation:
    """The Script model enforces its own invariants."""

    def _scene(self, index: int, duration: int = 3) -> ScriptScene:
        return ScriptScene(scene_index=index, text="t", image_prompt="p", duration_seconds=duration)

    def test_total_must_match_scene_sum(self, topic: TrendTopic) -> None:
        script = ScriptComposer().compose(topic)
        data = script.model_dump()
        data["total_duration_seconds"] = 99

        with pytest.raises(ValidationError):
            Script.model_validate(data)

    def test_scene_indexes_must_be_contiguous(self, topic: TrendTopic) -> None:
        script = ScriptComposer().compose(topic)

        with pytest.raises(ValidationError):
            Script(
                topic_id="x",
                topic_title="x",
                hook="x",
                character=script.character,
                scenes=[self._scene(1), self._scene(3)],
                total_duration_seconds=6,
            )

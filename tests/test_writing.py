import pytest

from ai.dashscope import LLMError
from ai.writing import (
    ASSISTANT_PROMPTS,
    WritingServiceError,
    assist_text,
    basic_improvement,
    basic_rephrase,
    basic_summary,
    get_word_alternatives,
    improve_text,
    parse_string_list,
    rephrase_text,
)
from linguala.config import settings


def test_parse_string_list():
    assert parse_string_list('["a", " ", "b"]') == ["a", "b"]
    assert parse_string_list('swift", "speedy"]') == ["swift", "speedy"]
    assert parse_string_list("not json") is None


async def test_improve_text(llm):
    llm.replies = ["Hello, world."]
    result = await improve_text("hello   world", client=llm)

    assert result.improved_text == "Hello, world."
    assert result.original_text == "hello   world"
    call = llm.calls[0]
    assert call["model"] == settings.dashscope.writing_model
    assert call["messages"][0]["content"] == "Improve:\nhello world"
    assert call["temperature"] == 0.3


async def test_corrections_only_prompt(llm):
    llm.replies = ["Their going."]
    await improve_text("there going", corrections_only=True, writing_style="academic", tone="polite", client=llm)

    call = llm.calls[0]
    assert call["messages"][0]["content"] == "Fix:\n(formal) (polite) there going"
    assert call["temperature"] == 0.1


async def test_improve_unchanged_is_an_error(llm):
    llm.replies = ["Already fine."]
    with pytest.raises(WritingServiceError):
        await improve_text("Already fine.", client=llm)


async def test_improve_model_failure(llm):
    llm.replies = [LLMError("down")]
    with pytest.raises(WritingServiceError, match="unavailable"):
        await improve_text("some text", client=llm)


async def test_word_alternatives_filters_the_word(llm):
    llm.replies = ['quick", "Fast", "rapid"]']
    result = await get_word_alternatives("fast", "a fast car", client=llm)

    assert result.alternatives == ["quick", "rapid"]
    prompt = llm.calls[0]["messages"][0]["content"]
    assert prompt == '5 alternatives for "fast" in "a fast car":\n["'
    assert llm.calls[0]["max_tokens"] <= 200


async def test_word_alternatives_translate_mode_and_loose_reply(llm):
    llm.replies = ["schnell, rasch"]
    result = await get_word_alternatives("fast", "", mode="translate", client=llm)

    assert result.alternatives == ["schnell", "rasch"]
    assert llm.calls[0]["messages"][0]["content"].startswith("5 translations for")


async def test_rephrase_text(llm):
    llm.replies = ['One way.", "Another way.", "A third way."]']
    result = await rephrase_text("Some way.", client=llm)

    assert result.rephrased_text == "One way."
    assert result.rephrase_options == ["One way.", "Another way.", "A third way."]


def test_basic_improvement():
    assert basic_improvement("i dont know  if im right") == "I don't know if I'm right"


def test_basic_rephrase():
    assert basic_rephrase("a very good and fast car") == "a extremely excellent and quick car"


def test_basic_summary():
    text = "First sentence here. Second sentence follows. Third one ends it."
    assert basic_summary(text) == "First sentence here. Second sentence follows."


def test_basic_summary_without_sentences():
    assert basic_summary("no punctuation") == "no punctuation"


async def test_assist_text_uses_system_prompt(llm):
    llm.replies = ["Short version."]
    result = await assist_text("summarize", "A long text.", client=llm)

    assert result.output_text == "Short version."
    assert not result.fallback
    messages = llm.calls[0]["messages"]
    assert messages[0] == {"role": "system", "content": ASSISTANT_PROMPTS["summarize"]}
    assert llm.calls[0]["model"] == settings.dashscope.assistant_model


async def test_assist_text_falls_back_locally(llm):
    result = await assist_text("improve", "i cant go", client=llm)
    assert result.output_text == "I can't go"
    assert result.fallback


async def test_assist_text_rejects_unknown_operation(llm):
    with pytest.raises(ValueError):
        await assist_text("poeticize", "text", client=llm)

import pytest

from ai import translation
from ai.dashscope import LLMError
from ai.translation import (
    GlossaryTerm,
    get_pattern_based_translation,
    select_glossary_terms,
    translate_long_text,
    translate_text,
)
from linguala.config import settings


async def test_translate_text_uses_model(llm):
    llm.replies = ["Hola"]
    result = await translate_text("Hello", "en", "es", client=llm)

    assert result.translated_text == "Hola"
    assert result.source_lang == "en"
    assert result.target_lang == "es"
    assert not result.fallback

    call = llm.calls[0]
    assert call["model"] == settings.dashscope.translation_model
    assert call["messages"] == [{"role": "user", "content": "Translate from English to Spanish: Hello"}]
    assert call["extra_body"] is None


async def test_auto_source_prompt(llm):
    llm.replies = ["Bonjour"]
    result = await translate_text("Good day", None, "fr", client=llm)
    assert result.source_lang == "auto"
    assert llm.calls[0]["messages"][0]["content"] == "Translate to French: Good day"


async def test_glossary_terms_sent_as_translation_options(llm):
    llm.replies = ["Das API-Gateway ist ausgefallen"]
    glossary = [
        {"source": "API gateway", "target": "API-Gateway"},
        {"source": "invoice", "target": "Rechnung"},
    ]
    await translate_text("The API gateway is down", "en", "de", glossary=glossary, client=llm)

    options = llm.calls[0]["extra_body"]["translation_options"]
    assert options["terms"] == [{"source": "API gateway", "target": "API-Gateway"}]
    assert options["source_lang"] == "English"
    assert options["target_lang"] == "German"


async def test_domain_hint_sent(llm):
    llm.replies = ["Der Patient"]
    await translate_text("The patient", "en", "de", domain="medical", client=llm)
    assert llm.calls[0]["extra_body"]["translation_options"]["domains"] == "medical"


async def test_common_phrase_fallback(llm):
    llm.replies = [LLMError("timeout")]
    result = await translate_text("Hello there", "en", "es", client=llm)
    assert result.translated_text == "Hola"
    assert result.fallback


async def test_echoed_input_falls_back(llm):
    llm.replies = ["thank you"]
    result = await translate_text("thank you", "en", "de", client=llm)
    assert result.translated_text == "Danke"
    assert result.fallback


async def test_missing_target_returns_error_text(llm):
    result = await translate_text("Hi", "en", "", client=llm)
    assert result.translated_text == "Translation error: Hi"
    assert result.fallback
    assert llm.calls == []


def test_pattern_based_translation():
    assert get_pattern_based_translation("Hello world", "French") == "bonjour le monde"
    assert get_pattern_based_translation("cat and dog.", "French") == "chat and chien"
    assert get_pattern_based_translation("xyz", "German") == "[Translated to German] xyz"


def test_select_glossary_terms_filters_domain_and_fuzzy_matches():
    entries = [
        GlossaryTerm("organisation", "Organisation", "legal"),
        GlossaryTerm("dose", "Dosis", "medical"),
        GlossaryTerm("contract", "Vertrag", "general"),
    ]
    text = "The organization signed the contract about the dose"

    legal = select_glossary_terms(text, entries, "legal")
    assert [t.source for t in legal] == ["organisation", "contract"]

    everything = select_glossary_terms(text, entries)
    assert {t.source for t in everything} == {"organisation", "dose", "contract"}


def test_select_glossary_terms_dedupes_and_skips_short_fuzzy():
    entries = [{"source": "cat", "target": "Katze"}, {"source": "cat", "target": "Katze"}, {"source": "dog", "target": "Hund"}]
    assert [t.target for t in select_glossary_terms("a cot and a cat", entries)] == ["Katze"]


async def test_translate_long_text_joins_chunks(llm, monkeypatch):
    monkeypatch.setattr(settings.translation, "max_chunk_size", 100)
    llm.replies = ["first", "second"]
    text = "a" * 60 + "\n\n" + "b" * 60

    assert await translate_long_text(text, "en", "de", client=llm) == "first\n\nsecond"
    assert len(llm.calls) == 2


async def test_translate_long_text_keeps_failed_chunk(llm, monkeypatch):
    monkeypatch.setattr(settings.translation, "max_chunk_size", 100)
    original = translation.translate_text

    async def flaky(chunk, *args, **kwargs):
        if chunk.startswith("b"):
            raise RuntimeError("boom")
        return await original(chunk, *args, **kwargs)

    monkeypatch.setattr(translation, "translate_text", flaky)
    llm.replies = ["first"]
    text = "a" * 60 + "\n\n" + "b" * 60

    assert await translate_long_text(text, "en", "de", client=llm) == "first\n\n" + "b" * 60


@pytest.mark.parametrize("code,name", [("en", "English"), ("zh", "Chinese"), ("xx", "xx"), ("", "auto")])
def test_language_names(code, name):
    from config.languages import language_name

    assert language_name(code) == name

import pytest
from unittest.mock import AsyncMock

from mediphant_server.llm.client import LLMClient, LLMError
from mediphant_server.search.models import SearchMatch
from mediphant_server.search.synthesizer import (
    AnswerSynthesizer,
    CONSULT_SUFFIX,
    NO_INFORMATION_ANSWER,
)

TWO_MATCHES = [
    SearchMatch(text="Top passage.", score=1.0),
    SearchMatch(text="Second passage.", score=0.5),
]


@pytest.fixture
def mock_llm():
    mock = AsyncMock(spec=LLMClient)
    mock.chat.return_value = "Generated answer."
    return mock


@pytest.mark.asyncio
async def test_no_matches_returns_disclaimer(mock_llm):
    answer = await AnswerSynthesizer(mock_llm).synthesize("q", [])

    assert answer == NO_INFORMATION_ANSWER
    mock_llm.chat.assert_not_awaited()


@pytest.mark.asyncio
async def test_single_match_returned_verbatim(mock_llm):
    answer = await AnswerSynthesizer(mock_llm).synthesize("q", TWO_MATCHES[:1])

    assert answer == "Top passage."
    mock_llm.chat.assert_not_awaited()


@pytest.mark.asyncio
async def test_multiple_matches_use_generative_answer(mock_llm):
    answer = await AnswerSynthesizer(mock_llm).synthesize("what to do?", TWO_MATCHES)

    assert answer == "Generated answer."
    messages = mock_llm.chat.await_args.args[0]
    prompt = messages[0]["content"]
    assert '"what to do?"' in prompt
    assert "Top passage.\n\nSecond passage." in prompt
    assert mock_llm.chat.await_args.kwargs == {"max_tokens": 200, "temperature": 0.3}


@pytest.mark.asyncio
async def test_generative_failure_uses_top_match(mock_llm):
    mock_llm.chat.side_effect = LLMError("timeout")

    answer = await AnswerSynthesizer(mock_llm).synthesize("q", TWO_MATCHES)

    assert answer == f"Top passage. {CONSULT_SUFFIX}"


@pytest.mark.asyncio
async def test_unexpected_generative_error_never_raises(mock_llm):
    mock_llm.chat.side_effect = RuntimeError("bug")

    answer = await AnswerSynthesizer(mock_llm).synthesize("q", TWO_MATCHES)

    assert answer == "Top passage. For additional guidance, consult with a healthcare professional."


@pytest.mark.asyncio
async def test_without_generative_client_uses_top_match():
    synth = AnswerSynthesizer(None)

    assert synth.generative is False
    assert await synth.synthesize("q", TWO_MATCHES) == f"Top passage. {CONSULT_SUFFIX}"

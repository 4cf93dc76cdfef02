# tests/test_tokenizer.py
import sys
import pytest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from summarize.config import FAMILY_ENCODINGS
from summarize.core.tokenizer import (
    EstimateTokenizer,
    Tokenizer,
    get_encoding_tokenizer,
    get_tokenizer,
)
from summarize.errors import DecodeError
from summarize.models import ModelFamily, TokenizerModel

SAMPLE = "def hello(name):\n    return f'hello {name}'\n".encode("utf-8")


# --- Test 1: Contract for every model ---

@pytest.mark.parametrize("model", list(TokenizerModel))
def test_empty_content_counts_zero(model):
    assert get_tokenizer(model).count(b"") == 0


@pytest.mark.parametrize("model", list(TokenizerModel))
def test_non_empty_content_counts_at_least_one(model):
    tokenizer = get_tokenizer(model)
    assert tokenizer.count(b" ") >= 1
    assert tokenizer.count(SAMPLE) >= 1


@pytest.mark.parametrize("model", list(TokenizerModel))
def test_counts_are_deterministic(model):
    tokenizer = get_tokenizer(model)
    assert tokenizer.count(SAMPLE) == tokenizer.count(SAMPLE)


@pytest.mark.parametrize("model", [TokenizerModel.GPT_4, TokenizerModel.CLAUDE_3_OPUS, TokenizerModel.GEMINI_20_FLASH])
def test_invalid_utf8_raises_decode_error(model):
    with pytest.raises(DecodeError):
        get_tokenizer(model).count(b"\x89PNG\r\n\x1a\n\x00\xff")


def test_special_token_text_is_ordinary_text():
    tokenizer = get_tokenizer(TokenizerModel.GPT_4)
    assert tokenizer.count(b"<|endoftext|>") >= 1


def test_concurrent_counts_match_sequential():
    tokenizer = get_tokenizer(TokenizerModel.GPT_4_TURBO)
    contents = [SAMPLE * i for i in range(1, 40)]

    expected = [tokenizer.count(c) for c in contents]
    with ThreadPoolExecutor(max_workers=8) as executor:
        actual = list(executor.map(tokenizer.count, contents))

    assert actual == expected


# --- Test 2: Dispatch ---

def test_model_families():
    assert TokenizerModel.GPT_35_TURBO.family is ModelFamily.OPENAI
    assert TokenizerModel.CLAUDE_3_SONNET.family is ModelFamily.ANTHROPIC
    assert TokenizerModel.GEMINI_15_FLASH.family is ModelFamily.GEMINI


def test_tokenizers_are_shared_per_encoding():
    gpt = get_tokenizer(TokenizerModel.GPT_4)
    gemini = get_tokenizer(TokenizerModel.GEMINI_15_PRO)
    claude = get_tokenizer(TokenizerModel.CLAUDE_3_OPUS)

    assert gpt is gemini
    assert claude is get_encoding_tokenizer(FAMILY_ENCODINGS[ModelFamily.ANTHROPIC])


def test_display_names():
    assert str(TokenizerModel.GPT_35_TURBO) == "GPT-3.5 Turbo"
    assert TokenizerModel.CLAUDE_3_OPUS.display_name == "Claude 3 Opus"


# --- Test 3: Estimate variant ---

def test_estimate_rounds_up():
    tokenizer = EstimateTokenizer()
    assert tokenizer.count(b"a") == 1
    assert tokenizer.count(b"abcd") == 1
    assert tokenizer.count(b"abcde") == 2


def test_estimate_counts_characters_not_bytes():
    assert EstimateTokenizer().count("éééé".encode("utf-8")) == 1


def test_base_tokenizer_is_abstract():
    with pytest.raises(NotImplementedError):
        Tokenizer().count(b"text")

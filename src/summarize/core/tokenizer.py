# src/summarize/core/tokenizer.py
import logging
import math
import threading
from typing import Dict

import tiktoken

from summarize.config import FAMILY_ENCODINGS
from summarize.errors import DecodeError
from summarize.models import TokenizerModel

logger = logging.getLogger(__name__)


class Tokenizer:
    """
    Counts model-specific tokens in raw file content.

    Implementations must be deterministic and safe to call from several
    threads at once. Empty content counts as 0, anything else as at least 1.
    """
    name = "tokenizer"

    def count(self, content: bytes) -> int:
        if not content:
            return 0
        text = self.decode(content)
        return max(1, self.count_text(text))

    @staticmethod
    def decode(content: bytes) -> str:
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"not valid UTF-8 ({e.reason} at byte {e.start})") from e

    def count_text(self, text: str) -> int:
        raise NotImplementedError


class TiktokenTokenizer(Tokenizer):
    def __init__(self, encoding):
        self._encoding = encoding
        self.name = encoding.name

    def count_text(self, text: str) -> int:
        # encode_ordinary treats "<|endoftext|>" and friends as plain text
        return len(self._encoding.encode_ordinary(text))


class EstimateTokenizer(Tokenizer):
    """Roughly four characters per token."""
    name = "estimate"

    def __init__(self, chars_per_token: int = 4):
        self.chars_per_token = chars_per_token

    def count_text(self, text: str) -> int:
        return math.ceil(len(text) / self.chars_per_token)


_tokenizers: Dict[str, Tokenizer] = {}
_lock = threading.Lock()


def get_encoding_tokenizer(encoding_name: str) -> Tokenizer:
    """Loads a tiktoken encoding once per process."""
    with _lock:
        tokenizer = _tokenizers.get(encoding_name)
        if tokenizer is None:
            try:
                tokenizer = TiktokenTokenizer(tiktoken.get_encoding(encoding_name))
            except Exception as e:
                # Encodings are downloaded on first use; offline runs fall back
                logger.warning(
                    "Could not load tiktoken encoding %s (%s); using character estimate",
                    encoding_name, e,
                )
                tokenizer = EstimateTokenizer()
            _tokenizers[encoding_name] = tokenizer
        return tokenizer


def get_tokenizer(model: TokenizerModel) -> Tokenizer:
    return get_encoding_tokenizer(FAMILY_ENCODINGS[model.family])

import re

# Each rule is (tag, pattern). Rules are tried in order at the current position.
# A tag of None means the match is consumed but nothing is emitted.
TOKEN_RULES = [
    (None, r"\s+"),
    (None, r"</?[A-Za-z][^<>]*>"),  # html-ish markup found in subtitles
    ("endpunct", r"[.!?]+"),
    ("quote", r"['\"]"),
    ("word", r"\w+"),
    ("punct", r"[,;:\-]+"),
    ("punct", r"."),
]

_SCANNER = re.compile(
    "|".join(f"(?P<rule{i}>{pattern})" for i, (_, pattern) in enumerate(TOKEN_RULES)),
    re.DOTALL,
)


class TokenizationError(ValueError):
    """Raised when a line cannot be tokenized."""


def tokenize(text):
    """
    Splits a raw dialogue line into (tag, word) pairs.

    The result is a fresh generator on every call. A tag of "endpunct" marks
    sentence-ending punctuation, which lets callers keep only the first sentence.
    """
    if not isinstance(text, str):
        raise TokenizationError(f"Expected a string, got {type(text).__name__}")
    return _scan(text)


def _scan(text):
    for match in _SCANNER.finditer(text):
        tag = TOKEN_RULES[int(match.lastgroup[4:])][0]
        if tag is not None:
            yield tag, match.group()

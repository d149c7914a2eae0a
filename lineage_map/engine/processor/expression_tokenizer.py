"""
Tokenize transformation expressions and pick out field references.

Grammar::

    expression  := { whitespace | comment | token }
    token       := identifier | number | string | symbol
    identifier  := part { "." part }
    part        := (letter | "_") { letter | digit | "_" }
                 | '"' { any character except '"' } '"'
    number      := digit { letter | digit | "_" | "." }
    string      := "'" { any character except "'" | "''" } "'"
    symbol      := any other single character
    comment     := "--" ... end of line | "/*" ... "*/"

Whether an identifier is a field reference is decided by a separate
convention object, so the grammar and the id naming rules can be tested
on their own.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..models.enums import TokenKind


@dataclass(frozen=True)
class Token:
    """One lexical token with its offset in the source text."""
    kind: TokenKind
    text: str
    position: int


class ExpressionTokenizer:
    """Split an expression into identifier, number, string and symbol tokens."""

    def tokenize(self, text: str) -> List[Token]:
        tokens = []
        i = 0
        length = len(text)

        while i < length:
            char = text[i]

            if char.isspace():
                i += 1
                continue

            # Line comment
            if char == "-" and text.startswith("--", i):
                end = text.find("\n", i)
                i = length if end == -1 else end + 1
                continue

            # Block comment (unterminated runs to the end)
            if char == "/" and text.startswith("/*", i):
                end = text.find("*/", i + 2)
                i = length if end == -1 else end + 2
                continue

            if char == "'":
                i = self._read_string(text, i, tokens)
                continue

            if _is_ident_start(char) or char == '"':
                i = self._read_identifier(text, i, tokens)
                continue

            if char.isdigit():
                start = i
                while i < length and (text[i].isalnum() or text[i] in "_."):
                    i += 1
                tokens.append(Token(TokenKind.NUMBER, text[start:i], start))
                continue

            tokens.append(Token(TokenKind.SYMBOL, char, i))
            i += 1

        return tokens

    def _read_string(self, text: str, start: int, tokens: List[Token]) -> int:
        """Read a single-quoted literal; '' is an escaped quote."""
        value = []
        i = start + 1
        while i < len(text):
            if text[i] == "'":
                if text.startswith("''", i):
                    value.append("'")
                    i += 2
                    continue
                i += 1
                break
            value.append(text[i])
            i += 1
        tokens.append(Token(TokenKind.STRING, "".join(value), start))
        return i

    def _read_identifier(self, text: str, start: int, tokens: List[Token]) -> int:
        """Read a possibly dotted identifier; quoted parts keep inner text only."""
        parts = []
        i = start

        while True:
            part, i = self._read_part(text, i)
            if part is None:
                break
            parts.append(part)

            # Continue only on "." directly followed by another part
            if i + 1 < len(text) and text[i] == "." and (_is_ident_start(text[i + 1]) or text[i + 1] == '"'):
                i += 1
                continue
            break

        tokens.append(Token(TokenKind.IDENTIFIER, ".".join(parts), start))
        return i

    def _read_part(self, text: str, i: int):
        if i >= len(text):
            return None, i

        if text[i] == '"':
            end = text.find('"', i + 1)
            if end == -1:
                return text[i + 1:], len(text)
            return text[i + 1:end], end + 1

        if not _is_ident_start(text[i]):
            return None, i

        start = i
        while i < len(text) and (text[i].isalnum() or text[i] == "_"):
            i += 1
        return text[start:i], i


def _is_ident_start(char: str) -> bool:
    return char.isalpha() or char == "_"


def _letter_prefix(text: str) -> str:
    split = 0
    while split < len(text) and text[split].isascii() and text[split].isalpha():
        split += 1
    return text[:split]


class PrefixDigitsConvention:
    """
    Field ids made of letters followed by digits (``f1``, ``field12``).

    Unrestricted, any such identifier counts, including keywords like
    ``VARCHAR2``. Use ``from_ids`` to accept only the prefixes a graph uses.

    Args:
        prefixes: Optional set of allowed letter prefixes (case-sensitive)
    """

    def __init__(self, prefixes: Optional[Iterable[str]] = None):
        self.prefixes = set(prefixes) if prefixes is not None else None

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> "PrefixDigitsConvention":
        """Restrict to the letter prefixes of the given ids that follow the convention."""
        unrestricted = cls()
        return cls(_letter_prefix(i) for i in ids if unrestricted.matches(i))

    def resolve(self, text: str) -> Optional[str]:
        return text if self.matches(text) else None

    def matches(self, text: str) -> bool:
        prefix = _letter_prefix(text)
        digits = text[len(prefix):]
        if not prefix or not digits:
            return False
        if not (digits.isascii() and digits.isdigit()):
            return False
        if self.prefixes is not None and prefix not in self.prefixes:
            return False
        return True


class KnownIdConvention:
    """
    Field ids taken from a fixed set, e.g. every field id of a graph.

    Args:
        ids: Known field ids
        ignore_case: Match case-insensitively; references resolve to the known spelling
    """

    def __init__(self, ids: Iterable[str], ignore_case: bool = False):
        self.ignore_case = ignore_case
        self.ids = {}
        for field_id in ids:
            self.ids.setdefault(self._key(field_id), field_id)

    def _key(self, text: str) -> str:
        return text.upper() if self.ignore_case else text

    def resolve(self, text: str) -> Optional[str]:
        return self.ids.get(self._key(text))

    def matches(self, text: str) -> bool:
        return self.resolve(text) is not None


class FieldReferenceExtractor:
    """Extract field references from expression text."""

    def __init__(self, tokenizer: Optional[ExpressionTokenizer] = None, convention=None):
        self.tokenizer = tokenizer or ExpressionTokenizer()
        self.convention = convention or PrefixDigitsConvention()

    def extract(self, text: str) -> List[str]:
        """References in first-occurrence order, without duplicates."""
        references = []
        for token in self.tokenizer.tokenize(text or ""):
            if token.kind != TokenKind.IDENTIFIER:
                continue
            reference = self.convention.resolve(token.text)
            if reference is not None and reference not in references:
                references.append(reference)
        return references

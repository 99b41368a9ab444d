"""
Placeholder Aligner
Map the vendor's positional placeholders back onto the caller's tokens.

The vendor replaces every interpolation token of the source text (named
placeholders such as ``%{name}`` and HTML markup) with ``{0}``, ``{1}``, ...
in order of appearance, and translators may move those markers around.
Re-tokenizing the phrase key the same way gives back the ordering, so
``{i}`` can be swapped for the i-th token's original text.

Usage:
    aligner = PlaceholderAligner()
    tokens = aligner.tokenize("I like %{apples} and %{peaches}")
    aligner.realign("Me gustan los {1} y {0}", tokens)
    # -> "Me gustan los %{peaches} y %{apples}"
"""
import logging
import re
from collections import Counter, deque
from dataclasses import dataclass, replace
from typing import Deque, Dict, List, Optional, Tuple, Union

from .models import TranslationUnit

logger = logging.getLogger(__name__)


# ==================== TOKENS ====================

@dataclass(frozen=True)
class PlainRun:
    """Literal text between interpolation tokens."""
    text: str

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class NamedPlaceholder:
    """A ``%{name}`` span."""
    name: str
    raw: str = ""

    def render(self) -> str:
        return self.raw or f"%{{{self.name}}}"


@dataclass(frozen=True)
class TagOpen:
    """An opening tag; ``pair`` is the token index of its TagClose."""
    name: str
    attrs: str = ""
    raw: str = ""
    pair: Optional[int] = None

    def shell(self) -> str:
        return f"<{self.name} {self.attrs}>" if self.attrs else f"<{self.name}>"

    def render(self) -> str:
        return self.raw or self.shell()


@dataclass(frozen=True)
class TagClose:
    """A closing tag; ``pair`` is the token index of its TagOpen."""
    name: str
    raw: str = ""
    pair: Optional[int] = None

    def shell(self) -> str:
        return f"</{self.name}>"

    def render(self) -> str:
        return self.raw or self.shell()


@dataclass(frozen=True)
class TagSelfClosing:
    """A self-closing tag such as ``<br/>``."""
    name: str
    attrs: str = ""
    raw: str = ""

    def shell(self) -> str:
        return f"<{self.name} {self.attrs}/>" if self.attrs else f"<{self.name}/>"

    def render(self) -> str:
        return self.raw or self.shell()


Token = Union[NamedPlaceholder, TagOpen, TagClose, TagSelfClosing, PlainRun]
TagToken = Union[TagOpen, TagClose, TagSelfClosing]

TAG_TYPES = (TagOpen, TagClose, TagSelfClosing)


# ==================== PATTERNS ====================

# Attribute text may contain quoted strings and %{...} placeholders
_TAG_PATTERN = (
    r"<(?P<close>/)?(?P<name>[A-Za-z][A-Za-z0-9:-]*)"
    r"(?P<attrs>(?:\s+(?:\"[^\"]*\"|'[^']*'|[^'\"<>/]|/(?!\s*>))*)?)"
    r"\s*(?P<selfclose>/)?>"
)
_PLACEHOLDER_PATTERN = r"%\{(?P<phname>[^{}]+)\}"
_MARKER_PATTERN = r"\{(?P<index>[0-9]+)\}"

# Markup first: a placeholder inside attributes belongs to its tag
TOKEN_RE = re.compile(f"(?P<tag>{_TAG_PATTERN})|(?P<ph>{_PLACEHOLDER_PATTERN})")

# Placeholders before markers so a literal %{0} is never read as {0}
TARGET_RE = re.compile(
    f"(?P<ph>{_PLACEHOLDER_PATTERN})|(?P<marker>{_MARKER_PATTERN})|(?P<tag>{_TAG_PATTERN})"
)


def _tag_from_match(match: re.Match) -> TagToken:
    name = match.group("name")
    raw = match.group(0)
    if match.group("close"):
        return TagClose(name=name, raw=raw)

    attrs = (match.group("attrs") or "").strip()
    if match.group("selfclose"):
        return TagSelfClosing(name=name, attrs=attrs, raw=raw)
    return TagOpen(name=name, attrs=attrs, raw=raw)


def _literal_key(token: Token) -> Tuple[str, str]:
    """Identity used to recognize a token the vendor kept verbatim."""
    if isinstance(token, NamedPlaceholder):
        return ("placeholder", token.render())
    return (type(token).__name__, token.name.lower())


def interpolation_tokens(tokens: List[Token]) -> List[Token]:
    """Drop PlainRun tokens, keeping order."""
    return [token for token in tokens if not isinstance(token, PlainRun)]


# ==================== ALIGNER ====================

class PlaceholderAligner:
    """
    Tokenizes phrase keys and rewrites positional placeholders.

    Stateless; safe to share between threads.
    """

    def tokenize(self, text: str) -> List[Token]:
        """
        Split text into PlainRun and interpolation tokens.

        Open/close tags are paired with a stack while scanning; a tag
        without a partner keeps ``pair=None``.
        """
        tokens: List[Token] = []
        position = 0

        for match in TOKEN_RE.finditer(text or ""):
            if match.start() > position:
                tokens.append(PlainRun(text[position:match.start()]))

            if match.group("tag"):
                tokens.append(_tag_from_match(match))
            else:
                tokens.append(NamedPlaceholder(name=match.group("phname"), raw=match.group(0)))

            position = match.end()

        if text and position < len(text):
            tokens.append(PlainRun(text[position:]))

        return self._pair_tags(tokens)

    def realign(
        self,
        target_text: str,
        phrase_tokens: List[Token],
        source_text: Optional[str] = None,
    ) -> str:
        """
        Replace ``{i}`` markers in target_text with the phrase's tokens.

        Args:
            target_text: Vendor translation with positional markers
            phrase_tokens: tokenize() output for the phrase key
            source_text: Vendor source text; tokens it contains verbatim
                were not turned into markers and take no position

        Returns:
            Target text with markers substituted. Markers without a
            counterpart are left as-is.
        """
        interp = interpolation_tokens(phrase_tokens)
        positional = self._positional(interp, source_text)
        mapping: Dict[int, Token] = {i: interp[slot] for i, slot in enumerate(positional)}

        referenced = {
            int(m.group("index")) for m in TARGET_RE.finditer(target_text)
            if m.group("marker") and int(m.group("index")) in mapping
        }
        used_slots = {positional[i] for i in referenced}
        pool = self._tag_pool(interp, used_slots)

        def substitute(match: re.Match) -> str:
            if match.group("ph"):
                return match.group(0)

            if match.group("marker"):
                index = int(match.group("index"))
                token = mapping.get(index)
                if token is None:
                    logger.debug(f"No token for marker {{{index}}}, leaving it in place")
                    return match.group(0)
                return token.render()

            vendor_tag = _tag_from_match(match)
            candidates = pool.get(_literal_key(vendor_tag))
            if candidates:
                return candidates.popleft().render()
            # no phrase counterpart: keep the vendor markup as exported
            return match.group(0)

        return TARGET_RE.sub(substitute, target_text)

    def align(self, unit: TranslationUnit, phrase_key: str) -> str:
        """
        Realign a unit's target against a phrase key.

        When the phrase is wrapped in one paired tag that the vendor dropped
        from the stored text, the wrapper is put back around the result.
        """
        tokens = self.tokenize(phrase_key)
        wrapper = self._wrapper(tokens)

        if wrapper is not None and self._vendor_dropped_wrapper(unit, tokens):
            inner = tokens[1:-1]
            body = self.realign(unit.target_text, inner, unit.source_text)
            return f"{wrapper[0].render()}{body}{wrapper[1].render()}"

        return self.realign(unit.target_text, tokens, unit.source_text)

    def rehydrate_source(self, unit: TranslationUnit, phrase_tokens: List[Token]) -> str:
        """Vendor source text with the phrase's tokens put back in."""
        return self.realign(unit.source_text, phrase_tokens, unit.source_text)

    # ==================== HELPERS ====================

    @staticmethod
    def _pair_tags(tokens: List[Token]) -> List[Token]:
        stack: List[int] = []
        pairs: Dict[int, int] = {}

        for index, token in enumerate(tokens):
            if isinstance(token, TagOpen):
                stack.append(index)
            elif isinstance(token, TagClose):
                name = token.name.lower()
                for depth in range(len(stack) - 1, -1, -1):
                    if tokens[stack[depth]].name.lower() == name:
                        open_index = stack[depth]
                        # opens left above the match stay unpaired
                        del stack[depth:]
                        pairs[open_index] = index
                        pairs[index] = open_index
                        break

        return [
            replace(token, pair=pairs[index]) if index in pairs else token
            for index, token in enumerate(tokens)
        ]

    def _positional(self, interp: List[Token], source_text: Optional[str]) -> List[int]:
        """Indices into interp of tokens that became vendor markers."""
        if source_text is None:
            return list(range(len(interp)))

        literal = Counter(
            _literal_key(token) for token in interpolation_tokens(self.tokenize(source_text))
        )
        positional = []
        for slot, token in enumerate(interp):
            key = _literal_key(token)
            if literal[key] > 0:
                literal[key] -= 1
                continue
            positional.append(slot)
        return positional

    @staticmethod
    def _tag_pool(interp: List[Token], used_slots: set) -> Dict[Tuple[str, str], Deque[Token]]:
        """Phrase tags not consumed by a marker, for literal vendor tags."""
        pool: Dict[Tuple[str, str], Deque[Token]] = {}
        for slot, token in enumerate(interp):
            if slot in used_slots or not isinstance(token, TAG_TYPES):
                continue
            pool.setdefault(_literal_key(token), deque()).append(token)
        return pool

    @staticmethod
    def _wrapper(tokens: List[Token]) -> Optional[Tuple[TagOpen, TagClose]]:
        if len(tokens) < 2:
            return None
        first, last = tokens[0], tokens[-1]
        if isinstance(first, TagOpen) and isinstance(last, TagClose) and first.pair == len(tokens) - 1:
            return first, last
        return None

    def _vendor_dropped_wrapper(self, unit: TranslationUnit, tokens: List[Token]) -> bool:
        """
        True when the vendor source has exactly the markers of the wrapped
        content, i.e. the outer tag pair never became markers or literals.
        """
        source = unit.source_text
        markers = {
            m.group("index") for m in TARGET_RE.finditer(source) if m.group("marker")
        }
        inner = self._positional(interpolation_tokens(tokens[1:-1]), source)
        full = self._positional(interpolation_tokens(tokens), source)
        return len(markers) == len(inner) < len(full)

import logging
from typing import Iterable, List, Tuple

logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 3

FALLBACK_WORDS = (
    'CAT', 'DOG', 'TONE', 'STONE', 'TONES', 'TONED', 'WORD', 'GAME',
    'PLAY', 'TILE', 'SNATCH', 'CLAIM', 'TABLE', 'POOL', 'FLIP',
)


def normalize(token: str) -> str:
    return token.strip().upper()


class WordLexicon:
    """Membership oracle for legal words.

    Entries are stored trimmed and uppercased; lookups are case-insensitive.
    Length rules are the caller's job, although entries shorter than three
    letters are dropped when a word list is loaded.
    """

    def __init__(self, words: Iterable[str]):
        self._words = {normalize(w) for w in words if normalize(w)}

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> 'WordLexicon':
        return cls(w for w in (normalize(line) for line in lines) if len(w) >= MIN_WORD_LENGTH)

    @classmethod
    def from_file(cls, path: str) -> 'WordLexicon':
        """Load a newline-delimited word list, or fall back to the built-in set."""
        try:
            with open(path, encoding='utf-8') as fh:
                lexicon = cls.from_lines(fh)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"[lexicon-fallback] path={path} error={exc}; using {len(FALLBACK_WORDS)} built-in words")
            return cls.fallback()
        logger.info(f"[lexicon] loaded words={lexicon.word_count()} path={path}")
        return lexicon

    @classmethod
    def fallback(cls) -> 'WordLexicon':
        return cls(FALLBACK_WORDS)

    def is_valid(self, token: str) -> bool:
        return normalize(token) in self._words

    def word_count(self) -> int:
        return len(self._words)

    def validate_many(self, tokens: Iterable[str]) -> Tuple[List[str], List[str]]:
        valid, invalid = [], []
        for token in tokens:
            (valid if self.is_valid(token) else invalid).append(normalize(token))
        return valid, invalid

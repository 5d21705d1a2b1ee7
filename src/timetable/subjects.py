# classbell - Timetable Reminder Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Subject Inference Module

Labels a timetable line with a class name, first from subject keywords and
otherwise from whatever text is left once days and times are removed.
"""

import re
from typing import Optional

from .config import ExtractionConfig
from .days import ANY_DAY_RE
from .models import ContextWindow
from .time_tokens import strip_time_tokens

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_LETTER_RE = re.compile(r"[A-Za-z]")
_MERIDIEMS = {"am", "pm"}


def clean_label(text: str) -> str:
    """Replace punctuation with spaces and collapse whitespace."""
    text = _NON_WORD_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _is_label_word(word: str) -> bool:
    """A neighbouring word belongs in the label only if it reads as a name."""
    bare = _NON_WORD_RE.sub("", word)
    if not _LETTER_RE.search(bare):
        return False
    if bare.lower() in _MERIDIEMS:
        return False
    return ANY_DAY_RE.fullmatch(bare) is None


def subject_from_keywords(line: str, config: ExtractionConfig) -> Optional[str]:
    """
    Label a line from the first subject keyword it contains.

    The label is the word holding the keyword plus its neighbours on either
    side, when they look like words.

    Returns:
        Cleaned label, or None if no keyword matched
    """
    lowered = line.lower()
    for keyword in config.subject_keywords:
        if keyword not in lowered:
            continue
        words = line.split()
        for idx, word in enumerate(words):
            if keyword in word.lower():
                parts = [word]
                if idx > 0 and _is_label_word(words[idx - 1]):
                    parts.insert(0, words[idx - 1])
                if idx < len(words) - 1 and _is_label_word(words[idx + 1]):
                    parts.append(words[idx + 1])
                label = clean_label(" ".join(parts))
                return label or None
    return None


def subject_from_context(window: ContextWindow, config: ExtractionConfig) -> Optional[str]:
    """Pick the first window line that still has a name after stripping days and times."""
    for text in window.lines():
        if not text:
            continue
        candidate = ANY_DAY_RE.sub(" ", text)
        candidate = strip_time_tokens(candidate)
        candidate = clean_label(candidate)
        if 2 <= len(candidate) <= config.max_subject_length and _LETTER_RE.search(candidate):
            return candidate
    return None


def infer_subject(window: ContextWindow, config: Optional[ExtractionConfig] = None) -> str:
    """
    Infer the class label for the current line of a window.

    Args:
        window: Context window around the line
        config: Extraction config (keywords, length limit, default label)

    Returns:
        Label of 2 to max_subject_length characters, or the default label
    """
    config = config or ExtractionConfig()
    subject = subject_from_keywords(window.current, config)
    if not subject:
        subject = subject_from_context(window, config)

    subject = clean_label(subject or "")[: config.max_subject_length].strip()
    if len(subject) < 2:
        return config.default_subject
    return subject

"""Screenplay-specific utility functions."""

from __future__ import annotations

import re


class ScreenplayUtils:
    """Utility functions for screenplay name handling."""

    # Transitions are all-caps lines that are never character cues
    TRANSITION_PATTERN = re.compile(r"^[A-Z0-9 .'\-]+ TO:$|^[A-Z ]+(IN|OUT)[:.]$")
    TRANSITIONS = frozenset(
        {
            "FADE IN:",
            "FADE IN",
            "FADE OUT.",
            "FADE OUT",
            "FADE TO BLACK.",
            "FADE TO BLACK",
            "CUT TO BLACK.",
            "SMASH CUT:",
            "CONTINUED:",
            "(CONTINUED)",
            "THE END",
            "THE END.",
            "END OF CHAPTER",
            "END OF EPISODE",
            "INTERCUT",
            "INTERCUT:",
            "BACK TO SCENE",
        }
    )

    _WHITESPACE = re.compile(r"\s+")
    _DIGITS = re.compile(r"(\d+)")

    @staticmethod
    def collapse_whitespace(text: str) -> str:
        """Trim text and collapse inner runs of whitespace to one space."""
        return ScreenplayUtils._WHITESPACE.sub(" ", text).strip()

    @staticmethod
    def lookup_key(name: str) -> str:
        """Key used to compare names regardless of case and spacing.

        Args:
            name: Character or location name in any casing

        Returns:
            Case-folded name with collapsed whitespace
        """
        return ScreenplayUtils.collapse_whitespace(name).casefold()

    @staticmethod
    def display_case(text: str) -> str:
        """Convert an all-caps heading fragment to display casing.

        Unlike ``str.title`` the letter after an apostrophe stays lowercase,
        so ``SYLVIA'S HOUSE`` becomes ``Sylvia's House``.

        Args:
            text: Heading fragment (e.g., "THERAPIST'S OFFICE")

        Returns:
            Text with each whitespace or hyphen separated word capitalized
        """
        words = ScreenplayUtils.collapse_whitespace(text).split(" ")
        cased = []
        for word in words:
            parts = [p[:1].upper() + p[1:].lower() for p in word.split("-")]
            cased.append("-".join(parts))
        return " ".join(cased)

    @staticmethod
    def is_transition(line: str) -> bool:
        """Check whether a line is a transition such as ``CUT TO:``."""
        stripped = line.strip()
        if not stripped:
            return False
        if stripped.startswith(">") and not stripped.endswith("<"):
            # Fountain forced transition
            return True
        return stripped in ScreenplayUtils.TRANSITIONS or bool(
            ScreenplayUtils.TRANSITION_PATTERN.match(stripped)
        )

    @staticmethod
    def natural_sort_key(identifier: str) -> tuple[tuple[int, int | str], ...]:
        """Sort key that orders ``chapter-2`` before ``chapter-10``.

        Args:
            identifier: Chapter file identifier

        Returns:
            Tuple of comparable chunks
        """
        key: list[tuple[int, int | str]] = []
        for chunk in ScreenplayUtils._DIGITS.split(identifier):
            if not chunk:
                continue
            if chunk.isdigit():
                key.append((0, int(chunk)))
            else:
                key.append((1, chunk.casefold()))
        return tuple(key)

    @staticmethod
    def split_lines(text: str) -> list[str]:
        """Split chapter text into lines, tolerating CRLF line endings."""
        return [line.rstrip("\r") for line in text.split("\n")]

"""Paragraph separators between agent turns."""

from __future__ import annotations

from .classifier import ClassifiedFragment

DEFAULT_SEPARATOR = "\n\n"


class TurnSeparatorPolicy:
    """Insert a separator before the first output of a new agent turn.

    A separator is only owed once some output has been emitted, so a turn
    that ends before producing anything never leads with a separator.
    """

    def __init__(self, separator: str = DEFAULT_SEPARATOR) -> None:
        self.separator = separator
        self.has_emitted_content = False
        self.separator_pending = False

    def apply(self, fragment: ClassifiedFragment) -> list[str]:
        if fragment.kind == "turn_end":
            if self.has_emitted_content:
                self.separator_pending = True
            return []

        if not fragment.has_text:
            return []

        output: list[str] = []
        if self.separator_pending:
            if self.separator:
                output.append(self.separator)
            self.separator_pending = False
        self.has_emitted_content = True
        output.append(fragment.text or "")
        return output

"""
User confirmation prompts
Answers are normalized so any supported locale's "yes" is accepted
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

# English and French affirmative answers
AFFIRMATIVE_ANSWERS = frozenset({'y', 'yes', 'o', 'oui'})


def is_affirmative(answer: Optional[str]) -> bool:
    """Case-insensitive, whitespace-tolerant yes check"""
    if answer is None:
        return False
    return answer.strip().lower() in AFFIRMATIVE_ANSWERS


class UserPrompt(ABC):
    """Interactive yes/no confirmation capability"""

    @abstractmethod
    def confirm(self, message: str) -> bool:
        pass


class ConsolePrompt(UserPrompt):
    """Ask on the terminal; no answer or end of input means no"""

    def __init__(self, input_func: Callable[[str], str] = input):
        self._input = input_func

    def confirm(self, message: str) -> bool:
        try:
            answer = self._input(f"{message} (y/N): ")
        except EOFError:
            return False
        return is_affirmative(answer)


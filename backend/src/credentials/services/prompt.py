"""Operator confirmation via standard input."""

from collections.abc import Callable

Confirm = Callable[[str], bool]

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})


def is_affirmative(answer: str) -> bool:
    return answer.strip().lower() in AFFIRMATIVE_ANSWERS


def stdin_confirm(prompt: str) -> bool:
    """Ask ``prompt`` on stdin and return True only for "y" or "yes".

    End of input counts as a refusal.
    """
    try:
        answer = input(prompt)
    except EOFError:
        print()
        return False
    return is_affirmative(answer)

# hostbook CLI helpers

from typing import Optional


def prompt_input(prompt: str, default: Optional[str] = None) -> Optional[str]:
    """
    Read a line from the user.

    Returns:
        The stripped answer, `default` when the answer is empty and a default
        is given, or None if input was aborted (EOF / Ctrl+C)
    """
    try:
        answer = input(prompt)
    except (EOFError, KeyboardInterrupt):
        print()
        return None

    answer = answer.strip()
    if not answer and default is not None:
        return default
    return answer


def is_yes(answer: Optional[str]) -> bool:
    return answer is not None and answer.strip().lower() in ("y", "yes")

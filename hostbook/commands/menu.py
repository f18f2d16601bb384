# hostbook interactive menu
# 1 = Add, 2 = Connect, 3/q = Quit

from typing import Optional

from ..cli_utils import prompt_input
from .host import cmd_add, cmd_connect

MENU = '''
  1. Add connection
  2. Connect
  3. Quit (q)
'''

QUIT_CHOICES = ("3", "q", "quit")


def run_menu(config, prompt=None) -> int:
    """
    Run the top-level loop until the user quits.

    Returns:
        Process exit code (always 0; failures are reported and the menu resumes)
    """
    prompt = prompt or prompt_input

    while True:
        print(MENU)
        choice: Optional[str] = prompt("Choose an option: ")
        if choice is None:
            return 0

        choice = choice.strip().lower()
        if choice in QUIT_CHOICES:
            print("Bye.")
            return 0
        if choice == "1":
            cmd_add(config, [])
        elif choice == "2":
            cmd_connect(config, [])
        elif choice:
            print(f"Unknown option: {choice}")

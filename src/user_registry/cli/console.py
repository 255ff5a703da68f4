"""
Interactive console menu.

Reads a menu choice and the fields for it, delegates to UserService and
prints the returned message. Input and output are injectable so tests can
drive the loop with scripted answers.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from user_registry.core.logging.filters import new_operation_id, reset_operation_id, set_operation_id
from user_registry.services.user_service import UserService

logger = logging.getLogger(__name__)

MENU_WIDTH = 30


class Action(Enum):
    CREATE = ("1", "Create user")
    READ = ("2", "Read user")
    READ_ALL = ("3", "Read all users")
    UPDATE = ("4", "Update user")
    DELETE = ("5", "Delete user")
    EXIT = ("6", "Exit application")

    def __init__(self, code: str, definition: str):
        self.code = code
        self.definition = definition

    @classmethod
    def from_code(cls, code: str) -> "Action | None":
        for action in cls:
            if action.code == code:
                return action
        return None


class UserConsole:
    """
    Menu loop over a UserService.

    Args:
        service: the application service every action delegates to.
        input_func: reads one line, like the builtin `input` (prompt argument).
        output: writes one message, like the builtin `print`.

    `input_func` is called directly from `start()` and blocks the event loop
    while it waits. The console is the only task on that loop, and a pending
    prompt stays interruptible with Ctrl-C, which a worker thread would not be.
    """

    def __init__(
        self,
        service: UserService,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self.service = service
        self._input = input_func
        self._output = output

    def _ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def _wait_for_enter(self) -> None:
        self._input("Press Enter to continue...")

    def show_menu(self) -> None:
        self._output("\nMenu:")
        self._output("=" * MENU_WIDTH)
        for action in Action:
            self._output(f"{action.code}. {action.definition}")

    async def start(self) -> None:
        """
        Run the menu until the user chooses exit or input ends (EOF).
        """
        while True:
            self.show_menu()
            try:
                choice = self._ask("Choose an action: ")
            except EOFError:
                logger.info("console.input_closed")
                return

            action = Action.from_code(choice)
            if action is None:
                self._output(f"Invalid input, use digits from 1 to {len(Action)}.")
                if not self._pause():
                    return
                continue

            if action is Action.EXIT:
                self._output("Application terminated.")
                return

            token = set_operation_id(new_operation_id())
            try:
                logger.debug("console.action", extra={"action": action.name})
                await self._dispatch(action)
            except EOFError:
                logger.info("console.input_closed")
                return
            except Exception as exc:
                logger.exception("console.unexpected_error", extra={"action": action.name})
                self._output(f"An error occurred: {exc}")
            finally:
                reset_operation_id(token)

            if not self._pause():
                return

    def _pause(self) -> bool:
        try:
            self._wait_for_enter()
        except EOFError:
            return False
        return True

    async def _dispatch(self, action: Action) -> None:
        if action is Action.CREATE:
            await self.handle_create()
        elif action is Action.READ:
            await self.handle_read()
        elif action is Action.READ_ALL:
            self._output(await self.service.read_all())
        elif action is Action.UPDATE:
            await self.handle_update()
        elif action is Action.DELETE:
            await self.handle_delete()

    async def handle_create(self) -> None:
        name = self._ask("Enter name: ")
        email = self._ask("Enter email: ")
        age = self._ask("Enter age: ")
        self._output(await self.service.create(name, email, age))

    async def handle_read(self) -> None:
        user_id = self._ask("Enter user ID: ")
        self._output(await self.service.read(user_id))

    async def handle_update(self) -> None:
        user_id = self._ask("Enter user ID: ")
        name = self._ask("Enter new name: ")
        email = self._ask("Enter new email: ")
        age = self._ask("Enter new age: ")
        self._output(await self.service.update(user_id, name, email, age))

    async def handle_delete(self) -> None:
        user_id = self._ask("Enter user ID: ")
        self._output(await self.service.delete(user_id))

"""
Adapter base — the protocol contract between services and external tools.

Services never call ``subprocess`` directly. They describe the work as
an Action, hand it to an adapter inside an ExecutionContext, and turn
the returned Receipt into a typed error when it failed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from blink.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """Everything an adapter needs to execute an action."""

    action: Action
    working_dir: str = "."
    env: dict[str, str] = Field(default_factory=dict)   # overlaid on os.environ
    timeout: float | None = None


class Adapter(ABC):
    """Abstract base class for all adapters.

    Adapters perform external side effects and return receipts.
    They never raise: failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier ('shell', 'git', ...)."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool exists on this system."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Validate that the action can be executed.

        Returns:
            (is_valid, error_message). error_message is empty if valid.
        """

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Execute the action and return a receipt. Must never raise."""

    def run(self, context: ExecutionContext) -> Receipt:
        """Validate, then execute. A validation failure is a failed receipt."""
        valid, error = self.validate(context)
        if not valid:
            return Receipt.failure(adapter=self.name, action_id=context.action.id, error=error)
        return self.execute(context)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"

"""
Mock adapter — records actions instead of running them.

Stands in for the shell or git adapter in tests. Succeeds by default;
individual action IDs can be configured to fail.
"""

from __future__ import annotations

from blink.adapters.base import Adapter, ExecutionContext
from blink.core.models.action import Receipt


class MockAdapter(Adapter):
    """Recording adapter for tests."""

    def __init__(self, adapter_name: str = "mock", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._failures: dict[str, tuple[str, int]] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def operations(self) -> list[str]:
        """The 'operation' (or 'command') param of every call, in order."""
        return [
            ctx.action.params.get("operation") or ctx.action.params.get("command", "")
            for ctx in self._call_log
        ]

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, action_id: str, stderr: str = "mock failure", return_code: int = 1) -> None:
        """Make the action with this ID fail."""
        self._failures[action_id] = (stderr, return_code)

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)
        action_id = context.action.id
        if action_id in self._failures:
            stderr, code = self._failures[action_id]
            return Receipt.failure(
                adapter=self._name,
                action_id=action_id,
                error=stderr,
                stderr=stderr,
                return_code=code,
            )
        return Receipt.success(adapter=self._name, action_id=action_id, return_code=0)

    def reset(self) -> None:
        self._call_log.clear()
        self._failures.clear()

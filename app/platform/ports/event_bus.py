from typing import Protocol, runtime_checkable

@runtime_checkable
class EventBusPort(Protocol):
    """Out-of-process sink for domain event envelopes.

    ``publish`` returns the sink's id for the stored entry, or None when the
    sink does not keep one.
    """

    async def publish(self, topic: str, key: str, value: dict, headers: dict | None = None) -> str | None: ...

    async def close(self) -> None: ...

"""
Graph — thin runner over nodnod.

Nodes declare their inputs as `__compose__` parameters; running a target
node discovers and resolves everything it depends on.

    from cartflow import graph as G

    @G.node
    class Ledger:
        @classmethod
        def __compose__(cls, request: Submission) -> Ledger: ...

    node = await G.run(Decision).inject(request)
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, cast

from nodnod import EventLoopAgent, Node, Scope, Value
from nodnod import scalar_node as node


@dataclass(frozen=True, slots=True)
class Run[T]:
    """Awaitable run of a target node with injected values."""

    target: type[T]
    injections: tuple[tuple[type[Any], Any], ...] = ()

    def inject(self, value: object) -> Run[T]:
        """Inject under the value's runtime type."""
        return self.inject_as(cast(type[Any], type(value)), value)

    def inject_as[V](self, typ: type[V], value: V) -> Run[T]:
        return Run(self.target, (*self.injections, (typ, value)))

    def __await__(self) -> Any:
        return self._execute().__await__()

    async def _execute(self) -> T:
        agent = EventLoopAgent.build({cast(type[Node[Any, Any]], self.target)})

        scope = Scope(detail="run")
        async with scope:
            for typ, value in self.injections:
                scope.push(Value(typ, value))

            run_method = cast(
                Callable[[Scope, dict[type[Any], Scope]], Coroutine[Any, Any, None]],
                getattr(agent, "run"),
            )
            await run_method(scope, {})

            resolved = scope.get(self.target)
            if resolved is None:
                raise KeyError(f"{self.target.__name__} was not resolved")
            return cast(T, resolved.value)


def run[T](target: type[T]) -> Run[T]:
    return Run(target)


__all__ = ("node", "Run", "run")

"""Concurrent producer task execution."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterable, List, Mapping, TypeVar

from ..errors import ProducerTaskError

if TYPE_CHECKING:
    from ..assemblers import Collaborators
    from ..context import ThemeContext

logger = logging.getLogger(__name__)

T = TypeVar("T")

Producer = Callable[["ThemeContext", "Collaborators"], Awaitable[Any]]


def _always(context: "ThemeContext") -> bool:
    return True


@dataclass(frozen=True, slots=True)
class TaskSpec:
    """A named producer and the predicate deciding whether a run includes it."""

    name: str
    producer: Producer
    predicate: Callable[["ThemeContext"], bool] = _always


def select_tasks(specs: Iterable[TaskSpec], context: "ThemeContext") -> List[TaskSpec]:
    return [spec for spec in specs if spec.predicate(context)]


async def call_collaborator(func: Callable[..., Any], *args: Any) -> Any:
    """Await coroutine functions directly; run plain callables in a worker thread."""

    if inspect.iscoroutinefunction(func):
        return await func(*args)
    result = await asyncio.to_thread(func, *args)
    if inspect.isawaitable(result):
        return await result
    return result


async def settle_all(awaitables: Mapping[str, Awaitable[T]]) -> Dict[str, T]:
    """Run ``awaitables`` concurrently and wait until every one has settled.

    Nothing is cancelled when one fails. The first failure to surface is
    raised once all have settled; later failures and all results are
    discarded in that case. On success the results keep the input order.
    """

    order: Dict[asyncio.Future, int] = {}
    keys: Dict[asyncio.Future, str] = {}
    for index, (key, awaitable) in enumerate(awaitables.items()):
        future = asyncio.ensure_future(awaitable)
        order[future] = index
        keys[future] = key

    first_failure: BaseException | None = None
    pending = set(order)
    while pending:
        done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
        for future in sorted(done, key=order.__getitem__):
            exc = future.exception()
            if exc is None:
                continue
            if first_failure is None:
                first_failure = exc
            else:
                logger.debug("Discarding failure from %s: %s", keys[future], exc)

    if first_failure is not None:
        raise first_failure
    return {keys[future]: future.result() for future in order}


async def _run_task(spec: TaskSpec, context: "ThemeContext", collaborators: "Collaborators") -> Any:
    try:
        return await spec.producer(context, collaborators)
    except ProducerTaskError:
        raise
    except Exception as exc:
        raise ProducerTaskError(spec.name, exc) from exc


async def run_producers(
    tasks: Iterable[TaskSpec],
    context: "ThemeContext",
    collaborators: "Collaborators",
) -> Dict[str, Any]:
    """Start every producer at once and return ``{task name: result}``."""

    return await settle_all({spec.name: _run_task(spec, context, collaborators) for spec in tasks})

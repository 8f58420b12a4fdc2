"""Batching of independent calls into one ``system.multicall`` request."""

from collections.abc import Sequence
from typing import Any, NamedTuple

from .models import MulticallFault, TransportError
from .transport import Transport

MULTICALL_METHOD = "system.multicall"


class Call(NamedTuple):
    method: str
    params: Sequence[Any] = ()


def multicall(transport: Transport, calls: Sequence[Call]) -> list[Any]:
    """Execute calls in a single round trip.

    Args:
        transport: Connected transport
        calls: Calls to execute, in order

    Returns:
        One entry per call, same length and order as calls. Successful
        calls are unwrapped to their value, failed ones are returned as
        MulticallFault. A failing element never affects its siblings.

    Raises:
        ClientError: If the aggregate request itself fails
    """
    if not calls:
        return []

    formatted = [
        {"methodName": c.method, "params": list(c.params)} for c in calls
    ]

    results = transport.call(MULTICALL_METHOD, [formatted])

    if not isinstance(results, list) or len(results) != len(calls):
        count = len(results) if isinstance(results, list) else "no"
        raise TransportError(
            f"{MULTICALL_METHOD} returned {count} results "
            f"for {len(calls)} calls"
        )

    return [_unwrap(r) for r in results]


def is_fault(result: Any) -> bool:
    return isinstance(result, MulticallFault)


def _unwrap(result: Any) -> Any:
    # Success: [value]. Failure: {"faultCode": ..., "faultString": ...}
    if isinstance(result, dict) and "faultCode" in result:
        return MulticallFault(
            error=result.get("faultString") or "Unknown error",
            fault_code=result["faultCode"],
        )

    if isinstance(result, list):
        return result[0] if result else None

    return result

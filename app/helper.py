import asyncio
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, Iterable, List


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: Any) -> Any:
    """
    Firestore returns DatetimeWithNanoseconds (a datetime subclass) for timestamp
    fields; clients get ISO-8601 strings instead.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    return value


def serialize_doc(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    out = {"id": doc_id}
    for k, v in data.items():
        out[k] = to_iso(v)
    return out


def unique(items: Iterable[str]) -> List[str]:
    # dedupe, keep first-seen order
    return list(dict.fromkeys(items))


def same_email(a: str, b: str) -> bool:
    return (a or "").lower() == (b or "").lower()


async def run_blocking(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    # Firestore client calls block; keep them off the event loop
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))

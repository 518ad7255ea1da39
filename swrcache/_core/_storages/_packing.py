from __future__ import annotations

from typing import Any, Mapping, cast

import msgpack

from swrcache._core._headers import Headers
from swrcache._core.models import Response
from swrcache._utils import make_async_iterator


def filter_out_swrcache_metadata(data: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if not k.startswith("swrcache_")}


def pack(response: Response, body: bytes) -> bytes:
    """
    Serialize a response and its already collected body into a single blob.
    """
    return cast(
        bytes,
        msgpack.packb(
            {
                "status_code": response.status_code,
                "reason_phrase": response.reason_phrase,
                "headers": response.headers._headers,
                "extra": filter_out_swrcache_metadata(response.metadata),
                "body": body,
            }
        ),
    )


def unpack(value: bytes) -> Response:
    data = msgpack.unpackb(value)
    return Response(
        status_code=data["status_code"],
        reason_phrase=data["reason_phrase"],
        headers=Headers(data["headers"]),
        metadata=data["extra"],
        stream=make_async_iterator([data["body"]]),
    )

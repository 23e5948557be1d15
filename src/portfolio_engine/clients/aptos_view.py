"""Aptos fullnode view-function calls."""

from __future__ import annotations

from typing import Any


def view_request_body(
    function: str,
    arguments: list[Any] | None = None,
    type_arguments: list[str] | None = None,
) -> dict[str, Any]:
    """Body for ``POST /v1/view``.

    Args:
        function: Fully qualified ``address::module::function``
        arguments: Move arguments, already JSON-encoded per the fullnode rules
        type_arguments: Generic type arguments
    """
    return {
        "function": function,
        "type_arguments": list(type_arguments or []),
        "arguments": list(arguments or []),
    }

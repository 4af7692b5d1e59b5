"""JSON-RPC client for the Model Context Protocol, independent of the transport."""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

JSONRPC_VERSION = "2.0"

Notification = dict[str, Any]
NotificationHandler = Callable[[Notification], None]


class ClientError(Exception):
    """Raised when a request cannot be completed."""


class RPCError(ClientError):
    """Raised when the server answers a request with a JSON-RPC error."""

    def __init__(self, message: str, code: int | None = None, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data


class Transport(ABC):
    """A bidirectional channel that carries JSON-RPC messages to a server."""

    @abstractmethod
    def start(self) -> None:
        """Open the connection."""

    @abstractmethod
    def close(self) -> None:
        """Close the connection and release its resources."""

    @abstractmethod
    def send_request(self, request: dict[str, Any]) -> dict[str, Any]:
        """Send a request and return the server's response message."""

    @abstractmethod
    def send_notification(self, notification: dict[str, Any]) -> None:
        """Send a notification, which gets no response."""

    @abstractmethod
    def set_notification_handler(self, handler: NotificationHandler) -> None:
        """Register the callable that receives notifications from the server."""


def _decode_object(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = "nothing" if result is None else type(result).__name__
        raise ClientError(f"failed to unmarshal response: expected an object, got {kind}")
    return result


def _paged_params(cursor: str | None) -> dict[str, Any]:
    return {"cursor": cursor} if cursor else {}


class Client:
    """A client that speaks the Model Context Protocol over a transport."""

    def __init__(
        self,
        transport: Transport | None,
        client_capabilities: Mapping[str, Any] | None = None,
    ) -> None:
        self._transport = transport
        self._client_capabilities: dict[str, Any] = dict(client_capabilities or {})
        self._server_capabilities: dict[str, Any] = {}
        self._initialized = False
        self._handlers: list[NotificationHandler] = []
        self._handlers_lock = threading.Lock()
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    def __enter__(self) -> Client:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def start(self) -> None:
        """Start the transport and route its notifications to the registered handlers."""
        if self._transport is None:
            raise ClientError("transport is not set")
        self._transport.start()
        self._transport.set_notification_handler(self._dispatch_notification)

    def close(self) -> None:
        """Close the underlying transport."""
        if self._transport is not None:
            self._transport.close()

    def on_notification(self, handler: NotificationHandler) -> None:
        """Register a notification handler; handlers run in registration order."""
        with self._handlers_lock:
            self._handlers.append(handler)

    def _dispatch_notification(self, notification: Notification) -> None:
        with self._handlers_lock:
            handlers = list(self._handlers)
        for handler in handlers:
            handler(notification)

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def _send_request(self, method: str, params: Any = None) -> Any:
        if not self._initialized and method != "initialize":
            raise ClientError("client not initialized")
        if self._transport is None:
            raise ClientError("transport is not set")

        request: dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "id": self._next_id(),
            "method": method,
        }
        if params is not None:
            request["params"] = params

        try:
            response = self._transport.send_request(request)
        except Exception as exc:
            raise ClientError(f"transport error: {exc}") from exc

        error = response.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RPCError(str(error.get("message", "")), error.get("code"), error.get("data"))
            raise RPCError(str(error))
        return response.get("result")

    def initialize(
        self,
        protocol_version: str,
        client_info: Mapping[str, Any],
        capabilities: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Negotiate with the server; must be called before any other request."""
        params = {
            "protocolVersion": protocol_version,
            "clientInfo": dict(client_info),
            "capabilities": dict(capabilities or {}),
        }
        result = _decode_object(self._send_request("initialize", params))
        self._server_capabilities = dict(result.get("capabilities") or {})

        notification = {"jsonrpc": JSONRPC_VERSION, "method": "notifications/initialized"}
        assert self._transport is not None
        try:
            self._transport.send_notification(notification)
        except Exception as exc:
            raise ClientError(f"failed to send initialized notification: {exc}") from exc

        self._initialized = True
        return result

    def ping(self) -> None:
        """Check that the server is alive."""
        self._send_request("ping")

    def _list_page(self, method: str, cursor: str | None) -> dict[str, Any]:
        return _decode_object(self._send_request(method, _paged_params(cursor)))

    def _list_all(self, method: str, key: str, cursor: str | None) -> dict[str, Any]:
        result = self._list_page(method, cursor)
        items = list(result.get(key) or [])
        next_cursor = result.get("nextCursor")
        while next_cursor:
            page = self._list_page(method, next_cursor)
            items.extend(page.get(key) or [])
            next_cursor = page.get("nextCursor")
        result[key] = items
        result.pop("nextCursor", None)
        return result

    def list_resources_by_page(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch one page of resources."""
        return self._list_page("resources/list", cursor)

    def list_resources(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch every resource, following pagination cursors."""
        return self._list_all("resources/list", "resources", cursor)

    def list_resource_templates_by_page(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch one page of resource templates."""
        return self._list_page("resources/templates/list", cursor)

    def list_resource_templates(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch every resource template, following pagination cursors."""
        return self._list_all("resources/templates/list", "resourceTemplates", cursor)

    def read_resource(self, uri: str, arguments: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Read the contents of a resource."""
        params: dict[str, Any] = {"uri": uri}
        if arguments:
            params["arguments"] = dict(arguments)
        result = _decode_object(self._send_request("resources/read", params))
        result["contents"] = list(result.get("contents") or [])
        return result

    def subscribe(self, uri: str) -> None:
        """Ask for notifications when a resource changes."""
        self._send_request("resources/subscribe", {"uri": uri})

    def unsubscribe(self, uri: str) -> None:
        """Cancel notifications for a resource."""
        self._send_request("resources/unsubscribe", {"uri": uri})

    def list_prompts_by_page(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch one page of prompts."""
        return self._list_page("prompts/list", cursor)

    def list_prompts(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch every prompt, following pagination cursors."""
        return self._list_all("prompts/list", "prompts", cursor)

    def get_prompt(self, name: str, arguments: Mapping[str, str] | None = None) -> dict[str, Any]:
        """Retrieve a prompt, filled in with the given arguments."""
        params: dict[str, Any] = {"name": name}
        if arguments:
            params["arguments"] = dict(arguments)
        result = _decode_object(self._send_request("prompts/get", params))
        result["messages"] = list(result.get("messages") or [])
        return result

    def list_tools_by_page(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch one page of tools."""
        return self._list_page("tools/list", cursor)

    def list_tools(self, cursor: str | None = None) -> dict[str, Any]:
        """Fetch every tool, following pagination cursors."""
        return self._list_all("tools/list", "tools", cursor)

    def call_tool(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Invoke a tool on the server."""
        params: dict[str, Any] = {"name": name}
        if arguments:
            params["arguments"] = dict(arguments)
        result = _decode_object(self._send_request("tools/call", params))
        result["content"] = list(result.get("content") or [])
        return result

    def set_level(self, level: str) -> None:
        """Set the server's logging level."""
        self._send_request("logging/setLevel", {"level": level})

    def complete(
        self, ref: Mapping[str, Any], argument_name: str, argument_value: str
    ) -> dict[str, Any]:
        """Ask for completion options for an argument."""
        params = {
            "ref": dict(ref),
            "argument": {"name": argument_name, "value": argument_value},
        }
        return _decode_object(self._send_request("completion/complete", params))

    @property
    def transport(self) -> Transport | None:
        """The underlying transport."""
        return self._transport

    @property
    def server_capabilities(self) -> dict[str, Any]:
        """Capabilities the server announced during initialization."""
        return self._server_capabilities

    @property
    def client_capabilities(self) -> dict[str, Any]:
        """Capabilities this client was configured with."""
        return self._client_capabilities
# modelctx

`modelctx` is a client for the Model Context Protocol (MCP). MCP runs over
JSON-RPC 2.0, and servers use it to offer tools, resources, prompts and
completions. Everything lives in the `modelctx.client` module.

The client does not handle the wire itself. It passes plain dicts to a
`Transport` object that you supply, and that object carries them to the
server.

## Installation

```
pip install modelctx
```

To install the test tooling as well:

```
pip install "modelctx[test]"
```

## Transports

Subclass `modelctx.client.Transport` and implement its abstract methods:

| Method | Purpose |
| --- | --- |
| `start()` | Opens the connection. |
| `close()` | Closes the connection. |
| `send_request(request)` | Sends one JSON-RPC request (a dict) and returns the response message (a dict). |
| `send_notification(notification)` | Sends a JSON-RPC notification (a dict). |
| `set_notification_handler(handler)` | Stores the callable that receives each notification from the server. |

## Usage

```python
from modelctx.client import Client

with Client(my_transport) as client:  # start() on entry, close() on exit
    client.on_notification(lambda note: print("server says:", note["method"]))

    result = client.initialize(
        protocol_version="2025-03-26",
        client_info={"name": "example-client", "version": "1.0.0"},
    )
    print(result["serverInfo"]["name"])
    print(client.server_capabilities)

    client.ping()

    for tool in client.list_tools()["tools"]:
        print(tool["name"])

    answer = client.call_tool("echo", {"message": "hello"})
    print(answer["content"])
```

You can also call `start()` and `close()` yourself.

`Client(transport, client_capabilities=None)` stores the capabilities you
pass. They are available as the `client_capabilities` property. What goes to
the server during the handshake is the `capabilities` argument of
`initialize`.

## Methods

- `initialize(protocol_version, client_info, capabilities=None)` sends `initialize` and records the server's capabilities. It then sends `notifications/initialized` and returns the result dict.
- `ping()`
- `list_tools`, `list_prompts`, `list_resources` and `list_resource_templates` each take an optional `cursor`. They follow `nextCursor` until it runs out and return all the items merged into one result.
- The `*_by_page` variants return a single page as the server sent it.
- `read_resource(uri, arguments=None)`
- `subscribe(uri)` and `unsubscribe(uri)`
- `get_prompt(name, arguments=None)`
- `call_tool(name, arguments=None)`
- `set_level(level)`
- `complete(ref, argument_name, argument_value)`
- `on_notification(handler)` registers a handler. Handlers run in the order they were registered, once `start()` has connected the client to the transport.

The properties `transport`, `server_capabilities` and `client_capabilities`
expose the client's state.

## Errors

- `ClientError` is raised when:
  - a request is made before `initialize`;
  - the transport is missing;
  - the transport raises;
  - a result that should be an object is not one.
- `RPCError` is a subclass of `ClientError`. It is raised when the server answers with a JSON-RPC error, and carries the server's `message`, `code` and `data`.

## What it does not do

`modelctx` ships no ready-made transport: no stdio subprocess, HTTP or SSE
connection, and no authentication. It also contains no server. You provide
the `Transport`.
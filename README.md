# illabuilder

Building blocks for the backend of a collaborative low-code application
builder: the component tree model, display-name payloads, a small SQL lexer
that tells read queries from writes, a real-time collaboration hub, and
SQLite-backed repositories for apps, actions, resources, users and editor
state. It uses only the standard library.

## Installation

```
pip install illabuilder
```

For running the tests:

```
pip install "illabuilder[test]"
pytest
```

## Component trees

`illabuilder.component.ComponentNode` is one node of a component tree.
Component trees are stored flat, one `illabuilder.treestate.TreeState` per
node, each holding its JSON content and a JSON array of its children's ids.
`build_component_tree` puts the tree back together and raises `ValueError`
when a child id is missing from the map:

```python
from illabuilder.component import build_component_tree
from illabuilder.treestate import TreeState, StateType

root = TreeState(id=1, state_type=StateType.COMPONENTS,
                 children_node_ref_ids="[2]",
                 content='{"displayName": "root"}')
child = TreeState(id=2, state_type=StateType.COMPONENTS,
                  children_node_ref_ids="[]",
                  content='{"displayName": "button1"}')

tree = build_component_tree(root, {1: root, 2: child}, None)
print(tree.serialize())
```

`ComponentNode.serialize` writes compact JSON with the relations included;
`ComponentNode.serialize_for_database` leaves out the parent and children,
because those are kept in separate columns. `component_node_from_json`
parses a node strictly, while `construct_component_node` builds one from a
decoded payload and turns fields of the wrong type into empty values.

`TreeState.append_children_node_ref_id` and
`TreeState.remove_children_node_ref_id` edit the stored id list.

Display-name payloads are handled by `illabuilder.displayname`:
`resolve_display_name`, `resolve_display_name_state` and
`construct_display_name_state_for_update`.

## Telling SELECT from writes

```python
from illabuilder.sqllexer import Lexer
from illabuilder.sqlparser import is_select_sql

is_select_sql(Lexer("/* report */ SELECT * FROM users"))   # True
is_select_sql(Lexer("DELETE FROM users WHERE id = 1"))     # False
```

`is_select_sql` reads tokens until the first `select` (true) or the first
`insert`, `update` or `delete` (false); text with none of them gives false.
The lexer skips comments (`#`, `--`, `/* */`) and whitespace, counts lines
as it goes and raises `SQLLexError` on text it cannot tokenize.

## Collaboration hub

`illabuilder.protocol.new_message` decodes a client message into a
`Message`. `illabuilder.hub.Hub` keeps registered `Client` objects and
queues `illabuilder.feedback.Feedback` replies to the other clients of the
same app (`broadcast_to_other_clients`) or to every client
(`broadcast_to_global`); `kick_client` closes a client's queue and drops it.

`Client.read_pump` and `Client.write_pump` are asyncio coroutines that work
over any connection object with async `recv`, `send`, `ping` and `close`
methods.

## Repositories

Each repository (`AppRepository`, `ActionRepository`, `ResourceRepository`,
`UserRepository`, `TreeStateRepository`, `KVStateRepository`,
`SetStateRepository`) takes an open `sqlite3` connection and creates its
table if it does not exist. Updates write only the fields that are set
(non-zero, non-empty). A lookup by id or key that finds nothing raises
`illabuilder.util.RecordNotFoundError`, except
`AppRepository.retrieve_app_by_id`, which returns `None`.

```python
import sqlite3
from illabuilder.app_repository import App, AppRepository

repo = AppRepository(sqlite3.connect(":memory:"))
app_id = repo.create(App(name="demo"))
print(repo.retrieve_app_by_id(app_id).name)   # demo
```

## Logging

`illabuilder.util.get_logger()` returns the shared logger, writing one JSON
object per line to standard error. Its level comes from the
`ILLA_LOG_LEVEL` environment variable (-1 debug, 0 info, 1 warning,
2 error, higher values critical); a non-integer value raises `ValueError`.

## What this package does not do

It has no HTTP or websocket server, no REST handlers and no command-line
entry point. The hub does not accept connections or dispatch messages to
application services by itself; you supply the connections and run the
pumps. Storage is SQLite only.
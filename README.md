# accessgate

Policy-based access control for Python applications. You describe an access
control model (request shape, policy shape, role definitions, policy effect and
matcher expression) in a small configuration file, keep your rules in a policy
file, and ask an enforcer whether a request is allowed.

The package has no runtime dependencies.

## Model files

A model is an INI-style file (`#` and `;` start comments, a trailing `\`
continues a line) with these sections:

```
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act

[role_definition]
g = _, _

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = g(r.sub, p.sub) && r.obj == p.obj && r.act == p.act
```

Supported policy effects (anything else raises `ValueError("unsupported effect")`):

- `some(where (p.eft == allow))`
- `!some(where (p.eft == deny))`
- `some(where (p.eft == allow)) && !some(where (p.eft == deny))`
- `priority(p.eft) || deny`

When the policy definition has an `eft` field, a rule's `allow` or `deny`
value decides its effect; otherwise every matching rule allows.

Matchers are expressions with `&&`, `||`, `!`, comparisons, arithmetic,
`=~` regular-expression matching, `in` and `? :`. They may call the built-in
functions `keyMatch`, `keyMatch2`, `keyMatch3`, `keyMatch4`, `regexMatch` and
`ipMatch`, plus one function per role definition (`g`, `g2`, ...). A role
definition with three underscores (`g = _, _, _`) takes a domain as its third
argument. Role inheritance is followed up to ten levels deep. Custom functions
can be registered with `Enforcer.add_function(name, function)`.

## Policy files

A policy is a text file, one comma-separated rule per line, with the policy
type first. Empty lines and lines starting with `#` are skipped.

```
p, alice, data1, read
p, bob, data2, write
p, data2_admin, data2, read
g, alice, data2_admin
```

`accessgate.persist.file_adapter.FileAdapter` reads and writes such files.
`FilteredFileAdapter` can load only the lines matching a `Filter(p=[...], g=[...])`
(empty values match anything); while a filtered policy is loaded it refuses
to save.

## Usage

```python
from accessgate.management import Enforcer

enforcer = Enforcer("rbac_model.conf", "rbac_policy.csv")

if enforcer.enforce("alice", "data2", "read"):
    ...

enforcer.add_policy("eve", "data3", "read")
enforcer.add_grouping_policy("bob", "data2_admin")
print(enforcer.get_policy())
enforcer.save_policy()
```

An `Enforcer` is created from a model path and a policy path, a model path
and an adapter, a `Model` and an adapter, a model path alone, a `Model`
alone, or with no arguments. The keyword `enable_log=` turns logging on or
off.

A model can also be built in memory:

```python
from accessgate.model.model import Model
from accessgate.management import Enforcer

model = Model()
model.add_def("r", "r", "sub, obj, act")
model.add_def("p", "p", "sub, obj, act")
model.add_def("e", "e", "some(where (p.eft == allow))")
model.add_def("m", "m", "r.sub == p.sub && keyMatch(r.obj, p.obj)")

enforcer = Enforcer(model)
enforcer.add_policy("alice", "/alice_data/*", "GET")
enforcer.enforce("alice", "/alice_data/report", "GET")  # True
```

`Model.from_text(...)` and `Model.from_file(...)` load a model from
configuration text or a file.

Other enforcer operations include `get_filtered_policy`, `has_policy`,
`remove_policy`, `remove_filtered_policy`, the `*_grouping_policy` and
`*_named_*` variants, `get_all_subjects`/`objects`/`actions`/`roles`,
`load_policy`, `load_filtered_policy`, `clear_policy`, `enforce_with_matcher`,
`enable_enforce`, `enable_auto_save` and `enable_auto_build_role_links`.

Errors (malformed models, bad requests, unsupported effects, adapter
failures) are raised as exceptions.

### Variants

- `accessgate.cached.CachedEnforcer` remembers decisions for requests made
  only of strings; cached decisions survive policy changes until
  `invalidate_cache()` is called. `enable_cache(False)` turns it off.
- `accessgate.synced.SyncedEnforcer` guards every operation with a lock and
  can reload the policy on a background thread with
  `start_auto_load_policy(interval)` (seconds or a `timedelta`) and
  `stop_auto_load_policy()`.

### Logging

Logging goes through `accessgate.log`; the default logger writes to the
standard `logging` logger named `accessgate` and is off until enabled.
`accessgate.log.set_logger` installs a custom `Logger`.

## What it does not do

- Policies are stored only in text files; there is no database adapter.
  `Adapter` and `FilteredAdapter` in `accessgate.persist.adapter` are
  interfaces for writing your own.
- The file adapter does not save single rule changes: with auto-save on,
  changes stay in memory until `save_policy()` writes the whole policy.
- `accessgate.persist.watcher.Watcher` is an interface only; no watcher
  implementation is included.
- There are no role-query helpers such as listing a user's roles; roles are
  managed through the grouping-policy methods and checked in matchers.
- There is no command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```
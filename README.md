# queqiao

A small library with three parts:

- **A JSON document model** (`queqiao.value`). A `Value` holds null, a signed
  32-bit integer, an unsigned 32-bit integer, a real number, a string, a
  boolean, an array or an object. Any value can carry comments.
- **A reader and writers** (`queqiao.reader`, `queqiao.writer`). The reader
  accepts `//` and `/* */` comments and can keep them on the values. The
  writers give compact output (`FastWriter`) or indented output
  (`StyledWriter`, `StyledStreamWriter`).
- **Run configuration and numeric helpers** (`queqiao.config`,
  `queqiao.constant`). These load a JSON settings file, do arithmetic modulo
  a prime, encode integers as little-endian bytes, read numbers and
  fixed-point values from text, and time numbered sections of code.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Parsing and writing JSON

```python
from queqiao.reader import Reader, parse
from queqiao.writer import FastWriter, StyledWriter, to_styled_string

root = parse('{"name": "demo", "sizes": [1, 2, 3]}')
print(root["name"].as_string())     # demo
print(len(root["sizes"]))           # 3

print(FastWriter().write(root), end="")   # {"name":"demo","sizes":[1,2,3]}
print(to_styled_string(root))
```

`parse` and `Reader.parse` accept a string, bytes or a readable stream.
With `collect_comments=True` (the default) comments are attached to the
values they belong to, and the styled writers write them back out:

```python
reader = Reader()
doc = reader.parse("// settings\n{\"B\": 128 // batch size\n}", collect_comments=True)
print(StyledWriter().write(doc))
```

`Features.all()` (the default) allows comments and any value at the root.
`Features.strict_mode()` drops comments and requires the root to be an
array or an object: `Reader(Features.strict_mode())`.

A document that does not parse raises `JsonParseError`. Its message gives
the line and column of each error; `Reader.formatted_error_messages()`
returns the same text for the last parse.

`FastWriter.enable_yaml_compatibility()` puts a space after each colon.
`StyledStreamWriter(indentation)` writes to a text stream and indents with a
tab unless told otherwise. `value_to_string` and `value_to_quoted_string`
render single scalars. Object members are always written in name order.

## Building values

```python
from queqiao.value import Value, ValueType

v = Value.from_python({"ip": ["127.0.0.1"], "port": [8000]})
v["ip"].append(Value("127.0.0.2"))
print(v.to_python())

print(v.get("missing", "fallback"))   # fallback, and v is unchanged
print("ip" in v)                       # True
```

Indexing with `value[...]` creates missing array elements and object
members, turning a null value into an array or an object on the way; use
`get` and `in` for lookups that must not change the value. `resize`,
`clear`, `remove_member`, `member_names`, `items` and iteration work on
arrays and objects. The `as_int`, `as_uint`, `as_double`, `as_bool` and
`as_string` conversions raise `TypeError` or `OverflowError` where the value
cannot be converted. Comments are set with `set_comment(text, placement)`,
where `placement` is a `CommentPlacement`; the text must start with `/`.

## Configuration

```python
from queqiao import config

settings = config.init("settings.json")
print(settings.M, settings.IP, settings.PORT, settings.MOD)
```

`init(file_name)` loads the settings file once; later calls return the same
`Config`. `current()` returns the loaded settings (and raises
`RuntimeError` before `init`), and `reset()` forgets them. `Config.load`
and `Config.from_value` build a `Config` without touching the process-wide
one.

In the file, `MOD` is given as a string, and the first `M` entries of `IP`
and `PORT` are the parties' addresses. Integer settings that are absent
read as zero. `LEAKEY_RELU_BIAS`, `D2`, `SQRTINV`, `INV2` and `INV2_M` are
computed from the others.

The modular helpers `get_residual(a, mod)`, `power(a, b, mod)` and
`inverse(a, b, mod)` take the modulus as an argument.

## Utilities

`queqiao.constant` provides:

- `int_to_bytes` / `bytes_to_int` and `ll_to_bytes` / `bytes_to_ll` for
  4-byte and 8-byte little-endian encoding.
- `get_next`, `get_int`, `get_ll` and `get_fixpoint` to scan numbers in
  text. Each returns the position just after the number, and empty fields
  between separators are skipped.
- `get_sign`, `get_abs`, `mod_sqrt`, `random_long` and `cal_perm` for
  arithmetic modulo a prime.
- `get_date_time()`, the local time as `YYYY-MM-DD_HH-MM-SS`.
- `Clock`, a context manager that adds the elapsed time to one of 101
  numbered totals:

```python
from queqiao.constant import Clock

with Clock(3) as clock:
    ...
    clock.report()        # prints "duration: ..."
print(Clock.total(3))     # seconds accumulated under clock 3
```

## What it does not do

There is no command-line program, no networking and no model training
here: the `IP` and `PORT` settings are read and kept but nothing connects to
them. There is also no path-expression access to nested values; walk a tree
with indexing, `get` and `items`.
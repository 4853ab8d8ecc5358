"""Host capabilities: the only bindings a jsi program starts with.

```
require      module loader: "fs" (readFileSync, writeFileSync, existsSync), otherwise a Python module
console      log / error
RegExp       regular expression constructor
parseFloat   string -> number
Object       create / getPrototypeOf / keys / hasOwn
```

They live in a single HostObject (the root capability object) that backs the root Environment and is the receiver
of plain function calls. It is read-only to scripts, like the objects it holds. Nothing else is exposed;
whatever a Python module handed out by `require` can reach is the host's business.
"""

import importlib
import math
import os
import re

from jsi.lang.error import UserThrow
from jsi.runtime.scope import Environment
from jsi.runtime.values import (UNDEFINED, HostObject, JSArray, JSObject, JSRegExp, NativeFunction, to_display,
                                to_property_key, to_string)

FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_float(text=UNDEFINED):
    """Longest numeric prefix of text (after leading whitespace) as a number, or NaN."""
    match = FLOAT_PREFIX.match(to_string(text).lstrip())
    if match is None:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def make_regexp(pattern=UNDEFINED, flags=UNDEFINED):
    if isinstance(pattern, JSRegExp):
        return JSRegExp(pattern.source, pattern.flags if flags is UNDEFINED else to_string(flags))

    source = "(?:)" if pattern is UNDEFINED else to_string(pattern)
    try:
        return JSRegExp(source, "" if flags is UNDEFINED else to_string(flags))
    except (re.error, ValueError) as exc:
        raise UserThrow(f"SyntaxError: Invalid regular expression: /{source}/: {exc}")


def make_console(out):
    """console object writing the display form of its arguments, joined by spaces, to out."""

    def log(*args):
        out(" ".join(to_display(arg) for arg in args))
        return UNDEFINED

    return HostObject(log=NativeFunction("log", log), error=NativeFunction("error", log))


# ------------Object-------------------------------------------------------------------------------------------------

def _object_create(proto=UNDEFINED):
    if proto is not None and not isinstance(proto, JSObject):
        raise UserThrow("TypeError: Object prototype may only be an Object or null: " + to_display(proto, True))
    return JSObject(proto=proto)


def _object_get_prototype_of(obj=UNDEFINED):
    return obj.proto if isinstance(obj, JSObject) else None


def _object_keys(obj=UNDEFINED):
    if isinstance(obj, dict):
        return JSArray(obj.keys())
    if isinstance(obj, list):
        return JSArray(str(idx) for idx in range(len(obj)))
    return JSArray()


def _object_has_own(obj=UNDEFINED, key=UNDEFINED):
    return isinstance(obj, dict) and to_property_key(key) in obj


def make_object():
    return HostObject(
        create=NativeFunction("create", _object_create),
        getPrototypeOf=NativeFunction("getPrototypeOf", _object_get_prototype_of),
        keys=NativeFunction("keys", _object_keys),
        hasOwn=NativeFunction("hasOwn", _object_has_own),
    )


# ------------require------------------------------------------------------------------------------------------------

def _read_file_sync(path=UNDEFINED, encoding=UNDEFINED):
    encoding = "utf-8" if encoding is UNDEFINED or encoding is None else to_string(encoding)
    try:
        with open(to_string(path), "r", encoding=encoding) as file:
            return file.read()
    except OSError as exc:
        raise UserThrow(f"Error: {exc.strerror}, open '{to_string(path)}'")


def _write_file_sync(path=UNDEFINED, data=UNDEFINED):
    try:
        with open(to_string(path), "w", encoding="utf-8") as file:
            file.write(to_string(data))
    except OSError as exc:
        raise UserThrow(f"Error: {exc.strerror}, open '{to_string(path)}'")
    return UNDEFINED


def make_fs():
    return HostObject(
        readFileSync=NativeFunction("readFileSync", _read_file_sync),
        writeFileSync=NativeFunction("writeFileSync", _write_file_sync),
        existsSync=NativeFunction("existsSync", lambda path=UNDEFINED: os.path.exists(to_string(path))),
    )


def make_require():
    """require(name): "fs" is built in; any other name is imported as a Python module. Modules are cached."""
    modules = {"fs": make_fs()}

    def require(name=UNDEFINED):
        name = to_string(name)
        if name not in modules:
            try:
                modules[name] = importlib.import_module(name)
            except (ImportError, ValueError):
                raise UserThrow(f"Error: Cannot find module '{name}'")
        return modules[name]

    return require


def make_root(out=print):
    """Builds the root Environment. out receives every line console writes."""
    capabilities = HostObject(
        require=NativeFunction("require", make_require()),
        console=make_console(out),
        RegExp=NativeFunction("RegExp", make_regexp),
        parseFloat=NativeFunction("parseFloat", parse_float),
        Object=make_object(),
    )
    return Environment(bindings=capabilities, readonly=True)

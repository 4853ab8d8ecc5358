"""Runtime values for jsi and the host-native semantics of the operators that combine them.

A jsi value is always one of:

```
number      float                  ; Python ints coming back from host code are normalised to float
string      str
boolean     bool
null        None
undefined   UNDEFINED
array       JSArray (list)         ; plain Python lists from host code behave the same
object      JSObject (dict)        ; string keys, optional prototype
regexp      JSRegExp
function    Closure | NativeFunction
```

Anything else is an opaque host object (e.g. a Python module handed out by `require`): its public attributes can be
read and written and, if it is callable, it can be invoked.
"""

import math
import re
from decimal import Decimal
from functools import partial

from jsi.lang.error import NotCallableError, ReadOnlyNameError, UndefinedPropertyError, UserThrow


class Undefined:
    """Type of UNDEFINED: the value of missing arguments, missing members and undeclared names."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "undefined"


UNDEFINED = Undefined()


class JSObject(dict):
    """String-keyed mapping. Reads that miss fall back to proto (another JSObject, or None for no prototype)."""

    def __init__(self, *args, proto=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.proto = proto

    def lookup(self, key):
        """Returns the value of key in self or its prototype chain, or UNDEFINED."""
        obj = self
        while obj is not None:
            if key in obj:
                return obj[key]
            obj = obj.proto
        return UNDEFINED

    def has_own(self, key):
        return key in self


class HostObject(JSObject):
    """JSObject handed out by the host (the root capability object, console, fs, Object). Scripts can read it but
    every write raises ReadOnlyNameError.
    """


class JSArray(list):
    """Ordered list of values. props holds named properties (e.g. `index` and `input` on regexp matches)."""

    def __init__(self, *args):
        super().__init__(*args)
        self.props = {}


class JSRegExp:
    """Compiled regular expression with JavaScript flags: g (global, stateful lastIndex), m (multiline) and i
    (ignore case). Python's re syntax is used for the pattern itself.
    """
    FLAGS = {"g": 0, "m": re.MULTILINE, "i": re.IGNORECASE}

    def __init__(self, source, flags=""):
        """Raises ValueError on unknown or repeated flags and re.error on an invalid pattern."""
        if any(flag not in JSRegExp.FLAGS for flag in flags) or len(set(flags)) != len(flags):
            raise ValueError(f"invalid flags '{flags}'")

        bits = 0
        for flag in flags:
            bits |= JSRegExp.FLAGS[flag]

        self.source = source
        self.flags = "".join(flag for flag in "gim" if flag in flags)
        self.pattern = re.compile(source, bits)
        self.last_index = 0

    @property
    def is_global(self):
        return "g" in self.flags

    def exec(self, text):
        """Returns the next match of self in text as a JSArray (whole match, then groups; `index` and `input` as
        props), or None. Global regexps search from and update last_index.
        """
        start = self.last_index if self.is_global else 0
        match = self.pattern.search(text, start) if start <= len(text) else None

        if match is None:
            self.last_index = 0
            return None
        if self.is_global:
            self.last_index = match.end()

        result = JSArray(UNDEFINED if group is None else group for group in (match.group(0),) + match.groups())
        result.props["index"] = float(match.start())
        result.props["input"] = text
        return result

    def test(self, text):
        return self.exec(text) is not None

    def __repr__(self):
        return f"/{self.source}/{self.flags}"


class Closure:
    """Function value: a Function node paired with the scope it was defined in. evaluator runs the body."""

    def __init__(self, node, scope, evaluator):
        self.node = node
        self.scope = scope
        self.evaluator = evaluator

    @property
    def name(self):
        return self.node.name or ""

    def invoke(self, this, args):
        return self.evaluator.call(self, this, args)

    def __repr__(self):
        return f"Closure({self.name or '<anonymous>'})"


class NativeFunction:
    """Function value backed by a Python callable. The receiver is not passed on: methods are bound when they are
    looked up.
    """

    def __init__(self, name, fn):
        self.name = name
        self.fn = fn

    def invoke(self, this, args):
        return from_host(self.fn(*args))

    def __repr__(self):
        return f"NativeFunction({self.name})"


# ------------conversions--------------------------------------------------------------------------------------------

NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_function(value):
    return isinstance(value, (Closure, NativeFunction))


def from_host(value):
    """Normalises a value produced by Python code."""
    if is_number(value):
        return float(value)
    return value


def to_boolean(value):
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return not (value == 0 or math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def to_number(value):
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if value is None:
        return 0.0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if text in ("Infinity", "+Infinity", "-Infinity"):
            return float(text.replace("Infinity", "inf"))
        for prefix, base in (("0x", 16), ("0o", 8), ("0b", 2)):
            if text.lower().startswith(prefix):
                try:
                    return float(int(text[2:], base))
                except ValueError:
                    return math.nan
        return float(text) if NUMBER.match(text) else math.nan
    if isinstance(value, list):
        return to_number(to_string(value))
    return math.nan


def number_to_string(number):
    """Formats number the way JavaScript does: integers without a fraction, exponents outside [1e-6, 1e21)."""
    number = float(number)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number == 0:
        return "0"

    text = repr(number)  # shortest digits that round-trip
    if "e" not in text:
        return str(int(number)) if number.is_integer() else text
    if 1e-6 <= abs(number) < 1e21:
        return format(Decimal(text), "f")

    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    return f"{mantissa}e{'+' if exponent > 0 else '-'}{abs(exponent)}"


def to_string(value):
    if isinstance(value, str):
        return value
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return number_to_string(value)
    if isinstance(value, list):
        return ",".join("" if item is UNDEFINED or item is None else to_string(item) for item in value)
    if isinstance(value, JSRegExp):
        return repr(value)
    if isinstance(value, Closure):
        return f"function {value.name}() {{ [code] }}"
    if isinstance(value, NativeFunction):
        return f"function {value.name}() {{ [native code] }}"
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def to_primitive(value):
    """Objects, arrays, regexps and functions become strings; primitives are returned as is."""
    if value is UNDEFINED or value is None or isinstance(value, (bool, str)) or is_number(value):
        return value
    return to_string(value)


def to_property_key(value):
    return value if isinstance(value, str) else to_string(value)


def to_display(value, nested=False, seen=None):
    """Readable form of value, as printed by console.log and the shell. Strings are only quoted when nested."""
    if seen is None:
        seen = set()

    if isinstance(value, str):
        return f"'{value}'" if nested else value
    if is_function(value):
        return f"[Function: {value.name}]" if value.name else "[Function (anonymous)]"
    if isinstance(value, (list, dict)):
        if id(value) in seen:
            return "[Circular]"
        seen = seen | {id(value)}
        if isinstance(value, list):
            return "[" + ", ".join(to_display(item, True, seen) for item in value) + "]"
        pairs = (f"{key}: {to_display(item, True, seen)}" for key, item in value.items())
        return "{" + ", ".join(pairs) + "}"
    if value is UNDEFINED or value is None or isinstance(value, (bool, JSRegExp)) or is_number(value):
        return to_string(value)
    return repr(value)


# ------------operators----------------------------------------------------------------------------------------------

def strict_equals(left, right):
    """`===`: same type and same value; objects, arrays and functions compare by identity."""
    if is_number(left) and is_number(right):
        return float(left) == float(right)
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if isinstance(left, bool) and isinstance(right, bool):
        return left == right
    return left is right


def less_than(left, right):
    """`<`: string comparison when both sides are strings, numeric comparison (NaN is unordered) otherwise."""
    left, right = to_primitive(left), to_primitive(right)
    if isinstance(left, str) and isinstance(right, str):
        return left < right
    return to_number(left) < to_number(right)


def add(left, right):
    """`+`: concatenation if either primitive operand is a string, numeric addition otherwise."""
    left, right = to_primitive(left), to_primitive(right)
    if isinstance(left, str) or isinstance(right, str):
        return to_string(left) + to_string(right)
    return to_number(left) + to_number(right)


def multiply(left, right):
    return to_number(left) * to_number(right)


def negate(value):
    return -to_number(value)


def logical_not(value):
    return not to_boolean(value)


# ------------calls--------------------------------------------------------------------------------------------------

def call_value(func, this, args, what=None):
    """Invokes func with receiver this and the list args. what describes func in the error raised if it is not
    callable.
    """
    if is_function(func):
        return func.invoke(this, list(args))
    if callable(func):
        return from_host(func(*args))
    raise NotCallableError(what if what is not None else to_display(func, True))


# ------------members------------------------------------------------------------------------------------------------

def _array_index(key):
    """Returns key as a list index, or None if key is not a non-negative integer."""
    if is_number(key) and not math.isinf(key) and float(key).is_integer() and key >= 0:
        return int(key)
    if isinstance(key, str) and key.isascii() and key.isdigit() and str(int(key)) == key:
        return int(key)
    return None


def _relative_index(value, length, default):
    """Resolves a slice bound the way String/Array.prototype.slice do (negative counts from the end)."""
    if value is UNDEFINED:
        return default
    number = to_number(value)
    if math.isnan(number):
        return 0
    if not math.isinf(number):
        number = math.trunc(number)
    if number < 0:
        number = max(length + number, 0)
    return int(min(number, length))


def _slice(sequence, start=UNDEFINED, end=UNDEFINED):
    length = len(sequence)
    return sequence[_relative_index(start, length, 0):_relative_index(end, length, length)]


def _expand_replacement(template, match):
    """Expands $$, $& and $n (1 <= n <= 99) in a replacement string. References to missing groups stay literal."""
    groups = len(match.groups())

    def expand(token):
        code = token.group(1)
        if code == "$":
            return "$"
        if code == "&":
            return match.group(0)
        if 0 < int(code) <= groups:
            return match.group(int(code)) or ""
        if len(code) == 2 and 0 < int(code[0]) <= groups:  # $12 with one group is $1 then "2"
            return (match.group(int(code[0])) or "") + code[1]
        return token.group(0)

    return re.sub(r"\$(\$|&|\d{1,2})", expand, template)


def _string_replace(text, pattern, replacement=UNDEFINED):
    if isinstance(pattern, JSRegExp):
        regex, count = pattern.pattern, 0 if pattern.is_global else 1
        pattern.last_index = 0
    else:
        regex, count = re.compile(re.escape(to_string(pattern))), 1

    def substitute(match):
        if is_function(replacement):
            groups = [UNDEFINED if group is None else group for group in match.groups()]
            args = [match.group(0)] + groups + [float(match.start()), text]
            return to_string(call_value(replacement, UNDEFINED, args))
        return _expand_replacement(to_string(replacement), match)

    return regex.sub(substitute, text, count=count)


def _string_split(text, separator=UNDEFINED, limit=UNDEFINED):
    if separator is UNDEFINED:
        parts = [text]
    elif isinstance(separator, JSRegExp):
        parts = [UNDEFINED if part is None else part for part in separator.pattern.split(text)]
    elif to_string(separator) == "":
        parts = list(text)
    else:
        parts = text.split(to_string(separator))
    if limit is not UNDEFINED:
        parts = parts[:max(int(to_number(limit)), 0)]
    return JSArray(parts)


def _string_char_at(text, index=0.0):
    index = to_number(index)
    if math.isnan(index):
        index = 0
    return text[int(index)] if 0 <= index < len(text) else ""


def _string_index_of(text, search=UNDEFINED, start=0.0):
    start = to_number(start)
    start = 0 if math.isnan(start) else int(min(max(start, 0), len(text)))
    return float(text.find(to_string(search), start))


STRING_METHODS = {
    "slice": _slice,
    "charAt": _string_char_at,
    "indexOf": _string_index_of,
    "split": _string_split,
    "replace": _string_replace,
    "toUpperCase": str.upper,
    "toLowerCase": str.lower,
    "trim": str.strip,
}


def _array_push(items, *values):
    items.extend(values)
    return float(len(items))


def _array_pop(items):
    return items.pop() if items else UNDEFINED


def _array_map(items, callback=UNDEFINED):
    return JSArray(call_value(callback, UNDEFINED, [item, float(idx), items], "map callback")
                   for idx, item in enumerate(list(items)))


def _array_slice(items, start=UNDEFINED, end=UNDEFINED):
    return JSArray(_slice(items, start, end))


def _array_join(items, separator=","):
    if separator is UNDEFINED:
        separator = ","
    return to_string(separator).join("" if item is UNDEFINED or item is None else to_string(item) for item in items)


def _array_index_of(items, value=UNDEFINED):
    for idx, item in enumerate(items):
        if strict_equals(item, value):
            return float(idx)
    return -1.0


def _array_concat(items, *others):
    result = JSArray(items)
    for other in others:
        if isinstance(other, list):
            result.extend(other)
        else:
            result.append(other)
    return result


ARRAY_METHODS = {
    "push": _array_push,
    "pop": _array_pop,
    "map": _array_map,
    "slice": _array_slice,
    "join": _array_join,
    "indexOf": _array_index_of,
    "concat": _array_concat,
}


def _function_apply(func, this=UNDEFINED, args=UNDEFINED):
    if args is UNDEFINED or args is None:
        args = []
    return call_value(func, this, list(args))


def _function_call(func, this=UNDEFINED, *args):
    return call_value(func, this, list(args))


FUNCTION_METHODS = {
    "apply": _function_apply,
    "call": _function_call,
}


def _object_has_own_property(obj, key=UNDEFINED):
    return to_property_key(key) in obj


OBJECT_METHODS = {
    "hasOwnProperty": _object_has_own_property,
    "toString": to_string,
}


REGEXP_METHODS = {
    "exec": lambda regexp, text=UNDEFINED: regexp.exec(to_string(text)),
    "test": lambda regexp, text=UNDEFINED: regexp.test(to_string(text)),
}


def _method(methods, receiver, key):
    """Returns methods[key] bound to receiver as a NativeFunction, or UNDEFINED."""
    if key in methods:
        return NativeFunction(key, partial(methods[key], receiver))
    return UNDEFINED


def get_member(obj, key):
    """obj[key]. Raises UndefinedPropertyError if obj is undefined or null; missing members are UNDEFINED."""
    if obj is UNDEFINED or obj is None:
        raise UndefinedPropertyError(to_property_key(key), to_string(obj))

    if isinstance(obj, (str, list)):
        index = _array_index(key)
        if index is not None:
            return from_host(obj[index]) if index < len(obj) else UNDEFINED
        key = to_property_key(key)
        if key == "length":
            return float(len(obj))
        if isinstance(obj, JSArray) and key in obj.props:
            return obj.props[key]
        return _method(STRING_METHODS if isinstance(obj, str) else ARRAY_METHODS, obj, key)

    key = to_property_key(key)

    if isinstance(obj, JSObject):
        if key == "__proto__":
            return obj.proto
        value = obj.lookup(key)
        if value is UNDEFINED:
            return _method(OBJECT_METHODS, obj, key)
        return value

    if isinstance(obj, dict):
        return from_host(obj.get(key, UNDEFINED))

    if isinstance(obj, JSRegExp):
        properties = {
            "source": obj.source,
            "flags": obj.flags,
            "global": obj.is_global,
            "ignoreCase": "i" in obj.flags,
            "multiline": "m" in obj.flags,
            "lastIndex": float(obj.last_index),
        }
        if key in properties:
            return properties[key]
        return _method(REGEXP_METHODS, obj, key)

    if is_function(obj):
        if key == "name":
            return obj.name
        if key == "length":
            return float(len(obj.node.params)) if isinstance(obj, Closure) else 0.0
        return _method(FUNCTION_METHODS, obj, key)

    if isinstance(obj, bool) or is_number(obj):
        return _method({"toString": to_string}, obj, key)

    if key.startswith("_"):
        return UNDEFINED
    return from_host(getattr(obj, key, UNDEFINED))


def set_member(obj, key, value):
    """obj[key] = value. Raises UndefinedPropertyError if obj is undefined or null."""
    if obj is UNDEFINED or obj is None:
        raise UndefinedPropertyError(to_property_key(key), to_string(obj), write=True)

    if isinstance(obj, list):
        index = _array_index(key)
        if index is not None:
            if index >= len(obj):
                obj.extend([UNDEFINED] * (index + 1 - len(obj)))
            obj[index] = value
        elif to_property_key(key) == "length":
            length = to_number(value)
            if length < 0 or not length.is_integer():
                raise UserThrow("RangeError: Invalid array length")
            length = int(length)
            del obj[length:]
            obj.extend([UNDEFINED] * (length - len(obj)))
        elif isinstance(obj, JSArray):
            obj.props[to_property_key(key)] = value
        return value

    key = to_property_key(key)

    if isinstance(obj, HostObject):
        raise ReadOnlyNameError(key)
    if isinstance(obj, JSObject) and key == "__proto__":
        if value is None or isinstance(value, JSObject):
            obj.proto = value
    elif isinstance(obj, dict):
        obj[key] = value
    elif isinstance(obj, JSRegExp):
        if key == "lastIndex":
            index = to_number(value)
            obj.last_index = 0 if math.isnan(index) or math.isinf(index) else max(int(index), 0)
    elif isinstance(obj, (str, bool)) or is_number(obj) or is_function(obj) or key.startswith("_"):
        pass  # primitives and functions do not hold properties
    else:
        setattr(obj, key, value)
    return value

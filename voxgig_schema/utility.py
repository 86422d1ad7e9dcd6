# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Voxgig Schema Utilities
# =======================
#
# Small helpers for JSON-like values, shared by the schema engine.
#
# - isnode, islist, ismap, iskey, isabsent: identify value kinds.
# - getprop: safely get a property value by key.
# - getpath: get the value at a key path deep inside an object.
# - splitpath: split a dotted (and bracketed) path into parts.
# - keysof: sorted list of map keys (ascending).
# - items: list entries of a map or list as [key, value] pairs.
# - toarray: wrap a single value in a list.
# - clone: deep copy a value, sharing functions and schemas.
# - prependdeep: merge one node under another.
# - printvalue: human-friendly string version of a value.


from typing import *
from datetime import date, datetime
import copy
import json
import math
import re

from .schema import isschema


# Path part pattern: plain keys, or bracketed indexes and quoted keys.
R_PATH_PART = re.compile(r'[^.\[\]]+|\[[^\]]*\]')
R_QUOTED = re.compile(r'^\s*([\'"])(.*)\1\s*$')

# General strings.
S_MT = ''
S_DT = '.'
S_undefined = 'undefined'
S_null = 'null'


class Undefined:
    """
    The absent value. Unlike None (null), this marks a value that was never
    provided. There is only one instance: UNDEF.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return S_undefined

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return 'UNDEF'


# The undefined value for this package.
UNDEF = Undefined()


def isabsent(val: Any = UNDEF) -> bool:
    "Value is undefined or null."
    return val is UNDEF or val is None


def isnode(val: Any = UNDEF) -> bool:
    "Value is a node - defined, and a map (hash) or list (array)."
    return isinstance(val, (dict, list))


def ismap(val: Any = UNDEF) -> bool:
    "Value is a defined map (hash)."
    return isinstance(val, dict)


def islist(val: Any = UNDEF) -> bool:
    "Value is a defined list (array) with integer keys (indexes)."
    return isinstance(val, list)


def iskey(key: Any = UNDEF) -> bool:
    "Value is a defined string (non-empty) or integer key."
    if isinstance(key, str):
        return len(key) > 0
    # Exclude bool (which is a subclass of int)
    if isinstance(key, bool):
        return False
    return isinstance(key, int)


def getprop(val: Any = UNDEF, key: Any = UNDEF, alt: Any = UNDEF) -> Any:
    """
    Safely get a property of a node. Undefined arguments return the
    alternative, as do missing keys. Objects are read by attribute.
    """
    if isabsent(val) or not iskey(key):
        return alt

    if ismap(val):
        return val.get(key, alt)

    if isinstance(val, (list, tuple)):
        try:
            key = int(key)
        except ValueError:
            return alt

        if 0 <= key < len(val):
            return val[key]
        return alt

    if isinstance(key, str) and not isinstance(val, (str, int, float, bool)):
        return getattr(val, key, alt)

    return alt


def keysof(val: Any = UNDEF) -> List[Any]:
    "Sorted keys of a map, or indexes of a list."
    if ismap(val):
        return sorted(val.keys(), key=str)
    elif islist(val):
        return list(range(len(val)))
    return []


def items(val: Any = UNDEF):
    "List the entries of a map or list as an array of (key, value) tuples."
    if ismap(val):
        return [(k, val[k]) for k in keysof(val)]
    elif islist(val):
        return list(enumerate(val))
    return []


def toarray(val: Any = UNDEF) -> List[Any]:
    "Wrap a single value in a list. Lists and tuples are copied, UNDEF is empty."
    if val is UNDEF:
        return []
    if isinstance(val, (list, tuple)):
        return list(val)
    return [val]


def splitpath(path: Any) -> List[Tuple[str, bool]]:
    """
    Split a path such as `a.b[0].c` or `a["x.y"]` into (part, isindex)
    pairs. Bracketed integers are list indexes, bracketed quoted strings are
    plain keys.
    """
    if islist(path):
        return [(str(p), isinstance(p, int)) for p in path]

    if not isinstance(path, str):
        return []

    parts = []
    for raw in R_PATH_PART.findall(path):
        if raw.startswith('['):
            inner = raw[1:-1].strip()
            m = R_QUOTED.match(inner)
            if m:
                parts.append((m.group(2), False))
            else:
                parts.append((inner, inner.lstrip('-').isdigit()))
        else:
            parts.append((raw, False))
    return parts


def getpath(store: Any, path: Any, alt: Any = UNDEF) -> Any:
    """
    Get a value from the store using a path. An empty path finds the
    store itself. Missing parts give the alternative value.
    """
    parts = splitpath(path)
    if 0 == len(parts):
        return store

    val = store
    for part, isindex in parts:
        if isabsent(val):
            return alt
        val = getprop(val, int(part) if isindex else part)

    return alt if val is UNDEF else val


def clone(val: Any = UNDEF, memo: Optional[Dict[int, Any]] = None):
    """
    Deep copy a value.
    NOTE: functions (any callable) are copied by reference, *not* cloned,
    and so are schemas, which are treated as immutable values.
    """
    if val is UNDEF:
        return UNDEF
    return _clonedeep(val, {} if memo is None else memo)


def _clonedeep(val, memo):
    # Any callable is shared: partials, bound methods and callable objects too.
    if val is UNDEF or isschema(val) or callable(val):
        return val

    vid = id(val)
    if vid in memo:
        return memo[vid]

    if isinstance(val, dict):
        out = {}
        memo[vid] = out
        for k, v in val.items():
            out[k] = _clonedeep(v, memo)
        return out

    if isinstance(val, list):
        out = []
        memo[vid] = out
        out.extend(_clonedeep(v, memo) for v in val)
        return out

    if type(val) in (tuple, set, frozenset):
        out = type(val)(_clonedeep(v, memo) for v in val)
        memo[vid] = out
        return out

    if hasattr(val, '__dict__'):
        out = copy.copy(val)
        memo[vid] = out
        out.__dict__.update({k: _clonedeep(v, memo) for k, v in vars(val).items()})
        return out

    return copy.deepcopy(val, memo)


def prependdeep(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge source under target: values already present in target win.
    Absent (UNDEF or None) target values are taken from source, lists are
    joined with source items first, nested schemas are concatenated
    (target after source), and maps merge recursively. The target is
    modified.
    """
    for key, sval in items(source):
        tval = target.get(key, UNDEF)

        if isabsent(tval):
            target[key] = sval

        elif tval is sval:
            continue

        elif isschema(tval):
            if isschema(sval):
                target[key] = sval.concat(tval)

        elif ismap(tval):
            if ismap(sval):
                target[key] = prependdeep(tval, sval)

        elif islist(tval):
            if islist(sval):
                target[key] = sval + tval

    return target


def printvalue(val: Any = UNDEF, quotestrings: bool = False, maxlen: Optional[int] = None) -> str:
    "Safely print a value for error messages (NOT JSON!)."
    valstr = _printsimple(val, quotestrings)

    if valstr is UNDEF:
        try:
            valstr = json.dumps(val, sort_keys=True, separators=(',', ':'),
                                default=lambda v: _printsimple(v, False) or str(v))
            valstr = valstr.replace('"', '')
        except (TypeError, ValueError):
            valstr = str(val)

    if maxlen is not None:
        fulllen = len(valstr)
        valstr = valstr[:maxlen]

        if 3 < maxlen < fulllen:
            valstr = valstr[:maxlen - 3] + '...'

    return valstr


def _printsimple(val, quotestrings):
    if val is UNDEF:
        return S_undefined
    if val is None:
        return S_null
    if isinstance(val, bool):
        return 'true' if val else 'false'
    if isinstance(val, str):
        return json.dumps(val) if quotestrings else val
    if isinstance(val, float):
        if math.isnan(val):
            return 'NaN'
        if math.isinf(val):
            return 'Infinity' if 0 < val else '-Infinity'
        return repr(val)
    if isinstance(val, int):
        return str(val)
    if isinstance(val, (datetime, date)):
        return val.isoformat()
    if isinstance(val, BaseException):
        return '[' + type(val).__name__ + ': ' + str(val) + ']'
    if callable(val) and not isinstance(val, type):
        return '[Function ' + getattr(val, '__name__', 'anonymous') + ']'
    if isnode(val) or isinstance(val, (tuple, set, frozenset)):
        return UNDEF
    return str(val)

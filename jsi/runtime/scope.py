"""Environments (scopes) for jsi. Exactly one Environment is created per function call, never per block, so `var` is
function-scoped. Each Environment owns its own bindings and refers to (but does not own) its parent: closures keep
their defining Environment alive for as long as they are reachable.
"""

from jsi.lang.error import ReadOnlyNameError, UnknownNameError
from jsi.runtime.values import UNDEFINED


class Environment:
    """Name -> value mapping with a parent link. Lookups walk the parent chain."""

    def __init__(self, parent=None, bindings=None, readonly=False):
        self.parent = parent
        self.bindings = bindings if bindings is not None else {}
        self.readonly = readonly  # the root environment is fixed once built

    def owner(self, name):
        """Returns the nearest Environment (self or an ancestor) that directly binds name, or None."""
        env = self
        while env is not None:
            if name in env.bindings:
                return env
            env = env.parent
        return None

    def lookup(self, name):
        """Value of name, or UNDEFINED if no Environment in the chain binds it."""
        env = self.owner(name)
        return UNDEFINED if env is None else env.bindings[name]

    def declare(self, name, value=UNDEFINED):
        """Binds name in this Environment, shadowing any outer binding."""
        if self.readonly:
            raise ReadOnlyNameError(name)
        self.bindings[name] = value
        return value

    def assign(self, name, value):
        """Rebinds name in the Environment that owns it. Raises UnknownNameError if no Environment does."""
        env = self.owner(name)
        if env is None:
            raise UnknownNameError(name)
        if env.readonly:
            raise ReadOnlyNameError(name)
        env.bindings[name] = value
        return value

    def child(self):
        return Environment(self)

    @property
    def depth(self):
        """Number of ancestors."""
        depth, env = 0, self.parent
        while env is not None:
            depth, env = depth + 1, env.parent
        return depth

    def __contains__(self, name):
        return self.owner(name) is not None

    def __repr__(self):
        return f"Environment({sorted(self.bindings)}, depth={self.depth})"

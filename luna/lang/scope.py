"""Scope chains for the luna runtime. A Scope binds names to values and, separately, names to declared functions,
and links to the Scope it was created in. Name resolution walks the chain outward until the global Scope.
"""

from luna.lang.error import LunaRuntimeError


class Scope:
    """A frame of name bindings. kind is one of GLOBAL, CALL or BLOCK."""
    GLOBAL = "global"
    CALL = "call"
    BLOCK = "block"

    def __init__(self, parent=None, kind=None):
        if kind is None:
            kind = Scope.GLOBAL if parent is None else Scope.BLOCK

        self.parent = parent
        self.kind = kind

        self.variables = {}  # dict of name: value
        self.functions = {}  # dict of name: Function
        self.last_value = None

    def child(self, kind=BLOCK):
        """Returns a new Scope whose parent is self."""
        return Scope(self, kind)

    @property
    def depth(self):
        """Number of Scopes between self and the global Scope."""
        depth, scope = 0, self.parent
        while scope is not None:
            depth, scope = depth + 1, scope.parent
        return depth

    def chain(self):
        """Yields self and every enclosing Scope, innermost first."""
        scope = self
        while scope is not None:
            yield scope
            scope = scope.parent

    def define(self, name, value):
        self.variables[name] = value

    def define_function(self, function):
        self.functions[function.name] = function

    def resolve(self, name):
        """Returns the Scope that binds variable name, or None."""
        for scope in self.chain():
            if name in scope.variables:
                return scope
        return None

    def resolve_function(self, name):
        """Returns the Scope that declares function name, or None."""
        for scope in self.chain():
            if name in scope.functions:
                return scope
        return None

    def resolve_binding(self, name):
        """Returns the nearest Scope that binds name as either a variable or a function, or None."""
        for scope in self.chain():
            if name in scope.variables or name in scope.functions:
                return scope
        return None

    def lookup(self, name):
        """Returns the value bound to name in the chain. Unresolved names are always an error."""
        scope = self.resolve(name)
        if scope is None:
            raise LunaRuntimeError("undefined variable '{}'", name, kind=LunaRuntimeError.Kind.UNDEFINED_VARIABLE,
                                   actual=name)
        return scope.variables[name]

    def lookup_function(self, name):
        """Returns the Function declared as name in the chain."""
        scope = self.resolve_function(name)
        if scope is None:
            raise LunaRuntimeError("undefined function '{}'", name, kind=LunaRuntimeError.Kind.UNDEFINED_FUNCTION,
                                   actual=name)
        return scope.functions[name]

    def remember(self, value):
        """Stores value as the last evaluated value of the enclosing call (or of the global Scope). Block Scopes
        forward it outward, since a call's implicit return value is the last value evaluated anywhere in its body.
        """
        scope = self
        while scope.kind == Scope.BLOCK and scope.parent is not None:
            scope = scope.parent
        scope.last_value = value

    def __repr__(self):
        return f"Scope(kind={self.kind!r}, depth={self.depth}, names={sorted(self.variables) + sorted(self.functions)})"

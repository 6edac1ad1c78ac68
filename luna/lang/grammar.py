"""Abstract syntax tree for the luna language. The tree is a closed set of node types: the Parser builds exactly these,
and the Runtime walks exactly these. Every node records the source position of its first token.

Statements: Program, IfStatement, WhileStatement, LoopStatement, FunctionDeclaration, LetDeclaration, VarDeclaration,
            ImportStatement, ExportStatement, PrintStatement, BreakStatement, ReturnStatement, ExpressionStatement
Expressions: Literal, Identifier, Call, Input
"""

from dataclasses import dataclass, field, fields
from typing import List, Optional, Union


@dataclass
class Node:
    """Superclass representing any node in a luna syntax tree."""

    @property
    def children(self):
        """Child nodes, in source order."""
        nodes = []
        for node_field in fields(self):
            value = getattr(self, node_field.name)
            if isinstance(value, Node):
                nodes.append(value)
            elif isinstance(value, list):
                nodes.extend(value)
        return nodes

    @property
    def attrs(self):
        """Non-node fields that are worth displaying."""
        return {
            node_field.name: getattr(self, node_field.name) for node_field in fields(self)
            if node_field.name != "position" and not isinstance(getattr(self, node_field.name), (Node, list))
            and getattr(self, node_field.name) is not None
        }

    def display(self, indents=0):
        """Recursively displays tree with readable format.

        Format:
        <Node>(<attr>=<value>, nodes=[
            <Node>(<attr>=<value>, nodes=[
                ...
                <Node>(<attr>=<value>)  # <-- if there are no child nodes
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}("
        result += ", ".join(f"{name}={value!r}" for name, value in self.attrs.items())

        nodes = self.children
        if nodes:
            result += ", nodes=[" if self.attrs else "nodes=["
            for node in nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"


# Expressions

@dataclass
class Literal(Node):
    """true, false, null, numbers and strings. value is already a luna value (None, bool, float or str)."""
    value: Union[None, bool, float, str]
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class Identifier(Node):
    name: str
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class Call(Node):
    """Zero-argument call of a declared function."""
    name: str
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class Input(Node):
    """Reads one line from the input collaborator."""
    position: int = field(default=0, compare=False, repr=False)


Expression = Union[Literal, Identifier, Call, Input]


# Statements

@dataclass
class IfStatement(Node):
    condition: Expression
    body: "Statement"
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class WhileStatement(Node):
    condition: Expression
    body: "Statement"
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class LoopStatement(Node):
    body: List["Statement"] = field(default_factory=list)
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class FunctionDeclaration(Node):
    name: str
    body: "Statement"
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class LetDeclaration(Node):
    name: str
    initializer: Expression
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class VarDeclaration(Node):
    name: str
    initializer: Expression
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class ImportStatement(Node):
    module: str
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class ExportStatement(Node):
    name: str
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class PrintStatement(Node):
    expression: Expression
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class BreakStatement(Node):
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class ReturnStatement(Node):
    expression: Optional[Expression] = None
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class ExpressionStatement(Node):
    expression: Expression
    position: int = field(default=0, compare=False, repr=False)


Statement = Union[
    IfStatement, WhileStatement, LoopStatement, FunctionDeclaration, LetDeclaration, VarDeclaration, ImportStatement,
    ExportStatement, PrintStatement, BreakStatement, ReturnStatement, ExpressionStatement
]


@dataclass
class Program(Node):
    statements: List[Statement] = field(default_factory=list)
    position: int = field(default=0, compare=False, repr=False)

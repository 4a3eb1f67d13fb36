# src/ast_nodes.py
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from allocator import Allocator


class ASTReleaseError(RuntimeError):
    """A node was released twice (single-owner contract violated)."""


class NodeKind(Enum):
    # literales e identificadores
    NUM = "num"
    VAR = "var"
    # operadores binarios
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    # comparaciones
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    EQ = "=="
    NEQ = "!="
    # asignación, declaración
    ASSIGN = "assign"
    DECLARATION = "declaration"
    STATEMENT_LIST = "statement_list"
    # control de flujo
    IF = "if"
    IF_ELSE = "if_else"
    WHILE = "while"
    FOR_HEADER = "for_header"  # for(init; cond; update)
    FOR = "for"


BINARY_KINDS = (
    NodeKind.ADD, NodeKind.SUB, NodeKind.MUL, NodeKind.DIV, NodeKind.MOD,
    NodeKind.GT, NodeKind.LT, NodeKind.GE, NodeKind.LE, NodeKind.EQ, NodeKind.NEQ,
)
OPERATORS = frozenset(k.value for k in BINARY_KINDS)


@dataclass(eq=False)
class ASTNode:
    released: bool = field(default=False, init=False, repr=False)
    _allocator: Optional[Allocator] = field(default=None, init=False, repr=False)

@dataclass(eq=False)
class Literal(ASTNode):
    value: int = 0

@dataclass(eq=False)
class Identifier(ASTNode):
    name: str = ""

@dataclass(eq=False)
class BinaryOp(ASTNode):
    op: str = ""
    left: ASTNode = None  # type: ignore
    right: ASTNode = None  # type: ignore

@dataclass(eq=False)
class Assignment(ASTNode):
    name: str = ""
    value: ASTNode = None  # type: ignore

@dataclass(eq=False)
class Declaration(ASTNode):
    name: str = ""
    initializer: Optional[ASTNode] = None

@dataclass(eq=False)
class StatementSequence(ASTNode):
    # cadena binaria: (s1, (s2, (s3, ...)))
    first: ASTNode = None  # type: ignore
    second: ASTNode = None  # type: ignore

@dataclass(eq=False)
class Conditional(ASTNode):
    cond: ASTNode = None  # type: ignore
    then_branch: ASTNode = None  # type: ignore

@dataclass(eq=False)
class ConditionalElse(ASTNode):
    cond: ASTNode = None  # type: ignore
    then_branch: ASTNode = None  # type: ignore
    else_branch: ASTNode = None  # type: ignore

@dataclass(eq=False)
class WhileLoop(ASTNode):
    cond: ASTNode = None  # type: ignore
    body: ASTNode = None  # type: ignore

@dataclass(eq=False)
class ForHeader(ASTNode):
    init: Optional[ASTNode] = None
    cond: Optional[ASTNode] = None
    update: Optional[ASTNode] = None

@dataclass(eq=False)
class ForLoop(ASTNode):
    header: ForHeader = None  # type: ignore
    body: ASTNode = None  # type: ignore


# kind -> (clase, campos hijos en orden, lleva nombre)
_SHAPES: Dict[NodeKind, Tuple[type, Tuple[str, ...], bool]] = {
    NodeKind.ASSIGN: (Assignment, ("value",), True),
    NodeKind.DECLARATION: (Declaration, ("initializer",), True),
    NodeKind.STATEMENT_LIST: (StatementSequence, ("first", "second"), False),
    NodeKind.IF: (Conditional, ("cond", "then_branch"), False),
    NodeKind.IF_ELSE: (ConditionalElse, ("cond", "then_branch", "else_branch"), False),
    NodeKind.WHILE: (WhileLoop, ("cond", "body"), False),
    NodeKind.FOR_HEADER: (ForHeader, ("init", "cond", "update"), False),
    NodeKind.FOR: (ForLoop, ("header", "body"), False),
}
for _kind in BINARY_KINDS:
    _SHAPES[_kind] = (BinaryOp, ("left", "right"), False)


def _allocate(node: ASTNode, allocator: Optional[Allocator], owns_name: bool) -> ASTNode:
    if allocator is not None:
        allocator.allocate("node")
        if owns_name:
            try:
                allocator.allocate("name")
            except MemoryError:
                allocator.release("node")
                raise
        node._allocator = allocator
    return node


def make_literal(value: int, allocator: Optional[Allocator] = None) -> Literal:
    return _allocate(Literal(value=int(value)), allocator, owns_name=False)


def make_identifier(name: str, allocator: Optional[Allocator] = None) -> Identifier:
    # str(name) -> copia propia, el nodo no comparte el buffer del caller
    return _allocate(Identifier(name=str(name)), allocator, owns_name=True)


def make_node(kind: NodeKind, *children: Optional[ASTNode], name: Optional[str] = None,
              value: int = 0, allocator: Optional[Allocator] = None) -> ASTNode:
    """
    Build an internal node for `kind` from its children (in source order).

    Only the kind -> variant shape is checked; missing trailing children are left
    absent (e.g. a Declaration without initializer). Leaf kinds delegate to
    make_literal / make_identifier.
    """
    if kind is NodeKind.NUM:
        return make_literal(value, allocator)
    if kind is NodeKind.VAR:
        return make_identifier(name or "", allocator)

    cls, child_fields, named = _SHAPES[kind]
    if len(children) > len(child_fields):
        raise TypeError(f"{cls.__name__} takes at most {len(child_fields)} children, got {len(children)}")
    kwargs: Dict[str, Any] = dict(zip(child_fields, children))
    if named:
        kwargs["name"] = str(name or "")
    if cls is BinaryOp:
        kwargs["op"] = kind.value
    return _allocate(cls(**kwargs), allocator, owns_name=named)


def iter_children(n: Any) -> Iterator[Tuple[str, ASTNode]]:
    """Yield (field_name, child) for every present child, in declaration order."""
    if not is_dataclass(n):
        return
    for f in fields(n):
        if f.name == "_allocator":
            continue
        v = getattr(n, f.name)
        if isinstance(v, ASTNode):
            yield f.name, v


def _label(n: ASTNode) -> str:
    if isinstance(n, Literal):           return f"Literal({n.value})"
    if isinstance(n, Identifier):        return f"Identifier({n.name})"
    if isinstance(n, BinaryOp):          return f"BinaryOp({n.op if n.op in OPERATORS else '?'})"
    if isinstance(n, Assignment):        return f"Assignment({n.name})"
    if isinstance(n, Declaration):       return f"Declaration({n.name})"
    if isinstance(n, StatementSequence): return "StatementSequence"
    if isinstance(n, ConditionalElse):   return "ConditionalElse"
    if isinstance(n, Conditional):       return "Conditional"
    if isinstance(n, WhileLoop):         return "WhileLoop"
    if isinstance(n, ForHeader):         return "ForHeader"
    if isinstance(n, ForLoop):           return "ForLoop"
    return "Unknown AST Node"


def render(node: Optional[ASTNode], depth: int = 0) -> Iterator[str]:
    """
    Lazily yield one indented line per node, pre-order, two spaces per level.

    Statement sequences nest one level per statement, so the walk keeps its own
    stack instead of recursing.
    """
    if node is None:
        return
    stack: List[Tuple[Any, int]] = [(node, depth)]
    while stack:
        n, d = stack.pop()
        yield "  " * d + _label(n)
        children = [ch for _, ch in iter_children(n)]
        for ch in reversed(children):
            stack.append((ch, d + 1))


def render_text(node: Optional[ASTNode], depth: int = 0) -> str:
    return "\n".join(render(node, depth))


def count_nodes(node: Optional[ASTNode]) -> int:
    return sum(1 for _ in render(node))


def release(node: Optional[ASTNode]) -> None:
    """
    Tear down `node` and everything it owns: children first, then the owned
    name, then the node itself. No-op for None.
    Raises ASTReleaseError if any node of the subtree was already released.
    """
    if node is None:
        return
    order: List[ASTNode] = []
    stack: List[ASTNode] = [node]
    while stack:
        n = stack.pop()
        if n.released:
            raise ASTReleaseError(f"{type(n).__name__} released twice")
        order.append(n)
        stack.extend(ch for _, ch in iter_children(n))

    # orden pre-order invertido: todo descendiente antes que su ancestro
    for n in reversed(order):
        for fname, _ in list(iter_children(n)):
            setattr(n, fname, None)
        alloc = n._allocator
        if alloc is not None:
            if isinstance(n, (Identifier, Assignment, Declaration)):
                alloc.release("name")
            alloc.release("node")
            n._allocator = None
        n.released = True

from laurelion.core.models.ast import (
    HighType, TVoid, TBool, TInt, TFloat64, UserDefined, Applied, Pure, Intersection,
    Operation, ContractType, StmtExpr,
    IfThenElse, Block, LocalVariable, While, Exit, Return,
    LiteralInt, LiteralBool, Identifier, Assign, FieldSelect, PureFieldUpdate,
    StaticCall, PrimitiveOp, This, ReferenceEquals, AsType, IsType, InstanceCall,
    Forall, Exists, Assigned, Old, Fresh, Assert, Assume, ProveBy, ContractOf,
    Abstract, All, Hole,
    Body, Transparent, Opaque, AbstractBody,
    TypeDefinition, Composite, Constrained,
    Program, Procedure, Parameter, Field, CompositeType, ConstrainedType,
)

BINARY_OPERATORS: dict[Operation, str] = {
    Operation.EQ: "==",
    Operation.NEQ: "!=",
    Operation.AND: "&&",
    Operation.OR: "||",
    Operation.ADD: "+",
    Operation.SUB: "-",
    Operation.MUL: "*",
    Operation.DIV: "/",
    Operation.MOD: "%",
    Operation.LT: "<",
    Operation.LEQ: "<=",
    Operation.GT: ">",
    Operation.GEQ: ">=",
}

UNARY_OPERATORS: dict[Operation, str] = {
    Operation.NOT: "!",
    Operation.NEG: "-",
}

CONTRACT_KEYWORDS: dict[ContractType, str] = {
    ContractType.READS: "reads",
    ContractType.MODIFIES: "modifies",
    ContractType.PRECONDITION: "precondition",
    ContractType.POSTCONDITION: "postcondition",
}


class PrettyPrinter:
    """
    Renders Laurel ASTs in a readable, Laurel-like surface syntax.

    The output is for humans (CLI output, test failure messages); it is not
    parsed back and carries no guarantee beyond being stable for a given tree.
    """
    def __init__(self, indent: str = "  ") -> None:
        self._indent = indent

    def _pad(self, level: int) -> str:
        return self._indent * level

    # ---------- types ----------

    def type(self, t: HighType) -> str:
        match t:
            case TVoid():
                return "void"
            case TBool():
                return "bool"
            case TInt():
                return "int"
            case TFloat64():
                return "float64"
            case UserDefined(name):
                return name
            case Applied(base, ()):
                return self.type(base)
            case Applied(base, args):
                return f"{self.type(base)}<{', '.join(self.type(a) for a in args)}>"
            case Pure(base):
                return f"pure {self.type(base)}"
            case Intersection(()):
                return "⊤"
            case Intersection(types):
                return " & ".join(self.type(member) for member in types)
        raise TypeError(f"Not a Laurel type: {t!r}")

    # ---------- statements / expressions ----------

    def stmt(self, e: StmtExpr, level: int = 0) -> str:
        s = lambda sub: self.stmt(sub, level)  # noqa: E731

        match e:
            case IfThenElse(cond, then_branch, None):
                return f"if ({s(cond)}) {s(then_branch)}"
            case IfThenElse(cond, then_branch, else_branch):
                return f"if ({s(cond)}) {s(then_branch)} else {s(else_branch)}"
            case Block(statements, label):
                lines = [f"{self._pad(level + 1)}{self.stmt(st, level + 1)};\n" for st in statements]
                prefix = f"{label}: " if label is not None else ""
                return f"{prefix}{{\n{''.join(lines)}{self._pad(level)}}}"
            case LocalVariable(name, ty, initializer):
                init = f" = {s(initializer)}" if initializer is not None else ""
                return f"var {name}: {self.type(ty)}{init}"
            case While(cond, invariant, decreases, body):
                out = f"while ({s(cond)})"
                if invariant is not None:
                    out += f"\n{self._pad(level + 1)}invariant {self.stmt(invariant, level + 1)}"
                if decreases is not None:
                    out += f"\n{self._pad(level + 1)}decreases {self.stmt(decreases, level + 1)}"
                return f"{out} {s(body)}"
            case Exit(target):
                return f"exit {target}"
            case Return(None):
                return "return"
            case Return(value):
                return f"return {s(value)}"
            case LiteralInt(value):
                return str(value)
            case LiteralBool(value):
                return "true" if value else "false"
            case Identifier(name):
                return name
            case Assign(target, value):
                return f"{s(target)} = {s(value)}"
            case FieldSelect(target, field_name):
                return f"{s(target)}.{field_name}"
            case PureFieldUpdate(target, field_name, new_value):
                return f"{s(target)} with {{ {field_name} = {s(new_value)} }}"
            case StaticCall(callee, arguments):
                return f"{callee}({', '.join(s(a) for a in arguments)})"
            case PrimitiveOp(operator, arguments):
                return self._primitive_op(operator, arguments, level)
            case This():
                return "this"
            case ReferenceEquals(lhs, rhs):
                return f"{s(lhs)} === {s(rhs)}"
            case AsType(target, target_type):
                return f"{s(target)} as {self.type(target_type)}"
            case IsType(target, ty):
                return f"{s(target)} is {self.type(ty)}"
            case InstanceCall(target, callee, arguments):
                return f"{s(target)}.{callee}({', '.join(s(a) for a in arguments)})"
            case Forall(name, ty, body):
                return f"forall {name}: {self.type(ty)} :: {s(body)}"
            case Exists(name, ty, body):
                return f"exists {name}: {self.type(ty)} :: {s(body)}"
            case Assigned(name):
                return f"assigned({s(name)})"
            case Old(value):
                return f"old({s(value)})"
            case Fresh(value):
                return f"fresh({s(value)})"
            case Assert(condition):
                return f"assert {s(condition)}"
            case Assume(condition):
                return f"assume {s(condition)}"
            case ProveBy(value, proof):
                return f"{s(value)} by {{ {s(proof)} }}"
            case ContractOf(ct, function):
                return f"{CONTRACT_KEYWORDS[ct]}({s(function)})"
            case Abstract():
                return "abstract"
            case All():
                return "all"
            case Hole():
                return "_"
        raise TypeError(f"Not a Laurel statement/expression: {e!r}")

    def _operand(self, e: StmtExpr, level: int) -> str:
        text = self.stmt(e, level)
        if isinstance(e, (PrimitiveOp, IfThenElse, Forall, Exists)):
            return f"({text})"
        return text

    def _primitive_op(self, operator: Operation, arguments: tuple[StmtExpr, ...], level: int) -> str:
        if operator in UNARY_OPERATORS and len(arguments) == 1:
            return UNARY_OPERATORS[operator] + self._operand(arguments[0], level)
        if operator in BINARY_OPERATORS and len(arguments) == 2:
            lhs, rhs = arguments
            return f"{self._operand(lhs, level)} {BINARY_OPERATORS[operator]} {self._operand(rhs, level)}"
        # arity does not fit the operator: fall back to call syntax
        return f"{operator.value}({', '.join(self.stmt(a, level) for a in arguments)})"

    # ---------- declarations ----------

    def parameter(self, param: Parameter) -> str:
        return f"{param.name}: {self.type(param.type)}"

    def field(self, f: Field, level: int = 0) -> str:
        keyword = "var" if f.is_mutable else "val"
        return f"{self._pad(level)}{keyword} {f.name}: {self.type(f.type)}"

    def body(self, body: Body, level: int = 0) -> str:
        inner = self._pad(level + 1)
        match body:
            case Transparent(impl):
                return f"{self._pad(level)}{{\n{inner}{self.stmt(impl, level + 1)}\n{self._pad(level)}}}"
            case Opaque(postcondition, implementation):
                out = f"{inner}ensures {self.stmt(postcondition, level + 1)}\n"
                if implementation is not None:
                    out += (
                        f"{self._pad(level)}{{\n{inner}{self.stmt(implementation, level + 1)}"
                        f"\n{self._pad(level)}}}"
                    )
                return out
            case AbstractBody(postcondition):
                return f"{inner}ensures {self.stmt(postcondition, level + 1)}"
        raise TypeError(f"Not a Laurel body: {body!r}")

    def procedure(self, proc: Procedure, level: int = 0) -> str:
        inner = self._pad(level + 1)
        nondet = "" if proc.deterministic else "nondet "
        params = ", ".join(self.parameter(p) for p in proc.inputs)
        lines = [f"{self._pad(level)}{nondet}procedure {proc.name}({params}): {self.type(proc.output)}\n"]

        # trivial contracts (true precondition, empty modifies/decreases) are omitted
        if proc.precondition != LiteralBool(True):
            lines.append(f"{inner}requires {self.stmt(proc.precondition, level + 1)}\n")
        if proc.reads is not None:
            lines.append(f"{inner}reads {self.stmt(proc.reads, level + 1)}\n")
        if proc.modifies != Block():
            lines.append(f"{inner}modifies {self.stmt(proc.modifies, level + 1)}\n")
        if proc.decreases != Block():
            lines.append(f"{inner}decreases {self.stmt(proc.decreases, level + 1)}\n")

        lines.append(self.body(proc.body, level))
        return "".join(lines)

    def composite_type(self, ct: CompositeType, level: int = 0) -> str:
        extends = f" extends {', '.join(ct.extending)}" if ct.extending else ""
        out = f"{self._pad(level)}type {ct.name}{extends} {{\n"
        out += "".join(f"{self.field(f, level + 1)}\n" for f in ct.fields)
        if ct.instance_procedures:
            if ct.fields:
                out += "\n"
            out += "".join(f"{self.procedure(p, level + 1)}\n" for p in ct.instance_procedures)
        return f"{out}{self._pad(level)}}}"

    def constrained_type(self, ct: ConstrainedType, level: int = 0) -> str:
        return (
            f"{self._pad(level)}type {ct.name} = {{ {ct.value_name}: {self.type(ct.base)} | "
            f"{self.stmt(ct.constraint, level)} }}\n"
            f"{self._pad(level + 1)}witness {self.stmt(ct.witness, level + 1)}"
        )

    def type_definition(self, td: TypeDefinition, level: int = 0) -> str:
        match td:
            case Composite(ct):
                return self.composite_type(ct, level)
            case Constrained(ct):
                return self.constrained_type(ct, level)
        raise TypeError(f"Not a Laurel type definition: {td!r}")

    def program(self, program: Program) -> str:
        sections: list[str] = []

        if program.static_fields:
            sections.append("// Static Fields\n" + "".join(f"{self.field(f)}\n" for f in program.static_fields))
        if program.types:
            sections.append(
                "// Type Definitions\n" + "".join(f"{self.type_definition(td)}\n\n" for td in program.types)
            )
        if program.static_procedures:
            sections.append(
                "// Static Procedures\n" + "".join(f"{self.procedure(p)}\n\n" for p in program.static_procedures)
            )

        return "\n".join(sections).rstrip()

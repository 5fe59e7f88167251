from decimal import Decimal

import pytest

from laurelion.core.codec.decoder import Decoder
from laurelion.core.codec.encoder import Encoder
from laurelion.core.codec.tags import STMTS, TYPES
from laurelion.core.models.ast import (
    TInt, TBool, UserDefined, Applied, Intersection, Pure,
    Block, Return, LiteralInt, LiteralBool, Identifier, StaticCall, LocalVariable, Hole, Abstract, Old,
    Field, Parameter, Program, Transparent, Opaque, AbstractBody,
)
from laurelion.core.models.errors import (
    DecodeError, ArityError, UnknownTagError, TypeMismatchError, ShapeError, DepthError,
)
from laurelion.core.models.wire import Symbol
from tests.generators import AstGenerator, sample_program, sample_stmts, sample_types

S = Symbol

FIXED_ARITY_TYPES = [t for t in sample_types() if not isinstance(t, (Applied, Intersection))]


def replace(node: tuple, index: int, value) -> tuple:
    return node[:index] + (value,) + node[index + 1:]


@pytest.mark.ut
@pytest.mark.parametrize("stmt", sample_stmts(), ids=lambda s: type(s).__name__)
def test_statement_dispatch(encoder, decoder, stmt):
    assert decoder.decode_stmt(encoder.encode_stmt(stmt)) == stmt


@pytest.mark.ut
@pytest.mark.parametrize("t", sample_types(), ids=lambda t: type(t).__name__)
def test_type_dispatch(encoder, decoder, t):
    assert decoder.decode_type(encoder.encode_type(t)) == t


@pytest.mark.ut
def test_sample_program(encoder, decoder):
    program = sample_program()
    assert decoder.decode(encoder.encode(program).root) == program


@pytest.mark.ut
@pytest.mark.parametrize("seed", range(25))
def test_generated_programs(decoder, seed):
    program = AstGenerator(seed).program()
    assert decoder.decode(Encoder().encode(program).root) == program


@pytest.mark.ut
def test_empty_program(decoder):
    root = (S("Laurel.Program"), None, (S("seq"), None), (S("seq"), None), (S("seq"), None))
    assert decoder.decode(root) == Program.empty()


@pytest.mark.ut
@pytest.mark.parametrize("stmt", sample_stmts(), ids=lambda s: type(s).__name__)
def test_statement_missing_field(encoder, decoder, stmt):
    node = encoder.encode_stmt(stmt)
    with pytest.raises(ArityError):
        decoder.decode_stmt(node[:-1])


@pytest.mark.ut
@pytest.mark.parametrize("stmt", sample_stmts(), ids=lambda s: type(s).__name__)
def test_statement_extra_field(encoder, decoder, stmt):
    node = encoder.encode_stmt(stmt)
    with pytest.raises(ArityError):
        decoder.decode_stmt(node + ((S("Laurel.Hole"), None),))


@pytest.mark.ut
@pytest.mark.parametrize("t", FIXED_ARITY_TYPES, ids=lambda t: type(t).__name__)
def test_type_arity(encoder, decoder, t):
    node = encoder.encode_type(t)
    with pytest.raises(ArityError):
        decoder.decode_type(node + ((S("ident"), None, S("Laurel.TInt")),))


@pytest.mark.ut
def test_applied_requires_a_base(decoder):
    with pytest.raises(ArityError, match="Laurel.Applied"):
        decoder.decode_type((S("ident"), None, S("Laurel.Applied")))


@pytest.mark.ut
@pytest.mark.parametrize("decl, method, cut", [
    (Parameter("n", TInt()), "parameter", 1),
    (Field("f", False, TBool()), "field", 1),
])
def test_declaration_arity(encoder, decoder, decl, method, cut):
    node = getattr(encoder, f"encode_{method}")(decl)
    with pytest.raises(ArityError):
        getattr(decoder, f"decode_{method}")(node[:-cut])


@pytest.mark.ut
def test_program_arity(decoder):
    with pytest.raises(ArityError, match="Laurel.Program"):
        decoder.decode((S("Laurel.Program"), None, (S("seq"), None), (S("seq"), None)))


@pytest.mark.ut
@pytest.mark.parametrize("body", [Transparent(Hole()), Opaque(Hole(), Hole()), AbstractBody(Hole())])
def test_body_dispatch_and_arity(encoder, decoder, body):
    node = encoder.encode_body(body)
    assert decoder.decode_body(node) == body
    with pytest.raises(ArityError):
        decoder.decode_body(node + (None,))


@pytest.mark.ut
def test_abstract_is_resolved_by_category(decoder):
    assert decoder.decode_stmt((S("Laurel.Abstract"), None)) == Abstract()
    assert decoder.decode_body((S("Laurel.Abstract"), None, (S("Laurel.Hole"), None))) == AbstractBody(Hole())


@pytest.mark.ut
def test_unknown_statement_tag(decoder):
    with pytest.raises(UnknownTagError) as ex:
        decoder.decode_stmt((S("Laurel.Goto"), None))
    assert ex.value.tag == "Laurel.Goto"
    assert "Laurel.Goto" in str(ex.value)


@pytest.mark.ut
def test_unqualified_tag(decoder):
    with pytest.raises(UnknownTagError):
        decoder.decode_stmt((S("Hole"), None))


@pytest.mark.ut
def test_tag_from_another_category(decoder):
    with pytest.raises(UnknownTagError):
        decoder.decode_stmt((S("Laurel.TInt"), None))
    with pytest.raises(UnknownTagError):
        decoder.decode_body((S("Laurel.Hole"), None, (S("Laurel.Hole"), None)))


@pytest.mark.ut
def test_tag_must_be_a_symbol(decoder):
    with pytest.raises(TypeMismatchError):
        decoder.decode_stmt(("Laurel.Hole", None))


@pytest.mark.ut
def test_wrong_declaration_tag(decoder):
    with pytest.raises(UnknownTagError, match="Laurel.Program"):
        decoder.decode((S("Laurel.Procedure"), None, (S("seq"), None), (S("seq"), None), (S("seq"), None)))


@pytest.mark.ut
def test_boolean_third_tag(encoder, decoder):
    node = encoder.encode_stmt(LiteralBool(True))
    broken = replace(node, 2, (S("op"), (S("Init.maybe"), None)))
    with pytest.raises(UnknownTagError, match="Init.maybe"):
        decoder.decode_stmt(broken)


@pytest.mark.ut
def test_boolean_without_op(encoder, decoder):
    node = encoder.encode_stmt(LiteralBool(True))
    with pytest.raises(TypeMismatchError):
        decoder.decode_stmt(replace(node, 2, (S("num"), None, 1)))


@pytest.mark.ut
def test_option_with_too_many_elements(encoder, decoder):
    node = encoder.encode_stmt(Return(Hole()))
    broken = replace(node, 2, node[2] + ((S("Laurel.Hole"), None),))
    with pytest.raises(ShapeError, match="option"):
        decoder.decode_stmt(broken)


@pytest.mark.ut
def test_option_replaced_by_seq(decoder):
    with pytest.raises(ShapeError):
        decoder.decode_stmt((S("Laurel.Return"), None, (S("seq"), None)))


@pytest.mark.ut
def test_bare_value_where_option_expected(encoder, decoder):
    node = encoder.encode_stmt(Return(Hole()))
    with pytest.raises(ShapeError):
        decoder.decode_stmt(replace(node, 2, (S("Laurel.Hole"), None)))


@pytest.mark.ut
def test_seq_replaced_by_option(encoder, decoder):
    node = encoder.encode_stmt(StaticCall("f"))
    with pytest.raises(ShapeError, match="seq"):
        decoder.decode_stmt(replace(node, 3, (S("option"), None)))


@pytest.mark.ut
def test_seq_missing_annotation(encoder, decoder):
    node = encoder.encode_stmt(Block())
    with pytest.raises(ShapeError):
        decoder.decode_stmt(replace(node, 2, (S("seq"),)))


@pytest.mark.ut
def test_strlit_where_num_expected(encoder, decoder):
    node = encoder.encode_stmt(LiteralInt(3))
    with pytest.raises(TypeMismatchError):
        decoder.decode_stmt(replace(node, 2, (S("strlit"), None, "3")))


@pytest.mark.ut
def test_num_payload_type(encoder, decoder):
    node = encoder.encode_stmt(LiteralInt(3))
    with pytest.raises(TypeMismatchError):
        decoder.decode_stmt(replace(node, 2, (S("num"), None, "3")))
    with pytest.raises(TypeMismatchError):
        decoder.decode_stmt(replace(node, 2, (S("num"), None, True)))


@pytest.mark.ut
def test_strlit_payload_type(encoder, decoder):
    node = encoder.encode_stmt(Identifier("x"))
    with pytest.raises(TypeMismatchError):
        decoder.decode_stmt(replace(node, 2, (S("strlit"), None, 7)))


@pytest.mark.ut
def test_statement_where_type_expected(encoder, decoder):
    node = encoder.encode_stmt(LocalVariable("x", TInt()))
    with pytest.raises(TypeMismatchError):
        decoder.decode_stmt(replace(node, 3, encoder.encode_stmt(Identifier("T"))))


@pytest.mark.ut
def test_leaf_where_node_expected(decoder):
    with pytest.raises(TypeMismatchError):
        decoder.decode_stmt("Laurel.Hole")
    with pytest.raises(TypeMismatchError):
        decoder.decode(None)


@pytest.mark.ut
def test_annotation_slot_is_ignored(encoder, decoder):
    node = encoder.encode_stmt(Identifier("x"))
    assert decoder.decode_stmt(replace(node, 1, "source: line 3")) == Identifier("x")


@pytest.mark.ut
def test_error_names_the_construct(encoder, decoder):
    node = encoder.encode_stmt(Block())
    with pytest.raises(ArityError) as ex:
        decoder.decode_stmt(node[:-1])

    assert isinstance(ex.value, DecodeError)
    assert ex.value.construct == "Laurel.Block"
    assert str(ex.value) == "Laurel.Block: expected 4 elements, found 3"


@pytest.mark.ut
def test_depth_limit():
    decoder = Decoder(max_depth=16)
    stmt = Hole()
    for _ in range(20):
        stmt = Return(stmt)
    program = Program(static_fields=(), types=(), static_procedures=())
    root = Encoder().encode(program).root
    root = replace(root, 3, (S("seq"), None, Encoder().encode_stmt(stmt)))

    with pytest.raises(DepthError) as ex:
        decoder.decode(root)
    assert ex.value.limit == 16


@pytest.mark.ut
def test_depth_within_limit(encoder):
    nested = UserDefined("T")
    for _ in range(10):
        nested = Pure(nested)
    program = Program(static_fields=(Field("f", True, nested),))

    assert Decoder(max_depth=32).decode(encoder.encode(program).root) == program
    assert Decoder().max_depth == Decoder.DEFAULT_MAX_DEPTH


@pytest.mark.ut
@pytest.mark.parametrize("slot", [
    {"line": 3},
    True,
    1.5,
    Decimal("1.5"),
    [1, 2],
    b"\x00",
], ids=lambda v: type(v).__name__)
def test_any_value_in_the_annotation_slot(encoder, decoder, slot):
    node = encoder.encode_stmt(Identifier("x"))
    assert decoder.decode_stmt(replace(node, 1, slot)) == Identifier("x")


@pytest.mark.ut
@pytest.mark.parametrize("payload", [1.5, Decimal("1"), True, [1]], ids=repr)
def test_num_payload_outside_the_vocabulary(decoder, payload):
    node = (S("Laurel.LiteralInt"), None, (S("num"), None, payload))
    with pytest.raises(TypeMismatchError, match="integer"):
        decoder.decode_stmt(node)


@pytest.mark.ut
def test_list_in_place_of_seq(decoder):
    node = (S("Laurel.StaticCall"), None, (S("strlit"), None, "f"), [S("seq"), None])
    with pytest.raises(ShapeError, match="seq"):
        decoder.decode_stmt(node)


def nested_old(levels: int) -> tuple:
    node = (S("Laurel.Hole"), None)
    for _ in range(levels):
        node = (S("Laurel.Old"), None, node)
    return node


@pytest.mark.ut
def test_entry_points_check_depth():
    decoder = Decoder(max_depth=8)

    with pytest.raises(DepthError) as ex:
        decoder.decode_stmt(nested_old(20))
    assert ex.value.construct == STMTS.category
    assert ex.value.limit == 8

    nested = (S("ident"), None, S("Laurel.TInt"))
    for _ in range(20):
        nested = (S("ident"), None, S("Laurel.Pure"), nested)
    with pytest.raises(DepthError) as ex:
        decoder.decode_type(nested)
    assert ex.value.construct == TYPES.category


@pytest.mark.ut
def test_hostile_nesting_is_a_depth_error(decoder):
    with pytest.raises(DepthError):
        decoder.decode_stmt(nested_old(50_000))


@pytest.mark.ut
def test_default_depth_fits_on_the_stack(decoder):
    levels = Decoder.DEFAULT_MAX_DEPTH - 1
    stmt = decoder.decode_stmt(nested_old(levels))

    count = 0
    while isinstance(stmt, Old):
        stmt, count = stmt.value, count + 1
    assert count == levels
    assert stmt == Hole()

# tests/test_symbol_table.py

from symbol_table.symbol_table import DataType, Status, SymbolTable, TableState


def test_insert_and_lookup_global(st):
    res = st.insert("x", DataType.INT)
    assert res.ok
    looked = st.lookup("x")
    assert looked is res.entry
    assert looked.type is DataType.INT
    assert looked.scope_level == 0


def test_shadow_then_restore(st):
    assert st.insert("x", DataType.INT)
    st.open_scope()
    # mismo nombre, otro scope -> permitido
    assert st.insert("x", DataType.FLOAT)
    inner = st.lookup("x")
    assert (inner.type, inner.scope_level) == (DataType.FLOAT, 1)
    st.close_scope()
    outer = st.lookup("x")
    assert (outer.type, outer.scope_level) == (DataType.INT, 0)


def test_redeclaration_rejected_and_first_kept(st):
    first = st.insert("y", DataType.INT)
    second = st.insert("y", DataType.FLOAT)
    assert second.status is Status.REDECLARATION
    assert second.entry is None
    assert not second
    found = st.lookup("y")
    assert found is first.entry
    assert found.type is DataType.INT
    assert found.scope_level == 0
    assert st.current_scope.count == 1


def test_close_releases_only_top(st):
    st.insert("a", DataType.INT)
    st.open_scope()
    st.insert("b", DataType.CHAR)
    st.open_scope()
    st.insert("c", DataType.FLOAT)

    assert st.close_scope() is Status.OK
    assert st.lookup("a") is not None
    assert st.lookup("b") is not None
    assert st.lookup("c") is None


def test_lookup_current_scope_ignores_outer(st):
    st.insert("g", DataType.INT)
    st.open_scope()
    assert st.lookup_current_scope("g") is None
    assert st.lookup("g") is not None
    st.insert("g", DataType.VOID)
    assert st.lookup_current_scope("g").type is DataType.VOID


def test_entries_keep_insertion_order(st):
    for name in ["c", "a", "b"]:
        st.insert(name, DataType.INT)
    assert [e.name for e in st.current_scope.entries] == ["c", "a", "b"]


def test_entry_name_is_owned_copy(st):
    name = "".join(["co", "unt"])
    entry = st.insert(name, DataType.INT).entry
    assert entry.name == "count"
    assert st.lookup("count") is entry


def test_lookup_not_found(st):
    assert st.lookup("missing") is None
    assert st.lookup_current_scope("missing") is None


def test_scope_context_manager(st):
    with st.scope() as inner:
        assert st.current_scope is inner
        st.insert("tmp", DataType.INT)
        assert st.lookup("tmp").scope_level == inner.level
    assert st.lookup("tmp") is None
    assert st.depth == 1


def test_scope_context_manager_closes_nested_leftovers(st):
    with st.scope():
        st.open_scope()
        st.open_scope()
        assert st.depth == 4
    assert st.depth == 1


def test_lifecycle_states():
    st = SymbolTable()
    assert st.state is TableState.UNINITIALIZED
    st.init()
    assert st.state is TableState.ACTIVE
    st.close_scope()
    assert st.state is TableState.DEGENERATE
    st.teardown()
    assert st.state is TableState.UNINITIALIZED


def test_init_resets_previous_state(st, alloc):
    st.insert("x", DataType.INT)
    st.open_scope()
    st.open_scope()
    root = st.init()
    assert root.level == 0
    assert st.depth == 1
    assert st.lookup("x") is None
    # solo quedan el scope raíz y su arreglo
    assert alloc.snapshot() == {"scope": 1, "slots": 10}


def test_teardown_releases_everything(st, alloc):
    st.insert("x", DataType.INT)
    st.open_scope()
    st.insert("y", DataType.FLOAT)
    st.teardown()
    assert alloc.live() == 0
    assert st.scopes == []


def test_independent_tables_do_not_interfere():
    a = SymbolTable()
    b = SymbolTable()
    a.init()
    b.init()
    a.insert("x", DataType.INT)
    a.open_scope()
    assert b.lookup("x") is None
    assert b.levels() == [0]
    assert a.levels() == [1, 0]


def test_datatype_from_name():
    assert DataType.from_name("int") is DataType.INT
    assert DataType.from_name(" Float ") is DataType.FLOAT
    assert DataType.from_name("string") is DataType.UNDEFINED
    assert str(DataType.CHAR) == "CHAR"


def test_resolve_reports_not_found(st):
    st.insert("r", DataType.INT)
    assert st.resolve("r").entry is st.lookup("r")
    missing = st.resolve("nope")
    assert missing.status is Status.NOT_FOUND
    assert not missing

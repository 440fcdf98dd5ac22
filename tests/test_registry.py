"""Unit tests for the handler registry and method blocklist."""
import pytest

from rpc_server.jsonrpc.blocklist import MethodBlocklist
from rpc_server.jsonrpc.registry import HandlerEntry, HandlerRegistry, public_methods, type_key
from rpc_server.utils.errors import InvalidArgumentError
from sample_handlers import Calculator, Echo, ScientificCalculator, Store


@pytest.fixture
def registry():
    """Create an empty HandlerRegistry for testing."""
    return HandlerRegistry()


class TestBind:
    """Test binding single handlers."""

    def test_bind_instance(self, registry):
        calc = Calculator()
        assert registry.bind(calc) is True
        assert registry.snapshot() == {type_key(Calculator): calc}

    def test_bind_class(self, registry):
        assert registry.bind(Calculator) is True
        assert isinstance(registry.list()[0].instance, Calculator)

    def test_bind_import_path(self, registry):
        assert registry.bind("sample_handlers:Echo") is True
        assert registry.bind("sample_handlers.Calculator") is True
        assert [entry.key for entry in registry.list()] == [
            type_key(Echo),
            type_key(Calculator),
        ]

    def test_bind_registered_short_name(self, registry):
        registry.register_type(Store)
        assert registry.bind("Store") is True
        assert type_key(Store) in registry

    def test_bind_mapping_assigns_properties(self, registry):
        assert registry.bind({"type": "sample_handlers:Store", "path": "/tmp/data"}) is True
        store = registry.list()[0].instance
        assert store.where() == "/tmp/data"

    def test_bind_mapping_skips_unassignable_properties(self, registry):
        assert registry.bind({"type": Store, "readonly": "changed", "path": "/x"}) is True
        store = registry.list()[0].instance
        assert store.readonly == "fixed"
        assert store.path == "/x"

    def test_bind_unknown_type(self, registry):
        assert registry.bind("no_such_module:Nothing") is False
        assert registry.bind("Nothing") is False
        assert len(registry) == 0

    def test_bind_failing_constructor(self, registry):
        assert registry.bind("sample_handlers:Broken") is False
        assert registry.bind({"type": "sample_handlers:Broken"}) is False
        assert len(registry) == 0

    def test_bind_mapping_without_type(self, registry):
        assert registry.bind({"path": "/tmp"}) is False
        assert len(registry) == 0

    def test_bind_none(self, registry):
        assert registry.bind(None) is False

    @pytest.mark.parametrize("value", [5, [1], [1, 2], 3.5, b"raw", (Calculator,), {Calculator}])
    def test_bind_builtin_value(self, registry, value):
        assert registry.bind(value) is False
        assert len(registry) == 0

    def test_bind_same_type_twice_replaces(self, registry):
        registry.bind({"type": Store, "path": "first"})
        registry.bind(Calculator())
        registry.bind({"type": Store, "path": "second"})

        assert len(registry) == 2
        entries = registry.list()
        # Replacement keeps the original position.
        assert entries[0].key == type_key(Store)
        assert entries[0].instance.path == "second"


class TestSetAll:
    """Test replacing, clearing and reading all bindings."""

    def test_getter_without_argument(self, registry):
        registry.bind(Calculator())
        assert list(registry.set_all()) == [type_key(Calculator)]
        assert len(registry) == 1

    def test_replace_all(self, registry):
        registry.bind(Store())
        handles = registry.set_all([Echo(), "sample_handlers:Calculator"])
        assert list(handles) == [type_key(Echo), type_key(Calculator)]

    def test_replace_skips_failed_binds(self, registry):
        handles = registry.set_all(["sample_handlers:Broken", Echo(), "missing:Type"])
        assert list(handles) == [type_key(Echo)]

    def test_none_clears(self, registry):
        registry.bind(Calculator())
        assert registry.set_all(None) == {}
        assert registry.list() == []

    def test_empty_list_clears(self, registry):
        registry.bind(Calculator())
        assert registry.set_all([]) == {}

    @pytest.mark.parametrize("bad", ["Calculator", 42, {"type": "Calculator"}])
    def test_invalid_argument(self, registry, bad):
        with pytest.raises(InvalidArgumentError):
            registry.set_all(bad)

    def test_snapshot_is_a_copy(self, registry):
        registry.bind(Calculator())
        handles = registry.set_all()
        handles.clear()
        assert len(registry) == 1


class TestMethodTable:
    """Test the per-handler method table built at bind time."""

    def test_public_methods_only(self):
        methods = public_methods(Calculator())
        assert {"add", "divide", "fail", "nothing", "greet"} <= methods
        assert "_hidden" not in methods
        assert "__init__" not in methods
        assert "precision" not in methods

    def test_properties_are_not_methods(self):
        assert public_methods(Store()) == frozenset({"where"})

    def test_inherited_static_and_class_methods(self):
        entry = HandlerEntry.from_instance(ScientificCalculator())
        assert entry.key == type_key(ScientificCalculator)
        assert {"add", "divide", "square", "kind"} <= entry.methods
        assert "_hidden" not in entry.methods

    def test_exposes(self):
        entry = HandlerEntry.from_instance(Echo())
        assert entry.exposes("echo")
        assert not entry.exposes("missing")

    def test_find_first_match_in_insertion_order(self, registry):
        registry.bind(Echo())
        registry.bind(Calculator())
        assert isinstance(registry.find("add").instance, Echo)
        assert isinstance(registry.find("divide").instance, Calculator)
        assert registry.find("missing") is None


class TestBlocklist:
    """Test method blocking."""

    def test_block_and_unblock(self):
        blocklist = MethodBlocklist()
        assert blocklist.block("add") == {"add"}
        assert blocklist.is_blocked("add")
        assert blocklist.unblock("add") == set()
        assert not blocklist.is_blocked("add")

    def test_idempotent(self):
        blocklist = MethodBlocklist()
        blocklist.block("add")
        assert blocklist.block("add") == {"add"}
        assert blocklist.unblock("other") == {"add"}
        blocklist.unblock("add")
        assert blocklist.unblock("add") == set()

    def test_case_sensitive(self):
        blocklist = MethodBlocklist()
        blocklist.block("Add")
        assert "Add" in blocklist
        assert "add" not in blocklist

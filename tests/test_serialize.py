"""Tests for whole-tree serialization and output assembly."""

import pytest

from treescript import serialize
from treescript.assemble import OutputMode, choose_mode
from treescript.errors import AccessRestricted, SizeExceeded, UnsupportedRoot
from treescript.options import MAX_SOURCE_LENGTH, Options
from treescript.serialize import RunState
from treescript.tree import Instance


@pytest.fixture
def root(new, host):
    return new("Folder", parent=host.workspace, name="Root")


def add_folders(new, parent, count):
    return [new("Folder", parent=parent) for _ in range(count)]


# =============================================================================
# Flat output
# =============================================================================

class TestFlatOutput:
    """Tests for the single-script layout."""

    @pytest.fixture
    def model(self, new, host):
        model = new("Model", parent=host.workspace)
        part = new("Part", parent=model, Anchored=True)
        model["PrimaryPart"] = part
        return model

    def test_verbose_layout(self, serializer, model):
        container = serializer.serialize(model)
        assert container.source == (
            'local Model = Instance.new("Model")\n'
            '\n'
            'local Part = Instance.new("Part")\n'
            'Part.Anchored = true\n'
            'Part.Parent = Model\n'
            '\n'
            'Model.PrimaryPart = Part\n'
        )
        assert serializer.mode is OutputMode.FLAT
        assert serializer.state is RunState.DONE

    def test_compact_layout(self, make_serializer, model):
        container = make_serializer(verbose=False).serialize(model)
        assert container.source == (
            'local a=Instance.new"Model"\n'
            'local b=Instance.new"Part"\n'
            'b.Anchored=true\n'
            'b.Parent=a\n'
            'a.PrimaryPart=b\n'
        )

    def test_disabled_script_by_default(self, serializer, model):
        container = serializer.serialize(model)
        assert container.class_name == "Script"
        assert container.disabled
        assert container.name == "SerializerOutput"
        assert not container.is_split

    def test_module_returns_root(self, make_serializer, model):
        container = make_serializer(module=True).serialize(model)
        assert container.class_name == "ModuleScript"
        assert not container.disabled
        assert container.source.endswith("\nreturn Model")

    def test_parent_restored(self, make_serializer, model):
        container = make_serializer(parent=True).serialize(model)
        assert container.source.endswith("Model.PrimaryPart = Part\nModel.Parent = workspace")

    def test_parent_restored_through_service(self, make_serializer, new, host):
        assets = new("Folder", parent=host.get_service("ReplicatedStorage"), name="Assets")
        model = new("Model", parent=assets)
        container = make_serializer(parent=True).serialize(model)
        assert 'Model.Parent = game:GetService("ReplicatedStorage").Assets' in container.source

    def test_descendants_in_traversal_order(self, serializer, root, new):
        outer = new("Folder", parent=root, name="Outer")
        new("Folder", parent=outer, name="Inner")
        new("Folder", parent=root, name="Last")
        source = serializer.serialize(root).source
        assert source.index("local Outer") < source.index("local Inner") < source.index("local Last")
        assert "Inner.Parent = Outer" in source
        assert "Last.Parent = Root" in source

    def test_convenience_function(self, host, model):
        container = serialize(model, host, Options(verbose=False))
        assert container.source.startswith('local a=Instance.new"Model"')


# =============================================================================
# Failures and skipped nodes
# =============================================================================

class TestFailures:

    def test_locked_root(self, serializer, root, caplog):
        root.locked = True
        with pytest.raises(AccessRestricted):
            serializer.serialize(root)
        assert serializer.state is RunState.FAILED
        assert "context restrictions" in caplog.text

    def test_try_serialize(self, serializer, root):
        root.locked = True
        assert serializer.try_serialize(root) == (False, None)

    def test_service_root(self, serializer, host):
        with pytest.raises(UnsupportedRoot):
            serializer.serialize(host.workspace)

    def test_locked_descendants_skipped(self, serializer, root, new, caplog):
        """A locked node and everything under it are skipped."""
        vault = new("Folder", parent=root, name="Vault")
        new("Part", parent=vault, name="Secret")
        new("Part", parent=root, name="Door")
        vault.locked = True
        source = serializer.serialize(root).source
        assert "local Door" in source
        assert source.count("Instance.new") == 2
        assert "cannot index descendant #1" in caplog.text
        assert "cannot index descendant #2" in caplog.text

    def test_uninstantiable_descendant_skipped(self, serializer, root, host, new, caplog):
        terrain = Instance("Terrain", host=host)
        terrain.Parent = root
        new("Part", parent=terrain, name="Rock")
        new("Part", parent=root, name="Door")
        source = serializer.serialize(root).source
        assert "class Terrain cannot be created" in caplog.text
        assert "Rock" not in source
        assert "Door.Parent = Root" in source
        assert serializer.state is RunState.DONE


# =============================================================================
# Deferred references
# =============================================================================

class TestReferences:
    """Tests for resolving instance-valued properties."""

    def test_cycle(self, serializer, root, new):
        """A references B and B references A."""
        a = new("ObjectValue", parent=root, name="A")
        b = new("ObjectValue", parent=root, name="B")
        a["Value"] = b
        b["Value"] = a
        source = serializer.serialize(root).source
        assert "A.Value = B\n" in source
        assert "B.Value = A\n" in source
        assert source.index("A.Value = B") > source.index("local B")
        assert source.index("B.Value = A") > source.index("B.Parent = Root")

    def test_forward_reference(self, serializer, root, new):
        pointer = new("ObjectValue", parent=root, name="Pointer")
        target = new("Part", parent=root, name="Target")
        pointer["Value"] = target
        source = serializer.serialize(root).source
        assert source.index("Pointer.Value = Target") > source.index("local Target")

    def test_self_reference(self, serializer, root, new):
        loop = new("ObjectValue", parent=root, name="Loop")
        loop["Value"] = loop
        assert "Loop.Value = Loop\n" in serializer.serialize(root).source

    def test_root_references_come_last(self, serializer, new, host):
        value = new("ObjectValue", parent=host.workspace, name="Holder")
        child = new("ObjectValue", parent=value, name="Child")
        value["Value"] = child
        child["Value"] = value
        source = serializer.serialize(value).source
        assert source.index("Child.Value = Holder") < source.index("Holder.Value = Child")

    def test_external_reference_path(self, serializer, new, host):
        world = new("Folder", parent=host.workspace, name="Map")
        spawn = new("Part", parent=world, name="Spawn Point")
        car = new("Model", parent=host.workspace, name="Car")
        new("ObjectValue", parent=car, name="Target", Value=spawn)
        source = serializer.serialize(car).source
        assert 'Target.Value = workspace.Map["Spawn Point"]' in source

    def test_external_reference_quotes_keywords_and_digits(self, serializer, new, host):
        world = new("Folder", parent=host.workspace, name="Map")
        end = new("Part", parent=world, name="end")
        flat = new("Part", parent=world, name="2D")
        car = new("Model", parent=host.workspace, name="Car")
        new("ObjectValue", parent=car, name="First", Value=end)
        new("ObjectValue", parent=car, name="Second", Value=flat)
        source = serializer.serialize(car).source
        assert 'First.Value = workspace.Map["end"]' in source
        assert 'Second.Value = workspace.Map["2D"]' in source

    def test_external_reference_quotes_member_names(self, serializer, new, host):
        world = new("Folder", parent=host.workspace, name="Map")
        label = new("Part", parent=world, name="Name")
        car = new("Model", parent=host.workspace, name="Car")
        new("ObjectValue", parent=car, name="Target", Value=label)
        source = serializer.serialize(car).source
        assert 'Target.Value = workspace.Map["Name"]' in source

    def test_external_reference_through_service(self, make_serializer, new, host):
        sky = new("Folder", parent=host.get_service("Lighting"), name="Sky")
        car = new("Model", parent=host.workspace, name="Car")
        new("ObjectValue", parent=car, name="Target", Value=sky)
        verbose = make_serializer().serialize(car).source
        compact = make_serializer(verbose=False).serialize(car).source
        assert 'Target.Value = game:GetService("Lighting").Sky' in verbose
        assert 'b.Value=game:GetService"Lighting".Sky' in compact

    def test_reference_to_roots(self, serializer, new, host):
        car = new("Model", parent=host.workspace, name="Car")
        new("ObjectValue", parent=car, name="Game", Value=host.game)
        new("ObjectValue", parent=car, name="World", Value=host.workspace)
        source = serializer.serialize(car).source
        assert "Game_.Value = game\n" in source
        assert "World.Value = workspace\n" in source

    def test_detached_reference_is_nil(self, serializer, new, host, caplog):
        car = new("Model", parent=host.workspace, name="Car")
        new("ObjectValue", parent=car, name="Target", Value=host.create_instance("Part"))
        source = serializer.serialize(car).source
        assert "Target.Value = nil" in source
        assert "not in the data model" in caplog.text

    def test_reference_to_skipped_node_dropped(self, serializer, new, host, caplog):
        car = new("Model", parent=host.workspace, name="Car")
        vault = new("Folder", parent=car, name="Vault")
        new("ObjectValue", parent=car, name="Target", Value=vault)
        vault.locked = True
        source = serializer.serialize(car).source
        assert "Target.Value" not in source
        assert "was not serialized" in caplog.text


# =============================================================================
# Output strategy
# =============================================================================

class TestChooseMode:

    def test_small_tree_is_flat(self):
        assert choose_mode(10, 1000) is OutputMode.FLAT

    def test_local_limit(self):
        """199 descendants plus the root fill exactly 200 locals."""
        assert choose_mode(199, 10) is OutputMode.FLAT
        assert choose_mode(200, 10) is OutputMode.SPLIT

    def test_length_limit(self):
        assert choose_mode(5, MAX_SOURCE_LENGTH) is OutputMode.FLAT
        assert choose_mode(5, MAX_SOURCE_LENGTH + 1) is OutputMode.SPLIT


class TestSplitOutput:
    """Tests for the multi-module layout."""

    def test_split_by_count(self, serializer, root, new):
        """201 tiny descendants split even though the text is short."""
        add_folders(new, root, 201)
        container = serializer.serialize(root)
        assert serializer.mode is OutputMode.SPLIT
        assert container.is_split
        assert container.total_length() < MAX_SOURCE_LENGTH
        root_unit = container.find("Root")
        assert root_unit is not None
        assert len(root_unit.children) == 201

    def test_199_descendants_stay_flat(self, serializer, root, new):
        add_folders(new, root, 199)
        container = serializer.serialize(root)
        assert serializer.mode is OutputMode.FLAT
        assert not container.is_split

    def test_split_by_length(self, serializer, root, new):
        """Five large descendants exceed the flat limit but fit one per unit."""
        for _ in range(5):
            new("StringValue", parent=root, Value="x" * 50_000)
        container = serializer.serialize(root)
        assert serializer.mode is OutputMode.SPLIT
        units = list(container.walk())
        assert len(units) == 7
        assert all(len(unit.source) <= MAX_SOURCE_LENGTH for unit in units)

    def test_oversized_unit_aborts(self, serializer, root, new, caplog):
        new("StringValue", parent=root, Value="x" * 200_000)
        with pytest.raises(SizeExceeded):
            serializer.serialize(root)
        assert serializer.state is RunState.FAILED
        assert "too large" in caplog.text
        assert serializer.try_serialize(root) == (False, None)

    def test_member_named_node_has_its_own_module_path(self, serializer, root, new):
        """A node named Parent must not resolve to the Parent member of its module."""
        add_folders(new, root, 200)
        target = new("Folder", parent=root, name="Parent")
        new("ObjectValue", parent=root, name="Ref", Value=target)
        container = serializer.serialize(root)
        lines = container.source.splitlines()
        assert "Ref.Value = require(script.Root.Parent_)" in lines
        assert "Ref.Value = require(script.Root.Parent)" not in lines
        assert container.find("Root.Parent_").source.endswith("\nreturn Parent_")

    def test_length_counted_in_bytes(self, serializer, root, new):
        """Non-ASCII text counts by its UTF-8 size when choosing the layout."""
        for _ in range(2):
            new("StringValue", parent=root, Value="é" * 60_000)
        serializer.serialize(root)
        assert serializer.mode is OutputMode.SPLIT

    def test_oversized_unit_counted_in_bytes(self, serializer, root, new):
        new("StringValue", parent=root, Value="é" * 100_000)
        with pytest.raises(SizeExceeded) as info:
            serializer.serialize(root)
        assert info.value.length > MAX_SOURCE_LENGTH

    def test_unit_layout(self, serializer, root, new):
        add_folders(new, root, 201)
        container = serializer.serialize(root)
        assert container.class_name == "Script"
        assert container.disabled
        assert container.source.splitlines()[0] == "Root = require(script.Root)"

        root_unit = container.find("Root")
        assert root_unit.class_name == "ModuleScript"
        assert root_unit.source.startswith('local Root = Instance.new("Folder")\nRoot.Name = "Root"\n')
        assert "require(v).Parent = Root" in root_unit.source
        assert root_unit.source.endswith("\nreturn Root")

        leaf = container.find("Root.Folder")
        assert leaf.source.startswith('local Folder = Instance.new("Folder")')
        assert leaf.source.endswith("\nreturn Folder")

    def test_nested_units(self, serializer, root, new):
        sub = new("Folder", parent=root, name="Sub")
        new("Part", parent=sub, name="Leaf")
        add_folders(new, root, 200)
        container = serializer.serialize(root)
        leaf = container.find("Root.Sub.Leaf")
        assert leaf is not None
        assert leaf.get_full_name() == "SerializerOutput.Root.Sub.Leaf"

    def test_compact_units(self, make_serializer, root, new):
        add_folders(new, root, 201)
        container = make_serializer(verbose=False).serialize(root)
        root_unit = container.find("a")
        assert "for _,v in next,script:GetChildren() do require(v).Parent=a end" in root_unit.source
        assert container.source.startswith("a=require(script.a)")

    def test_cycle_resolved_through_require(self, serializer, root, new):
        add_folders(new, root, 200)
        a = new("ObjectValue", parent=root, name="A")
        b = new("ObjectValue", parent=root, name="B")
        a["Value"] = b
        b["Value"] = a
        source = serializer.serialize(root).source
        lines = source.splitlines()
        assert "A = require(script.Root.A)" in lines
        assert "A.Value = require(script.Root.B)" in lines
        assert "B.Value = require(script.Root.A)" in lines
        assert lines.index("A = require(script.Root.A)") < lines.index("A.Value = require(script.Root.B)")

    def test_self_and_external_references(self, serializer, root, new, host):
        world = new("Folder", parent=host.workspace, name="Map")
        spawn = new("Part", parent=world, name="Spawn Point")
        add_folders(new, root, 200)
        loop = new("ObjectValue", parent=root, name="Loop")
        loop["Value"] = loop
        new("ObjectValue", parent=root, name="Target", Value=spawn)
        lines = serializer.serialize(root).source.splitlines()
        assert "Loop.Value = Loop" in lines
        assert 'Target.Value = workspace.Map["Spawn Point"]' in lines

    def test_root_references_and_parent(self, make_serializer, new, host):
        holder = new("ObjectValue", parent=host.workspace, name="Holder")
        sub = new("Folder", parent=holder, name="Sub")
        deep = new("Part", parent=sub, name="Deep")
        add_folders(new, holder, 200)
        holder["Value"] = deep
        lines = make_serializer(parent=True).serialize(holder).source.splitlines()
        assert lines[:3] == [
            "Holder = require(script.Holder)",
            "Holder.Value = require(script.Holder.Sub.Deep)",
            "Holder.Parent = workspace",
        ]

    def test_module_output(self, make_serializer, root, new):
        add_folders(new, root, 201)
        container = make_serializer(module=True).serialize(root)
        assert container.class_name == "ModuleScript"
        assert container.source.splitlines()[-1] == "return require(script.Root)"

"""Tests for diagr.transform.instances: mounting definitions as instances."""

from diagr.ir.document import Document
from diagr.transform.instances import expand_node_instances, root_definition_ids


def _nodes(*nodes: dict):
    return Document.model_validate({"edges": "x --> y", "nodes": list(nodes)}).nodes


class TestRoots:
    def test_unreferenced_definitions_are_roots(self):
        defs = _nodes({"id": "a"}, {"id": "b"}, {"id": "panel", "ids": ["a"]})
        assert root_definition_ids(defs) == ["b", "panel"]

    def test_no_roots_is_a_diagnostic(self):
        defs = _nodes({"id": "a", "ids": ["b"]}, {"id": "b", "ids": ["a"]})
        result = expand_node_instances(defs)
        assert result.instances == []
        assert any("no root nodes" in d.message for d in result.diagnostics)


class TestMounting:
    def test_flat_definitions(self):
        result = expand_node_instances(_nodes({"id": "a"}, {"id": "b"}))
        assert [i.instance_id for i in result.instances] == ["a__0", "b__1"]
        assert all(i.parent_instance_id is None for i in result.instances)
        assert result.diagnostics == []

    def test_shared_definition_is_mounted_per_reference(self):
        result = expand_node_instances(
            _nodes(
                {"id": "a", "label": "A"},
                {"id": "left", "renderer": "groupCard", "ids": ["a"]},
                {"id": "right", "renderer": "groupCard", "ids": ["a"]},
                {"id": "third", "renderer": "groupCard", "ids": ["a"]},
            )
        )
        mounts = result.mounted_by_definition["a"]
        assert len(mounts) == 3
        assert len(set(mounts)) == 3
        parents = {result.instance_by_id[m].parent_instance_id for m in mounts}
        assert parents == {"left__0", "right__2", "third__4"}

    def test_mounts_are_independent_records(self):
        result = expand_node_instances(
            _nodes(
                {"id": "a", "data": {"k": 1}},
                {"id": "left", "ids": ["a"]},
                {"id": "right", "ids": ["a"]},
            )
        )
        first, second = (result.instance_by_id[m] for m in result.mounted_by_definition["a"])
        first.data["k"] = 2
        assert second.data["k"] == 1

    def test_inline_children(self):
        result = expand_node_instances(
            _nodes({"id": "panel", "renderer": "groupCard", "nodes": [{"id": "c1"}, {"id": "c2"}]})
        )
        ids = [i.instance_id for i in result.instances]
        assert ids == ["panel__0", "c1__inline__1", "c2__inline__2"]
        assert result.instance_by_id["c1__inline__1"].parent_instance_id == "panel__0"
        assert result.instance_by_id["c1__inline__1"].def_id == "c1"

    def test_nested_inline_ids(self):
        result = expand_node_instances(
            _nodes({"id": "p", "nodes": [{"id": "box", "nodes": [{"id": "leaf"}]}]})
        )
        assert [i.instance_id for i in result.instances] == ["p__0", "box__inline__1", "leaf__inline__2"]

    def test_nested_composition(self):
        result = expand_node_instances(
            _nodes(
                {"id": "leaf"},
                {"id": "inner", "ids": ["leaf"]},
                {"id": "outer", "ids": ["inner"]},
            )
        )
        by_id = result.instance_by_id
        assert [i.instance_id for i in result.instances] == ["outer__0", "inner__1", "leaf__2"]
        assert by_id["leaf__2"].parent_instance_id == "inner__1"
        assert by_id["inner__1"].parent_instance_id == "outer__0"

    def test_legacy_data_ids(self):
        result = expand_node_instances(_nodes({"id": "a"}, {"id": "panel", "data": {"ids": ["a"]}}))
        assert result.instance_by_id["a__1"].parent_instance_id == "panel__0"


class TestContainers:
    def test_container_flag(self):
        result = expand_node_instances(
            _nodes(
                {"id": "a"},
                {"id": "empty", "renderer": "groupCard"},
                {"id": "plain", "ids": ["a"]},
            )
        )
        by_def = {i.def_id: i for i in result.instances}
        assert by_def["empty"].is_container
        assert by_def["plain"].is_container
        assert not by_def["a"].is_container

    def test_group_card_property(self):
        result = expand_node_instances(_nodes({"id": "g", "renderer": "groupCard"}))
        assert result.instances[0].is_group_card

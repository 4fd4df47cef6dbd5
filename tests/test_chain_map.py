"""
ChainMap 测试套件

测试分层读取/写入第一层/键并集/clone 的独立性以及空层集合的异常.
"""

import copy

import pytest

from pythonic.helpers.chain_map import ChainMap
from pythonic.helpers.default_dict import DefaultDict
from pythonic.helpers.errors import ChainMapKeyError, EmptyLayerSetError, HelperError


@pytest.fixture
def layered():
    """创建一个两层的 ChainMap"""
    return ChainMap.from_maps({"x": 1}, {"x": 2, "y": 3})


@pytest.fixture
def empty_map():
    """创建一个没有任何层的 ChainMap"""
    return ChainMap()


class TestChainMapConstruction:
    """测试构造方式"""

    def test_init_keeps_list_reference(self):
        layers = [{"a": 1}]
        m = ChainMap(layers)
        assert m.layers is layers
        layers.append({"b": 2})
        assert m["b"] == 2

    def test_from_maps_preserves_order(self):
        first, second = {"k": "first"}, {"k": "second"}
        m = ChainMap.from_maps(first, second)
        assert m.layers == [first, second]
        assert m.layers[0] is first

    def test_from_list_builds_new_list(self):
        layers = [{"a": 1}, {"b": 2}]
        m = ChainMap.from_list(layers)
        assert m.layers is not layers
        assert m.layers[1] is layers[1]

    def test_from_list_accepts_iterable(self):
        m = ChainMap.from_list({"n": i} for i in range(3))
        assert len(m) == 3
        assert m["n"] == 0

    def test_default_is_empty(self, empty_map):
        assert empty_map.layers == []
        assert len(empty_map) == 0


class TestChainMapRead:
    """测试分层读取"""

    def test_first_layer_wins(self, layered):
        assert layered["x"] == 1

    def test_falls_through(self, layered):
        assert layered["y"] == 3

    def test_missing_key(self, layered):
        with pytest.raises(ChainMapKeyError) as exc_info:
            layered["z"]
        assert exc_info.value.key == "z"
        assert "'z'" in str(exc_info.value)

    def test_missing_key_is_key_error(self, layered):
        with pytest.raises(KeyError):
            layered["z"]
        with pytest.raises(HelperError):
            layered["z"]

    def test_none_values_are_skipped(self):
        m = ChainMap.from_maps({"x": None}, {"x": 5})
        assert m["x"] == 5

    def test_key_present_only_as_none(self):
        m = ChainMap.from_maps({"x": None}, {"x": None})
        assert "x" in m.keys
        with pytest.raises(ChainMapKeyError):
            m["x"]

    def test_falsy_values_are_found(self):
        m = ChainMap.from_maps({"x": 0, "y": ""}, {"x": 1, "y": "s"})
        assert m["x"] == 0
        assert m["y"] == ""

    def test_get(self, layered):
        assert layered.get("y") == 3
        assert layered.get("z") is None
        assert layered.get("z", "fallback") == "fallback"

    def test_contains(self, layered):
        assert "x" in layered
        assert "z" not in layered

    def test_read_does_not_insert_into_default_dict_layer(self):
        dd = DefaultDict(list)
        m = ChainMap.from_maps(dd, {"a": [1]})
        assert m["a"] == [1]
        assert "a" not in dd

    def test_empty_read(self, empty_map):
        with pytest.raises(ChainMapKeyError):
            empty_map["x"]


class TestChainMapKeys:
    """测试键并集"""

    def test_union(self, layered):
        assert layered.keys == {"x", "y"}

    def test_recomputed_on_access(self, layered):
        layered.layers[1]["w"] = 0
        assert layered.keys == {"x", "y", "w"}

    def test_empty(self, empty_map):
        assert empty_map.keys == set()


class TestChainMapWrite:
    """测试写入第一层"""

    def test_write_targets_first_layer(self, layered):
        layered["x"] = 99
        assert layered["x"] == 99
        assert layered.layers[0]["x"] == 99
        assert layered.layers[1]["x"] == 2

    def test_new_key_goes_to_first_layer(self, layered):
        layered["z"] = 26
        assert layered.layers[0] == {"x": 1, "z": 26}
        assert "z" not in layered.layers[1]

    def test_empty_write(self, empty_map):
        with pytest.raises(EmptyLayerSetError):
            empty_map["x"] = 1
        assert empty_map.layers == []

    def test_empty_write_is_index_error(self, empty_map):
        with pytest.raises(IndexError):
            empty_map["x"] = 1


class TestChainMapClone:
    """测试 clone"""

    def test_same_contents(self, layered):
        clone = layered.clone()
        assert isinstance(clone, ChainMap)
        assert clone.layers == layered.layers
        assert len(clone) == len(layered)

    def test_layers_are_independent(self, layered):
        clone = layered.clone()
        clone.layers[1]["new"] = 1
        assert "new" not in layered.layers[1]

        layered.layers[0]["other"] = 2
        assert "other" not in clone.layers[0]

        clone["x"] = 100
        assert layered["x"] == 1

    def test_values_are_shared(self):
        shared = [1, 2]
        m = ChainMap.from_maps({"list": shared})
        clone = m.clone()
        assert clone["list"] is shared

    def test_clone_of_empty(self, empty_map):
        clone = empty_map.clone()
        assert clone.layers == []
        assert clone.layers is not empty_map.layers


class TestChainMapSpecialMethods:
    """测试特殊方法"""

    def test_repr(self, layered):
        assert repr(layered) == "ChainMap([{'x': 1}, {'x': 2, 'y': 3}])"

    def test_iterates_over_key_union(self):
        m = ChainMap.from_maps({0: "a", 1: "b"}, {2: None})
        assert sorted(m) == [0, 1, 2]

    def test_iterating_empty_map(self, empty_map):
        assert list(empty_map) == []

    def test_copy_has_own_layer_list(self, layered):
        duplicate = copy.copy(layered)
        assert duplicate.layers is not layered.layers
        assert duplicate.layers[0] is layered.layers[0]
        duplicate.layers.append({"z": 26})
        assert len(layered) == 2

"""
UI component contract tests: read-only props, the update channel, and
read-only index components.
"""

from __future__ import annotations

import pytest

from fieldkit.fieldtypes.components import (
    ComponentDescriptor,
    FieldProps,
    FieldtypeComponent,
    IndexComponent,
    UpdateChannel,
)


class RecordingChannel:
    def __init__(self):
        self.values = []
        self.metas = []

    def update(self, value):
        self.values.append(value)

    def update_meta(self, partial):
        self.metas.append(dict(partial))


class TestFieldProps:
    def test_exposes_inputs(self):
        props = FieldProps("tags", "select", ["a"], {"options": []}, {"multiple": True}, version=3)
        assert props.field_id == "tags"
        assert props.handle == "select"
        assert props.value == ["a"]
        assert props.meta["options"] == []
        assert props.config["multiple"] is True
        assert props.version == 3

    def test_attributes_cannot_be_assigned(self):
        props = FieldProps("title", "text", "Hello")
        with pytest.raises(AttributeError):
            props.value = "Bye"  # type: ignore[misc]
        with pytest.raises(AttributeError):
            props._value = "Bye"

    def test_meta_is_read_only(self):
        props = FieldProps("title", "text", "Hello", {"foo": "bar"})
        with pytest.raises(TypeError):
            props.meta["foo"] = "baz"  # type: ignore[index]

    def test_value_is_a_private_copy(self):
        source = ["a", "b"]
        props = FieldProps("tags", "select", source)
        props.value.append("c")
        assert source == ["a", "b"]


class TestFieldtypeComponent:
    def test_channel_protocol(self):
        assert isinstance(RecordingChannel(), UpdateChannel)

    def test_update_goes_through_channel(self):
        channel = RecordingChannel()
        component = FieldtypeComponent(FieldProps("title", "text", "Hello"), channel)
        component.update("Bye")
        assert channel.values == ["Bye"]
        # The held input is untouched until the store pushes new props
        assert component.value == "Hello"

    def test_update_meta_goes_through_channel(self):
        channel = RecordingChannel()
        component = FieldtypeComponent(FieldProps("title", "text", "Hello", {"foo": "bar"}), channel)
        component.update_meta({"foo": "baz"})
        assert channel.metas == [{"foo": "baz"}]
        assert component.meta["foo"] == "bar"

    def test_default_on_input_forwards_raw_value(self):
        channel = RecordingChannel()
        component = FieldtypeComponent(FieldProps("title", "text", ""), channel)
        component.on_input("typed")
        assert channel.values == ["typed"]

    def test_value_has_no_setter(self):
        component = FieldtypeComponent(FieldProps("title", "text", "Hello"), RecordingChannel())
        with pytest.raises(AttributeError):
            component.value = "Bye"  # type: ignore[misc]

    def test_lifecycle_hooks(self):
        calls = []

        class Tracking(FieldtypeComponent):
            def setup(self):
                calls.append(("setup", self.value))

            def props_changed(self, previous):
                calls.append(("changed", previous.value, self.value))

        component = Tracking(FieldProps("title", "text", "a"), RecordingChannel())
        component._receive(FieldProps("title", "text", "b", version=1))
        assert calls == [("setup", "a"), ("changed", "a", "b")]

    def test_view(self):
        component = FieldtypeComponent(FieldProps("title", "text", "Hi", {"m": 1}, {"c": 2}), RecordingChannel())
        assert component.view() == {"field": "title", "handle": "text", "value": "Hi", "meta": {"m": 1}, "config": {"c": 2}}


class TestIndexComponent:
    def test_has_no_update_capability(self):
        index = IndexComponent("Hello", "text")
        assert not hasattr(index, "update")
        assert not hasattr(index, "update_meta")

    def test_update_cannot_be_attached(self):
        index = IndexComponent("Hello", "text")
        with pytest.raises(AttributeError):
            index.update = lambda value: None

    def test_subclass_defining_update_rejected(self):
        with pytest.raises(TypeError):

            class Editable(IndexComponent):
                def update(self, value):
                    pass

    def test_subclass_defining_update_meta_rejected(self):
        with pytest.raises(TypeError):

            class Editable(IndexComponent):
                def update_meta(self, partial):
                    pass

    def test_subclass_inheriting_update_from_mixin_rejected(self):
        class Editing:
            def update(self, value):
                pass

        with pytest.raises(TypeError, match="update"):

            class Editable(Editing, IndexComponent):
                pass

    def test_subclass_inheriting_update_meta_rejected(self):
        class Editing:
            def update_meta(self, partial):
                pass

        with pytest.raises(TypeError, match="update_meta"):

            class Editable(IndexComponent, Editing):
                pass

    def test_display_defaults(self):
        assert IndexComponent(None).display() == ""
        assert IndexComponent(42).display() == "42"

    def test_value_is_read_only(self):
        index = IndexComponent("Hello")
        with pytest.raises(AttributeError):
            index.value = "Bye"  # type: ignore[misc]


class TestComponentDescriptor:
    def test_is_index(self):
        assert ComponentDescriptor("text-fieldtype-index", IndexComponent).is_index
        assert not ComponentDescriptor("text-fieldtype", FieldtypeComponent).is_index

"""
Form service tests: open (resolve, pre-process, preload), component round
trips, submission and listing output.
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from fieldkit.exceptions import (
    DuplicateFieldError,
    ErrorCode,
    FieldNotFoundError,
    FieldtypeNotFoundError,
    FieldValidationError,
    FormNotFoundError,
    MissingComponentError,
)
from fieldkit.fieldtypes.base import REQUIRED_MESSAGE, Fieldtype
from fieldkit.fieldtypes.components import FieldtypeComponent
from fieldkit.services.form_service import FieldBlueprint, FormService, FormSession, FormSessionManager


class FooComponent(FieldtypeComponent):
    pass


class Foo(Fieldtype):
    component = FooComponent

    async def preload(self, context):
        return {"foo": "bar"}


class Headless(Fieldtype):
    """Registered without a component."""


class Broken(Fieldtype):
    component = FooComponent

    async def preload(self, context):
        raise ConnectionError("upstream unavailable")


class Picky(Fieldtype):
    component = FooComponent
    preloads = 0

    async def preload(self, context):
        Picky.preloads += 1
        return {}

    def pre_process(self, value):
        return int(value)

    def pre_process_index(self, value):
        return int(value)


class TestOpen:
    def test_preload_seeds_meta(self, registry):
        Foo.register(registry)
        session = asyncio.run(FormService(registry).open([FieldBlueprint("x", "foo")]))
        assert session.store.meta("x") == {"foo": "bar"}
        assert session.errors == {}

    def test_component_update_meta_round_trip(self, registry):
        Foo.register(registry)
        session = asyncio.run(FormService(registry).open([FieldBlueprint("x", "foo")]))

        component = session.component("x")
        assert component.meta["foo"] == "bar"
        component.update_meta({"foo": "baz"})

        assert session.store.meta("x") == {"foo": "baz"}
        assert component.meta["foo"] == "baz"

    def test_component_is_mounted_once(self, registry):
        Foo.register(registry)
        session = asyncio.run(FormService(registry).open([FieldBlueprint("x", "foo")]))
        assert session.component("x") is session.component("x")

    def test_values_are_pre_processed(self, builtin_registry):
        service = FormService(builtin_registry)
        session = asyncio.run(
            service.open(
                [
                    FieldBlueprint("published", "toggle", {"default": True}),
                    FieldBlueprint("fruit", "select", {"options": ["a"], "multiple": True}, "a"),
                ]
            )
        )
        assert session.store.value("published") is True
        assert session.store.value("fruit") == ["a"]

    def test_form_id_generated_or_kept(self, registry):
        Foo.register(registry)
        service = FormService(registry)
        assert len(asyncio.run(service.open([])).form_id) == 32
        assert asyncio.run(service.open([], form_id="abc")).form_id == "abc"

    def test_unknown_fieldtype_fails_fast(self, registry):
        with pytest.raises(FieldtypeNotFoundError):
            asyncio.run(FormService(registry).open([FieldBlueprint("x", "nope")]))

    def test_duplicate_field_ids_rejected_before_preload(self, registry):
        Picky.register(registry)
        Picky.preloads = 0
        blueprints = [FieldBlueprint("x", "picky", value=1), FieldBlueprint("y", "picky", value=2)]
        blueprints.append(FieldBlueprint("x", "picky", value=3))
        with pytest.raises(DuplicateFieldError) as exc_info:
            asyncio.run(FormService(registry).open(blueprints))
        assert exc_info.value.details == {"fields": ["x"]}
        assert exc_info.value.error_code == ErrorCode.VALIDATION_DUPLICATE_RESOURCE
        assert Picky.preloads == 0

    def test_unusable_stored_value_is_a_validation_error(self, registry):
        Picky.register(registry)
        Picky.preloads = 0
        blueprints = [FieldBlueprint("ok", "picky", value="1"), FieldBlueprint("bad", "picky", value="abc")]
        with pytest.raises(FieldValidationError) as exc_info:
            asyncio.run(FormService(registry).open(blueprints))
        assert list(exc_info.value.errors) == ["bad"]
        assert Picky.preloads == 0

    def test_non_numeric_entry_ids_are_dropped(self, builtin_registry):
        session = asyncio.run(FormService(builtin_registry).open([FieldBlueprint("related", "entries", value=["abc"])]))
        assert session.store.value("related") == []
        assert session.store.meta("related") == {"data": []}

    def test_missing_component_fails_fast(self, registry):
        Headless.register(registry)
        with pytest.raises(MissingComponentError) as exc_info:
            asyncio.run(FormService(registry).open([FieldBlueprint("x", "headless")]))
        assert exc_info.value.details["component"] == "headless-fieldtype"

    async def test_entries_preload_from_database(self, builtin_registry, session_factory):
        service = FormService(builtin_registry, session_factory=session_factory)
        session = await service.open(
            [
                FieldBlueprint("title", "text", value="Hello"),
                FieldBlueprint("related", "entries", value=[3, 1]),
                FieldBlueprint("more", "entries", value=[2]),
            ]
        )
        assert [d["title"] for d in session.store.meta("related")["data"]] == ["Hello World", "About"]
        assert session.store.meta("more")["data"][0]["title"] == "Contact"
        assert session.errors == {}


class TestPreloadFailure:
    def test_failing_preload_does_not_block_form(self, registry):
        Foo.register(registry)
        Broken.register(registry)
        session = asyncio.run(
            FormService(registry).open([FieldBlueprint("ok", "foo"), FieldBlueprint("bad", "broken")])
        )
        assert session.store.meta("ok") == {"foo": "bar"}
        assert session.store.meta("bad") == {}
        assert "upstream unavailable" in session.store.state("bad").preload_error
        assert "bad" in session.errors
        assert "ok" not in session.errors

    def test_failure_is_logged(self, registry, caplog):
        Broken.register(registry)
        with caplog.at_level(logging.WARNING, logger="fieldkit.services.form_service"):
            asyncio.run(FormService(registry).open([FieldBlueprint("bad", "broken")]))
        assert "Preload failed for field 'bad'" in caplog.text

    def test_entries_without_database(self, builtin_registry):
        session = asyncio.run(FormService(builtin_registry).open([FieldBlueprint("related", "entries", value=[1])]))
        assert session.store.value("related") == [1]
        assert session.store.meta("related") == {}
        assert "related" in session.errors


class TestSubmit:
    def _open(self, registry, blueprints):
        service = FormService(registry)
        return service, asyncio.run(service.open(blueprints))

    def test_submit_processes_canonical_values(self, builtin_registry):
        service, session = self._open(
            builtin_registry,
            [FieldBlueprint("title", "text", value="Hello"), FieldBlueprint("published", "toggle")],
        )
        session.component("title").on_input("  Bye  ")
        session.component("published").on_input()
        assert service.submit(session) == {"title": "Bye", "published": True}

    def test_submit_collects_every_error(self, builtin_registry):
        service, session = self._open(
            builtin_registry,
            [
                FieldBlueprint("title", "text", {"required": True}),
                FieldBlueprint("fruit", "select", {"options": ["a"]}, "z"),
                FieldBlueprint("published", "toggle"),
            ],
        )
        with pytest.raises(FieldValidationError) as exc_info:
            service.submit(session)
        assert exc_info.value.errors == {
            "title": [REQUIRED_MESSAGE],
            "fruit": ["Invalid option(s): z."],
        }
        assert exc_info.value.status_code == 422

    def test_to_dict(self, builtin_registry):
        _, session = self._open(builtin_registry, [FieldBlueprint("title", "text", value="Hi")])
        data = session.to_dict()
        assert data["form_id"] == session.form_id
        assert data["dirty"] is False
        field = data["fields"][0]
        assert field["component"] == "text-fieldtype"
        assert field["value"] == "Hi"
        assert field["can_undo"] is False

    def test_unknown_field(self, builtin_registry):
        _, session = self._open(builtin_registry, [])
        with pytest.raises(FieldNotFoundError):
            session.fieldtype("missing")
        with pytest.raises(FieldNotFoundError):
            session.component("missing")


class TestIndex:
    def test_index_uses_registered_index_component(self, builtin_registry):
        rows = FormService(builtin_registry).index("toggle", [True, None])
        assert rows == [
            {"value": True, "display": "Yes", "component": "toggle-fieldtype-index"},
            {"value": False, "display": "No", "component": "toggle-fieldtype-index"},
        ]

    def test_index_falls_back_to_generic_component(self, builtin_registry):
        rows = FormService(builtin_registry).index("text", ["<b>Bold</b>", None])
        assert [r["display"] for r in rows] == ["Bold", ""]
        assert rows[0]["component"] == "text-fieldtype-index"

    def test_index_masks_passwords(self, builtin_registry):
        rows = FormService(builtin_registry).index("toggle_password", ["hunter2"])
        assert rows[0]["display"] == "••••••••"

    def test_index_respects_config(self, builtin_registry):
        rows = FormService(builtin_registry).index("text", ["abcdefghijkl"], {"index_max_length": 5})
        assert rows[0]["value"] == "abcd…"

    def test_index_unusable_value_is_a_validation_error(self, registry):
        Picky.register(registry)
        with pytest.raises(FieldValidationError) as exc_info:
            FormService(registry).index("picky", ["1", "abc"])
        assert list(exc_info.value.errors) == ["values.1"]

    def test_index_drops_non_numeric_entry_ids(self, builtin_registry):
        rows = FormService(builtin_registry).index("entries", [["abc"], [1, "2"]])
        assert [r["display"] for r in rows] == ["0 entries", "2 entries"]

    def test_index_unknown_handle(self, builtin_registry):
        with pytest.raises(FieldtypeNotFoundError):
            FormService(builtin_registry).index("nope", [1])


class TestFormSessionManager:
    def test_add_get_discard(self, registry):
        manager = FormSessionManager()
        session = manager.add(FormSession("abc", registry))
        assert manager.get("abc") is session
        assert len(manager) == 1
        manager.discard("abc")
        assert len(manager) == 0

    def test_unknown_form(self):
        manager = FormSessionManager()
        with pytest.raises(FormNotFoundError):
            manager.get("missing")
        with pytest.raises(FormNotFoundError):
            manager.discard("missing")

    def test_singleton(self):
        from fieldkit.services.form_service import form_sessions, get_form_sessions

        assert get_form_sessions() is form_sessions

"""Tests for the lifecycle events fired by Model and Record operations."""

import pytest

from recordkit.events import EventContext
from recordkit.models import (
    OperationCancelledByEventCallbackError,
    RecordNotFoundError,
    StoreError,
)
from recordkit.persistence.sqlite import SQLiteStore


class FailingDeleteStore(SQLiteStore):
    """SQLite store whose delete always fails."""

    def delete(self, kind, id):
        raise StoreError("disk full")


# =============================================================================
# after_find
# =============================================================================


class TestAfterFind:
    def test_find_fires_after_find_once(self, make_model, create_persisted_record):
        model = make_model("afterFindEventModel")
        record = create_persisted_record(model)
        contexts = []
        model.after_find.do(contexts.append)

        found = model.find(record.id)

        assert len(contexts) == 1
        assert contexts[0].args[0] is found
        assert contexts[0].args[0].id == record.id

    def test_find_miss_fires_nothing(self, make_model):
        model = make_model("afterFindMissModel")
        contexts = []
        model.after_find.do(contexts.append)

        with pytest.raises(RecordNotFoundError):
            model.find(123)

        assert contexts == []

    def test_all_fires_after_find_per_record(self, make_model, create_persisted_record):
        model = make_model("afterFindEventAllModel")
        create_persisted_record(model)
        record2 = create_persisted_record(model)
        contexts = []
        model.after_find.do(contexts.append)

        records = model.all()

        assert len(contexts) == 2
        assert [c.args[0] for c in contexts] == records
        assert contexts[-1].args[0].id == record2.id

    def test_all_uses_fresh_context_per_record(self, make_model, create_persisted_record):
        model = make_model("afterFindFreshContextModel")
        create_persisted_record(model)
        create_persisted_record(model)
        contexts = []
        model.after_find.do(contexts.append)

        model.all()

        assert contexts[0] is not contexts[1]

    def test_handler_can_modify_found_record(self, make_model, create_persisted_record):
        model = make_model("afterFindDecorateModel")
        record = create_persisted_record(model)

        @model.after_find.handler
        def add_greeting(ctx):
            ctx.args[0].set("greeting", f"Hi {ctx.args[0].get('name')}")

        assert model.find(record.id).get("greeting") == "Hi Mat"


# =============================================================================
# before_delete_by_id / after_delete_by_id
# =============================================================================


class TestDeleteEvents:
    def test_before_delete_by_id(self, make_model, create_persisted_record):
        model = make_model("beforeDeleteEventModel")
        record = create_persisted_record(model)
        seen = {}

        def before(ctx):
            seen["context"] = ctx
            # the record is still there while the before event runs
            seen["loaded"] = model.find(record.id)

        model.before_delete_by_id.do(before)

        model.delete(record.id)

        assert seen["context"].args[0] == record.id
        assert seen["loaded"].id == record.id

    def test_before_delete_by_id_cancellation(self, make_model, create_persisted_record):
        model = make_model("beforeDeleteEventCancelModel")
        record = create_persisted_record(model)
        after_calls = []

        def cancel(ctx):
            ctx.cancel = True

        model.before_delete_by_id.do(cancel)
        model.after_delete_by_id.do(after_calls.append)

        with pytest.raises(OperationCancelledByEventCallbackError) as exc_info:
            model.delete(record.id)

        assert exc_info.value.operation == "delete"
        assert exc_info.value.context.cancel is True
        assert after_calls == []

        found = model.find(record.id)
        assert found.id == record.id
        assert found.get("name") == "Mat"

    def test_after_delete_by_id(self, make_model, create_persisted_record):
        model = make_model("afterDeleteByIDModel")
        record = create_persisted_record(model)
        seen = {}

        def after(ctx):
            seen["context"] = ctx
            try:
                model.find(record.id)
            except RecordNotFoundError as e:
                seen["error"] = e

        model.after_delete_by_id.do(after)

        model.delete(record.id)

        assert seen["context"].args[0] == record.id
        assert isinstance(seen["error"], RecordNotFoundError)

    def test_before_and_after_delete_share_context(self, make_model, create_persisted_record):
        model = make_model("afterDeleteByIDModel")
        record = create_persisted_record(model)
        contexts = []
        model.before_delete_by_id.do(contexts.append)
        model.after_delete_by_id.do(contexts.append)

        model.delete(record.id)

        assert len(contexts) == 2
        assert contexts[0] is contexts[1]

    def test_delete_missing_fires_nothing(self, make_model):
        model = make_model("deleteMissingModel")
        calls = []
        model.before_delete_by_id.do(calls.append)
        model.after_delete_by_id.do(calls.append)

        with pytest.raises(RecordNotFoundError):
            model.delete(77)

        assert calls == []

    def test_store_failure_skips_after_delete(self, create_persisted_record):
        from recordkit.models import Model

        store = FailingDeleteStore(":memory:")
        store.connect()
        model = Model("failingDeleteModel", store=store)
        record = create_persisted_record(model)
        before_calls = []
        after_calls = []
        model.before_delete_by_id.do(before_calls.append)
        model.after_delete_by_id.do(after_calls.append)

        with pytest.raises(StoreError, match="disk full"):
            model.delete(record.id)

        assert len(before_calls) == 1
        assert after_calls == []
        store.close()

    def test_record_delete_fires_delete_events(self, make_model, create_persisted_record):
        model = make_model("recordDeleteModel")
        record = create_persisted_record(model)
        ids = []
        model.before_delete_by_id.do(lambda ctx: ids.append(ctx.args[0]))

        record.delete()

        assert ids == [record.id]


# =============================================================================
# before_put / after_put
# =============================================================================


class TestPutEvents:
    def test_before_put(self, make_model):
        model = make_model("beforePutEventModel")
        record = model.new().set("something", "something")
        contexts = []
        model.before_put.do(contexts.append)

        record.put()

        assert record.is_persisted
        assert len(contexts) == 1
        assert contexts[0].args[0] is record

    def test_before_put_sees_unpersisted_record(self, make_model):
        model = make_model("beforePutStateModel")
        record = model.new()
        states = []
        model.before_put.do(lambda ctx: states.append(ctx.args[0].is_persisted))
        model.after_put.do(lambda ctx: states.append(ctx.args[0].is_persisted))

        record.put()

        assert states == [False, True]

    def test_before_put_cancellation(self, make_model):
        model = make_model("beforePutCancelModel")
        record = model.new().set("something", "something")
        after_calls = []

        def cancel(ctx):
            ctx.cancel = True

        model.before_put.do(cancel)
        model.after_put.do(after_calls.append)

        with pytest.raises(OperationCancelledByEventCallbackError) as exc_info:
            record.put()

        assert exc_info.value.operation == "put"
        assert exc_info.value.context.args[0] is record
        assert not record.is_persisted
        assert record.id is None
        assert after_calls == []
        assert model.all() == []

    def test_before_put_cancellation_keeps_stored_values(self, make_model):
        model = make_model("beforePutCancelUpdateModel")
        record = model.new().set("name", "Mat").put()

        model.before_put.do(lambda ctx: setattr(ctx, "cancel", True))
        record.set("name", "changed")

        with pytest.raises(OperationCancelledByEventCallbackError):
            record.put()

        assert model.find(record.id).get("name") == "Mat"

    def test_before_put_handler_can_modify_record(self, make_model):
        model = make_model("beforePutModifyModel")

        @model.before_put.handler
        def stamp(ctx):
            ctx.args[0].set("stamped", True)

        record = model.new().put()

        assert model.find(record.id).get("stamped") is True

    def test_after_put(self, make_model):
        model = make_model("afterPutEventModel")
        record = model.new().set("something", "something")
        contexts = []
        model.after_put.do(contexts.append)

        record.put()

        assert record.is_persisted
        assert len(contexts) == 1
        assert contexts[0].args[0].id == record.id

    def test_before_and_after_put_share_context(self, make_model, create_persisted_record):
        model = make_model("puttingSharedContext")
        record = create_persisted_record(model)
        contexts = []
        model.before_put.do(contexts.append)
        model.after_put.do(contexts.append)

        record.put()

        assert len(contexts) == 2
        assert contexts[0] is contexts[1]

    def test_after_put_sees_before_put_payload(self, make_model):
        model = make_model("sharedPayloadModel")
        seen = []
        model.before_put.do(lambda ctx: ctx.args.append("from-before"))
        model.after_put.do(lambda ctx: seen.extend(ctx.args[1:]))

        model.new().put()

        assert seen == ["from-before"]

    def test_store_failure_skips_after_put(self, make_model):
        model = make_model("failingPutModel")
        record = model.new().set("bad", object())
        after_calls = []
        model.after_put.do(after_calls.append)

        with pytest.raises(StoreError):
            record.put()

        assert after_calls == []
        assert not record.is_persisted

    def test_handler_exception_prevents_write(self, make_model):
        model = make_model("raisingHandlerModel")
        after_calls = []

        def explode(ctx):
            raise RuntimeError("handler failed")

        model.before_put.do(explode)
        model.after_put.do(after_calls.append)
        record = model.new()

        with pytest.raises(RuntimeError, match="handler failed"):
            record.put()

        assert not record.is_persisted
        assert after_calls == []
        assert model.all() == []


# =============================================================================
# Initializers
# =============================================================================


def test_initializer_can_register_handlers(make_model):
    contexts: list[EventContext] = []

    def track(model):
        model.after_put.do(contexts.append)

    model = make_model("initializedModel", track)
    model.new().put()

    assert len(contexts) == 1


def test_records_share_model_events(make_model):
    model = make_model("sharedEventsModel")
    calls = []
    first = model.new()
    second = model.new()

    # registered after the records were created
    model.before_put.do(lambda ctx: calls.append(ctx.args[0]))
    first.put()
    second.put()

    assert calls == [first, second]

"""
Tests for folding extracted entities into call memory.
"""
import pytest

from joinery.services.context import merge_context


@pytest.mark.unit
class TestMergeContext:

    def test_update_is_remembered(self):
        session = {}
        merge_context(session, {"client": "Holly Parry"}, {})
        assert session == {"client": "Holly Parry"}

    def test_remembered_values_fill_missing_parameters(self):
        session = {"client": "Holly Parry", "project_number": "MJ2501"}

        params = merge_context(session, None, {"task_description": "Order hinges"})

        assert params == {
            "client": "Holly Parry",
            "project_number": "MJ2501",
            "task_description": "Order hinges",
        }

    def test_current_turn_wins_over_memory(self):
        session = {"client": "Holly Parry"}

        params = merge_context(session, None, {"client": "Marco Bianchi"})

        assert params["client"] == "Marco Bianchi"
        # turn parameters are not written back
        assert session["client"] == "Holly Parry"

    def test_update_overwrites_but_never_removes(self):
        session = {"client": "Holly Parry", "project_name": "9 wood st, Randwick"}

        merge_context(session, {"client": "Marco Bianchi"}, None)

        assert session == {"client": "Marco Bianchi", "project_name": "9 wood st, Randwick"}

    def test_empty_update_is_idempotent(self):
        session = {"client": "Holly Parry"}

        first = merge_context(session, {}, {})
        second = merge_context(session, None, None)

        assert first == second == {"client": "Holly Parry"}
        assert session == {"client": "Holly Parry"}

    def test_blank_values_do_not_wipe_memory(self):
        session = {"client": "Holly Parry"}

        params = merge_context(session, {"client": "", "project_name": None}, {"client": "  "})

        assert session == {"client": "Holly Parry"}
        assert params["client"] == "Holly Parry"

    def test_unknown_keys_are_kept(self):
        session = {}
        merge_context(session, {"favourite_timber": "Tasmanian oak"}, None)
        assert session["favourite_timber"] == "Tasmanian oak"

    def test_result_is_a_copy(self):
        session = {"client": "Holly Parry"}

        params = merge_context(session, None, None)
        params["client"] = "changed"

        assert session["client"] == "Holly Parry"

# tests/test_guards.py — Ownership and role checks
import pytest

from errors import DeleteForbidden, NotOwner, UpdateForbidden
from guards import assert_can_mutate, assert_owner, UPDATE, DELETE


class TestAssertCanMutate:
    def test_owner_may_mutate(self):
        assert_can_mutate("u1", "u1", False, UPDATE, "business")
        assert_can_mutate("u1", "u1", False, DELETE, "business")

    def test_admin_may_mutate_anything(self):
        assert_can_mutate("u1", "admin", True, UPDATE, "business")
        assert_can_mutate("u1", "admin", True, DELETE, "user")

    def test_stranger_update_refused(self):
        with pytest.raises(UpdateForbidden) as exc:
            assert_can_mutate("u1", "u2", False, UPDATE, "business")
        assert exc.value.message == "Updating business is forbidden"
        assert exc.value.http_status == 401

    def test_stranger_delete_refused(self):
        with pytest.raises(DeleteForbidden) as exc:
            assert_can_mutate("u1", "u2", False, DELETE, "user")
        assert exc.value.message == "Deleting user is forbidden"

    def test_unknown_action(self):
        with pytest.raises(ValueError):
            assert_can_mutate("u1", "u1", False, "archive", "business")


class TestAssertOwner:
    def test_owner_passes(self):
        assert_owner("u1", "u1")

    def test_no_admin_override(self):
        with pytest.raises(NotOwner):
            assert_owner("u1", "admin")

# guards.py — Ownership and role checks shared by the stores
#
# Tasks are strictly owned: nobody but the owner may read or change them, admins
# included. Businesses and user accounts may be changed by their owner or by an
# admin. Keep the two checks separate.
from errors import DeleteForbidden, NotOwner, UpdateForbidden

UPDATE = "update"
DELETE = "delete"

_FORBIDDEN = {
    UPDATE: UpdateForbidden,
    DELETE: DeleteForbidden,
}


def assert_can_mutate(
    resource_owner_id: str,
    requester_id: str,
    requester_is_admin: bool,
    action: str,
    resource: str,
) -> None:
    """Allow the mutation when the requester owns the resource or is an admin"""
    if action not in _FORBIDDEN:
        raise ValueError(f"Unknown action: {action}")
    if resource_owner_id == requester_id or requester_is_admin:
        return
    raise _FORBIDDEN[action](resource)


def assert_owner(resource_owner_id: str, requester_id: str) -> None:
    """Strict ownership, no admin override"""
    if resource_owner_id != requester_id:
        raise NotOwner()

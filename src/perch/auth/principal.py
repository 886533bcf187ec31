"""Session principal resolver — user <-> opaque session identifier.

The principal stored in the session is the user's id. ``serialize`` runs
once at login; ``deserialize`` runs on every request that carries a
principal and lets ``UserNotFound`` propagate to the session layer.
"""

from perch._internal.invoke import invoke
from perch.auth.store import CredentialStore, User

type PrincipalId = int


class PrincipalResolver:
    """Maps users to session principals and back through a credential store."""

    __slots__ = ("_store",)

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    @property
    def store(self) -> CredentialStore:
        return self._store

    def serialize(self, user: User) -> PrincipalId:
        """Return the value stored in the session for *user*."""
        return user.id

    async def deserialize(self, principal: PrincipalId) -> User:
        """Load the user a session principal refers to.

        Raises ``UserNotFound`` when the store no longer knows the id.
        """
        return await invoke(self._store.find_by_id, principal)

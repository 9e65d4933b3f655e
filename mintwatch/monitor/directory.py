# MIT License
# Copyright (c) 2025 Hashborn

"""
User directory: which owner watches which masternode.

The monitor only needs `list_watched_operators()`; the sqlite adapter below
also carries the edit operations the CLI exposes.
"""

import logging
from typing import List, Optional, Protocol, Sequence

from pydantic import BaseModel

from ..protocol.types.candidate import shorten
from ..storage.db import StorageDB

logger = logging.getLogger(__name__)


class WatchedOperator(BaseModel):
    owner_id: int
    user_name: str = ""
    pub_key: str = ""                   # Mp... masternode key, empty when unbound
    address: Optional[str] = None       # Mx... account paying for on/off transactions
    private_key: Optional[str] = None   # hex, only if the owner handed it over
    notifications: bool = True

    @property
    def can_sign(self) -> bool:
        return bool(self.private_key)


class UserDirectory(Protocol):
    def list_watched_operators(self) -> Sequence[WatchedOperator]:
        ...


class DirectoryError(Exception):
    pass


def _from_row(row) -> WatchedOperator:
    return WatchedOperator(
        owner_id=row["owner_id"],
        user_name=row["user_name"],
        pub_key=row["pub_key"],
        address=row["user_address"] or None,
        private_key=row["priv_key"] or None,
        notifications=bool(row["notification"]),
    )


class SqliteUserDirectory:
    """
    Directory backed by StorageDB. Every call reads or writes the database;
    there is no in-memory copy to drift from it.
    """

    def __init__(self, db: StorageDB):
        self.db = db

    def list_watched_operators(self) -> List[WatchedOperator]:
        return [_from_row(row) for row in self.db.list_operators()]

    def get(self, owner_id: int) -> Optional[WatchedOperator]:
        row = self.db.get_operator(owner_id)
        return _from_row(row) if row else None

    def add(self, operator: WatchedOperator) -> WatchedOperator:
        if self.db.get_operator(operator.owner_id):
            raise DirectoryError("A masternode is already bound to this owner, edit it instead")
        self.db.insert_operator({
            "owner_id": operator.owner_id,
            "user_name": operator.user_name,
            "user_address": operator.address or "",
            "pub_key": operator.pub_key,
            "priv_key": operator.private_key or "",
            "notification": int(operator.notifications),
        })
        logger.info(f"Owner {operator.owner_id} bound to {shorten(operator.pub_key)}")
        return operator

    def update_keys(self, owner_id: int, pub_key: str,
                    address: Optional[str] = None, private_key: Optional[str] = None) -> WatchedOperator:
        """Changes the public key alone, or the public key with address and private key."""
        if not pub_key:
            raise DirectoryError("Public key is required")
        if (address is None) != (private_key is None):
            raise DirectoryError("Address and private key go together")

        fields = {"pub_key": pub_key}
        if private_key is not None:
            fields.update(user_address=address, priv_key=private_key)
        if not self.db.update_operator(owner_id, fields):
            raise DirectoryError("No masternode is bound to this owner yet")
        return self.get(owner_id)

    def unbind(self, owner_id: int) -> None:
        """Forgets the keys and turns notifications off; the owner row stays."""
        self.db.update_operator(owner_id, {"pub_key": "", "priv_key": "", "notification": 0})
        logger.info(f"Owner {owner_id} unbound")

    def toggle_notifications(self, owner_id: int) -> bool:
        """Flips the notification flag. Returns the new value."""
        operator = self.get(owner_id)
        if operator is None:
            raise DirectoryError("No masternode is bound to this owner yet")
        enabled = not operator.notifications
        self.db.update_operator(owner_id, {"notification": int(enabled)})
        return enabled

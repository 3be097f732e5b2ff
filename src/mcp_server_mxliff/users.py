"""
User directory built from the m:user listing of an MXLIFF document.

Comments reference their author by numeric id; the directory maps ids to
display names on read and names back to ids on write.
"""

import logging
from typing import Dict, Iterable, Optional

from lxml import etree

from .locator import NodeLocator

logger = logging.getLogger("mxliff-parser")


class UserDirectory:
    """Read-only bidirectional map between author id and display name."""

    def __init__(self, users: Optional[Iterable[tuple]] = None):
        self._names: Dict[int, str] = {}
        self._ids: Dict[str, int] = {}
        for user_id, name in users or ():
            if user_id in self._names:
                logger.warning(f"Duplicate user id {user_id} ignored ('{name}')")
                continue
            self._names[user_id] = name
            self._ids.setdefault(name, user_id)

    @classmethod
    def from_document(cls, root: etree._Element, locator: NodeLocator) -> 'UserDirectory':
        """Collect every m:user element (id, username) in the document."""
        entries = []
        for user in locator.findall(root, './/m:user'):
            raw_id = user.get('id')
            try:
                user_id = int(raw_id) if raw_id is not None else 0
            except ValueError:
                logger.warning(f"Skipping user with non-numeric id '{raw_id}'")
                continue
            entries.append((user_id, user.get('username') or ''))
        return cls(entries)

    def name_for(self, user_id) -> Optional[str]:
        """
        Display name for an author id, or None if unknown.

        Accepts the raw attribute string; values that are not integers are
        treated as unknown.
        """
        try:
            return self._names.get(int(user_id))
        except (TypeError, ValueError):
            return None

    def id_for(self, name: Optional[str]) -> Optional[int]:
        if name is None:
            return None
        return self._ids.get(name)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, user_id) -> bool:
        return self.name_for(user_id) is not None

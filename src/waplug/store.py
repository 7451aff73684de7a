"""Flat JSON "database" of per-user (``Private``) and per-group (``Grup``) records.

Every read loads the whole document and every write replaces the whole file.
There is no locking: a caller that keeps a document across an ``await`` and
saves it later overwrites whatever was written in between.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .jid import is_group_jid, is_user_jid
from .logging import get_logger
from .utils.json_state import atomic_write_json, read_json_object

logger = get_logger(__name__)

PRIVATE = "Private"
GROUPS = "Grup"

DEFAULT_WELCOME_TEXT = "👋 Selamat datang @user di grup!"
DEFAULT_LEFT_TEXT = "👋 Selamat tinggal @user!"

type Document = dict[str, Any]
type Record = dict[str, Any]


def empty_document() -> Document:
    return {PRIVATE: {}, GROUPS: {}}


@dataclass(frozen=True, slots=True)
class UserEntry:
    key: str
    value: Record


def _group_identity(record: Any) -> str | None:
    if not isinstance(record, dict):
        return None
    for field_name in ("Id", "id"):
        value = record.get(field_name)
        if value:
            return str(value)
    return None


def _find_group(document: Document, chat_id: str) -> Record | None:
    groups = document.get(GROUPS) or {}
    for record in groups.values():
        if _group_identity(record) == str(chat_id):
            return record
    return None


def _nested(record: Record | None, *path: str) -> Any:
    value: Any = record
    for part in path:
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _text_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


class BotDatabase:
    def __init__(self, path: Path) -> None:
        self.path = path

    def init(self) -> None:
        """Create the database file with an empty skeleton when it is missing."""
        if self.path.exists():
            return
        atomic_write_json(self.path, empty_document())
        logger.info("store.created", path=str(self.path))

    def read(self) -> Document:
        if not self.path.exists():
            return empty_document()
        try:
            document = read_json_object(self.path)
        except (OSError, ValueError) as exc:
            # json.JSONDecodeError is a ValueError
            logger.warning(
                "store.read_failed",
                path=str(self.path),
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return empty_document()
        if not document:
            return empty_document()
        for section in (PRIVATE, GROUPS):
            value = document.get(section)
            if isinstance(value, dict):
                continue
            if value is not None:
                logger.warning(
                    "store.malformed",
                    path=str(self.path),
                    section=section,
                    found=type(value).__name__,
                )
            document[section] = {}
        return document

    def save(self, document: Document) -> None:
        if not isinstance(document, dict):
            raise TypeError(
                f"database document must be a dict, not {type(document).__name__}"
            )
        atomic_write_json(self.path, document)

    # users

    @staticmethod
    def get_user(document: Document, number: str) -> UserEntry | None:
        users = document.get(PRIVATE)
        if not isinstance(users, dict):
            return None
        for key, value in users.items():
            if isinstance(value, dict) and value.get("Nomor") == number:
                return UserEntry(key=key, value=value)
        return None

    def get_user_data(self, number: str) -> Record | None:
        entry = self.get_user(self.read(), number)
        return entry.value if entry is not None else None

    def is_premium(self, number: str) -> bool:
        return _nested(self.get_user_data(number), "premium", "prem") is True

    def set_user_auto_ai(self, number: str, enabled: bool) -> None:
        document = self.read()
        entry = self.get_user(document, number)
        if entry is None:
            record: Record = {"Nomor": number}
            document[PRIVATE][number] = record
        else:
            record = entry.value
        record["autoai"] = enabled
        self.save(document)

    # groups

    def get_group(self, chat_id: str) -> Record | None:
        return _find_group(self.read(), chat_id)

    def load_group(self, chat_id: str) -> tuple[Document, Record]:
        """Return the document and the group's record, creating the record lazily."""
        document = self.read()
        record = _find_group(document, chat_id)
        if record is None:
            record = {"id": chat_id, "gbFilter": {}}
            document[GROUPS][chat_id] = record
        if not isinstance(record.get("gbFilter"), dict):
            record["gbFilter"] = {}
        return document, record

    def is_welcome_enabled(self, chat_id: str) -> bool:
        return _nested(self.get_group(chat_id), "gbFilter", "Welcome", "welcome") is True

    def welcome_text(self, chat_id: str) -> str:
        value = _nested(self.get_group(chat_id), "gbFilter", "Welcome", "welcomeText")
        return _text_or_default(value, DEFAULT_WELCOME_TEXT)

    def is_left_enabled(self, chat_id: str) -> bool:
        return _nested(self.get_group(chat_id), "gbFilter", "Left", "gcLeft") is True

    def left_text(self, chat_id: str) -> str:
        value = _nested(self.get_group(chat_id), "gbFilter", "Left", "leftText")
        return _text_or_default(value, DEFAULT_LEFT_TEXT)

    def set_welcome(self, chat_id: str, enabled: bool, text: str | None = None) -> None:
        document, record = self.load_group(chat_id)
        welcome = record["gbFilter"].setdefault("Welcome", {})
        welcome["welcome"] = enabled
        if text is not None:
            welcome["welcomeText"] = text
        self.save(document)

    def set_left(self, chat_id: str, enabled: bool, text: str | None = None) -> None:
        document, record = self.load_group(chat_id)
        left = record["gbFilter"].setdefault("Left", {})
        left["gcLeft"] = enabled
        if text is not None:
            left["leftText"] = text
        self.save(document)

    def set_auto_ai(self, chat_id: str, enabled: bool) -> None:
        document, record = self.load_group(chat_id)
        record["autoai"] = enabled
        self.save(document)

    def is_auto_ai_enabled(self, sender_id: str, chat_id: str) -> bool:
        document = self.read()
        if is_user_jid(chat_id):
            entry = self.get_user(document, sender_id)
            return entry is not None and entry.value.get("autoai") is True
        if is_group_jid(chat_id):
            record = _find_group(document, chat_id)
            return record is not None and record.get("autoai") is True
        return False

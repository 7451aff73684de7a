import json
from pathlib import Path

import pytest

from waplug.store import (
    DEFAULT_LEFT_TEXT,
    DEFAULT_WELCOME_TEXT,
    BotDatabase,
    empty_document,
)
from tests.fakes import GROUP_ID, USER, user_jid


def _db(tmp_path: Path) -> BotDatabase:
    return BotDatabase(tmp_path / "db" / "database.json")


def test_init_creates_skeleton(tmp_path: Path) -> None:
    db = _db(tmp_path)
    db.init()

    assert json.loads(db.path.read_text(encoding="utf-8")) == {"Private": {}, "Grup": {}}

    db.save({"Private": {"a": {"Nomor": "1"}}, "Grup": {}})
    db.init()
    assert db.read()["Private"] == {"a": {"Nomor": "1"}}


def test_read_missing_file_returns_skeleton(tmp_path: Path) -> None:
    assert _db(tmp_path).read() == empty_document()


def test_read_malformed_json_degrades_to_skeleton(tmp_path: Path) -> None:
    db = _db(tmp_path)
    db.path.parent.mkdir(parents=True)
    db.path.write_text("{not json", encoding="utf-8")

    assert db.read() == empty_document()


@pytest.mark.parametrize(
    "document",
    [
        {"Private": {}, "Grup": [{"Id": GROUP_ID}]},
        {"Private": [], "Grup": None},
        {"Private": "x", "Grup": 3},
    ],
)
def test_read_resets_sections_of_the_wrong_shape(tmp_path: Path, document: dict) -> None:
    db = _db(tmp_path)
    db.path.parent.mkdir(parents=True)
    db.path.write_text(json.dumps(document), encoding="utf-8")

    assert db.read() == empty_document()
    assert db.get_group(GROUP_ID) is None
    assert db.is_welcome_enabled(GROUP_ID) is False
    assert db.is_auto_ai_enabled(user_jid(USER), GROUP_ID) is False
    assert db.is_premium(user_jid(USER)) is False

    db.set_welcome(GROUP_ID, True)
    assert db.is_welcome_enabled(GROUP_ID) is True


def test_read_empty_file_degrades_to_skeleton(tmp_path: Path) -> None:
    db = _db(tmp_path)
    db.path.parent.mkdir(parents=True)
    db.path.write_text("", encoding="utf-8")

    assert db.read() == empty_document()


def test_save_is_pretty_printed_and_keeps_unknown_fields(tmp_path: Path) -> None:
    db = _db(tmp_path)
    document = {
        "Private": {"x": {"Nomor": "1", "limit": 5}},
        "Grup": {"g": {"Id": GROUP_ID, "custom": {"nested": True}}},
    }
    db.save(document)
    raw = db.path.read_text(encoding="utf-8")

    assert raw.startswith("{\n  ")
    db.set_welcome(GROUP_ID, True)
    reread = db.read()
    assert reread["Private"]["x"]["limit"] == 5
    assert reread["Grup"]["g"]["custom"] == {"nested": True}
    assert reread["Grup"]["g"]["gbFilter"]["Welcome"]["welcome"] is True


def test_welcome_round_trip(tmp_path: Path) -> None:
    db = _db(tmp_path)
    db.set_welcome(GROUP_ID, True, "hi @user")

    assert db.is_welcome_enabled(GROUP_ID) is True
    assert db.welcome_text(GROUP_ID) == "hi @user"


def test_welcome_write_without_text_keeps_previous_text(tmp_path: Path) -> None:
    db = _db(tmp_path)
    db.set_welcome(GROUP_ID, True, "hi @user")
    db.set_welcome(GROUP_ID, False)

    assert db.is_welcome_enabled(GROUP_ID) is False
    assert db.welcome_text(GROUP_ID) == "hi @user"
    assert len(db.read()["Grup"]) == 1


def test_left_round_trip(tmp_path: Path) -> None:
    db = _db(tmp_path)
    db.set_left(GROUP_ID, True, "bye @user")
    db.set_left(GROUP_ID, True)

    assert db.is_left_enabled(GROUP_ID) is True
    assert db.left_text(GROUP_ID) == "bye @user"


def test_defaults_for_group_without_filters(tmp_path: Path) -> None:
    db = _db(tmp_path)
    db.save({"Private": {}, "Grup": {"k": {"Id": GROUP_ID}}})

    assert db.is_welcome_enabled(GROUP_ID) is False
    assert db.welcome_text(GROUP_ID) == DEFAULT_WELCOME_TEXT
    assert db.is_left_enabled(GROUP_ID) is False
    assert db.left_text(GROUP_ID) == DEFAULT_LEFT_TEXT


def test_defaults_for_unknown_group_and_blank_text(tmp_path: Path) -> None:
    db = _db(tmp_path)
    assert db.welcome_text("nope@g.us") == DEFAULT_WELCOME_TEXT

    db.set_welcome(GROUP_ID, True, "   ")
    assert db.welcome_text(GROUP_ID) == DEFAULT_WELCOME_TEXT


def test_group_lookup_scans_values_not_keys(tmp_path: Path) -> None:
    db = _db(tmp_path)
    db.save(
        {
            "Private": {},
            "Grup": {
                "group-1": {
                    "Id": GROUP_ID,
                    "gbFilter": {"Welcome": {"welcome": True, "welcomeText": "yo @user"}},
                }
            },
        }
    )

    assert db.is_welcome_enabled(GROUP_ID) is True
    db.set_left(GROUP_ID, True)
    assert set(db.read()["Grup"]) == {"group-1"}


def test_lazy_group_record_shape(tmp_path: Path) -> None:
    db = _db(tmp_path)
    document, record = db.load_group(GROUP_ID)

    assert record == {"id": GROUP_ID, "gbFilter": {}}
    assert document["Grup"][GROUP_ID] is record
    # nothing is persisted until save
    assert not db.path.exists()


def test_get_user_and_premium(tmp_path: Path) -> None:
    db = _db(tmp_path)
    sender = user_jid(USER)
    db.save(
        {
            "Private": {
                "u1": {"Nomor": sender, "premium": {"prem": True}},
                "u2": {"Nomor": "other@s.whatsapp.net", "premium": {"prem": "yes"}},
            },
            "Grup": {},
        }
    )

    entry = BotDatabase.get_user(db.read(), sender)
    assert entry is not None
    assert entry.key == "u1"
    assert db.is_premium(sender) is True
    assert db.is_premium("other@s.whatsapp.net") is False
    assert db.is_premium("missing@s.whatsapp.net") is False
    assert BotDatabase.get_user({}, sender) is None


def test_auto_ai_private_and_group(tmp_path: Path) -> None:
    db = _db(tmp_path)
    sender = user_jid(USER)

    assert db.is_auto_ai_enabled(sender, sender) is False
    db.set_user_auto_ai(sender, True)
    assert db.is_auto_ai_enabled(sender, sender) is True

    assert db.is_auto_ai_enabled(sender, GROUP_ID) is False
    db.set_auto_ai(GROUP_ID, True)
    assert db.is_auto_ai_enabled(sender, GROUP_ID) is True

    assert db.is_auto_ai_enabled(sender, "status@broadcast") is False


def test_stale_documents_lose_updates(tmp_path: Path) -> None:
    """Whole-document writes: the later save wins over an earlier stale one."""
    db = _db(tmp_path)
    db.init()
    first = db.read()
    second = db.read()

    first["Grup"]["a@g.us"] = {"id": "a@g.us", "gbFilter": {}}
    db.save(first)
    second["Grup"]["b@g.us"] = {"id": "b@g.us", "gbFilter": {}}
    db.save(second)

    assert set(db.read()["Grup"]) == {"b@g.us"}

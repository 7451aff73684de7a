"""Helpers for the transport's chat identity ("jid") strings."""

from __future__ import annotations

import re

GROUP_SUFFIX = "@g.us"
USER_SUFFIX = "@s.whatsapp.net"

_USER_SUFFIX_RE = re.compile(re.escape(USER_SUFFIX) + r"$")
_NON_DIGITS_RE = re.compile(r"\D")


def is_group_jid(jid: str) -> bool:
    return jid.endswith(GROUP_SUFFIX)


def is_user_jid(jid: str) -> bool:
    return jid.endswith(USER_SUFFIX)


def strip_user_suffix(jid: str) -> str:
    return _USER_SUFFIX_RE.sub("", jid)


def digits_only(jid: str) -> str:
    return _NON_DIGITS_RE.sub("", jid)


def bot_jid(user_id: str) -> str:
    """Map a connection user id like ``628123:4@s.whatsapp.net`` to its chat jid."""
    number = user_id.split(":", 1)[0].split("@", 1)[0]
    return number + USER_SUFFIX

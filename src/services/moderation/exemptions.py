"""
SentinelBot - Moderation Exemptions
===================================

Which messages the filters skip.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from typing import Any, Optional

from src.core.config import Config


def has_bypass_role(member: Any, config: Config) -> bool:
    """True if the member holds any configured bypass role."""
    if member is None or not config.bypass_role_ids:
        return False
    roles = getattr(member, "roles", None) or []
    return any(role.id in config.bypass_role_ids for role in roles)


def _category_ids(channel: Any) -> set:
    """Parent and grandparent ids (threads sit one level deeper)."""
    ids = set()
    parent_id = getattr(channel, "category_id", None)
    if parent_id is None:
        parent_id = getattr(channel, "parent_id", None)
    if parent_id is not None:
        ids.add(parent_id)

    parent = getattr(channel, "parent", None)
    grandparent_id = getattr(parent, "category_id", None) if parent is not None else None
    if grandparent_id is not None:
        ids.add(grandparent_id)
    return ids


def is_channel_exempt(channel: Any, config: Config) -> bool:
    """
    Check the channel rules.

    The bug-reports channel is always exempt. A filter-exempt channel is
    exempt unless its category (or its parent's category) is enforced.
    """
    if config.bug_reports_channel_id and channel.id == config.bug_reports_channel_id:
        return True
    if channel.id not in config.filter_exempt_channel_ids:
        return False
    return not (_category_ids(channel) & config.filter_enforced_category_ids)


def exemption_reason(message: Any, config: Config) -> Optional[str]:
    """
    Why a message skips moderation, or None if it must be checked.

    Returns:
        "bot", "dm", "channel" or "bypass_role".
    """
    if message.author.bot:
        return "bot"
    if message.guild is None:
        return "dm"
    if is_channel_exempt(message.channel, config):
        return "channel"
    if has_bypass_role(message.author, config):
        return "bypass_role"
    return None


__all__ = [
    "has_bypass_role",
    "is_channel_exempt",
    "exemption_reason",
]

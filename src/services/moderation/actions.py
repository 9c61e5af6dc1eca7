"""
SentinelBot - Moderation Actions
================================

Discord side effects requested by the escalation engine.

DESIGN:
    Every action is best-effort. Permission (Forbidden) and platform
    (HTTPException) failures are logged and reported as False, never
    raised, so one failed action never blocks the next one.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import timedelta
from typing import List, Optional

import discord

from src.core.config import Config
from src.core.logger import logger


# =============================================================================
# Lookups
# =============================================================================

def find_role(guild: discord.Guild, name: str, case_insensitive: bool = False) -> Optional[discord.Role]:
    """Find a guild role by name."""
    if not name:
        return None
    wanted = name.lower() if case_insensitive else name
    for role in guild.roles:
        role_name = role.name.lower() if case_insensitive else role.name
        if role_name == wanted:
            return role
    return None


def has_role(member: discord.Member, role: discord.Role) -> bool:
    return any(r.id == role.id for r in member.roles)


def check_guild_setup(guild: discord.Guild, config: Config) -> List[str]:
    """
    Problems that will make moderation actions fail in a guild.

    Checked once at startup so missing permissions show up in the log
    before the first violation instead of as a stream of Forbidden errors.
    """
    problems: List[str] = []
    me = guild.me
    perms = me.guild_permissions if me is not None else None

    if perms is None:
        return ["Bot member not cached"]
    if not perms.manage_messages:
        problems.append("Missing Manage Messages (cannot delete spam)")
    if not perms.manage_roles:
        problems.append("Missing Manage Roles (cannot mute or assign read-only)")
    if not perms.moderate_members:
        problems.append("Missing Moderate Members (cannot time out)")

    muted_role = find_role(guild, config.muted_role_name, case_insensitive=True)
    if muted_role is None:
        problems.append(f"No '{config.muted_role_name}' role (timeouts will be used)")
    elif muted_role.position >= me.top_role.position:
        problems.append(f"'{muted_role.name}' role is above the bot's top role")

    if find_role(guild, config.read_only_role_name) is None:
        problems.append(f"No '{config.read_only_role_name}' role")

    if config.moderation_log_channel_id and guild.get_channel(config.moderation_log_channel_id) is None:
        problems.append("Moderation log channel not found")

    return problems


# =============================================================================
# Message Actions
# =============================================================================

async def delete_message(message: discord.Message, context: str) -> bool:
    """Delete a message. Already-deleted messages count as success."""
    try:
        await message.delete()
        return True
    except discord.NotFound:
        return True
    except discord.Forbidden:
        logger.warning("Message Delete Forbidden", [
            ("Context", context),
            ("Channel ID", str(message.channel.id)),
            ("Message ID", str(message.id)),
        ])
        return False
    except discord.HTTPException as e:
        logger.warning("Message Delete Failed", [
            ("Context", context),
            ("Message ID", str(message.id)),
            ("Error", str(e)[:100]),
        ])
        return False


# =============================================================================
# Role Actions
# =============================================================================

async def add_role(member: discord.Member, role: discord.Role, reason: str) -> bool:
    try:
        await member.add_roles(role, reason=reason)
        return True
    except discord.Forbidden:
        logger.warning("Role Add Forbidden", [
            ("User ID", str(member.id)),
            ("Role", role.name),
            ("Reason", "Missing permissions or role above bot"),
        ])
        return False
    except discord.HTTPException as e:
        logger.warning("Role Add Failed", [
            ("User ID", str(member.id)),
            ("Role", role.name),
            ("Error", str(e)[:100]),
        ])
        return False


async def remove_role(member: discord.Member, role: discord.Role, reason: str) -> bool:
    try:
        await member.remove_roles(role, reason=reason)
        return True
    except discord.Forbidden:
        logger.warning("Role Remove Forbidden", [
            ("User ID", str(member.id)),
            ("Role", role.name),
        ])
        return False
    except discord.HTTPException as e:
        logger.warning("Role Remove Failed", [
            ("User ID", str(member.id)),
            ("Role", role.name),
            ("Error", str(e)[:100]),
        ])
        return False


async def timeout_member(member: discord.Member, duration: float, reason: str) -> bool:
    """Native Discord timeout, used when no muted role exists."""
    try:
        await member.timeout(timedelta(seconds=duration), reason=reason)
        return True
    except discord.Forbidden:
        logger.warning("Timeout Forbidden", [
            ("User ID", str(member.id)),
            ("Reason", "Missing permissions or user has higher role"),
        ])
        return False
    except discord.HTTPException as e:
        logger.warning("Timeout Failed", [
            ("User ID", str(member.id)),
            ("Error", str(e)[:100]),
        ])
        return False


async def assign_read_only_role(member: discord.Member, role_name: str, total: int) -> bool:
    """
    Give a member the read-only role.

    Returns:
        True if the role was added now, False if missing, already held or failed.
    """
    role = find_role(member.guild, role_name)
    if role is None:
        logger.warning("Read-Only Role Missing", [
            ("Role Name", role_name),
            ("Guild ID", str(member.guild.id)),
        ])
        return False

    if has_role(member, role):
        return False

    added = await add_role(member, role, reason=f"Violation threshold reached ({total} violations)")
    if added:
        logger.tree("Read-Only Role Assigned", [
            ("User", str(member)),
            ("User ID", str(member.id)),
            ("Total Violations", str(total)),
        ], emoji="🔒")
    return added


__all__ = [
    "find_role",
    "has_role",
    "check_guild_setup",
    "delete_message",
    "add_role",
    "remove_role",
    "timeout_member",
    "assign_read_only_role",
]

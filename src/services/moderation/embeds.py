"""
SentinelBot - Moderation Embeds
===============================

Report and notice embeds for the moderation pipeline.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from datetime import datetime
import discord

from src.core.config import EmbedColors, NY_TZ
from src.core.constants import REPORT_MAX_ENTRIES, REPORT_PREVIEW_LENGTH
from src.services.moderation.escalation import BadwordDecision, SpamDecision
from src.services.moderation.models import ViolationRecord


FOOTER_TEXT = "Automated Moderation System"


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def format_duration(seconds: float) -> str:
    if seconds >= 3600 and seconds % 3600 == 0:
        hours = int(seconds // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''}"
    minutes = max(1, int(seconds // 60))
    return f"{minutes} minute{'s' if minutes != 1 else ''}"


def _recent_entries(record: ViolationRecord, width: int) -> str:
    lines = []
    for i, entry in enumerate(reversed(record.entries[-REPORT_MAX_ENTRIES:]), start=1):
        lines.append(f"**{i}.** {entry.category}\n└─ *{_truncate(entry.excerpt, width)}*")
    return "\n\n".join(lines) or "None"


# =============================================================================
# Moderation Channel Reports
# =============================================================================

def build_spam_report(
    user: discord.abc.User,
    channel_mention: str,
    decision: SpamDecision,
    record: ViolationRecord,
    action: str,
    content: str,
    warnings_before_mute: int,
) -> discord.Embed:
    """Running spam report for one user."""
    embed = discord.Embed(
        title="🚨 Spam Detected",
        color=EmbedColors.MUTE if decision.short_mute else EmbedColors.SPAM,
        timestamp=datetime.now(NY_TZ),
    )
    embed.set_thumbnail(url=user.display_avatar.url)
    embed.add_field(name="User", value=f"{user.mention} ({user.id})", inline=True)
    embed.add_field(name="Channel", value=channel_mention, inline=True)
    embed.add_field(name="Warnings", value=f"{decision.warnings}/{warnings_before_mute}", inline=True)
    embed.add_field(name="Total Spam Violations", value=f"**{decision.spam_total}**", inline=True)
    embed.add_field(name="Violations", value="\n".join(decision.violations), inline=False)
    embed.add_field(name="Action", value=action, inline=False)
    embed.add_field(
        name="Message Preview",
        value=content[:REPORT_PREVIEW_LENGTH] or "(empty)",
        inline=False,
    )
    embed.add_field(name="Recent Violations", value=_recent_entries(record, 70), inline=False)
    embed.set_footer(text=FOOTER_TEXT)
    return embed


def build_badword_report(
    user: discord.abc.User,
    decision: BadwordDecision,
    record: ViolationRecord,
    content: str,
) -> discord.Embed:
    """Running badword report for one user."""
    embed = discord.Embed(
        title="🔴 Inappropriate Language Detected",
        color=EmbedColors.MUTE,
        timestamp=datetime.now(NY_TZ),
    )
    embed.set_thumbnail(url=user.display_avatar.url)
    embed.add_field(name="User", value=f"{user.mention} ({user.id})", inline=True)
    embed.add_field(name="Total Violations", value=f"**{decision.term_total}**", inline=True)
    embed.add_field(name="Detected", value=", ".join(decision.terms), inline=False)

    breakdown = sorted(record.counts.items(), key=lambda kv: kv[1], reverse=True)[:10]
    embed.add_field(
        name="Word Breakdown",
        value="\n".join(f"• **{term}**: {count}x" for term, count in breakdown) or "None",
        inline=False,
    )
    embed.add_field(
        name="Message Preview",
        value=content[:REPORT_PREVIEW_LENGTH] or "(empty)",
        inline=False,
    )
    embed.set_footer(text=FOOTER_TEXT)
    return embed


def build_long_mute_report(
    member: discord.Member,
    total: int,
    threshold: int,
    duration: float,
) -> discord.Embed:
    embed = discord.Embed(
        title="🔇 Auto-Mute - Spam Threshold Reached",
        color=EmbedColors.MUTE,
        timestamp=datetime.now(NY_TZ),
    )
    embed.set_thumbnail(url=member.display_avatar.url)
    embed.add_field(name="Member", value=f"{member.mention} ({member.id})", inline=True)
    embed.add_field(name="Total Violations", value=f"**{total}**", inline=True)
    embed.add_field(name="Threshold", value=str(threshold), inline=True)
    embed.add_field(name="Duration", value=format_duration(duration), inline=False)
    embed.add_field(name="Note", value="The spam counter resets when the mute ends", inline=False)
    embed.set_footer(text=FOOTER_TEXT)
    return embed


# =============================================================================
# User Notices
# =============================================================================

def build_long_mute_notice(guild_name: str, total: int, threshold: int, duration: float) -> discord.Embed:
    embed = discord.Embed(
        title=f"🔇 You have been muted in {guild_name}",
        description=(
            f"You reached **{total} spam violations** and were muted for "
            f"**{format_duration(duration)}**.\n\n"
            "Your spam counter will be reset to 0 when the mute ends."
        ),
        color=EmbedColors.MUTE,
        timestamp=datetime.now(NY_TZ),
    )
    embed.add_field(name="Threshold", value=str(threshold), inline=True)
    embed.set_footer(text=FOOTER_TEXT)
    return embed


def build_reset_notice(guild_name: str) -> discord.Embed:
    embed = discord.Embed(
        title="✅ Violation counter reset",
        description=(
            f"Your mute in {guild_name} has ended and your spam counter is back to **0**. "
            "Please follow the server rules."
        ),
        color=EmbedColors.SUCCESS,
        timestamp=datetime.now(NY_TZ),
    )
    embed.set_footer(text=FOOTER_TEXT)
    return embed


__all__ = [
    "build_spam_report",
    "build_badword_report",
    "build_long_mute_report",
    "build_long_mute_notice",
    "build_reset_notice",
    "format_duration",
]

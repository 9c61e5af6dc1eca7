"""
Sentinel Discord Bot - Logger Module
====================================

Tree-style logging with Eastern timestamps and daily log folders.

DESIGN:
    A moderation decision is logged as one block: a title line followed
    by key/value lines drawn with tree connectors. The block is built
    first and written once, so blocks from concurrent handlers never
    interleave inside a file.

        [02:30:45 PM EST] 🚨 Spam Detected
          ├─ User ID: 123456789012345678
          ├─ Violations: Rate limit (6 msgs/8s)
          └─ Action: Warning

    Files live in <LOGS_DIR>/<YYYY-MM-DD>/ (a main log and an errors-only
    log). The folder rolls over at midnight Eastern, and folders older
    than the retention period are removed at startup.

    Errors with details can also be posted to a Discord webhook. During
    a spam wave the same error can fire hundreds of times, so each
    title is posted at most once per cooldown.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import os
import time
import uuid
import asyncio
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Tuple, Optional

import aiohttp
from zoneinfo import ZoneInfo


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path(os.getenv("LOGS_DIR", "logs"))
"""Directory for all log files, organized by date."""

LOG_RETENTION_DAYS = 7
"""Number of days to retain log directories before cleanup."""

MAX_VALUE_LENGTH = 300
"""Longer values (message excerpts) are cut in log lines."""

WEBHOOK_COOLDOWN = 60.0
"""Seconds before the same error title is posted to the webhook again."""

NY_TZ = ZoneInfo("America/New_York")
"""Eastern timezone for consistent timestamps."""

Details = Optional[List[Tuple[str, str]]]


# =============================================================================
# Tree Logger Class
# =============================================================================

class TreeLogger:
    """
    Tree-formatted logger writing to the console and dated files.

    Attributes:
        run_id: Unique identifier for this bot session.
        name: File name prefix.
        logs_dir: Root folder holding one folder per day.
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(
        self,
        logs_dir: Path = LOGS_DIR,
        name: str = "Sentinel",
        retention_days: int = LOG_RETENTION_DAYS,
    ) -> None:
        self.run_id: str = str(uuid.uuid4())[:8]
        self.name = name
        self.logs_dir = Path(logs_dir)
        self.retention_days = retention_days

        self._webhook_url: Optional[str] = None
        self._webhook_sent: Dict[str, float] = {}
        self._day: Optional[str] = None

        self._roll_files()
        self._cleanup_old_logs()
        self._append([
            "",
            "=" * 60,
            f"NEW SESSION - RUN ID: {self.run_id}",
            f"[{datetime.now(NY_TZ).strftime('%I:%M:%S %p %Z')}]",
            "=" * 60,
        ])

    def set_webhook(self, url: Optional[str]) -> None:
        """Set (or clear) the Discord webhook used for error alerts."""
        self._webhook_url = url

    # =========================================================================
    # Files
    # =========================================================================

    def _roll_files(self) -> None:
        """Point the log files at today's folder, creating it on a new day."""
        today = datetime.now(NY_TZ).strftime("%Y-%m-%d")
        if today == self._day:
            return
        self._day = today
        self.log_dir = self.logs_dir / today
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / f"{self.name}-{today}.log"
        self.error_file = self.log_dir / f"{self.name}-Errors-{today}.log"

    def _cleanup_old_logs(self) -> int:
        """Remove dated folders older than the retention period."""
        now = datetime.now()
        deleted = 0

        for item in self.logs_dir.iterdir():
            if not item.is_dir():
                continue
            try:
                dir_date = datetime.strptime(item.name, "%Y-%m-%d")
            except ValueError:
                continue
            if (now - dir_date).days <= self.retention_days:
                continue
            for f in item.iterdir():
                f.unlink()
            item.rmdir()
            deleted += 1

        if deleted:
            print(f"[LOG CLEANUP] Removed {deleted} old log directories")
        return deleted

    def _append(self, lines: List[str], is_error: bool = False) -> None:
        """Print lines and append them to the log files in one write."""
        self._roll_files()
        block = "\n".join(lines) + "\n"

        print(block, end="")
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(block)
        if is_error:
            with open(self.error_file, "a", encoding="utf-8") as f:
                f.write(block)

    # =========================================================================
    # Formatting
    # =========================================================================

    def _headline(self, message: str, emoji: str = "") -> str:
        timestamp = datetime.now(NY_TZ).strftime("[%I:%M:%S %p %Z]")
        return f"{timestamp} {emoji} {message}" if emoji else f"{timestamp} {message}"

    @staticmethod
    def _format_items(items: List[Tuple[str, str]]) -> List[str]:
        """
        Render (key, value) pairs with tree connectors.

        Multi-line values (message content) continue under their key
        instead of breaking the tree.
        """
        lines: List[str] = []
        for i, (key, value) in enumerate(items):
            last = i == len(items) - 1
            text = str(value)
            if len(text) > MAX_VALUE_LENGTH:
                text = text[:MAX_VALUE_LENGTH - 3] + "..."
            first, *rest = text.split("\n")
            lines.append(f"  {'└─' if last else '├─'} {key}: {first}")
            lines.extend(f"  {'  ' if last else '│ '}   {extra}" for extra in rest)
        return lines

    # =========================================================================
    # Tree Output
    # =========================================================================

    def tree(
        self,
        title: str,
        items: List[Tuple[str, str]],
        emoji: str = "📦",
    ) -> None:
        """Log a titled block of (key, value) pairs."""
        self._append(["", self._headline(title, emoji), *self._format_items(items), ""])

    # =========================================================================
    # Log Levels
    # =========================================================================

    def _level(self, msg: str, emoji: str, details: Details, is_error: bool = False) -> None:
        lines = [self._headline(msg, emoji)]
        if details:
            lines.extend(self._format_items(details))
        self._append(lines, is_error=is_error)

    def debug(self, msg: str, details: Details = None) -> None:
        """Log debug message (only if DEBUG env var set)."""
        if os.getenv("DEBUG"):
            self._level(msg, "🔍", details)

    def info(self, msg: str, details: Details = None) -> None:
        self._level(msg, "ℹ️", details)

    def success(self, msg: str) -> None:
        self._level(msg, "✅", None)

    def warning(self, msg: str, details: Details = None) -> None:
        self._level(msg, "⚠️", details)

    def error(self, msg: str, details: Details = None) -> None:
        """
        Log an error to both files.

        Errors with details are also queued for the webhook when one is
        set, a loop is running and the title is outside its cooldown.
        """
        if not details:
            self._level(msg, "❌", None, is_error=True)
            return

        self._append(
            ["", self._headline(msg, "❌"), *self._format_items(details), ""],
            is_error=True,
        )

        if self._webhook_url and self._webhook_due(msg):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return  # No loop (startup/shutdown), file log is enough
            loop.create_task(self._send_webhook_error(msg, details))

    def critical(self, msg: str) -> None:
        self._level(msg, "🚨", None, is_error=True)

    # =========================================================================
    # Webhook Integration
    # =========================================================================

    def _webhook_due(self, title: str, now: Optional[float] = None) -> bool:
        """True if title was not posted within the cooldown (and marks it)."""
        now = time.monotonic() if now is None else now
        last = self._webhook_sent.get(title)
        if last is not None and now - last < WEBHOOK_COOLDOWN:
            return False
        self._webhook_sent[title] = now
        return True

    def _webhook_payload(self, title: str, details: List[Tuple[str, str]]) -> dict:
        description = "\n".join(f"**{k}:** {v}" for k, v in details)
        return {
            "embeds": [{
                "title": f"❌ {title}",
                "description": description[:4000],
                "color": 0xDC3545,
                "timestamp": datetime.now(NY_TZ).isoformat(),
                "footer": {"text": f"{self.name} | Run ID: {self.run_id}"},
            }]
        }

    async def _send_webhook_error(self, title: str, details: List[Tuple[str, str]]) -> None:
        """Post an error embed to the webhook. Failures only print."""
        if not self._webhook_url:
            return

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self._webhook_url,
                    json=self._webhook_payload(title, details),
                    timeout=aiohttp.ClientTimeout(total=10),
                ) as resp:
                    if resp.status != 204:
                        print(f"Webhook error: {resp.status}")
        except Exception as e:
            print(f"Failed to send webhook: {e}")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()
"""Global logger instance for use throughout the application."""


__all__ = [
    "logger",
    "TreeLogger",
    "NY_TZ",
]

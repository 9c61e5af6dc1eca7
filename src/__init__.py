"""
Sentinel Discord Bot - Source Package
=====================================

The main source package for the Sentinel moderation bot, built for
discord.gg/syria. Badword filtering, spam detection and violation
escalation for a single community server.

Package Structure:
- bot.py: Main Discord bot class and lifecycle
- core/: Configuration, logging and the SQLite database
- events/: Gateway event cogs (message routing)
- services/: The moderation service
- utils/: Helper functions and utilities

Author: حَـــــنَّـــــا
Server: discord.gg/syria
Version: v1.0.0
"""

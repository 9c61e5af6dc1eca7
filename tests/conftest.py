"""
Sentinel Discord Bot - Test Fixtures
====================================

Shared fixtures for all tests.
"""

import os
import sys
import tempfile
import pytest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, AsyncMock

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set up test environment before importing modules
os.environ["TESTING"] = "1"
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="sentinel-logs-"))

# Mock aiohttp
aiohttp_mock = MagicMock()
sys.modules['aiohttp'] = aiohttp_mock


# Mock Embed Field that behaves like discord.py EmbedField
class MockEmbedField:
    """Mock Discord Embed Field."""

    def __init__(self, name='', value='', inline=True):
        self.name = name
        self.value = value
        self.inline = inline


# Embed mock that tracks field additions
class MockEmbed:
    """Mock Discord Embed that tracks all properties."""

    def __init__(self, **kwargs):
        self.title = kwargs.get('title', '')
        self.description = kwargs.get('description', '')
        self.color = kwargs.get('color')
        self.timestamp = kwargs.get('timestamp')
        self.fields = []
        self._footer = None
        self._thumbnail = None

    def add_field(self, name='', value='', inline=True):
        self.fields.append(MockEmbedField(name, value, inline))
        return self

    def set_footer(self, text='', icon_url=None):
        self._footer = {'text': text, 'icon_url': icon_url}
        return self

    def set_thumbnail(self, url=''):
        self._thumbnail = {'url': url}
        return self

    def field(self, name):
        """Value of the first field with this name."""
        for f in self.fields:
            if f.name == name:
                return f.value
        return None


# Exception hierarchy mirrors discord.py: NotFound and Forbidden are HTTPExceptions
class MockHTTPException(Exception):
    """Mock discord.HTTPException."""


class MockForbidden(MockHTTPException):
    """Mock discord.Forbidden."""


class MockNotFound(MockHTTPException):
    """Mock discord.NotFound."""


# Mock discord module before any imports
discord_mock = MagicMock()
discord_mock.Embed = MockEmbed
discord_mock.HTTPException = MockHTTPException
discord_mock.Forbidden = MockForbidden
discord_mock.NotFound = MockNotFound
discord_mock.Guild = MagicMock
discord_mock.Member = MagicMock
discord_mock.User = MagicMock
discord_mock.Role = MagicMock
discord_mock.Message = MagicMock
discord_mock.abc = MagicMock()
discord_mock.abc.User = MagicMock
discord_mock.abc.Messageable = MagicMock
sys.modules['discord'] = discord_mock
sys.modules['discord.ext'] = MagicMock()
sys.modules['discord.ext.commands'] = MagicMock()
sys.modules['discord.abc'] = discord_mock.abc


GUILD_ID = 987654321987654321
USER_ID = 123456789123456789
CHANNEL_ID = 555666777555666777
LOG_CHANNEL_ID = 444555666444555666


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_sentinel.db"


@pytest.fixture
def test_db(temp_db_path, monkeypatch):
    """Create a fresh test database instance."""
    from src.core.database import manager as manager_module

    # Reset singleton
    manager_module.DatabaseManager._instance = None

    # Patch the DB path where the manager reads it
    monkeypatch.setattr(manager_module, "DB_PATH", temp_db_path)
    monkeypatch.setattr(manager_module, "DATA_DIR", temp_db_path.parent)

    db = manager_module.DatabaseManager()

    yield db

    # Cleanup
    db.close()
    manager_module.DatabaseManager._instance = None


# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def config():
    """Default configuration with a moderation log channel."""
    from src.core.config import Config
    return Config(
        discord_token="test-token",
        moderation_log_channel_id=LOG_CHANNEL_ID,
    )


@pytest.fixture
def state(config):
    """Fresh in-memory moderation state."""
    from src.services.moderation.state import ModerationStateStore
    return ModerationStateStore(config)


# =============================================================================
# Mock Discord Objects
# =============================================================================

def make_role(role_id, name):
    """Create a mock role with an id, a name and a mention."""
    role = MagicMock()
    role.id = role_id
    role.name = name
    role.mention = f"<@&{role_id}>"
    return role


@pytest.fixture
def muted_role():
    return make_role(111000111000111000, "Muted")


@pytest.fixture
def read_only_role():
    return make_role(222000222000222000, "Read Only")


@pytest.fixture
def staff_role():
    return make_role(333000333000333000, "Staff")


@pytest.fixture
def mock_log_message():
    """Report message posted in the moderation log."""
    message = MagicMock()
    message.id = 777000777000777000
    message.edit = AsyncMock()
    return message


@pytest.fixture
def mock_log_channel(mock_log_message):
    """Moderation log channel that can still fetch its last report."""
    channel = MagicMock()
    channel.id = LOG_CHANNEL_ID
    channel.send = AsyncMock(return_value=mock_log_message)
    channel.fetch_message = AsyncMock(return_value=mock_log_message)
    return channel


@pytest.fixture
def mock_discord_guild(mock_log_channel):
    """Create a mock Discord guild with no roles."""
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Server"
    guild.roles = []
    guild.get_member = MagicMock(return_value=None)
    guild.fetch_member = AsyncMock(side_effect=MockNotFound("Unknown Member"))
    guild.get_channel = MagicMock(
        side_effect=lambda cid: mock_log_channel if cid == LOG_CHANNEL_ID else None
    )
    return guild


@pytest.fixture
def mock_discord_member(mock_discord_guild):
    """Create a mock Discord member."""
    member = MagicMock()
    member.id = USER_ID
    member.name = "testuser"
    member.display_name = "Test User"
    member.display_avatar.url = "https://example.com/avatar.png"
    member.guild = mock_discord_guild
    member.roles = []
    member.mention = f"<@{USER_ID}>"
    member.bot = False
    member.add_roles = AsyncMock()
    member.remove_roles = AsyncMock()
    member.timeout = AsyncMock()
    member.send = AsyncMock()
    return member


@pytest.fixture
def mock_discord_channel():
    """A plain text channel outside any exempt list."""
    return SimpleNamespace(
        id=CHANNEL_ID,
        name="chat",
        mention=f"<#{CHANNEL_ID}>",
        category_id=None,
        parent=None,
    )


@pytest.fixture
def mock_discord_message(mock_discord_member, mock_discord_guild, mock_discord_channel):
    """Create a mock Discord guild message."""
    message = MagicMock()
    message.id = 111222333111222333
    message.content = "hello there"
    message.author = mock_discord_member
    message.guild = mock_discord_guild
    message.channel = mock_discord_channel
    message.mentions = []
    message.role_mentions = []
    message.mention_everyone = False
    message.delete = AsyncMock()
    return message


@pytest.fixture
def mock_bot(mock_discord_guild):
    """Create a mock bot instance that knows one guild."""
    bot = MagicMock()
    bot.get_guild = MagicMock(
        side_effect=lambda gid: mock_discord_guild if gid == GUILD_ID else None
    )
    return bot

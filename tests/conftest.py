"""Shared test fixtures for the Pocket Assistant test suite."""

import pytest
import tempfile
import os
from unittest.mock import Mock, AsyncMock

# Add parent directory to path so we can import pocket_assistant modules
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pocket_assistant import config
from pocket_assistant.db import init_db, close_db
from pocket_assistant.scheduler import ReminderScheduler

TEST_CONFIG = {
    "timezone": "UTC",
    "reminders": {
        "min_minutes": 1,
        "max_minutes": 1440,
        "pre_notify_minutes": 5,
        "edit_default_recurrence": "daily",
    },
    "notifications": {
        "retry_attempts": 2,
        "retry_backoff": 0,
    },
}


@pytest.fixture(autouse=True)
def test_config(tmp_path):
    """Install a known configuration for every test."""
    settings = dict(TEST_CONFIG)
    settings["export"] = {"directory": str(tmp_path / "exports")}
    config.set_config(settings, base_path=str(tmp_path))
    yield settings


@pytest.fixture
def test_db():
    """Create a temporary test database."""
    # Create a temporary file for the test database
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    # Initialize the database
    init_db(db_path)

    yield db_path

    # Cleanup
    close_db()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def owner_id():
    return "123456789"


@pytest.fixture
def other_owner_id():
    return "987654321"


def make_job(callback, when, data, name):
    """Stand-in for a telegram.ext.Job returned by JobQueue.run_once."""
    job = Mock()
    job.callback = callback
    job.when = when
    job.data = data
    job.name = name
    job.removed = False

    def schedule_removal():
        job.removed = True

    job.schedule_removal = Mock(side_effect=schedule_removal)
    return job


@pytest.fixture
def job_queue():
    """Mock JobQueue recording one-shot jobs."""
    queue = Mock()
    queue.run_once = Mock(side_effect=make_job)
    return queue


@pytest.fixture
def notifier():
    """Mock Notifier whose sends succeed."""
    mock = Mock()
    mock.send = AsyncMock()
    mock.send_file = AsyncMock()
    mock.resolve_file_link = AsyncMock(return_value="https://api.telegram.org/file/bot/photo.jpg")
    mock.download = AsyncMock()
    return mock


@pytest.fixture
def scheduler(test_db, job_queue, notifier):
    return ReminderScheduler(job_queue, notifier, pre_notify_minutes=5)


def make_update(user_id, args=None, text=None):
    """Mock Telegram update and context for a command from ``user_id``."""
    update = Mock()
    update.effective_user = Mock()
    update.effective_user.id = int(user_id)
    update.message = Mock()
    update.message.text = text
    update.message.caption = None
    update.message.reply_text = AsyncMock()
    update.effective_message = update.message

    context = Mock()
    context.args = args if args is not None else []
    context.bot_data = {}
    return update, context


@pytest.fixture
def telegram_update():
    return make_update

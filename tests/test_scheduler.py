"""Tests for the reminder timer lifecycle."""

import pytest
from datetime import timedelta

from pocket_assistant.db import Store, close_db
from pocket_assistant.errors import TransportError
from pocket_assistant.scheduler import next_occurrence
from pocket_assistant.services import ReminderService
from pocket_assistant.timeutil import utcnow


def insert_reminder(owner_id, due_at, text="stretch", recurrence=None, completed=False):
    now = utcnow()
    return Store().insert("reminder", {
        "owner_id": owner_id,
        "text": text,
        "due_at": due_at,
        "completed": completed,
        "recurrence": recurrence,
        "created_at": now,
    })


def jobs_named(job_queue, suffix=""):
    return [c.kwargs for c in job_queue.run_once.call_args_list if c.kwargs["name"].endswith(suffix)]


class TestArming:

    def test_far_reminder_gets_pre_notification(self, scheduler, job_queue, owner_id):
        reminder = insert_reminder(owner_id, utcnow() + timedelta(minutes=10))

        scheduler.arm(reminder)

        pre = jobs_named(job_queue, "_pre")
        assert len(pre) == 1
        assert 290 <= pre[0]["when"] <= 300

        fire = jobs_named(job_queue, f"reminder_{reminder['id']}")
        assert len(fire) == 1
        assert 590 <= fire[0]["when"] <= 600
        assert fire[0]["data"] == {
            "reminder_id": reminder["id"],
            "owner_id": owner_id,
            "due_at": reminder["due_at"],
        }

    def test_near_reminder_skips_pre_notification(self, scheduler, job_queue, owner_id):
        reminder = insert_reminder(owner_id, utcnow() + timedelta(minutes=3))

        scheduler.arm(reminder)

        assert jobs_named(job_queue, "_pre") == []
        assert job_queue.run_once.call_count == 1

    def test_exactly_five_minutes_skips_pre_notification(self, scheduler, job_queue, owner_id):
        reminder = insert_reminder(owner_id, utcnow() + timedelta(minutes=5))

        scheduler.arm(reminder)

        assert jobs_named(job_queue, "_pre") == []

    def test_overdue_reminder_fires_immediately(self, scheduler, job_queue, owner_id):
        reminder = insert_reminder(owner_id, utcnow() - timedelta(hours=2))

        scheduler.arm(reminder)

        assert job_queue.run_once.call_count == 1
        assert job_queue.run_once.call_args.kwargs["when"] == 0

    def test_rearming_cancels_old_timers(self, scheduler, owner_id):
        reminder = insert_reminder(owner_id, utcnow() + timedelta(minutes=30))
        scheduler.arm(reminder)
        first = scheduler.active_jobs(reminder["id"])

        scheduler.arm(reminder)

        assert all(job.removed for job in first)
        assert len(scheduler.active_jobs(reminder["id"])) == 2

    def test_cancel_reports_count(self, scheduler, owner_id):
        reminder = insert_reminder(owner_id, utcnow() + timedelta(minutes=30))
        scheduler.arm(reminder)

        assert scheduler.cancel(reminder["id"]) == 2
        assert scheduler.cancel(reminder["id"]) == 0


class TestFiring:

    @pytest.mark.asyncio
    async def test_one_off_reminder_completes(self, scheduler, notifier, owner_id):
        reminder = insert_reminder(owner_id, utcnow(), text="call mom")

        await scheduler.fire(reminder["id"], owner_id, reminder["due_at"])

        notifier.send.assert_awaited_once_with(owner_id, "⏰ Reminder: call mom")
        stored = Store().find_by_id("reminder", reminder["id"], owner_id)
        assert stored["completed"] == True
        assert ReminderService().list_active(owner_id) == []

    @pytest.mark.asyncio
    async def test_daily_reminder_advances_one_day(self, scheduler, job_queue, owner_id):
        due = utcnow() + timedelta(seconds=1)
        reminder = insert_reminder(owner_id, due, recurrence="daily")

        await scheduler.fire(reminder["id"], owner_id, due)

        stored = Store().find_by_id("reminder", reminder["id"], owner_id)
        assert stored["due_at"] - due == timedelta(hours=24)
        assert stored["completed"] == False
        # Re-armed for the next day, including its pre-notification
        assert len(scheduler.active_jobs(reminder["id"])) == 2

    @pytest.mark.asyncio
    async def test_weekly_reminder_advances_seven_days(self, scheduler, owner_id):
        due = utcnow() + timedelta(seconds=1)
        reminder = insert_reminder(owner_id, due, recurrence="weekly")

        await scheduler.fire(reminder["id"], owner_id, due)

        stored = Store().find_by_id("reminder", reminder["id"], owner_id)
        assert stored["due_at"] - due == timedelta(hours=7 * 24)
        assert stored["completed"] == False

    @pytest.mark.asyncio
    async def test_delivery_failure_still_advances(self, scheduler, notifier, owner_id):
        notifier.send.side_effect = TransportError("network down")
        reminder = insert_reminder(owner_id, utcnow())

        await scheduler.fire(reminder["id"], owner_id, reminder["due_at"])

        stored = Store().find_by_id("reminder", reminder["id"], owner_id)
        assert stored["completed"] == True

    @pytest.mark.asyncio
    async def test_deleted_reminder_does_not_fire(self, scheduler, notifier, owner_id):
        reminder = insert_reminder(owner_id, utcnow())
        Store().delete_by_id("reminder", reminder["id"], owner_id)

        await scheduler.fire(reminder["id"], owner_id, reminder["due_at"])

        notifier.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stale_timer_after_edit_does_not_fire(self, scheduler, notifier, owner_id):
        service = ReminderService(scheduler=scheduler)
        reminder = service.create(owner_id, 10, "call mom")
        original_due = reminder["due_at"]

        service.edit(owner_id, reminder["id"], 30, "call mom", "none")
        await scheduler.fire(reminder["id"], owner_id, original_due)

        notifier.send.assert_not_awaited()
        stored = service.get(owner_id, reminder["id"])
        assert stored["completed"] == False

    @pytest.mark.asyncio
    async def test_edit_during_delivery_is_kept(self, scheduler, notifier, owner_id):
        service = ReminderService(scheduler=scheduler)
        reminder = insert_reminder(owner_id, utcnow(), text="call mom")

        async def edit_while_sending(*args):
            service.edit(owner_id, reminder["id"], 30, "call dad", "none")

        notifier.send.side_effect = edit_while_sending
        await scheduler.fire(reminder["id"], owner_id, reminder["due_at"])

        stored = service.get(owner_id, reminder["id"])
        assert stored["text"] == "call dad"
        assert stored["completed"] == False
        assert stored["due_at"] > utcnow() + timedelta(minutes=29)
        assert len(scheduler.active_jobs(reminder["id"])) == 2

    @pytest.mark.asyncio
    async def test_recurring_edit_during_delivery_is_kept(self, scheduler, notifier, owner_id):
        service = ReminderService(scheduler=scheduler)
        due = utcnow()
        reminder = insert_reminder(owner_id, due, recurrence="daily")

        async def edit_while_sending(*args):
            service.edit(owner_id, reminder["id"], 60, "stretch", "weekly")

        notifier.send.side_effect = edit_while_sending
        await scheduler.fire(reminder["id"], owner_id, due)

        stored = service.get(owner_id, reminder["id"])
        assert stored["recurrence"] == "weekly"
        assert stored["due_at"] < due + timedelta(hours=2)

    @pytest.mark.asyncio
    async def test_completed_reminder_does_not_fire_again(self, scheduler, notifier, owner_id):
        reminder = insert_reminder(owner_id, utcnow(), completed=True)

        await scheduler.fire(reminder["id"], owner_id, reminder["due_at"])

        notifier.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_job_callback_unregisters_itself(self, scheduler, job_queue, owner_id):
        reminder = insert_reminder(owner_id, utcnow() + timedelta(minutes=2))
        scheduler.arm(reminder)
        job = scheduler.active_jobs(reminder["id"])[0]

        context = type("Context", (), {"job": job})()
        await job.callback(context)

        assert scheduler.active_jobs(reminder["id"]) == []
        assert Store().find_by_id("reminder", reminder["id"], owner_id)["completed"] == True


class TestPreNotification:

    @pytest.mark.asyncio
    async def test_pre_notification_text(self, scheduler, notifier, owner_id):
        reminder = insert_reminder(owner_id, utcnow() + timedelta(minutes=5), text="standup")

        await scheduler.send_pre_notification(reminder["id"], owner_id, reminder["due_at"])

        notifier.send.assert_awaited_once_with(owner_id, "⏳ 5 minutes until: standup")

    @pytest.mark.asyncio
    async def test_pre_notification_failure_is_swallowed(self, scheduler, notifier, owner_id):
        notifier.send.side_effect = TransportError("blocked")
        reminder = insert_reminder(owner_id, utcnow() + timedelta(minutes=5))

        await scheduler.send_pre_notification(reminder["id"], owner_id, reminder["due_at"])

        stored = Store().find_by_id("reminder", reminder["id"], owner_id)
        assert stored["completed"] == False


class TestRecovery:

    def test_recover_rearms_pending(self, scheduler, job_queue, owner_id, other_owner_id):
        insert_reminder(owner_id, utcnow() + timedelta(hours=1))
        insert_reminder(other_owner_id, utcnow() - timedelta(minutes=30))
        insert_reminder(owner_id, utcnow() - timedelta(days=1), completed=True)

        assert scheduler.recover() == 2

        fire_delays = sorted(c["when"] for c in jobs_named(job_queue) if not c["name"].endswith("_pre"))
        assert fire_delays[0] == 0
        assert fire_delays[1] > 3500

    def test_recover_without_database(self, job_queue, notifier):
        from pocket_assistant.scheduler import ReminderScheduler

        scheduler = ReminderScheduler(job_queue, notifier)
        assert scheduler.recover() == 0
        job_queue.run_once.assert_not_called()

    def test_recover_after_database_closed(self, scheduler, job_queue, owner_id):
        insert_reminder(owner_id, utcnow() + timedelta(hours=1))
        close_db()

        assert scheduler.recover() == 0
        job_queue.run_once.assert_not_called()

    @pytest.mark.asyncio
    async def test_missed_daily_reminder_catches_up(self, scheduler, owner_id):
        due = utcnow() - timedelta(days=3, hours=1)
        reminder = insert_reminder(owner_id, due, recurrence="daily")

        await scheduler.fire(reminder["id"], owner_id, due)

        stored = Store().find_by_id("reminder", reminder["id"], owner_id)
        assert stored["due_at"] > utcnow()
        assert stored["due_at"] - due == timedelta(days=4)


class TestNextOccurrence:

    def test_single_step(self):
        now = utcnow()
        due = now + timedelta(minutes=1)
        assert next_occurrence(due, "weekly", now=now) == due + timedelta(days=7)

    def test_skips_past_slots(self):
        now = utcnow()
        due = now - timedelta(days=10)
        assert next_occurrence(due, "weekly", now=now) == due + timedelta(days=14)

"""Tests for reminder creation, editing and deletion."""

import pytest
from datetime import timedelta

from pocket_assistant import config
from pocket_assistant.errors import NotFound, ValidationError
from pocket_assistant.services import ReminderService
from pocket_assistant.timeutil import utcnow


class TestReminderCreation:
    """Validation and due-time computation."""

    def test_due_time_is_minutes_from_now(self, test_db, owner_id):
        before = utcnow()
        reminder = ReminderService().create(owner_id, 10, "call mom")
        after = utcnow()

        assert before + timedelta(minutes=10) <= reminder["due_at"] <= after + timedelta(minutes=10)
        assert reminder["completed"] == False
        assert reminder["recurrence"] is None

    def test_listed_as_active(self, test_db, owner_id):
        service = ReminderService()
        service.create(owner_id, 10, "call mom")

        active = service.list_active(owner_id)
        assert len(active) == 1
        assert active[0]["text"] == "call mom"
        assert active[0]["completed"] == False

        diff = abs((active[0]["due_at"] - (utcnow() + timedelta(minutes=10))).total_seconds())
        assert diff < 60

    @pytest.mark.parametrize("minutes", [1, 1440])
    def test_boundaries_accepted(self, test_db, owner_id, minutes):
        reminder = ReminderService().create(owner_id, minutes, "x")
        assert reminder["id"] >= 1

    @pytest.mark.parametrize("minutes", [0, 1441, -5])
    def test_out_of_range_rejected(self, test_db, owner_id, minutes):
        service = ReminderService()
        with pytest.raises(ValidationError):
            service.create(owner_id, minutes, "x")

        assert service.list_active(owner_id) == []

    def test_empty_text_rejected(self, test_db, owner_id):
        with pytest.raises(ValidationError):
            ReminderService().create(owner_id, 10, "   ")

    def test_recurrence_normalized(self, test_db, owner_id):
        reminder = ReminderService().create(owner_id, 10, "standup", "Weekly")
        assert reminder["recurrence"] == "weekly"

    def test_unknown_recurrence_rejected(self, test_db, owner_id):
        with pytest.raises(ValidationError):
            ReminderService().create(owner_id, 10, "standup", "hourly")

    def test_create_arms_timers(self, scheduler, job_queue, owner_id):
        reminder = ReminderService(scheduler=scheduler).create(owner_id, 10, "call mom")

        assert job_queue.run_once.call_count == 2
        assert len(scheduler.active_jobs(reminder["id"])) == 2

    def test_active_list_ordered_by_due_time(self, test_db, owner_id):
        service = ReminderService()
        service.create(owner_id, 30, "later")
        service.create(owner_id, 5, "sooner")

        assert [r["text"] for r in service.list_active(owner_id)] == ["sooner", "later"]


class TestReminderEditing:

    def test_edit_resets_deadline_and_completion(self, test_db, owner_id):
        service = ReminderService()
        reminder = service.create(owner_id, 10, "call mom")
        reminder["completed"] = True
        service.store.update("reminder", reminder)

        edited = service.edit(owner_id, reminder["id"], 60, "call dad", "weekly")

        assert edited["text"] == "call dad"
        assert edited["completed"] == False
        assert edited["recurrence"] == "weekly"
        diff = abs((edited["due_at"] - (utcnow() + timedelta(minutes=60))).total_seconds())
        assert diff < 60

    def test_edit_defaults_to_daily(self, test_db, owner_id):
        service = ReminderService()
        reminder = service.create(owner_id, 10, "water plants")

        edited = service.edit(owner_id, reminder["id"], 10, "water plants")
        assert edited["recurrence"] == "daily"

    def test_edit_default_configurable(self, test_db, owner_id, test_config):
        settings = dict(test_config)
        settings["reminders"] = dict(test_config["reminders"], edit_default_recurrence="none")
        config.set_config(settings)

        service = ReminderService()
        reminder = service.create(owner_id, 10, "water plants", "daily")

        edited = service.edit(owner_id, reminder["id"], 10, "water plants")
        assert edited["recurrence"] is None

    def test_edit_missing_reminder(self, test_db, owner_id):
        with pytest.raises(NotFound):
            ReminderService().edit(owner_id, 42, 10, "x")

    def test_edit_other_owners_reminder(self, test_db, owner_id, other_owner_id):
        service = ReminderService()
        reminder = service.create(owner_id, 10, "mine")

        with pytest.raises(NotFound):
            service.edit(other_owner_id, reminder["id"], 10, "theirs")

        assert service.get(owner_id, reminder["id"])["text"] == "mine"

    def test_edit_validates_before_lookup(self, test_db, owner_id):
        service = ReminderService()
        reminder = service.create(owner_id, 10, "x")

        with pytest.raises(ValidationError):
            service.edit(owner_id, reminder["id"], 0, "x")

    def test_edit_cancels_previous_timers(self, scheduler, owner_id):
        service = ReminderService(scheduler=scheduler)
        reminder = service.create(owner_id, 10, "call mom")
        old_jobs = scheduler.active_jobs(reminder["id"])

        service.edit(owner_id, reminder["id"], 20, "call mom")

        assert all(job.removed for job in old_jobs)
        new_jobs = scheduler.active_jobs(reminder["id"])
        assert len(new_jobs) == 2
        assert not any(job.removed for job in new_jobs)


class TestReminderDeletion:

    def test_delete_is_idempotent(self, test_db, owner_id):
        service = ReminderService()
        reminder = service.create(owner_id, 10, "x")

        assert service.delete(owner_id, reminder["id"]) == 1
        assert service.delete(owner_id, reminder["id"]) == 0

    def test_delete_cancels_timers(self, scheduler, owner_id):
        service = ReminderService(scheduler=scheduler)
        reminder = service.create(owner_id, 10, "x")
        jobs = scheduler.active_jobs(reminder["id"])

        service.delete(owner_id, reminder["id"])

        assert all(job.removed for job in jobs)
        assert scheduler.active_jobs(reminder["id"]) == []

    def test_other_owner_cannot_delete(self, scheduler, owner_id, other_owner_id):
        service = ReminderService(scheduler=scheduler)
        reminder = service.create(owner_id, 10, "x")

        assert service.delete(other_owner_id, reminder["id"]) == 0
        assert len(scheduler.active_jobs(reminder["id"])) == 2

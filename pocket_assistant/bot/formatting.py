"""Reply text for notes, reminders, media and statistics."""

from pocket_assistant.services.notes import split_tags
from pocket_assistant.timeutil import format_datetime

MEDIA_ICONS = {
    "photo": "📸",
    "video": "🎥",
    "document": "📄",
    "voice": "🎤",
}


def format_note(note, header=None, show_edited=True):
    lines = []
    if header:
        lines.append(header)
    lines.append(f"ID: {note['id']}")
    lines.append(note["title"])
    lines.append(f"   {note['content']}")
    if note["category"]:
        lines.append(f"   Category: {note['category']}")
    tags = split_tags(note["tags"])
    if tags:
        lines.append("   Tags: " + ", ".join(f"#{t}" for t in tags))
    lines.append(f"   Created: {format_datetime(note['created_at'])}")
    if show_edited and note["last_edited_at"] and note["last_edited_at"] > note["created_at"]:
        lines.append(f"   Edited: {format_datetime(note['last_edited_at'])}")
    return "\n".join(lines)


def format_note_list(notes, title="📋 Your notes"):
    if not notes:
        return "You have no notes yet"

    text = f"{title}:\n\n"
    text += "\n\n".join(format_note(note) for note in notes)
    text += "\n\nTo edit: /editnote <id> <title> <content>"
    return text


def format_reminder(reminder, header=None):
    lines = []
    if header:
        lines.append(header)
    lines.append(f"ID: {reminder['id']}")
    lines.append(reminder["text"])
    lines.append(f"   Due: {format_datetime(reminder['due_at'])}")
    if reminder["recurrence"]:
        lines.append(f"   Repeats: {reminder['recurrence']}")
    return "\n".join(lines)


def format_reminder_list(reminders):
    if not reminders:
        return "You have no active reminders"

    text = "⏰ Your active reminders:\n\n"
    text += "\n\n".join(format_reminder(r) for r in reminders)
    text += "\n\nTo edit: /editreminder <id> <minutes> <text>"
    return text


def format_media_list(media):
    if not media:
        return "You have no saved media"

    entries = []
    for item in media:
        icon = MEDIA_ICONS.get(item["kind"], "📁")
        lines = [f"ID: {item['id']}", f"{icon} {item['kind']}"]
        if item["caption"]:
            lines.append(f"   Caption: {item['caption']}")
        if item["file_name"]:
            lines.append(f"   File: {item['file_name']}")
        lines.append(f"   Uploaded: {format_datetime(item['uploaded_at'])}")
        entries.append("\n".join(lines))

    return "📁 Your media:\n\n" + "\n\n".join(entries)


def format_stats(stats):
    text = (
        "📊 Usage statistics:\n\n"
        f"Notes: {stats['notes']}\n"
        f"Reminders: {stats['reminders']}\n"
        f"Media: {stats['media']}\n"
    )
    if stats["categories"]:
        text += "\nNote categories:\n"
        text += "\n".join(f"   {category}: {count}" for category, count in stats["categories"].items())
    return text

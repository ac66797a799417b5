"""Argument grammar for the bot's slash commands.

Each parser takes the whitespace-split arguments PTB puts in ``context.args``
and raises ValidationError carrying the usage text when required tokens are
missing or malformed.
"""

from typing import List, NamedTuple, Optional

from pocket_assistant.db import Recurrence
from pocket_assistant.errors import ValidationError

NOTE_USAGE = "Usage: /note <title> <content> [#category] [tags:a,b]"
EDIT_NOTE_USAGE = "Usage: /editnote <id> <title> <content> [#category] [tags:a,b]"
SEARCH_USAGE = "Usage: /search <query>"
REMIND_USAGE = "Usage: /remind <minutes> <text> [daily|weekly]"
EDIT_REMINDER_USAGE = "Usage: /editreminder <id> <minutes> <text> [daily|weekly]"
DELETE_USAGE = "Usage: /delete <note|reminder|media> <id>"

DELETE_KINDS = ("note", "reminder", "media")
RECURRENCE_KEYWORDS = [r.value for r in Recurrence]


class NoteArgs(NamedTuple):
    title: str
    content: str
    category: Optional[str]
    tags: Optional[List[str]]


class ReminderArgs(NamedTuple):
    minutes: int
    text: str
    recurrence: Optional[str]


def _to_int(token: str, usage: str) -> int:
    try:
        return int(token)
    except (TypeError, ValueError):
        raise ValidationError(usage) from None


def _note_args(args: List[str], usage: str) -> NoteArgs:
    if len(args) < 2:
        raise ValidationError(usage)

    title, rest = args[0], list(args[1:])

    tags = None
    for token in list(rest):
        if token.lower().startswith("tags:"):
            rest.remove(token)
            tags = (tags or []) + [t for t in token[5:].split(",") if t]

    category = None
    if rest and rest[-1].startswith("#") and len(rest[-1]) > 1:
        category = rest.pop()[1:]

    content = " ".join(rest)
    if not content:
        raise ValidationError(usage)
    return NoteArgs(title, content, category, tags)


def _reminder_args(args: List[str], usage: str) -> ReminderArgs:
    if len(args) < 2:
        raise ValidationError(usage)

    minutes = _to_int(args[0], usage)
    rest = list(args[1:])

    recurrence = None
    if rest[-1].lower() in RECURRENCE_KEYWORDS:
        recurrence = rest.pop().lower()

    text = " ".join(rest)
    if not text:
        raise ValidationError(usage)
    return ReminderArgs(minutes, text, recurrence)


def parse_note(args: List[str]) -> NoteArgs:
    """/note <title> <content...> [#category] [tags:a,b]"""
    return _note_args(args, NOTE_USAGE)


def parse_edit_note(args: List[str]):
    """/editnote <id> <title> <content...> [#category] [tags:a,b] -> (id, NoteArgs)"""
    if not args:
        raise ValidationError(EDIT_NOTE_USAGE)
    return _to_int(args[0], EDIT_NOTE_USAGE), _note_args(args[1:], EDIT_NOTE_USAGE)


def parse_search(args: List[str]) -> str:
    query = " ".join(args)
    if not query:
        raise ValidationError(SEARCH_USAGE)
    return query


def parse_remind(args: List[str]) -> ReminderArgs:
    """/remind <minutes> <text...> [daily|weekly]"""
    return _reminder_args(args, REMIND_USAGE)


def parse_edit_reminder(args: List[str]):
    """/editreminder <id> <minutes> <text...> [daily|weekly] -> (id, ReminderArgs)"""
    if not args:
        raise ValidationError(EDIT_REMINDER_USAGE)
    return _to_int(args[0], EDIT_REMINDER_USAGE), _reminder_args(args[1:], EDIT_REMINDER_USAGE)


def parse_delete(args: List[str]):
    """/delete <note|reminder|media> <id> -> (kind, id)"""
    if len(args) < 2:
        raise ValidationError(DELETE_USAGE)
    kind = args[0].lower()
    if kind not in DELETE_KINDS:
        raise ValidationError(DELETE_USAGE)
    return kind, _to_int(args[1], DELETE_USAGE)

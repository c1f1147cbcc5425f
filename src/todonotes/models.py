"""Defines classes for representing notes, their status, and queries over them.

The most important classes are :class:`Note` and :class:`NoteQuery`
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Callable, Optional, Union, Iterable, List, Iterator
from urllib.parse import unquote_plus


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Returns the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class NoteStatus(Enum):
    """Lifecycle marker for a note. The values are the labels shown to users."""
    NOT_DONE = 'Not Done'
    DONE = 'Done'


@dataclass
class Note:
    """A single piece of user content.

    Instances are normally created by :meth:`todonotes.collection.NoteCollection.add_note`, which assigns
    the :attr:`id` and validates the title and content. Constructing a Note directly performs no validation.
    """

    id: int
    """Unique within the owning collection. Ids are assigned in creation order and never reused."""

    title: str

    content: str

    requires_confirmation: bool = False
    """If True, edits are expected to be confirmed first.

    Currently this only results in a log message when the note is edited; the edit is never blocked.
    """

    status: NoteStatus = NoteStatus.NOT_DONE

    created: Optional[datetime] = None
    """When the note was created. Defaults to the current time according to :attr:`clock`."""

    last_edited: Optional[datetime] = None
    """When the title or content was last changed. Defaults to :attr:`created`."""

    clock: Callable[[], datetime] = field(default=utcnow, repr=False, compare=False)
    """Returns the current time. The owning collection passes its own clock here."""

    def __post_init__(self):
        if self.created is None:
            self.created = self.clock()
        if self.last_edited is None:
            self.last_edited = self.created

    @property
    def is_done(self) -> bool:
        return self.status == NoteStatus.DONE

    def edit(self, title: str, content: str, now: Optional[datetime] = None) -> None:
        """Replaces the title and content and updates :attr:`last_edited`.

        The new timestamp is ``now`` if given, otherwise a reading of :attr:`clock`.
        If :attr:`requires_confirmation` is set, a message is logged before the change is applied.
        """
        if self.requires_confirmation:
            logger.info('Editing note %d: confirmation required', self.id)
        self.title = title
        self.content = content
        if now is None:
            now = self.clock()
        self.last_edited = max(self.last_edited, now)

    def mark_done(self) -> None:
        """Sets the status to done. Calling it on a note that is already done has no effect."""
        self.status = NoteStatus.DONE

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'requires_confirmation': self.requires_confirmation,
            'status': self.status.value,
            'created': self.created.isoformat(),
            'last_edited': self.last_edited.isoformat(),
        }


class NoteSortField(Enum):
    CREATED = 'created'
    EDITED = 'edited'
    ID = 'id'
    STATUS = 'status'
    TITLE = 'title'


@dataclass
class NoteSort:
    field: NoteSortField

    reverse: bool = False
    """If True, sort descending."""

    by_label: bool = True
    """Only affects :attr:`NoteSortField.STATUS`.

    If True, statuses are compared as plain strings using their labels, so "Done" comes before "Not Done".
    If False, notes that are not done come first.
    """

    def key(self, note: Note) -> Union[str, int, datetime]:
        """Returns sort key for the given note for the :attr:`field` specified in this instance.

        This is affected by :attr:`by_label`, but not by :attr:`reverse`.
        """
        if self.field == NoteSortField.CREATED:
            return note.created
        elif self.field == NoteSortField.EDITED:
            return note.last_edited
        elif self.field == NoteSortField.ID:
            return note.id
        elif self.field == NoteSortField.STATUS:
            if self.by_label:
                return note.status.value
            return 1 if note.is_done else 0
        elif self.field == NoteSortField.TITLE:
            return note.title

    @classmethod
    def parse_list(cls, value: str, by_label: bool = True) -> List[NoteSort]:
        """Parses a comma-separated list of field names such as ``"status,-created"``.

        A minus sign in front of a field name indicates to sort descending.
        Raises :exc:`ValueError` for unknown field names.
        """
        result = []
        for sortstr in value.lower().split(','):
            sortstr = sortstr.strip()
            if not sortstr:
                continue
            reverse = sortstr.startswith('-')
            if reverse:
                sortstr = sortstr[1:]
            result.append(cls(NoteSortField(sortstr), reverse=reverse, by_label=by_label))
        return result


def sort_in_place(notes: List[Note], sort_by: List[NoteSort]) -> None:
    """Sorts the list in place; fields on the left of sort_by take priority. The sort is stable."""
    for sort in reversed(sort_by):
        notes.sort(key=sort.key, reverse=sort.reverse)


_STATUS_NAMES = {
    'done': NoteStatus.DONE,
    'pending': NoteStatus.NOT_DONE,
    'notdone': NoteStatus.NOT_DONE,
}


@dataclass
class NoteQuery:
    """Represents criteria for searching for notes.

    Some methods that take a NoteQuery parameter also accept strings as a convenience, which they
    pass to :meth:`parse`.

    If multiple criteria are specified, the query only matches notes that satisfy *all* of them.
    All text matching is case-sensitive substring containment.
    """

    title: Optional[str] = None
    """If set, the note's title must contain this."""

    content: Optional[str] = None
    """If set, the note's content must contain this."""

    text: Optional[str] = None
    """If set, either the title or the content must contain this."""

    status: Optional[NoteStatus] = None
    """If set, only notes with this status match."""

    sort_by: List[NoteSort] = field(default_factory=list)
    """Indicates how to sort the results. Fields earlier in the list take priority."""

    @classmethod
    def parse(cls, strquery: NoteQueryIsh, by_label: bool = True) -> NoteQuery:
        """Converts the parameter to a NoteQuery, if it isn't one already.

        Query strings are split on spaces. Each part can be one of the following:

        * ``title:TEXT`` - title must contain TEXT
        * ``content:TEXT`` - content must contain TEXT
        * ``text:TEXT`` - title or content must contain TEXT; a term without any prefix means the same
        * ``status:done`` or ``status:pending``
        * ``sort:FIELD1,FIELD2`` - sort by the given fields
            * a minus sign in front of a field name sorts descending, e.g. ``sort:status,-created``
            * supported fields: ``created``, ``edited``, ``id``, ``status``, ``title``

        TEXT is URL-decoded, so ``title:Prepare+dinner`` matches titles containing "Prepare dinner".
        Prefixes are case-insensitive, but TEXT is not.

        Dicts such as ``{'title': 'Prepare', 'status': 'done'}`` are also accepted. Their keys are the same
        prefixes (lowercase), and their values are used as-is rather than URL-decoded. A ``status`` value may
        also be a :class:`NoteStatus`, and a ``sort`` value may also be a list of :class:`NoteSort`.

        Raises :exc:`ValueError` for unrecognized prefixes or keys, statuses, or sort fields.
        """
        if isinstance(strquery, NoteQuery):
            return strquery
        query = cls()
        if isinstance(strquery, dict):
            for key, value in strquery.items():
                if key == 'status' and isinstance(value, NoteStatus):
                    query.status = value
                elif key == 'sort' and not isinstance(value, str):
                    query.sort_by.extend(value)
                elif not query._set_term(key, value, by_label):
                    raise ValueError(f'Unknown query key: {key}')
            return query
        for term in strquery.split():
            key, sep, value = term.partition(':')
            if not sep:
                key, value = 'text', term
            if not query._set_term(key.lower(), unquote_plus(value), by_label):
                raise ValueError(f'Unknown query term: {term}')
        return query

    def _set_term(self, key: str, value: str, by_label: bool) -> bool:
        """Applies one criterion; returns False if the key is not recognized."""
        if key == 'title':
            self.title = value
        elif key == 'content':
            self.content = value
        elif key == 'text':
            self.text = value
        elif key == 'status':
            try:
                self.status = _STATUS_NAMES[value.lower()]
            except KeyError:
                raise ValueError(f'Unknown status: {value}')
        elif key == 'sort':
            self.sort_by.extend(NoteSort.parse_list(value, by_label=by_label))
        else:
            return False
        return True

    def matches(self, note: Note) -> bool:
        if self.title is not None and self.title not in note.title:
            return False
        if self.content is not None and self.content not in note.content:
            return False
        if self.text is not None and not (self.text in note.title or self.text in note.content):
            return False
        if self.status is not None and not note.status == self.status:
            return False
        return True

    def apply_filtering(self, notes: Iterable[Note]) -> Iterator[Note]:
        """Yields the entries from the given iterable which match the criteria of this query."""
        for note in notes:
            if self.matches(note):
                yield note

    def apply_sorting(self, notes: Iterable[Note]) -> List[Note]:
        """Returns a copy of the given notes sorted using this query's sort_by."""
        result = list(notes)
        sort_in_place(result, self.sort_by)
        return result


NoteQueryIsh = Union[str, dict, NoteQuery]

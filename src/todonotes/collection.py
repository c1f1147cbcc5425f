"""Provides the main entry point for using the library, :class:`NoteCollection`"""

from __future__ import annotations
from datetime import datetime
import itertools
import logging
from typing import Callable, List, Optional, Union

from todonotes.models import Note, NoteQuery, NoteQueryIsh, NoteSort, NoteSortField, NoteStatus, sort_in_place,\
    utcnow


logger = logging.getLogger(__name__)


class Error(Exception):
    pass


NoteSortIsh = Union[str, NoteSortField, NoteSort, List[NoteSort]]


class NoteCollection:
    """Owns an ordered list of notes and provides operations for changing and querying them.

    Notes are kept in insertion order until :meth:`sort_notes` reorders them. Everything happens in memory;
    nothing is saved anywhere.

    None of the methods raise errors for empty input or unknown ids: invalid additions are ignored, and
    operations on ids that don't exist do nothing (or return None).

    Note that :meth:`get_all_notes` and :meth:`get_note_by_id` return the collection's own list and notes, not
    copies. Changes made to them by the caller are visible to the collection.

    Here's an example:

    .. code-block:: python

       from todonotes.collection import NoteCollection
       notes = NoteCollection()
       notes.add_note('Prepare lunch', 'Spaghetti Bolognese', requires_confirmation=True)
       notes.mark_note_as_done(1)
       notes.search_notes({'title': 'Prepare'})

    .. attribute:: clock
       :type: Callable[[], datetime]

       Returns the current time; used for creation and edit timestamps.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None, first_id: int = 1,
                 status_sort_by_label: bool = True):
        self.clock = clock or utcnow
        self.status_sort_by_label = status_sort_by_label
        self._ids = itertools.count(first_id)
        self._notes: List[Note] = []

    def _find_index_by_id(self, id: int) -> int:
        for i, note in enumerate(self._notes):
            if note.id == id:
                return i
        return -1

    def add_note(self, title: str, content: str, requires_confirmation: bool = False) -> None:
        """Creates a note and appends it to the end of the collection.

        If the title or content is empty or only whitespace, nothing happens.
        """
        if not (title.strip() and content.strip()):
            logger.debug('Ignoring note with empty title or content: %r, %r', title, content)
            return
        note = Note(next(self._ids), title, content, requires_confirmation, clock=self.clock)
        self._notes.append(note)

    def delete_note(self, id: int) -> None:
        """Removes the note with the given id, if there is one."""
        index = self._find_index_by_id(id)
        if index == -1:
            logger.debug('No note to delete with id %d', id)
            return
        del self._notes[index]

    def edit_note(self, id: int, title: str, content: str) -> None:
        """Changes the title and content of the note with the given id, if there is one.

        See :meth:`todonotes.models.Note.edit`.
        """
        note = self.get_note_by_id(id)
        if note is None:
            logger.debug('No note to edit with id %d', id)
            return
        note.edit(title, content)

    def get_note_by_id(self, id: int) -> Optional[Note]:
        index = self._find_index_by_id(id)
        return self._notes[index] if index != -1 else None

    def get_all_notes(self) -> List[Note]:
        """Returns the list backing this collection, in its current order.

        This is not a copy: adding or removing items from it changes the collection.
        """
        return self._notes

    def mark_note_as_done(self, id: int) -> None:
        note = self.get_note_by_id(id)
        if note is None:
            logger.debug('No note to mark done with id %d', id)
            return
        note.mark_done()

    def get_total_note_count(self) -> int:
        return len(self._notes)

    def get_remaining_note_count(self) -> int:
        """Returns the number of notes which are not done."""
        return sum(1 for note in self._notes if note.status == NoteStatus.NOT_DONE)

    def get_done_note_count(self) -> int:
        return sum(1 for note in self._notes if note.status == NoteStatus.DONE)

    def search_notes(self, query: NoteQueryIsh = NoteQuery()) -> List[Note]:
        """Returns a new list of the notes matching the query.

        The query may be a :class:`todonotes.models.NoteQuery`, a query string (see
        :meth:`todonotes.models.NoteQuery.parse`), or a dict such as ``{'title': 'Prepare'}``.
        Omitted criteria do not restrict the results.

        Results are in the collection's current order unless the query specifies sorting.
        The collection itself is never reordered by this method.
        """
        query = NoteQuery.parse(query, by_label=self.status_sort_by_label)
        return query.apply_sorting(query.apply_filtering(self._notes))

    def search_notes_by_title_or_content(self, text: str) -> List[Note]:
        """Returns the notes whose title or content contains the given text (case-sensitive)."""
        return self.search_notes(NoteQuery(text=text))

    def sort_notes(self, sorting: NoteSortIsh) -> None:
        """Sorts the collection in place.

        sorting may be a field, a field name, a comma-separated list of names such as ``"status,-created"``,
        a :class:`todonotes.models.NoteSort`, or a list of them. The sort is stable.

        Raises :exc:`ValueError` if a field name is not recognized.
        """
        if isinstance(sorting, NoteSort):
            sort_by = [sorting]
        elif isinstance(sorting, NoteSortField):
            sort_by = [NoteSort(sorting, by_label=self.status_sort_by_label)]
        elif isinstance(sorting, str):
            sort_by = NoteSort.parse_list(sorting, by_label=self.status_sort_by_label)
        else:
            sort_by = list(sorting)
        sort_in_place(self._notes, sort_by)

    def sort_notes_by_status(self) -> None:
        """Sorts by comparing the status labels as strings, so done notes come first.

        This ignores :attr:`status_sort_by_label`; use :meth:`sort_notes` to put pending notes first.
        """
        self.sort_notes(NoteSort(NoteSortField.STATUS))

    def sort_notes_by_creation_date(self) -> None:
        """Sorts from earliest to latest creation time."""
        self.sort_notes(NoteSort(NoteSortField.CREATED))

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import os.path
from typing import Callable
from todonotes.collection import Error, NoteCollection
from todonotes.models import utcnow


@dataclass
class NotesConf:
    """Settings for creating a :class:`todonotes.collection.NoteCollection`.

    The command-line tool loads this from the variable ``conf`` in ``~/.todonotes.conf.py``, if that file exists.
    Example config file:

    .. code-block:: python

       from todonotes.conf import *
       conf = NotesConf(status_sort_by_label=False, log_level='INFO')
    """

    first_id: int = 1
    """The id assigned to the first note added."""

    clock: Callable[[], datetime] = utcnow
    """Returns the current time. Used for creation and edit timestamps."""

    status_sort_by_label: bool = True
    """Controls sorting by the ``status`` field when it is given by name (e.g. ``sort:status``).

    If True, status labels are compared as strings, which puts "Done" before "Not Done".
    If False, notes that are not done come first.
    """

    log_level: str = 'WARNING'
    """Logging level used by the command-line tool. Set to ``'INFO'`` to see confirmation messages."""

    @classmethod
    def user_config_path(cls) -> str:
        return os.path.expanduser(os.path.join('~', '.todonotes.conf.py'))

    @classmethod
    def for_user(cls) -> NotesConf:
        """Loads the config from :meth:`user_config_path`, or returns the defaults if there is no such file.

        Raises :exc:`todonotes.collection.Error` if the file does not assign a NotesConf to ``conf``.
        """
        path = cls.user_config_path()
        if not os.path.exists(path):
            return cls()
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise Error('You need to assign an instance of NotesConf to the variable `conf` '
                        f'in your config file: {path}')
        return context['conf']

    def instantiate(self) -> NoteCollection:
        return NoteCollection(clock=self.clock, first_id=self.first_id,
                              status_sort_by_label=self.status_sort_by_label)

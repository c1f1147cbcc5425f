"""Command-line interface for todonotes.

Notes only exist while the process is running, so the tool reads a series of commands (one per line) from a file
or from standard input, and runs them all against the same collection.
"""


import argparse
import json
import logging
import shlex
import sys
from typing import Iterable, List
from terminaltables import AsciiTable
import yaml
from todonotes.collection import Error, NoteCollection
from todonotes.conf import NotesConf
from todonotes.models import Note, NoteQuery


class _CommandExit(Exception):
    def __init__(self, status: int):
        self.status = status


class _CommandParser(argparse.ArgumentParser):
    """Reports bad commands by raising instead of exiting the process."""

    def error(self, message):
        raise Error(f'{self.prog}: {message}')

    def exit(self, status=0, message=None):
        if message:
            print(message, file=sys.stderr, end='')
        raise _CommandExit(status)


def _print_note(note: Note) -> None:
    print(f'id: {note.id}')
    print(f'title: {note.title}')
    print(f'content: {note.content}')
    print(f'status: {note.status.value}')
    print(f'requires confirmation: {"yes" if note.requires_confirmation else "no"}')
    print(f'created: {note.created}')
    print(f'last edited: {note.last_edited}')


def _add(args, notes: NoteCollection) -> int:
    before = notes.get_total_note_count()
    notes.add_note(args.title[0], args.content[0], requires_confirmation=args.confirm)
    if notes.get_total_note_count() > before:
        print(f'Added note {notes.get_all_notes()[-1].id}')
    return 0


def _edit(args, notes: NoteCollection) -> int:
    notes.edit_note(args.id[0], args.title[0], args.content[0])
    return 0


def _rm(args, notes: NoteCollection) -> int:
    notes.delete_note(args.id[0])
    return 0


def _done(args, notes: NoteCollection) -> int:
    notes.mark_note_as_done(args.id[0])
    return 0


def _info(args, notes: NoteCollection) -> int:
    note = notes.get_note_by_id(args.id[0])
    if note is None:
        raise Error(f'No note with id {args.id[0]}')
    if args.json:
        print(json.dumps(note.as_json()))
    else:
        _print_note(note)
    return 0


def _query(args, notes: NoteCollection) -> int:
    try:
        query = NoteQuery.parse(args.query or '', by_label=notes.status_sort_by_label)
    except ValueError as e:
        raise Error(str(e))
    results = notes.search_notes(query)
    if args.json:
        print(json.dumps([n.as_json() for n in results]))
    elif args.yaml:
        print(yaml.safe_dump([n.as_json() for n in results], sort_keys=False), end='')
    elif args.table:
        data = [('ID', 'Title', 'Status', 'Created')]
        for note in results:
            data.append((note.id, note.title, note.status.value, note.created.strftime('%Y-%m-%d %H:%M')))
        table = AsciiTable(data)
        table.justify_columns[0] = 'right'
        print(table.table)
    else:
        for note in results:
            print('--------------------')
            _print_note(note)
    return 0


def _sort(args, notes: NoteCollection) -> int:
    try:
        notes.sort_notes(args.fields[0])
    except ValueError as e:
        raise Error(str(e))
    return 0


def _count(args, notes: NoteCollection) -> int:
    counts = {
        'total': notes.get_total_note_count(),
        'remaining': notes.get_remaining_note_count(),
        'done': notes.get_done_note_count(),
    }
    if args.json:
        print(json.dumps(counts))
    else:
        for k, v in counts.items():
            print(f'{k}: {v}')
    return 0


def command_parser() -> argparse.ArgumentParser:
    """Returns the parser for a single line of a session."""
    parser = _CommandParser(prog='todonotes', add_help=False)
    parser.set_defaults(func=None)

    subs = parser.add_subparsers(title='Commands', parser_class=_CommandParser)

    p_add = subs.add_parser('add', help='Add a note. Notes with an empty title or content are ignored.')
    p_add.add_argument('title', nargs=1)
    p_add.add_argument('content', nargs=1)
    p_add.add_argument('-c', '--confirm', action='store_true',
                       help='Mark the note as requiring confirmation for edits.')
    p_add.set_defaults(func=_add)

    p_edit = subs.add_parser('edit', help='Replace the title and content of a note.')
    p_edit.add_argument('id', nargs=1, type=int)
    p_edit.add_argument('title', nargs=1)
    p_edit.add_argument('content', nargs=1)
    p_edit.set_defaults(func=_edit)

    p_rm = subs.add_parser('rm', help='Delete a note.')
    p_rm.add_argument('id', nargs=1, type=int)
    p_rm.set_defaults(func=_rm)

    p_done = subs.add_parser('done', help='Mark a note as done.')
    p_done.add_argument('id', nargs=1, type=int)
    p_done.set_defaults(func=_done)

    p_i = subs.add_parser('info', help='Show a note.')
    p_i.add_argument('id', nargs=1, type=int)
    p_i.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_i.set_defaults(func=_info)

    p_q = subs.add_parser(
        'query',
        help='Search for notes without changing their order. For full query syntax, see the documentation of '
             'todonotes.models.NoteQuery.parse - an example query is "title:Prepare status:pending sort:-created".')
    p_q.add_argument('query', nargs='?', help='Query string. If omitted, the query matches all notes.')
    p_q_formats = p_q.add_mutually_exclusive_group()
    p_q_formats.add_argument('-j', '--json', help='Output as JSON.', action='store_true')
    p_q_formats.add_argument('-t', '--table', help='Format output as a table.', action='store_true')
    p_q_formats.add_argument('-y', '--yaml', help='Output as YAML.', action='store_true')
    p_q.set_defaults(func=_query)

    p_sort = subs.add_parser('sort', help='Reorder the collection, e.g. "sort status,-created".')
    p_sort.add_argument('fields', nargs=1)
    p_sort.set_defaults(func=_sort)

    p_count = subs.add_parser('count', help='Show the number of total, remaining, and done notes.')
    p_count.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_count.set_defaults(func=_count)

    return parser


def run_session(notes: NoteCollection, lines: Iterable[str]) -> int:
    """Runs each line as a command against the collection.

    Errors are printed to stderr and do not stop the session. Returns 1 if any command failed, else 0.
    """
    parser = command_parser()
    status = 0
    for line in lines:
        try:
            argv = shlex.split(line, comments=True)
        except ValueError as e:
            print(f'error: {e}', file=sys.stderr)
            status = 1
            continue
        if not argv:
            continue
        if argv[0] in ('exit', 'quit'):
            break
        if argv[0] == 'help':
            print(parser.format_help(), end='')
            continue
        try:
            args = parser.parse_args(argv)
            if not args.func:
                raise Error(f'Unknown command: {argv[0]}')
            if args.func(args, notes):
                status = 1
        except _CommandExit as e:
            if e.status:
                status = 1
        except Error as e:
            print(f'error: {e}', file=sys.stderr)
            status = 1
    return status


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='todonotes',
        description='Manage notes in memory. Commands are read one per line; run "help" in a session for a list.')
    parser.add_argument('-f', '--file', nargs=1, help='Read commands from this file instead of standard input.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug logging.')
    return parser


def main(args: List[str] = None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    args = argparser().parse_args(args)
    conf = NotesConf.for_user()
    logging.basicConfig(level='DEBUG' if args.verbose else conf.log_level.upper(),
                        format='%(levelname)s %(name)s: %(message)s')
    notes = conf.instantiate()
    if args.file:
        with open(args.file[0], 'r') as file:
            return run_session(notes, file)
    return run_session(notes, sys.stdin)

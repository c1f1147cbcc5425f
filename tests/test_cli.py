from datetime import datetime, timezone
import json
import yaml
from freezegun import freeze_time
from todonotes import cli
from todonotes.collection import NoteCollection
from todonotes.conf import NotesConf


SETUP = [
    'add "Complete the project" "Finish project development"',
    'add "Prepare lunch" "Spaghetti Bolognese" --confirm',
    'add "Clean the room" "Tidy up the entire room"',
]


def session(lines, clock=None):
    notes = NoteCollection(clock=clock)
    status = cli.run_session(notes, SETUP + lines)
    return notes, status


@freeze_time('2012-05-02T03:04:05Z')
def test_add_and_info(capsys):
    notes, status = session(['info 2'])
    assert status == 0
    out, err = capsys.readouterr()
    assert out == """Added note 1
Added note 2
Added note 3
id: 2
title: Prepare lunch
content: Spaghetti Bolognese
status: Not Done
requires confirmation: yes
created: 2012-05-02 03:04:05+00:00
last edited: 2012-05-02 03:04:05+00:00
"""
    assert not err


@freeze_time('2012-05-02T03:04:05Z')
def test_info_json(capsys):
    session(['info -j 1'])
    out, err = capsys.readouterr()
    assert json.loads(out.splitlines()[-1]) == {
        'id': 1,
        'title': 'Complete the project',
        'content': 'Finish project development',
        'requires_confirmation': False,
        'status': 'Not Done',
        'created': '2012-05-02T03:04:05+00:00',
        'last_edited': '2012-05-02T03:04:05+00:00',
    }


def test_info_missing(capsys):
    notes, status = session(['info 9'])
    assert status == 1
    out, err = capsys.readouterr()
    assert 'error: No note with id 9' in err


def test_add_blank_is_ignored(capsys):
    notes, status = session(['add "  " "content"'])
    assert status == 0
    assert notes.get_total_note_count() == 3
    out, err = capsys.readouterr()
    assert out == 'Added note 1\nAdded note 2\nAdded note 3\n'


def test_changes(capsys, clock):
    notes, status = session([
        'done 1',
        'edit 2 "Prepare dinner" "Pasta with tuna"',
        'rm 3',
        'rm 30',
        'done 30',
        'edit 30 x y',
        'count -j',
    ], clock=clock)
    assert status == 0
    assert [(n.id, n.title, n.status.value) for n in notes.get_all_notes()] == [
        (1, 'Complete the project', 'Done'),
        (2, 'Prepare dinner', 'Not Done'),
    ]
    out, err = capsys.readouterr()
    assert json.loads(out.splitlines()[-1]) == {'total': 2, 'remaining': 1, 'done': 1}


def test_count(capsys):
    session(['done 2', 'count'])
    out, err = capsys.readouterr()
    assert out.endswith('total: 3\nremaining: 2\ndone: 1\n')


def test_query_json(capsys):
    notes, status = session(['query -j "title:Prepare"'])
    out, err = capsys.readouterr()
    result = json.loads(out.splitlines()[-1])
    assert [r['id'] for r in result] == [2]


def test_query_text_is_case_sensitive(capsys):
    session(['query -j prepare'])
    out, err = capsys.readouterr()
    assert json.loads(out.splitlines()[-1]) == []


def test_query_sort_does_not_reorder(capsys, clock):
    notes, status = session(['query -j sort:-created'], clock=clock)
    out, err = capsys.readouterr()
    assert [r['id'] for r in json.loads(out.splitlines()[-1])] == [3, 2, 1]
    assert [n.id for n in notes.get_all_notes()] == [1, 2, 3]


@freeze_time('2012-05-02T03:04:05Z')
def test_query_yaml(capsys):
    session(['query --yaml content:room'])
    out, err = capsys.readouterr()
    loaded = yaml.safe_load(out[out.index('- id:'):])
    assert loaded == [{
        'id': 3,
        'title': 'Clean the room',
        'content': 'Tidy up the entire room',
        'requires_confirmation': False,
        'status': 'Not Done',
        'created': '2012-05-02T03:04:05+00:00',
        'last_edited': '2012-05-02T03:04:05+00:00',
    }]


@freeze_time('2012-05-02T03:04:05Z')
def test_query_table(capsys):
    session(['done 3', 'query -t "status:done"'])
    out, err = capsys.readouterr()
    assert '| ID | Title          | Status | Created          |' in out
    assert '|  3 | Clean the room | Done   | 2012-05-02 03:04 |' in out
    assert 'Prepare lunch' not in out


def test_query_plain(capsys):
    session(['query "title:Clean"'])
    out, err = capsys.readouterr()
    assert '--------------------\nid: 3\ntitle: Clean the room\n' in out
    assert 'id: 1\n' not in out


def test_query_bad_syntax(capsys):
    notes, status = session(['query "tag:foo"'])
    assert status == 1
    out, err = capsys.readouterr()
    assert 'error: Unknown query term: tag:foo' in err


def test_sort(capsys, clock):
    notes, status = session(['done 2', 'sort status', 'query -j'], clock=clock)
    assert status == 0
    assert [n.id for n in notes.get_all_notes()] == [2, 1, 3]
    notes, status = session(['sort status,-created'], clock=clock)
    assert [n.id for n in notes.get_all_notes()] == [3, 2, 1]


def test_sort_unknown_field(capsys):
    notes, status = session(['sort priority'])
    assert status == 1
    out, err = capsys.readouterr()
    assert "'priority' is not a valid NoteSortField" in err


def test_bad_commands_do_not_stop_session(capsys):
    notes, status = session(['bogus', 'rm', 'done abc', 'add "unclosed', 'count'])
    assert status == 1
    out, err = capsys.readouterr()
    assert 'invalid choice' in err
    assert 'the following arguments are required: id' in err
    assert "invalid int value: 'abc'" in err
    assert out.endswith('total: 3\nremaining: 3\ndone: 0\n')


def test_comments_help_and_exit(capsys):
    notes, status = session(['', '# just a comment', 'help', 'add -h', 'exit', 'add "After" "exit"'])
    assert status == 0
    assert notes.get_total_note_count() == 3
    out, err = capsys.readouterr()
    assert 'Commands:' in out
    assert '--confirm' in out


def test_edit_with_confirmation_logs(caplog):
    caplog.set_level('INFO', logger='todonotes.models')
    session(['edit 2 "Prepare dinner" "Pasta with tuna"', 'edit 1 "Complete it" "Now"'])
    assert [r.getMessage() for r in caplog.records] == ['Editing note 2: confirmation required']


def test_main_file(fs, capsys, mocker):
    mocker.patch('todonotes.cli.NotesConf.for_user', return_value=NotesConf(first_id=20))
    fs.create_file('/commands.txt', contents='\n'.join(SETUP + ['rm 21', 'count']) + '\n')
    assert cli.main(['-f', '/commands.txt']) == 0
    out, err = capsys.readouterr()
    assert out == 'Added note 20\nAdded note 21\nAdded note 22\ntotal: 2\nremaining: 2\ndone: 0\n'


def test_main_stdin(fs, capsys, monkeypatch):
    monkeypatch.setattr('sys.stdin', iter(['add one two\n', 'info 1\n', 'info 2\n']))
    assert cli.main([]) == 1
    out, err = capsys.readouterr()
    assert out.startswith('Added note 1\nid: 1\ntitle: one\n')
    assert 'No note with id 2' in err

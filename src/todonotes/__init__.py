"""Helps manage a list of short notes held in memory.

If you installed via ``pip``, run ``todonotes -h`` to get help.

To use the Python API, look at :class:`todonotes.collection.NoteCollection`
"""

"""Shared test fixtures."""

import copy

import pytest


BOOKS = [
    {
        'title': "Old Man's War",
        'author': {'firstName': 'John', 'lastName': 'Scalzi'},
        'isbn': '9780765348272',
        'tags': ['fiction', 'military'],
    },
    {
        'title': 'The Lock Artist',
        'author': {'firstName': 'Steve', 'lastName': 'Hamilton'},
        'isbn': '9780312380045',
        'tags': ['thriller'],
    },
    {
        'title': 'HTML5',
        'author': {'firstName': 'Remy', 'lastName': 'Sharp'},
        'isbn': '9780321687296',
        'tags': ['programming'],
    },
]


@pytest.fixture
def books():
    """A fresh copy of the book records."""
    return copy.deepcopy(BOOKS)

"""
Statements Module
Each file builds the SQL for one table touched by a case upsert
"""

from .application import ApplicationStatements
from .event import EventStatements
from .representative import RepresentativeStatements

__all__ = [
    'ApplicationStatements',
    'EventStatements',
    'RepresentativeStatements'
]

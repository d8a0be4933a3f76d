""" Scripted walkthroughs showing how SQLite's per-connection foreign key setting changes the
    outcome of the same statements. Each step is run against a real store and its observed
    outcome recorded, so the dashboard can display what actually happened rather than what
    was expected to happen.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy.engine import Engine

from parentchild.errors import ParentChildError
from parentchild.sql_child import Child
from parentchild.sql_interface import DataInterface
from parentchild.sql_parent import Parent

logger = logging.getLogger(__name__)

PARENT_RECORDS = [
    {'uid': 1, 'parent_name': 'Adam'},
    {'uid': 2, 'parent_name': 'Jacob'},
]

CHILDREN_OF_ADAM = ['Cain', 'Abel']
CHILDREN_OF_JACOB = [
    'Reuben', 'Simeon', 'Levi', 'Judah', 'Dan', 'Naphtali', 'Gad',
    'Asher', 'Issachar', 'Zebulun', 'Dinah', 'Joseph', 'Benjamin',
]

@dataclass
class WalkthroughStep:
    """ The observed outcome of one step of a walkthrough. """

    description: str
    succeeded: bool
    parent_count: int
    child_count: int
    error: Optional[str] = None

def _run_step(engine: Engine, description: str, action: Callable[[], object]) -> WalkthroughStep:
    """ Run a single action, capturing a library error as a failed step rather than stopping
        the walkthrough, then record the row counts left behind.

        Arguments:
        engine      -- an object of type Engine referencing the current database
        description -- a human readable description of the step
        action      -- a zero-argument callable performing the step
    """

    error = None

    try:
        action()
    except ParentChildError as e:
        error = str(e)
        logger.info("Step '%s' failed: %s", description, error)

    return WalkthroughStep(
        description=description,
        succeeded=error is None,
        parent_count=Parent.count(engine),
        child_count=Child.count(engine),
        error=error,
    )

def run_enforcement_walkthrough(db_path: str) -> List[WalkthroughStep]:
    """ Reset the store and show that a dangling child reference is accepted on a connection
        without enforcement, then rejected after reconnecting with enforcement switched on.

        Arguments:
        db_path -- the file location of the store, which is created if missing
    """

    steps = []

    engine = DataInterface.open_connection(db_path, enforce_integrity=False, create=True)
    try:
        DataInterface.reset_database(engine)

        steps.append(_run_step(
            engine, 'Insert parents Adam (1) and Jacob (2)',
            lambda: Parent.create_mass_records(engine, PARENT_RECORDS),
        ))
        steps.append(_run_step(
            engine, 'Insert child Abel under parent 1',
            lambda: Child.create_record(engine, 1, 'Abel'),
        ))
        steps.append(_run_step(
            engine, 'Insert child Solomon under missing parent 3 (enforcement off)',
            lambda: Child.create_record(engine, 3, 'Solomon'),
        ))
    finally:
        engine.dispose()

    engine = DataInterface.open_connection(db_path, enforce_integrity=True)
    try:
        steps.append(_run_step(
            engine, 'Insert child Samuel under missing parent 4 (enforcement on)',
            lambda: Child.create_record(engine, 4, 'Samuel'),
        ))
    finally:
        engine.dispose()

    return steps

def run_cascade_walkthrough(db_path: str, enforce_integrity: bool=True) -> List[WalkthroughStep]:
    """ Reset the store, populate two parents with fifteen children between them, then delete
        one parent by name. With enforcement on, that parent's children go with it.

        Arguments:
        db_path           -- the file location of the store, which is created if missing
        enforce_integrity -- (optional) whether FK relationships are enforced (default True)
    """

    child_records = (
        [{'parent_uid': 1, 'child_name': name} for name in CHILDREN_OF_ADAM] +
        [{'parent_uid': 2, 'child_name': name} for name in CHILDREN_OF_JACOB]
    )

    engine = DataInterface.open_connection(db_path, enforce_integrity=enforce_integrity, create=True)
    try:
        DataInterface.reset_database(engine)

        return [
            _run_step(
                engine, 'Insert parents Adam (1) and Jacob (2)',
                lambda: Parent.create_mass_records(engine, PARENT_RECORDS),
            ),
            _run_step(
                engine, f"Insert {len(child_records)} children",
                lambda: Child.create_mass_records(engine, child_records),
            ),
            _run_step(
                engine, 'Delete parent Jacob',
                lambda: Parent.delete_by_name(engine, 'Jacob'),
            ),
        ]
    finally:
        engine.dispose()

import logging
from typing import Any, Dict, List, Union

import polars as pl
from sqlalchemy import Column, ForeignKey, Integer, Table, Text
from sqlalchemy import func, insert, literal_column, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from parentchild.errors import translate_sql_errors
from parentchild.sql_mapping import BASE
from parentchild.sql_parent import Parent

logger = logging.getLogger(__name__)

CHILD_SCHEMA = {'parent_uid': pl.Int64, 'child_name': pl.Utf8}

# The child table carries no key of its own, so it is declared at the Core level and the
# mapper is told which columns identify a row.
child_table = Table(
    'child',
    BASE.metadata,
    Column(
        'parent_uid',
        Integer,
        ForeignKey('parent.uid', onupdate='CASCADE', ondelete='CASCADE'),
        nullable=False,
    ),
    Column('child_name', Text, nullable=False),
)

class Child(BASE):
    """ Mapped class for the child table. Rows reference a Parent through parent_uid, which is
        only checked when FK enforcement is active for the connection performing the write.
    """

    __table__ = child_table
    __mapper_args__ = {'primary_key': [child_table.c.parent_uid, child_table.c.child_name]}

    def __repr__(self) -> str:
        return f"Child(parent_uid={self.parent_uid!r}, child_name={self.child_name!r})"

    def __eq__(self, other_child) -> bool:
        if type(other_child) == Child:
            return self.parent_uid == other_child.parent_uid and self.child_name == other_child.child_name
        else:
            return False

    @staticmethod
    def _resolve_parent_entry(value: Union[Parent, int]) -> int:
        """ Accept either a Parent record or a bare uid and return the uid. No lookup is made,
            so an unknown uid is passed through for the database to accept or reject.

            Arguments:
            value -- the Parent instance or uid to evaluate
        """

        return value.uid if isinstance(value, Parent) else value

    @staticmethod
    def _rows_to_frame(rows) -> pl.DataFrame:
        return pl.DataFrame(
            [tuple(row) for row in rows],
            schema=CHILD_SCHEMA,
            orient='row',
        )

    @staticmethod
    def create_record(engine: Engine, parent: Union[Parent, int], child_name: str) -> None:
        """ Insert a record into the database. Raises ConstraintViolation if FK enforcement is
            active and the parent does not exist.

            Arguments:
            engine     -- an object of type Engine referencing the current database
            parent     -- either an instance of type Parent, or the uid of the parent
            child_name -- the name of the child being recorded
        """

        Child.create_mass_records(
            engine,
            [{'parent_uid': Child._resolve_parent_entry(parent), 'child_name': child_name}],
        )

    @staticmethod
    def create_mass_records(engine: Engine, records: List[Dict[str, Any]]) -> int:
        """ Bulk-insert records into the database in a single transaction. If any record fails
            a constraint check, none of the records are kept. Returns the number of records
            inserted.

            Arguments:
            engine  -- an object of type Engine referencing the current database
            records -- a list of dictionary representations of the data to insert
        """

        if not records:
            return 0

        with translate_sql_errors('Child bulk insert'), Session(engine) as session:
            session.execute(
                insert(child_table),
                records,
            )
            session.commit()

        logger.debug("Inserted %d child records", len(records))
        return len(records)

    @staticmethod
    def select_all(engine: Engine) -> pl.DataFrame:
        """ Return all Child records in the database in insertion order, formatted as a polars
            DataFrame.

            Arguments:
            engine -- an object of type Engine referencing the current database
        """

        with Session(engine) as session:
            rows = session.execute(
                select(child_table.c.parent_uid, child_table.c.child_name)
                .order_by(literal_column('rowid'))
            ).all()

        return Child._rows_to_frame(rows)

    @staticmethod
    def select_by_parent(engine: Engine, parent: Union[Parent, int]) -> pl.DataFrame:
        """ Return the Child records referencing a single parent, in insertion order.

            Arguments:
            engine -- an object of type Engine referencing the current database
            parent -- either an instance of type Parent, or the uid of the parent
        """

        with Session(engine) as session:
            rows = session.execute(
                select(child_table.c.parent_uid, child_table.c.child_name)
                .where(child_table.c.parent_uid == Child._resolve_parent_entry(parent))
                .order_by(literal_column('rowid'))
            ).all()

        return Child._rows_to_frame(rows)

    @staticmethod
    def select_dangling(engine: Engine) -> pl.DataFrame:
        """ Return the Child records whose parent_uid matches no Parent. These can only exist
            if they were written, or their parent deleted, without FK enforcement.

            Arguments:
            engine -- an object of type Engine referencing the current database
        """

        with Session(engine) as session:
            rows = session.execute(
                select(child_table.c.parent_uid, child_table.c.child_name)
                .outerjoin(Parent, child_table.c.parent_uid == Parent.uid)
                .where(Parent.uid.is_(None))
                .order_by(literal_column('child.rowid'))
            ).all()

        return Child._rows_to_frame(rows)

    @staticmethod
    def count(engine: Engine) -> int:
        with Session(engine) as session:
            return session.scalar(select(func.count()).select_from(child_table))

import logging
from typing import Any, Dict, List

from sqlalchemy import Integer, Text
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.orm import Session

from parentchild.errors import translate_sql_errors
from parentchild.sql_mapping import BASE

logger = logging.getLogger(__name__)

class Parent(BASE):
    """ Mapped class for the parent table. Each parent is referenced by zero or more child
        records through its uid.
    """

    __tablename__ = 'parent'

    uid: Mapped[int] = mapped_column(Integer, primary_key=True)
    parent_name: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"Parent(uid={self.uid!r}, parent_name={self.parent_name!r})"

    def __eq__(self, other_parent) -> bool:
        if type(other_parent) == Parent:
            return self.uid == other_parent.uid and self.parent_name == other_parent.parent_name
        else:
            return False

    @staticmethod
    def create_record(engine: Engine, uid: int, parent_name: str) -> None:
        """ Insert a single record into the database. Raises a ValueError if the uid is not
            an integer, or ConstraintViolation if the uid is already taken.

            Arguments:
            engine      -- an object of type Engine referencing the current database
            uid         -- the unique identifier for the new parent
            parent_name -- the name of the parent being recorded
        """

        if not isinstance(uid, int):
            raise ValueError(f"Parent uid '{uid}' must be an integer.")

        new_record = Parent(uid=uid, parent_name=parent_name)

        with translate_sql_errors('Parent insert'), Session(engine) as session:
            session.add(new_record)
            session.commit()

    @staticmethod
    def create_mass_records(engine: Engine, records: List[Dict[str, Any]]) -> int:
        """ Bulk-insert records into the database in a single transaction. Accepts a list of
            dictionaries, each mapping the table column names. Returns the number of records
            inserted.

            Arguments:
            engine  -- an object of type Engine referencing the current database
            records -- a list of dictionary representations of the data to insert
        """

        if not records:
            return 0

        with translate_sql_errors('Parent bulk insert'), Session(engine) as session:
            session.execute(
                insert(Parent),
                records,
            )
            session.commit()

        logger.debug("Inserted %d parent records", len(records))
        return len(records)

    @staticmethod
    def select_all(engine: Engine) -> List['Parent']:
        """ Return a list of all Parent records in the database, ordered by uid.

            Arguments:
            engine -- an object of type Engine referencing the current database
        """

        with Session(engine) as session:
            parent_records = session.scalars(select(Parent).order_by(Parent.uid)).all()

        return parent_records

    @staticmethod
    def select_by_id(engine: Engine, uid: int) -> 'Parent':
        """ Return specific Parent instance according to the user specified key.

            Arguments:
            engine -- an object of type Engine referencing the current database
            uid    -- the unique identifier of the parent
        """

        with Session(engine) as session:
            parent_record = session.execute(
                select(Parent)
                .where(Parent.uid == uid)
            ).first()

        return parent_record[0] if parent_record else None

    @staticmethod
    def count(engine: Engine) -> int:
        with Session(engine) as session:
            return session.scalar(select(func.count()).select_from(Parent))

    @staticmethod
    def delete_by_name(engine: Engine, parent_name: str) -> int:
        """ Delete every parent with the given name, returning the number of parent rows
            removed. When FK enforcement is active for the connection, the children of those
            parents are removed by the same statement. Otherwise they are left in place as
            dangling references. Cascaded deletions are not included in the count.

            Arguments:
            engine      -- an object of type Engine referencing the current database
            parent_name -- the name to match against
        """

        with translate_sql_errors('Parent delete'), Session(engine) as session:
            result = session.execute(
                delete(Parent)
                .where(Parent.parent_name == parent_name),
                execution_options={'synchronize_session': False},
            )
            session.commit()

        logger.info("Deleted %d parent record(s) named %r", result.rowcount, parent_name)
        return result.rowcount

    @staticmethod
    def update_uid(engine: Engine, old_uid: int, new_uid: int) -> int:
        """ Change the uid of a parent, returning the number of parent rows updated. When FK
            enforcement is active, child records follow the new uid through the ON UPDATE
            CASCADE clause.

            Arguments:
            engine  -- an object of type Engine referencing the current database
            old_uid -- the current identifier of the parent
            new_uid -- the identifier to assign
        """

        with translate_sql_errors('Parent update'), Session(engine) as session:
            result = session.execute(
                update(Parent)
                .where(Parent.uid == old_uid)
                .values(uid=new_uid),
                execution_options={'synchronize_session': False},
            )
            session.commit()

        return result.rowcount

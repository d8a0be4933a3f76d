import logging
import os
from typing import Any, Dict, List

import polars as pl
from sqlalchemy import MetaData, Table, create_engine, delete, insert, text
from sqlalchemy import exc
from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateTable

from parentchild.errors import StatementError, StoreConnectionError, translate_sql_errors
from parentchild.sql_child import Child
from parentchild.sql_mapping import BASE, attach_foreign_key_pragma
from parentchild.sql_parent import Parent

logger = logging.getLogger(__name__)

MEMORY_PATH = ':memory:'

class DataInterface():

    @staticmethod
    def exp_tables() -> List[str]:
        return [
            Parent.__tablename__,
            Child.__table__.name,
        ]

    @staticmethod
    def _resolve_table(table_name: str) -> Table:
        """ Look up one of the mapped tables by name, raising StatementError for anything that
            is not part of the parent/child schema.

            Arguments:
            table_name -- the name of the table to be retrieved
        """

        try:
            return BASE.metadata.tables[table_name]
        except KeyError:
            raise StatementError(f"Table '{table_name}' is not part of the parent/child schema.") from None

#region Connection handling

    @staticmethod
    def open_connection(db_path: str, *, enforce_integrity: bool, echo: bool=False, create: bool=False) -> Engine:
        """ Standardised Engine instantiation. Whether FK relationships are enforced must be
            decided here, and applies to every connection the Engine opens. A reconnect therefore
            means building a new Engine with the desired setting.

            Raises StoreConnectionError if the file does not exist (unless create is set) or
            cannot be read as a SQLite database.

            Arguments:
            db_path           -- the file location of the database, or ':memory:'
            enforce_integrity -- whether FK relationships are enforced on this connection
            echo              -- (optional) use echoing for SQL transactions
            create            -- (optional) allow a new, empty store file to be created
        """

        if db_path != MEMORY_PATH and not create and not os.path.isfile(db_path):
            raise StoreConnectionError(f"No database found at '{db_path}'.")

        if db_path != MEMORY_PATH and create:
            os.makedirs(os.path.dirname(db_path) or '.', exist_ok=True)

        engine = create_engine(f"sqlite+pysqlite:///{db_path}", echo=echo, future=True)
        attach_foreign_key_pragma(engine, enforce_integrity)

        # Touch the schema so that an unreadable file is rejected here rather than on first use
        try:
            with engine.connect() as connection:
                connection.exec_driver_sql('SELECT count(*) FROM sqlite_master').scalar()

        except exc.DBAPIError as e:
            engine.dispose()
            raise StoreConnectionError(f"Unable to open database at '{db_path}': {e.orig}") from e

        logger.debug("Opened %s (enforce_integrity=%s)", db_path, enforce_integrity)
        return engine

#endregion

#region Schema management

    @staticmethod
    def create_blank_database(engine: Engine) -> None:
        """ Build the database structure to an existing connection (file or memory). Tables
            which already exist are left untouched.

            Arguments:
            engine -- the connection at which the database is to be created
        """

        logger.info("Creating parent/child schema objects...")

        with translate_sql_errors('Schema creation'):
            BASE.metadata.create_all(engine)

    @staticmethod
    def reset_database(engine: Engine) -> None:
        """ Drop both tables if they exist and recreate them empty. Child is dropped before
            parent, and the whole reset stops at the first failing statement.

            Arguments:
            engine -- the connection at which the database is to be reset
        """

        logger.info("Dropping parent/child schema objects...")

        with translate_sql_errors('Schema reset'):
            BASE.metadata.drop_all(engine)

        DataInterface.create_blank_database(engine)

    @staticmethod
    def export_schema_sql(engine: Engine) -> str:
        """ Render the CREATE TABLE statements for the schema in the dialect of the supplied
            connection, in dependency order.

            Arguments:
            engine -- an open connection to a database
        """

        return ';\n'.join(
            str(CreateTable(table).compile(engine)).strip()
            for table in BASE.metadata.sorted_tables
        ) + ';\n'

    @staticmethod
    def export_table_columns(engine: Engine, table_name: str) -> List[str]:
        """ Export the column names of a user-specified table available in an active connection.
            This function only returns the names of the columns, not the actual representation
            of them.

            Arguments:
            engine     -- an open connection to a database
            table_name -- the name of the table to be retrieved
        """

        table_map = DataInterface.map_database(engine)

        if table_name not in table_map:
            raise StatementError(f"Table '{table_name}' was not found in the database.")

        return [x.name for x in table_map[table_name].columns]

    @staticmethod
    def map_database(engine: Engine) -> Dict[str, Table]:
        """ Reflect the database provided through a user-specified connection and map the results
            in key/value pairs.

            Arguments:
            engine -- an open connection to a database
        """

        # Open and reflect the database
        metadata = MetaData()
        metadata.reflect(bind=engine)

        return {name: table for (name, table) in metadata.tables.items()}

    @staticmethod
    def report_database(engine: Engine) -> None:
        """ Iterate through the database provided at the user-specified path and report the presence
                of each table. Tables are categorised as expected or unexpected, although there are
                no restrictions on their columns.

            Arguments:
            engine -- an open connection to a database
        """

        exp_tables = DataInterface.exp_tables()
        table_map = DataInterface.map_database(engine)

        # Iterate over the contents, comparing against a checklist of expected tables
        for name, table in table_map.items():

            if name in exp_tables:
                logger.info("Table: %s", name)
                for column in table.columns:
                    logger.info("%s  %s (%s)", 'PK' if column.primary_key else '  ', column.name, column.type)

                for fk in table.foreign_keys:
                    logger.info(
                        "FK  %s -> %s (ON UPDATE %s, ON DELETE %s)",
                        fk.parent.name, fk.target_fullname, fk.onupdate, fk.ondelete
                    )

                exp_tables.remove(name)

            else:
                logger.error("Observed table %s is not in the expected list.", name)

        for exp_table in exp_tables:
            logger.error("Expected table %s was not found in the collection.", exp_table)

#endregion

#region Data access

    @staticmethod
    def insert_records(engine: Engine, table_name: str, records: List[Dict[str, Any]]) -> int:
        """ Bulk-insert records into a named table within a single transaction, returning the
            number inserted. If any record fails a constraint check the transaction is rolled
            back and ConstraintViolation is raised, leaving the table unchanged.

            Arguments:
            engine     -- an object of type Engine referencing the current database
            table_name -- either 'parent' or 'child'
            records    -- a list of dictionary representations of the data to insert
        """

        table = DataInterface._resolve_table(table_name)

        if not records:
            return 0

        # SQLAlchemy drops unrecognised keys from a bulk insert rather than rejecting them
        table_columns = set(table.c.keys())
        for record in records:
            if unknown_columns := sorted(set(record) - table_columns):
                raise StatementError(
                    f"Insert into {table_name} failed: unknown column(s) {', '.join(unknown_columns)}."
                )

        with translate_sql_errors(f"Insert into {table_name}"), engine.begin() as connection:
            connection.execute(insert(table), records)

        logger.debug("Inserted %d record(s) into %s", len(records), table_name)
        return len(records)

    @staticmethod
    def query(engine: Engine, statement: str, parameters: Dict[str, Any]=None) -> pl.DataFrame:
        """ Run an arbitrary SELECT statement and return the rows, in the order produced by the
            statement, as a polars DataFrame. Named parameters use the ':name' form.

            Arguments:
            engine     -- an object of type Engine referencing the current database
            statement  -- the SQL text to execute
            parameters -- (optional) values for the named parameters in the statement
        """

        with translate_sql_errors('Query'), engine.connect() as connection:
            result = connection.execute(text(statement), parameters or {})
            columns = list(result.keys())
            rows = [tuple(row) for row in result.all()]

        return pl.DataFrame(rows, schema=columns, orient='row')

    @staticmethod
    def delete_records(engine: Engine, table_name: str, predicate: str, parameters: Dict[str, Any]=None) -> int:
        """ Delete the rows of a named table which match a SQL predicate, returning the number of
            rows removed from that table. Rows removed from other tables through ON DELETE
            CASCADE are not counted.

            Arguments:
            engine     -- an object of type Engine referencing the current database
            table_name -- either 'parent' or 'child'
            predicate  -- the body of the WHERE clause, e.g. 'parent_name = :name'
            parameters -- (optional) values for the named parameters in the predicate
        """

        table = DataInterface._resolve_table(table_name)

        with translate_sql_errors(f"Delete from {table_name}"), engine.begin() as connection:
            result = connection.execute(
                delete(table).where(text(predicate)),
                parameters or {},
            )

        logger.info("Deleted %d record(s) from %s", result.rowcount, table_name)
        return result.rowcount

#endregion

import unittest
import polars as pl
from polars.testing import assert_frame_equal
from sqlalchemy import insert

from parentchild.errors import ConstraintViolation
from parentchild.sql_child import Child, child_table
from parentchild.sql_interface import DataInterface
from parentchild.sql_parent import Parent

class TestChild(unittest.TestCase):
    """ Unit test class for the parentchild.Child class. Each test has access to an enforcing
        connection (self.engine) and a non-enforcing connection (self.lax_engine), each with
        its own in-memory database containing parents Adam (1) and Jacob (2).
    """

    def setUp(self):
        self.engine = DataInterface.open_connection(':memory:', enforce_integrity=True)
        self.lax_engine = DataInterface.open_connection(':memory:', enforce_integrity=False)

        for engine in (self.engine, self.lax_engine):
            DataInterface.create_blank_database(engine)
            Parent.create_mass_records(
                engine,
                [{'uid': 1, 'parent_name': 'Adam'}, {'uid': 2, 'parent_name': 'Jacob'}],
            )

    def tearDown(self):
        self.engine.dispose()
        self.lax_engine.dispose()

    def insert_child(self, engine, parent_uid, child_name) -> None:
        """ Create a new record in the database without relying on the Child class.

            Arguments:
            engine     -- the Engine to write through
            parent_uid -- the uid of the referenced parent
            child_name -- the name of the child to be added
        """

        with engine.connect() as conn:
            conn.execute(
                insert(child_table)
                .values(parent_uid=parent_uid, child_name=child_name)
            )
            conn.commit()

    def create_frame(self, records) -> pl.DataFrame:
        return pl.DataFrame(records, schema={'parent_uid': pl.Int64, 'child_name': pl.Utf8}, orient='row')

#region Overhead

    def test_init(self):
        """ Test the constructor for the Child class. """

        my_child = Child(parent_uid=1, child_name='Abel')
        self.assertEqual(1, my_child.parent_uid)
        self.assertEqual('Abel', my_child.child_name)

    def test_eq(self):
        """ Test the equality operation for the Child class. """

        first_child = Child(parent_uid=1, child_name='Abel')
        second_child = Child(parent_uid=1, child_name='Abel')
        third_child = Child(parent_uid=2, child_name='Abel')

        self.assertEqual(first_child, second_child)
        self.assertNotEqual(first_child, third_child)
        self.assertNotEqual(first_child, None)

    def test_repr(self):
        """ Test the to-string behaviour for the Child class. """

        my_child = Child(parent_uid=1, child_name='Abel')
        self.assertEqual("Child(parent_uid=1, child_name='Abel')", str(my_child))

    def test_foreign_key_declaration(self):
        """ Test that the child table declares a cascading FK against parent.uid. """

        (fk,) = child_table.c.parent_uid.foreign_keys

        self.assertEqual('parent.uid', fk.target_fullname)
        self.assertEqual('CASCADE', fk.ondelete)
        self.assertEqual('CASCADE', fk.onupdate)

#endregion

#region Create operations

    def test_create_record(self):
        """ Test the success case for the `create_record()` function, using both a Parent
            instance and a bare uid.
        """

        Child.create_record(self.engine, Parent(uid=1, parent_name='Adam'), 'Abel')
        Child.create_record(self.engine, 2, 'Joseph')

        assert_frame_equal(
            self.create_frame([(1, 'Abel'), (2, 'Joseph')]),
            Child.select_all(self.engine),
        )

    def test_create_record_fail_enforced(self):
        """ Test that `create_record()` rejects a child of a missing parent when FK enforcement
            is active, leaving the table unchanged.
        """

        with self.assertRaises(ConstraintViolation) as error_context:
            Child.create_record(self.engine, 4, 'Samuel')

        self.assertIn('FOREIGN KEY constraint failed', str(error_context.exception))
        self.assertEqual(0, Child.count(self.engine))

    def test_create_record_unenforced(self):
        """ Test that `create_record()` accepts a child of a missing parent when FK enforcement
            is not active, producing a dangling reference.
        """

        Child.create_record(self.lax_engine, 3, 'Solomon')

        self.assertEqual(1, Child.count(self.lax_engine))
        assert_frame_equal(self.create_frame([(3, 'Solomon')]), Child.select_dangling(self.lax_engine))

    def test_create_record_fail_null_name(self):
        """ Test that the NOT NULL constraint applies regardless of FK enforcement. """

        for engine in (self.engine, self.lax_engine):
            with self.assertRaises(ConstraintViolation):
                Child.create_record(engine, 1, None)

            self.assertEqual(0, Child.count(engine))

    def test_create_mass_records(self):
        """ Test that `create_mass_records()` returns the number of records inserted. """

        obs_count = Child.create_mass_records(
            self.engine,
            [
                {'parent_uid': 1, 'child_name': 'Cain'},
                {'parent_uid': 1, 'child_name': 'Abel'},
                {'parent_uid': 2, 'child_name': 'Levi'},
            ]
        )

        self.assertEqual(3, obs_count)
        self.assertEqual(3, Child.count(self.engine))

    def test_create_mass_records_atomic(self):
        """ Test that a single invalid record causes the whole batch to be discarded when FK
            enforcement is active.
        """

        self.insert_child(self.engine, 1, 'Cain')

        with self.assertRaises(ConstraintViolation):
            Child.create_mass_records(
                self.engine,
                [
                    {'parent_uid': 1, 'child_name': 'Abel'},
                    {'parent_uid': 5, 'child_name': 'Samuel'},
                    {'parent_uid': 2, 'child_name': 'Levi'},
                ]
            )

        assert_frame_equal(self.create_frame([(1, 'Cain')]), Child.select_all(self.engine))

#endregion

#region Select operations

    def test_select_all_empty(self):
        """ Test the behaviour of the `select_all()` function when there are no entries in the
            database. The column layout is preserved.
        """

        assert_frame_equal(self.create_frame([]), Child.select_all(self.engine))

    def test_select_all_order(self):
        """ Test that `select_all()` returns records in insertion order. """

        for parent_uid, child_name in [(2, 'Zebulun'), (1, 'Abel'), (2, 'Asher')]:
            self.insert_child(self.engine, parent_uid, child_name)

        assert_frame_equal(
            self.create_frame([(2, 'Zebulun'), (1, 'Abel'), (2, 'Asher')]),
            Child.select_all(self.engine),
        )

    def test_select_by_parent(self):
        """ Test that `select_by_parent()` returns only the children of the requested parent. """

        for parent_uid, child_name in [(1, 'Cain'), (2, 'Levi'), (1, 'Abel')]:
            self.insert_child(self.engine, parent_uid, child_name)

        assert_frame_equal(
            self.create_frame([(1, 'Cain'), (1, 'Abel')]),
            Child.select_by_parent(self.engine, 1),
        )
        assert_frame_equal(
            self.create_frame([(2, 'Levi')]),
            Child.select_by_parent(self.engine, Parent(uid=2, parent_name='Jacob')),
        )

    def test_select_dangling_none(self):
        """ Test that `select_dangling()` is empty when every child has a parent. """

        self.insert_child(self.engine, 1, 'Abel')

        self.assertEqual(0, Child.select_dangling(self.engine).height)

#endregion

import os
import unittest
from unittest import mock

from parentchild.settings import DB_PATH_ENV, DEFAULT_DB_PATH, Settings

class TestSettings(unittest.TestCase):
    """ Unit test class for the parentchild.Settings class """

    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        self.assertEqual(DEFAULT_DB_PATH, settings.db_path)
        self.assertTrue(settings.enforce_integrity)
        self.assertFalse(settings.echo)

    def test_db_path_from_environment(self):
        with mock.patch.dict(os.environ, {DB_PATH_ENV: '/tmp/family.db'}):
            settings = Settings()

        self.assertEqual('/tmp/family.db', settings.db_path)

    def test_frozen(self):
        settings = Settings(db_path=':memory:')

        with self.assertRaises(AttributeError):
            settings.db_path = 'other.db'

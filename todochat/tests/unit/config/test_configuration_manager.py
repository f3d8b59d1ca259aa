"""
Unit tests for ConfigurationManager.

Tests block selection, inheritance, overrides and typed access against a
temporary INI file. The process-wide singleton is restored after each test.
"""

import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from todochat.config.configuration_manager import ConfigurationManager

TEST_INI = """
[default]
app name = Default App
app port = 3000
feature enabled = True
ratio = 0.5
origins = http://a.example, http://b.example
settings = {"retries": 0, "mode": "strict"}

[base]
inherits = default
app name = Base App
logging level = DEBUG

[child]
inherits = base
app port = 4000

[loop_a]
inherits = loop_b

[loop_b]
inherits = loop_a

[orphan]
inherits = missing_block
"""


class TestConfigurationManager( unittest.TestCase ):

    def setUp( self ):
        self.temp_dir = tempfile.mkdtemp()
        self.ini_path = os.path.join( self.temp_dir, "test-app.ini" )
        with open( self.ini_path, "w" ) as f:
            f.write( TEST_INI )

    def tearDown( self ):
        shutil.rmtree( self.temp_dir, ignore_errors=True )
        # Back to the testing block every other module expects
        ConfigurationManager( _reset_singleton=True )

    def _make( self, block_id="default", cli_args=None ):
        return ConfigurationManager(
            env_var_name    = None,
            config_path     = self.ini_path,
            config_block_id = block_id,
            cli_args        = cli_args,
            _reset_singleton= True
        )

    def test_singleton_returns_same_instance( self ):
        first  = self._make()
        second = ConfigurationManager()
        self.assertIs( first, second )

    def test_reads_default_block( self ):
        config_mgr = self._make()
        self.assertEqual( config_mgr.get( "app name" ), "Default App" )
        self.assertEqual( config_mgr.get( "app port", return_type="int" ), 3000 )

    def test_inheritance_nearest_ancestor_wins( self ):
        config_mgr = self._make( "child" )

        self.assertEqual( config_mgr.get( "app port", return_type="int" ), 4000 )
        self.assertEqual( config_mgr.get( "app name" ), "Base App" )
        self.assertEqual( config_mgr.get( "logging level" ), "DEBUG" )
        self.assertTrue( config_mgr.get( "feature enabled", return_type="boolean" ) )

    def test_inherits_key_is_not_exposed( self ):
        config_mgr = self._make( "child" )
        self.assertNotIn( "inherits", config_mgr.get_keys() )
        self.assertIn( "app port", config_mgr.get_keys() )

    def test_typed_values( self ):
        config_mgr = self._make()

        self.assertEqual( config_mgr.get( "ratio", return_type="float" ), 0.5 )
        self.assertEqual( config_mgr.get( "origins", return_type="list-string" ), [ "http://a.example", "http://b.example" ] )
        self.assertEqual( config_mgr.get( "settings", return_type="json" ), { "retries": 0, "mode": "strict" } )

    def test_missing_key_uses_typed_default( self ):
        config_mgr = self._make()

        self.assertEqual( config_mgr.get( "not there", default="7", return_type="int" ), 7 )
        self.assertFalse( config_mgr.get( "not there", default=False, return_type="boolean" ) )
        self.assertIsNone( config_mgr.get( "not there", default=None ) )

    def test_missing_key_without_default_returns_none( self ):
        config_mgr = self._make()
        self.assertIsNone( config_mgr.get( "not there" ) )

    def test_invalid_return_type_raises( self ):
        config_mgr = self._make()
        with self.assertRaises( ValueError ):
            config_mgr.get( "app name", return_type="tuple" )

    def test_cli_args_override_block_values( self ):
        config_mgr = self._make( "child", cli_args={ "app port": "5000" } )
        self.assertEqual( config_mgr.get( "app port", return_type="int" ), 5000 )

    def test_env_var_selects_block_and_overrides( self ):
        env_value = f"config_path={self.ini_path} config_block_id=base app+port=6000"

        with patch.dict( os.environ, { "TODOCHAT_TEST_ARGS": env_value } ):
            config_mgr = ConfigurationManager( env_var_name="TODOCHAT_TEST_ARGS", _reset_singleton=True )

        self.assertEqual( config_mgr.config_block_id, "base" )
        self.assertEqual( config_mgr.get( "app name" ), "Base App" )
        self.assertEqual( config_mgr.get( "app port", return_type="int" ), 6000 )

    def test_set_config_and_exists( self ):
        config_mgr = self._make()

        self.assertFalse( config_mgr.exists( "new key" ) )
        config_mgr.set_config( "new key", 42 )
        self.assertTrue( config_mgr.exists( "new key" ) )
        self.assertEqual( config_mgr.get( "new key", return_type="int" ), 42 )

    def test_missing_file_raises( self ):
        with self.assertRaises( FileNotFoundError ):
            ConfigurationManager(
                env_var_name    = None,
                config_path     = os.path.join( self.temp_dir, "nope.ini" ),
                _reset_singleton= True
            )

    def test_missing_block_raises( self ):
        with self.assertRaises( ValueError ):
            self._make( "does_not_exist" )

    def test_missing_parent_block_raises( self ):
        with self.assertRaises( ValueError ):
            self._make( "orphan" )

    def test_inheritance_cycle_raises( self ):
        with self.assertRaises( ValueError ):
            self._make( "loop_a" )


class TestBundledConfiguration( unittest.TestCase ):

    def test_testing_block_uses_in_memory_sqlite( self ):
        config_mgr = ConfigurationManager()

        self.assertEqual( config_mgr.config_block_id, "testing" )
        self.assertTrue( config_mgr.get( "database url" ).startswith( "sqlite" ) )
        self.assertEqual( config_mgr.get( "password bcrypt rounds", return_type="int" ), 4 )

    def test_testing_block_inherits_defaults( self ):
        config_mgr = ConfigurationManager()

        self.assertEqual( config_mgr.get( "jwt access token expire days", return_type="int" ), 7 )
        self.assertEqual( config_mgr.get( "app port", return_type="int" ), 3000 )


if __name__ == "__main__":
    unittest.main()

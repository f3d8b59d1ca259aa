import configparser
import json
import logging
import os
from typing import Optional, Union, Any, Callable

import todochat.utils.util as du

logger = logging.getLogger( __name__ )

DEFAULT_ENV_VAR_NAME = "TODOCHAT_CONFIG_MGR_CLI_ARGS"
DEFAULT_CONFIG_PATH  = "/conf/todochat-app.ini"

# Sentinel for "no default supplied", so that None, False and "" remain legal defaults
_NO_DEFAULT = "@@@_None_@@@"


def singleton( cls: type ) -> Callable[..., Any]:
    """
    Decorator that implements the Singleton pattern.

    Requires:
        - cls is a valid class type

    Ensures:
        - Only one instance of cls is created
        - All calls return the same instance
        - Provides a reset_for_testing method on the wrapper

    Raises:
        - None
    """

    instances = { }

    def wrapper( *args: Any, **kwargs: Any ) -> Any:

        if kwargs.pop( "_reset_singleton", False ):
            instances.pop( cls, None )

        if cls not in instances:
            logger.debug( "Instantiating ConfigurationManager() singleton..." )
            instances[ cls ] = cls( *args, **kwargs )

        return instances[ cls ]

    def reset_for_testing() -> bool:
        """Reset the singleton instance for testing purposes"""
        if cls in instances:
            del instances[ cls ]
            return True
        return False

    wrapper.reset_for_testing = reset_for_testing

    return wrapper


@singleton
class ConfigurationManager():
    """
    Manages application configuration with inheritance and override capabilities.

    Loads a named block from an INI file. A block may declare a parent with
    `inherits = <block id>`; values missing from a block are looked up along
    the inheritance chain and finally in the [default] block. Name=value pairs
    read from an environment variable override individual keys.
    """

    def __init__( self, env_var_name: Optional[str]=DEFAULT_ENV_VAR_NAME, config_path: Optional[str]=None, config_block_id: Optional[str]=None, cli_args: Optional[dict[str, str]]=None, debug: bool=False ) -> None:
        """
        Initialize the configuration manager.

        Requires:
            - If the env var named by env_var_name is set, it holds space separated name=value pairs
            - config_path, when given (explicitly or via env var), points to a readable INI file

        Ensures:
            - config_path and config_block_id are taken from the env var if present there,
              then from the explicit arguments, then from the bundled defaults
            - All other env var pairs, plus cli_args, override configuration keys
            - Inheritance chain is resolved for the selected block

        Raises:
            - FileNotFoundError if the configuration file doesn't exist
            - ValueError if the block or an inherited block doesn't exist
        """
        self.debug = debug

        env_args = { }
        if env_var_name is not None and os.environ.get( env_var_name ):
            env_args = du.get_name_value_pairs( os.environ[ env_var_name ].split( " " ) )

        self.config_path     = env_args.pop( "config_path", None ) or config_path or du.get_package_root() + DEFAULT_CONFIG_PATH
        self.config_block_id = env_args.pop( "config_block_id", None ) or config_block_id or "default"

        overrides = dict( env_args )
        if cli_args: overrides.update( cli_args )

        self.config = None
        self.init( overrides )

    def init( self, overrides: Optional[dict[str, str]]=None ) -> None:
        """
        Load (or reload) the configuration file and apply overrides.

        Requires:
            - self.config_path and self.config_block_id are set

        Ensures:
            - self.config holds the parsed file
            - Inherited and default values are materialized in the current block
            - Overrides are written into the current block

        Raises:
            - FileNotFoundError if self.config_path doesn't exist
            - ValueError if a referenced block doesn't exist
        """
        if not os.path.isfile( self.config_path ):
            raise FileNotFoundError( f"Configuration file not found [{self.config_path}]" )

        logger.debug( f"Loading configuration [{self.config_path}] block [{self.config_block_id}]" )

        self.config = configparser.ConfigParser()
        self.config.read( self.config_path )

        self._sanity_check_config_block( self.config_block_id )
        self._calculate_inheritance()
        self._override_configuration( overrides )

    def _calculate_inheritance( self ) -> None:
        """
        Copy values down the inheritance chain into the current block.

        Ensures:
            - Keys already set in the current block are never overwritten
            - Nearer ancestors win over more distant ones
            - [default] is always the last resort
        """
        chain = self._build_inheritance_list( self.config_block_id, [ ] )
        if self.config_block_id != "default" and "default" not in chain and self.config.has_section( "default" ):
            chain.append( "default" )

        for block_id in chain:

            for key in self.config.options( block_id ):

                if key == "inherits": continue
                if not self.config.has_option( self.config_block_id, key ):
                    self.config.set( self.config_block_id, key, self.config.get( block_id, key ) )

    def _build_inheritance_list( self, block_id: str, inheritance_list: list[str] ) -> list[str]:
        """
        Recursively build the list of ancestors of block_id, nearest first.

        Raises:
            - ValueError on a missing block or an inheritance cycle
        """
        if not self.config.has_option( block_id, "inherits" ):
            return inheritance_list

        inherits_from = self.config.get( block_id, "inherits" ).strip()
        self._sanity_check_config_block( inherits_from )

        if inherits_from == self.config_block_id or inherits_from in inheritance_list:
            raise ValueError( f"Inheritance cycle detected at block [{inherits_from}]" )

        inheritance_list.append( inherits_from )

        return self._build_inheritance_list( inherits_from, inheritance_list )

    def _override_configuration( self, overrides: Optional[dict[str, str]] ) -> None:

        if not overrides: return

        for key, value in overrides.items():
            logger.debug( f"Overriding [{key}] with [{value}]" )
            self.set_config( key, value )

    def _sanity_check_config_block( self, block_id: str ) -> None:

        if not self.config.has_section( block_id ):
            raise ValueError( f"Configuration block doesn't exist: [{block_id}] Check spelling?" )

    def set_config( self, config_key: str, value: Any ) -> None:
        """
        Set or update a configuration value in the current block.

        Requires:
            - config_key is a non-empty string
            - value can be converted to string
        """
        self.config.set( self.config_block_id, config_key, str( value ) )

    def exists( self, config_key: str ) -> bool:
        """True if config_key is set in the current block (after inheritance)."""
        return self.config.has_option( self.config_block_id, config_key )

    def get_keys( self ) -> list[str]:
        """Sorted keys of the current block."""
        return sorted( key for key in self.config.options( self.config_block_id ) if key != "inherits" )

    def get( self, key: str, default: Union[str, int, float, bool, list, None]=_NO_DEFAULT, return_type: str="string" ) -> Optional[Union[str, int, float, bool, list, dict]]:
        """
        Get a configuration value with optional type conversion.

        Requires:
            - key is a non-empty string
            - return_type is one of: 'boolean', 'float', 'int', 'string', 'list-string', 'json'

        Ensures:
            - Returns typed value if key exists
            - Returns typed default if key doesn't exist and default provided
            - Returns None if key doesn't exist and no default

        Raises:
            - ValueError if return_type is invalid
            - json.JSONDecodeError for malformed json values
        """
        if self.exists( key ):
            return self._get_typed_value( self.config.get( self.config_block_id, key ), return_type )

        if default is _NO_DEFAULT:
            logger.warning( f"Configuration key [{key}] NOT found" )
            return None

        if default is None: return None

        return self._get_typed_value( default, return_type )

    def _get_typed_value( self, value: Any, return_type: str ) -> Union[str, int, float, bool, list, dict]:
        """
        Convert a configuration value to the requested type.

        Ensures:
            - Booleans accept True/true/yes/1 (strings) or a real bool
            - list-string splits on commas and strips each element
        """
        return_type = return_type.lower()

        if return_type == "boolean":
            if isinstance( value, bool ): return value
            return str( value ).strip().lower() in ( "true", "yes", "1", "on" )
        elif return_type == "float":
            return float( value )
        elif return_type.startswith( "int" ):
            return int( value )
        elif return_type.startswith( "str" ):
            return value
        elif return_type == "list-string":
            if isinstance( value, list ): return value
            return [ item.strip() for item in str( value ).split( "," ) if item.strip() ]
        elif return_type == "json":
            if not isinstance( value, str ): return value
            return json.loads( value )
        else:
            raise ValueError( f"Invalid return_type [{return_type}]" )


def quick_smoke_test():

    du.print_banner( "ConfigurationManager Smoke Test", prepend_nl=True )

    config_mgr = ConfigurationManager( _reset_singleton=True )
    for key in config_mgr.get_keys():
        print( f"[{key}] = [{config_mgr.get( key )}]" )


if __name__ == "__main__":
    quick_smoke_test()

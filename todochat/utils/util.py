import os
from datetime import datetime, timezone
from typing import Optional


def get_package_root() -> str:
    """
    Get the absolute path of the installed todochat package.

    Ensures:
        - Returns the directory holding todochat/__init__.py, without a trailing slash
    """
    return os.path.dirname( os.path.dirname( os.path.abspath( __file__ ) ) )


def get_name_value_pairs( arg_list: list[str], decode_spaces: bool=True ) -> dict[str, str]:
    """
    Parse a list of strings in "name=value" format into a dictionary.

    Requires:
        - arg_list is a list of strings

    Ensures:
        - Returns a dictionary mapping names to values
        - Skips elements that don't contain "="
        - Splits on the first "=" only, so values may contain "="
        - Replaces "+" with spaces in names and values if decode_spaces is True

    Args:
        arg_list: Space delimited input, usually read from an environment variable
        decode_spaces: Whether to replace "+" with spaces (default: True)

    Returns:
        A dictionary of name-value pairs
    """
    name_value_pairs = { }

    for arg in arg_list:

        if "=" not in arg: continue

        name, value = arg.split( "=", 1 )
        if decode_spaces:
            name  = name.replace( "+", " " )
            value = value.replace( "+", " " )

        name_value_pairs[ name.strip() ] = value.strip()

    return name_value_pairs


def utc_now() -> datetime:
    """Timezone aware current time in UTC."""
    return datetime.now( timezone.utc )


def to_utc( dt: Optional[datetime] ) -> Optional[datetime]:
    """
    Normalize a datetime to an aware UTC datetime.

    Requires:
        - dt is None, a naive datetime (assumed to already be UTC) or an aware datetime

    Ensures:
        - Returns None for None
        - Naive values get tzinfo=UTC attached, aware values are converted to UTC
    """
    if dt is None: return None

    if dt.tzinfo is None:
        return dt.replace( tzinfo=timezone.utc )

    return dt.astimezone( timezone.utc )


def print_banner( msg: str, end: str="\n\n", prepend_nl: bool=False ) -> None:
    """
    Print a message to console with decorative header/footer lines.

    Used by the quick_smoke_test() functions that modules run under __main__.
    """
    if prepend_nl: print()

    line = "-" * max( 40, len( msg ) + 6 )
    print( line )
    print( f"-- {msg}" )
    print( line, end=end )

"""Entry point for 'python -m filedepot' command.

This module allows the FileDepot CLI to be invoked using
'python -m filedepot' or 'python -m filedepot serve'.
"""

from filedepot.cli import serve_main

if __name__ == "__main__":
    serve_main()

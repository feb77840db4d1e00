"""
Package entry point.

Allows running the application via:

    python -m grademate

This simply forwards execution to grademate.cli.main().
"""

from grademate.cli import main

if __name__ == "__main__":
    main()

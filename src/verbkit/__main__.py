"""Allow ``python -m verbkit`` invocation.

Runs the bundled ``sigterm`` sample verb, which is handy for checking
how a process built on verbkit reacts to Ctrl+C and SIGTERM.
"""

from __future__ import annotations

from verbkit.cli.demo import main

if __name__ == "__main__":
    main()

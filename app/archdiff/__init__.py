"""archdiff - audit a pacman-managed filesystem for drift.

Compares the live filesystem against the pacman local database, a set of
gitignore-style exclusion rules and an administrator-maintained reference
tree, and reports every path that diverges.
"""

__version__ = "0.1.0"

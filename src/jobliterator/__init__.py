"""
jobliterator: Remove stale Kubernetes Jobs and the Pods they leave behind.

Finds Jobs that finished more than N days ago, deletes their terminal Pods
and then the Job itself. Optionally finds Pods whose Job no longer exists
(orphans). Simulates by default; pass -f/--delete to apply.
"""

__version__ = "0.1.0"

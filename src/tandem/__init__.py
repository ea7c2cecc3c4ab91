"""tandem: run an app server and its front end as one unit.

tandem starts a small, fixed group of long-running processes, forwards
their log files to stderr, and tears the whole group down as soon as any
one of them exits or a termination signal arrives.
"""

__version__ = "0.1.0"

"""taskdash — per-user task tracker with a JSON API and a browser UI.

One backend serves both surfaces: API clients send a bearer JWT on every
call, browsers log in once and keep the same JWT in a server-side session.
The dashboard scores each user's task list into a productivity grade.
"""

__version__ = "0.1.0"

"""
Point the app at a throwaway SQLite database and create the schema.
Runs before any test module imports liftlog, so the cached settings and
the engine both pick up the override.
"""
import os
import tempfile

_tmpdir = tempfile.mkdtemp(prefix="liftlog-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmpdir, 'test.db')}"

from liftlog.db import Base, engine  # noqa: E402
from liftlog import models  # noqa: E402,F401

Base.metadata.create_all(engine)

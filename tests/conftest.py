"""Shared test configuration.

Keeps the exercise catalog created by module-level app objects out of the
user's real application support directory.
"""

import os
import sys
import tempfile

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

os.environ.setdefault("FITLOG_DATA_DIR", tempfile.mkdtemp(prefix="fitlog-test-"))

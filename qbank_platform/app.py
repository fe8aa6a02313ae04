"""Entry point for the question bank service.

`flask --app app run` and WSGI servers import `app` from here; running the
module directly starts the development server.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent
DOTENV_PATH = Path(os.getenv("QBANK_DOTENV", PROJECT_ROOT / ".env"))

# Backend ids and the bridge token usually live in `.env`; they must be in the
# environment before config.py is imported.
if os.getenv("FLASK_SKIP_DOTENV") not in {"1", "true", "True"}:
    try:
        load_dotenv(DOTENV_PATH)
    except PermissionError as exc:
        print(f"Skipping unreadable {DOTENV_PATH}: {exc}", file=sys.stderr)

from qbank_app import create_app  # noqa: E402  (import after load_dotenv)

app = create_app(os.getenv("FLASK_CONFIG"))


def _resolve_port() -> int:
    return int(os.getenv("PORT", os.getenv("FLASK_RUN_PORT", 5080)))


if __name__ == "__main__":  # pragma: no cover
    app.run(
        debug=app.config.get("DEBUG", False),
        host=os.getenv("HOST", "127.0.0.1"),
        port=_resolve_port(),
    )

import argparse
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from drive_upload.config import CONFIG, load_envs
from drive_upload.logger import log


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the Drive video upload API.")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only).")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None):
    args = _parse_args(argv)
    load_envs(PROJECT_ROOT)

    import uvicorn

    reload = args.reload or CONFIG.is_development
    log(f"[dispatcher] serving upload API on {args.host}:{args.port}", environment=CONFIG.environment)
    try:
        uvicorn.run("drive_upload.api.main:app", host=args.host, port=args.port, reload=reload)
    except Exception as exc:
        print(f"[dispatcher error] {type(exc).__name__}: {exc}", file=sys.stderr)
        return 2
    return 0

if __name__ == "__main__":
    sys.exit(main())

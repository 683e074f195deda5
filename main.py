"""Dad's Day Arcade dev launcher. Starts the backend in watch mode."""

import argparse
import os
import signal
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
BACKEND_PORT = os.getenv("BACKEND_PORT", "13013")


def seed_trivia(csv_path: Path) -> int:
    """Import a trivia sheet export into the configured data dir."""
    from backend import storage
    from dad_arcade.trivia import parse_trivia_csv

    questions = parse_trivia_csv(csv_path.read_text(encoding="utf-8"))
    return storage.upsert_trivia(questions)


def main():
    parser = argparse.ArgumentParser(description="Dad's Day Arcade dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--seed-trivia", type=Path, default=None, metavar="CSV",
                        help="Import trivia questions from a CSV export before starting")
    args = parser.parse_args()

    if args.seed_trivia or args.data_dir:
        from backend import storage
        data_dir = args.data_dir or Path("data")
        storage.init_storage(data_dir)
        if args.seed_trivia:
            count = seed_trivia(args.seed_trivia)
            print(f"Imported {count} trivia questions from {args.seed_trivia}")

    # Build env for the subprocess so the backend picks up the same data dir
    env = os.environ.copy()
    if args.data_dir:
        env["DATA_DIR"] = str(args.data_dir.resolve())

    procs: list[subprocess.Popen] = []

    def shutdown(*_):
        print("\nShutting down...")
        for p in procs:
            p.terminate()
        for p in procs:
            p.wait()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    print(f"Starting backend on http://localhost:{BACKEND_PORT} ...")
    procs.append(subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "backend.app:app", "--reload",
         "--host", HOST, "--port", BACKEND_PORT],
        cwd=ROOT, env=env,
    ))

    for p in procs:
        p.wait()


if __name__ == "__main__":
    main()

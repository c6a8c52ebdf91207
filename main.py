"""LLM Dungeon Master — dev launcher. Starts the API server in watch mode."""

import argparse
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "3000")


def main():
    parser = argparse.ArgumentParser(description="LLM Dungeon Master dev launcher")
    parser.add_argument("--saves-dir", type=Path, default=None,
                        help="Save file directory (default: ./saves)")
    parser.add_argument("--ollama-url", default=None,
                        help="Ollama base URL (default: http://localhost:11434)")
    parser.add_argument("--no-reload", action="store_true",
                        help="Disable auto-reload on code changes")
    args = parser.parse_args()

    # The app reads its settings from the environment, also in the reloader's child process
    if args.saves_dir:
        os.environ["SAVES_DIR"] = str(args.saves_dir.resolve())
    if args.ollama_url:
        os.environ["OLLAMA_URL"] = args.ollama_url

    print(f"Starting backend on http://localhost:{PORT} ...")
    uvicorn.run(
        "dungeon_master.app:app",
        host=HOST,
        port=int(PORT),
        reload=not args.no_reload,
        reload_dirs=[str(ROOT / "dungeon_master")],
    )


if __name__ == "__main__":
    main()

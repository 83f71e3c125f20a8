"""
Command line entry point.

  doubt-solver serve [--host 127.0.0.1] [--port 8000]   run the API (uvicorn)
  doubt-solver ask [--voice]                            interactive terminal UI
  doubt-solver issue-key [--subject USER]               print an anon credential

`ask` reads DOUBT_SOLVER_URL and DOUBT_SOLVER_ANON_KEY from the environment.
"""
from __future__ import annotations

import argparse
import sys

from doubt_solver.config import ConfigError, configure_logging, load_client_settings

HELP = """Type a question and press Enter.
  :subject <name>   set the subject (blank for General)
  :voice            capture the question from an audio file
  :history          toggle between latest answer and history
  :quit             exit"""


def _ask_audio_path() -> str | None:
    path = input("Audio file (blank to cancel): ").strip()
    return path or None


def run_ask(voice: bool) -> int:
    from doubt_solver.app import DoubtSolverApp
    from doubt_solver.client import ExplanationClient, RecordStoreGateway
    from doubt_solver.speech import SpeechCapture, WhisperRecognizer
    from doubt_solver.views import VOICE_UNSUPPORTED, render_page

    try:
        settings = load_client_settings()
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    client = ExplanationClient(settings)
    store = RecordStoreGateway(settings)
    app = DoubtSolverApp(client, store)
    recognizer = WhisperRecognizer(_ask_audio_path) if voice else None
    speech = SpeechCapture(recognizer, app.on_transcript)
    app.refresh_history()
    print(HELP)
    try:
        while True:
            try:
                line = input(f"\n[{app.subject or 'General'}] > ").strip()
            except EOFError:
                break
            if not line:
                continue
            if line == ":quit":
                break
            if line == ":history":
                app.toggle_history()
                print(render_page(app.current, app.doubts, app.show_history))
                continue
            if line.startswith(":subject"):
                app.set_subject(line[len(":subject"):].strip())
                continue
            if line == ":voice":
                if not speech.supported:
                    print(VOICE_UNSUPPORTED)
                    continue
                app.set_question("")
                speech.start()
                speech.wait()
                if not app.question:
                    continue
                print(f"Heard: {app.question}")
            else:
                app.set_question(line)

            print("Solving...")
            app.solve()
            if app.notice:
                print(app.notice, file=sys.stderr)
            else:
                print(render_page(app.current, app.doubts, app.show_history))
    finally:
        client.close()
        store.close()
    return 0


def run_serve(host: str, port: int, reload: bool) -> int:
    import uvicorn

    uvicorn.run("doubt_solver.api:app", host=host, port=port, reload=reload)
    return 0


def run_issue_key(subject: str | None) -> int:
    from doubt_solver.auth import create_anon_key

    print(create_anon_key(subject))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="doubt-solver", description="Simple explanations for your doubts")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ... (default: LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    ask = sub.add_parser("ask", help="Interactive terminal UI")
    ask.add_argument("--voice", action="store_true", help="Enable voice input (needs the 'voice' extra)")

    key = sub.add_parser("issue-key", help="Print an anon credential for DOUBT_SOLVER_ANON_KEY")
    key.add_argument("--subject", default=None, help="Optional user id stored with each record")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    if args.command == "serve":
        return run_serve(args.host, args.port, args.reload)
    if args.command == "ask":
        return run_ask(args.voice)
    return run_issue_key(args.subject)


if __name__ == "__main__":
    sys.exit(main())

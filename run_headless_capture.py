"""Run the application initialisation headless and capture its output.

A child Python process runs ``keeper.main --headless`` so OS-level output
(including messages printed by Qt's C++ layer) is captured into files instead
of leaking to the console.

Usage:
  python run_headless_capture.py

Outputs:
  - run_output.txt : combined stdout+stderr from the child run
  - run_exception.txt : the full output again when the child exited with an error code
"""
from __future__ import annotations
import os
import sys
import traceback

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

ROOT = os.path.dirname(os.path.abspath(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

out_file = os.path.join(ROOT, "run_output.txt")
err_file = os.path.join(ROOT, "run_exception.txt")


def _run_child_mode() -> int:
    """Import the package and run the headless check in-process."""
    try:
        import keeper.main as m  # type: ignore

        print("Imported keeper.main OK")
        try:
            rc = m.main(["--headless"])
            print("m.main() returned", rc)
            return int(rc) if isinstance(rc, int) else 0
        except SystemExit as se:
            print("m.main() raised SystemExit:", se)
            return se.code if isinstance(se.code, int) else 1
        except Exception:
            traceback.print_exc()
            return 2
    except Exception:
        traceback.print_exc()
        return 3


def _run_parent_mode() -> None:
    """Launch the child process with RUN_AS_CHILD=1 and store what it printed."""
    import subprocess

    env = dict(os.environ)
    env["RUN_AS_CHILD"] = "1"
    env["KEEPER_DEBUG"] = "1"
    env.setdefault("QT_QPA_PLATFORM", "offscreen")

    proc = subprocess.run([sys.executable, __file__], env=env, capture_output=True, text=True)

    combined = proc.stdout + ("\n" + proc.stderr if proc.stderr else "")
    with open(out_file, "w", encoding="utf-8") as outf:
        outf.write(combined)

    if proc.returncode != 0:
        with open(err_file, "w", encoding="utf-8") as errf:
            errf.write(combined)
        print("Child process failed; see", err_file)
    else:
        print("Run completed without exception; see", out_file)


if __name__ == "__main__":
    if os.environ.get("RUN_AS_CHILD") == "1":
        sys.exit(_run_child_mode())
    else:
        _run_parent_mode()

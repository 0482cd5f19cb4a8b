#!/usr/bin/env python
import argparse
import csv
import datetime as dt
import time
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import requests

from docqa.prompting import REFUSALS, PromptBuilder

# Standard-Katalog, falls keine --questions Datei angegeben ist
EVAL_QUESTIONS: List[Tuple[int, str]] = [
    (1, "What is the main topic of the text?"),
    (2, "Which names are mentioned in the text?"),
    (3, "What is the capital of France?"),  # meist nicht im Text -> Refusal erwartet
]

FIELDNAMES = [
    "timestamp",
    "run_name",
    "question_id",
    "question_text",
    "status_code",
    "ok",
    "refused",
    "answer",
    "error",
    "latency_ms",
]


def load_questions(path: Optional[str]) -> List[Tuple[int, str]]:
    """Eine Frage pro Zeile; leere Zeilen und '#'-Kommentare werden übersprungen."""
    if not path:
        return list(EVAL_QUESTIONS)
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    questions = [ln.strip() for ln in lines if ln.strip() and not ln.strip().startswith("#")]
    return list(enumerate(questions, start=1))


def call_ask(base_url: str, question: str, timeout: float = 120.0) -> Tuple[int, Dict]:
    url = base_url.rstrip("/") + "/ask"
    resp = requests.post(url, json={"question": question}, timeout=timeout)
    try:
        data = resp.json()
    except ValueError:
        data = {"error": resp.text}
    return resp.status_code, data


def build_row(run_name: str, q_id: int, q_text: str, status: Optional[int], data: Dict,
              prompting: PromptBuilder, latency_ms: Optional[float]) -> Dict:
    answer = (data.get("answer") or "").strip()
    ok = status == 200 and "answer" in data
    return {
        "timestamp": dt.datetime.now().isoformat(timespec="seconds"),
        "run_name": run_name,
        "question_id": q_id,
        "question_text": q_text,
        "status_code": status,
        "ok": ok,
        "refused": ok and prompting.is_refusal(answer),
        "answer": answer,
        "error": data.get("error"),
        "latency_ms": latency_ms,
    }


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Stellt eine Liste von Fragen an /ask und schreibt die Ergebnisse als CSV."
    )
    parser.add_argument("--base-url", default="http://localhost:8080")
    parser.add_argument("--run-name", required=True, help="Name des Durchlaufs")
    parser.add_argument("--questions", help="Textdatei mit einer Frage pro Zeile")
    parser.add_argument("--out", default="eval_results.csv", help="Pfad zur Ausgabedatei (CSV).")
    parser.add_argument("--language", default="en", choices=sorted(REFUSALS),
                        help="Sprache des Refusal-Satzes (wie PROMPT_LANGUAGE im Backend).")
    parser.add_argument("--timeout", type=float, default=120.0)
    args = parser.parse_args()

    prompting = PromptBuilder(args.language)
    write_header = not Path(args.out).exists()

    with open(args.out, "a", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        if write_header:
            writer.writeheader()

        for q_id, q_text in load_questions(args.questions):
            print(f"[{args.run_name}] Frage {q_id}: {q_text}")
            t0 = time.perf_counter()
            try:
                status, data = call_ask(args.base_url, q_text, timeout=args.timeout)
            except requests.RequestException as e:
                # Backend nicht erreichbar
                writer.writerow(build_row(args.run_name, q_id, q_text, None, {"error": str(e)}, prompting, None))
                continue
            latency = round((time.perf_counter() - t0) * 1000.0, 2)
            writer.writerow(build_row(args.run_name, q_id, q_text, status, data, prompting, latency))

    print(f"Fertig. Ergebnisse in {args.out}.")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path

import requests

from docqa.store import read_text_file


def post_text(url: str, text: str | None, timeout: float = 30.0) -> None:
    payload = {} if text is None else {"text": text}
    try:
        resp = requests.post(url, json=payload, timeout=timeout)
    except requests.ConnectionError as e:
        print("Connection error:", e)
        sys.exit(1)
    print("Status:", resp.status_code)
    print(resp.text)
    if resp.status_code >= 400:
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(description="Setzt oder leert den Basistext des Dienstes.")
    parser.add_argument("--base-url", default="http://localhost:8080")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--text")
    group.add_argument("--file", help=".txt oder .md")
    group.add_argument("--clear", action="store_true")
    args = parser.parse_args()

    upload_url = args.base_url.rstrip("/") + "/upload-text"

    if args.clear:
        post_text(upload_url, None)
    elif args.text is not None:
        post_text(upload_url, args.text)
    else:
        path = Path(args.file)
        if not path.is_file():
            print("File not found:", args.file)
            sys.exit(1)
        try:
            text = read_text_file(path)
        except ValueError as e:
            print(e)
            sys.exit(1)
        post_text(upload_url, text)


if __name__ == "__main__":
    main()

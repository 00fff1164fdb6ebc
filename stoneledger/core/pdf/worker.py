"""
Child-process entry point for PDF rendering.

Protocol: print READY on stdout once WeasyPrint is imported, read one UTF-8
HTML document from stdin until EOF, write the PDF bytes to stdout, exit 0.
Any failure exits non-zero with the reason on stderr.

Only inline (data:) resources are loaded; anything else is refused so that
rendering never waits on the network.
"""

import argparse
import sys

READY_MARKER = b"READY"

EXIT_UNAVAILABLE = 3
EXIT_RENDER_FAILED = 4


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="stoneledger-pdf-worker")
    parser.add_argument("--page-size", default="A4")
    parser.add_argument("--margin", default="10mm")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        from weasyprint import CSS, HTML, default_url_fetcher
    except (OSError, ImportError) as e:
        sys.stderr.write(f"WeasyPrint unavailable (system libraries: pango, glib): {e}\n")
        return EXIT_UNAVAILABLE

    def inline_only_fetcher(url, *fetch_args, **fetch_kwargs):
        if url.startswith("data:"):
            return default_url_fetcher(url, *fetch_args, **fetch_kwargs)
        raise ValueError(f"External resource refused: {url}")

    out = sys.stdout.buffer
    out.write(READY_MARKER + b"\n")
    out.flush()

    html = sys.stdin.buffer.read().decode("utf-8")
    page_css = CSS(string=f"@page {{ size: {args.page_size}; margin: {args.margin}; }}")
    try:
        pdf = HTML(string=html, url_fetcher=inline_only_fetcher).write_pdf(stylesheets=[page_css])
    except Exception as e:
        sys.stderr.write(f"PDF rendering failed: {type(e).__name__}: {e}\n")
        return EXIT_RENDER_FAILED

    out.write(pdf)
    out.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())

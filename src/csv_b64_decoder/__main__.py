"""Module entrypoint for `python -m csv_b64_decoder`."""

from csv_b64_decoder.cli import main


if __name__ == "__main__":  # pragma: no cover - exercised via CLI tests
    main()

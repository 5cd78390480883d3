"""CLI for the ``ledger_ingest`` package.

Each subcommand is a thin Typer wrapper around a ``cmd_*`` handler that
returns a process exit code. Handlers print results to stdout and errors to
stderr. Environment variables (``LEDGER_DATABASE_URL``, ``LEDGER_LOG_LEVEL``,
``LEDGER_RULES_FILE``) are loaded from a local ``.env`` by the root callback
before any command runs.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import OptionInfo

from .logging_setup import configure_logging

# ---- Small module-level helpers ----------------------------------------------


def _read_text(csv_path: str) -> str | None:
    """Return the file contents, or ``None`` after reporting the error."""

    try:
        with open(csv_path, encoding="utf-8-sig", newline="") as f:
            return f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Unexpected failure reading '{csv_path}': {e}", file=sys.stderr)
    return None


def _load_rules(rules_file: str | None):
    from .rules import load_rule_set

    try:
        return load_rule_set(rules_file)
    except FileNotFoundError:
        print(f"Error: Rules file not found: {rules_file}", file=sys.stderr)
    except ValidationError as e:
        print(f"Error: Invalid rules file: {e}", file=sys.stderr)
    return None


def _open_ledger(database_url: str | None, rules):
    """Load the persisted ledger, or ``None`` after reporting the error."""

    from .ledger import Ledger
    from .persistence import LedgerStore

    try:
        store = LedgerStore(database_url)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
    except Exception as e:
        print(f"Error: failed to open database: {e}", file=sys.stderr)
        return None
    return Ledger.load(store, rules=rules)


def _print_retailer_summary(summary) -> None:
    rows = sorted(summary.by_category.values(), key=lambda s: s.total, reverse=True)
    for s in rows:
        print(f"{s.sub}\t{s.ledger_cat}\t{s.count}\t{s.total:.2f}")
    print(
        f"Total spend {summary.total_spend:.2f} · returns {summary.total_returns:.2f}"
        f" · net {summary.net_spend:.2f}"
    )


# ---- Command handlers ----------------------------------------------------------


def cmd_import_csv(
    csv_path: str,
    account: str,
    *,
    persist: bool = False,
    database_url: str | None = None,
    rules_file: str | None = None,
) -> int:
    """Import a bank CSV and print the one-line import summary.

    Without ``persist`` the import runs against an empty in-memory ledger,
    which is useful to preview detection and categorization.
    """

    from .ledger import EmptyImportError, Ledger

    text = _read_text(csv_path)
    if text is None:
        return 1
    rules = _load_rules(rules_file)
    if rules is None:
        return 1

    if persist:
        ledger = _open_ledger(database_url, rules)
        if ledger is None:
            return 1
    else:
        ledger = Ledger(rules=rules)

    try:
        summary = ledger.import_csv(text, account)
    except EmptyImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for err in summary.errors:
        print(err, file=sys.stderr)
    print(summary.message())
    return 0


def cmd_parse_csv(csv_path: str, account: str, *, rules_file: str | None = None) -> int:
    """Print ``date\\tamount\\tcategory\\tdescription`` per parsed transaction."""

    from .categorize import categorize_all
    from .ingest import parse_csv
    from .normalizers import fmt_amount

    text = _read_text(csv_path)
    if text is None:
        return 1
    rules = _load_rules(rules_file)
    if rules is None:
        return 1

    result = parse_csv(text, account)
    if not result.transactions:
        print("Error: No transactions found. Check the CSV format.", file=sys.stderr)
        return 1
    for t in categorize_all(result.transactions, rules):
        print(f"{t.date.isoformat()}\t{fmt_amount(t.amount)}\t{t.category}\t{t.description}")
    return 0


def cmd_reclassify(
    transaction_id: str,
    category: str,
    *,
    note: str | None = None,
    exclude: bool | None = None,
    apply_to_all: bool = False,
    database_url: str | None = None,
) -> int:
    """Re-categorize a stored transaction, optionally for its whole merchant."""

    from .ledger import UnknownTransactionError

    rules = _load_rules(None)
    if rules is None:
        return 1
    ledger = _open_ledger(database_url, rules)
    if ledger is None:
        return 1
    try:
        result = ledger.edit_transaction(
            transaction_id,
            category=category,
            note=note,
            excluded=exclude,
            apply_to_all=apply_to_all,
        )
    except UnknownTransactionError:
        print(f"Error: Unknown transaction id: {transaction_id}", file=sys.stderr)
        return 1

    if result.rule_saved:
        print(f'Updated {result.updated} transactions · Rule saved for "{result.merchant_key}"')
    else:
        print("Transaction updated")
    return 0


def cmd_rules(*, database_url: str | None = None) -> int:
    """Print stored merchant rules as ``merchant_key\\tcategory``."""

    from .persistence import LedgerStore

    try:
        store = LedgerStore(database_url)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: failed to open database: {e}", file=sys.stderr)
        return 1
    for key, category in sorted(store.load_merchant_rules().items()):
        print(f"{key}\t{category}")
    return 0


def cmd_categories(*, database_url: str | None = None) -> int:
    """Print active categories as ``id\\tkind`` (``income``, ``budget`` or ``excluded``)."""

    from .categories import CategoryRegistry
    from .persistence import LedgerStore

    try:
        store = LedgerStore(database_url)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: failed to open database: {e}", file=sys.stderr)
        return 1
    registry = CategoryRegistry(store.load_categories())
    income = {c.id for c in registry.income_categories()}
    budget = {c.id for c in registry.budget_categories()}
    for c in registry.categories:
        kind = "income" if c.id in income else "budget" if c.id in budget else "excluded"
        print(f"{c.id}\t{kind}")
    return 0


def cmd_walmart(csv_path: str) -> int:
    from .retailers import parse_walmart_csv, summarize_walmart_items

    text = _read_text(csv_path)
    if text is None:
        return 1
    items = parse_walmart_csv(text)
    if not items:
        print("Error: No Walmart items found. Check the CSV format.", file=sys.stderr)
        return 1
    _print_retailer_summary(summarize_walmart_items(items))
    return 0


def cmd_amazon(csv_path: str) -> int:
    from .retailers import parse_amazon_csv, summarize_amazon_items

    text = _read_text(csv_path)
    if text is None:
        return 1
    items = parse_amazon_csv(text)
    if not items:
        print("Error: No Amazon items found. Check the CSV format.", file=sys.stderr)
        return 1
    _print_retailer_summary(summarize_amazon_items(items))
    return 0


def cmd_reconcile_walmart(csv_path: str, *, database_url: str | None = None) -> int:
    """Re-file stored Walmart/Target bank charges from a Walmart order export."""

    from .retailers import parse_walmart_csv, summarize_walmart_items

    text = _read_text(csv_path)
    if text is None:
        return 1
    items = parse_walmart_csv(text)
    if not items:
        print("Error: No Walmart items found. Check the CSV format.", file=sys.stderr)
        return 1
    rules = _load_rules(None)
    if rules is None:
        return 1
    ledger = _open_ledger(database_url, rules)
    if ledger is None:
        return 1
    updated = ledger.reconcile_walmart(summarize_walmart_items(items))
    if not updated:
        print(
            "Error: No Walmart bank charges found. Import bank CSVs first.",
            file=sys.stderr,
        )
        return 1
    print(f"Reconciled {updated} Walmart bank charge{'s' if updated != 1 else ''}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank CSV exports into a categorized ledger. "
        "Loads LEDGER_* settings from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to the CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
    readable=True,
)


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("import-csv")
def import_csv_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    account: str = typer.Option(..., help="Account label stored on each transaction."),
    persist: bool = typer.Option(False, help="Load and save the ledger in the database."),
    database_url: str | None = typer.Option(
        None, help="Override LEDGER_DATABASE_URL (falls back to env vars)."
    ),
    rules_file: str | None = typer.Option(
        None, help="JSON rule-set file (overrides LEDGER_RULES_FILE)."
    ),
) -> None:
    """Parse, categorize and de-duplicate a bank CSV export."""

    _exit(
        cmd_import_csv(
            str(csv_path),
            account,
            persist=persist,
            database_url=database_url,
            rules_file=rules_file,
        )
    )


@app.command("parse-csv")
def parse_csv_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    account: str = typer.Option("", help="Account label stored on each transaction."),
    rules_file: str | None = typer.Option(
        None, help="JSON rule-set file (overrides LEDGER_RULES_FILE)."
    ),
) -> None:
    """Print the categorized transactions of a CSV without storing them."""

    _exit(cmd_parse_csv(str(csv_path), account, rules_file=rules_file))


@app.command("reclassify")
def reclassify_cmd(
    *,
    transaction_id: str = typer.Option(..., "--id", help="Transaction id to edit."),
    category: str = typer.Option(..., help="New category id."),
    note: str | None = typer.Option(None, help="Note for the edited transaction."),
    exclude: bool | None = typer.Option(
        None, "--exclude/--include", help="Exclude the transaction from budget totals."
    ),
    apply_to_all: bool = typer.Option(
        False, help="Re-categorize every transaction from the same merchant and save a rule."
    ),
    database_url: str | None = typer.Option(
        None, help="Override LEDGER_DATABASE_URL (falls back to env vars)."
    ),
) -> None:
    """Edit a stored transaction's category."""

    _exit(
        cmd_reclassify(
            transaction_id,
            category,
            note=note,
            exclude=exclude,
            apply_to_all=apply_to_all,
            database_url=database_url,
        )
    )


@app.command("rules")
def rules_cmd(
    database_url: str | None = typer.Option(
        None, help="Override LEDGER_DATABASE_URL (falls back to env vars)."
    ),
) -> None:
    """List stored merchant rules."""

    _exit(cmd_rules(database_url=database_url))


@app.command("categories")
def categories_cmd(
    database_url: str | None = typer.Option(
        None, help="Override LEDGER_DATABASE_URL (falls back to env vars)."
    ),
) -> None:
    """List categories with their budget role."""

    _exit(cmd_categories(database_url=database_url))


@app.command("walmart")
def walmart_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Summarize a Walmart order export by subcategory."""

    _exit(cmd_walmart(str(csv_path)))


@app.command("amazon")
def amazon_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Summarize an Amazon Items report by subcategory."""

    _exit(cmd_amazon(str(csv_path)))


@app.command("reconcile-walmart")
def reconcile_walmart_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    database_url: str | None = typer.Option(
        None, help="Override LEDGER_DATABASE_URL (falls back to env vars)."
    ),
) -> None:
    """Re-file stored Walmart bank charges using a Walmart order export."""

    _exit(cmd_reconcile_walmart(str(csv_path), database_url=database_url))


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Logging level (overrides LEDGER_LOG_LEVEL)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover
    app()

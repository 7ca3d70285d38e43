"""Sale and expense commands."""

from datetime import date

import click

from cartsync.cli.date_filters import resolve_cli_date_range
from cartsync.cli.error_handling import handle_domain_error
from cartsync.cli.user_resolution import resolve_user_or_exit
from cartsync.domain.entities import Table
from cartsync.domain.errors import DomainError
from cartsync.domain.ledger import LedgerService
from cartsync.domain.users import UserService
from cartsync.utils.amount_parser import parse_amount
from cartsync.utils.date_parser import parse_business_date

PERIODS = ["today", "yesterday", "this-week", "last-week", "this-month", "last-month"]


def _build_group(table: Table) -> click.Group:
    """Build the add/list/delete group shared by sales and expenses."""
    noun = "sale" if table == Table.SALES else "expense"

    @click.group(noun, help=f"Record and review {table.value}.")
    def group():
        pass

    @group.command("add")
    @click.argument("name")
    @click.argument("total")
    @click.option("--date", "day", default="today", show_default=True, help="Business day")
    @click.option("--pin", required=True, help="PIN of the user posting the entry")
    @click.pass_context
    def add(ctx, name: str, total: str, day: str, pin: str):
        """Post an entry to a business day."""
        store = ctx.obj["db"]
        user = resolve_user_or_exit(ctx, UserService(store), pin)
        service = LedgerService(store)
        try:
            amount = parse_amount(total)
            business_day = parse_business_date(day)
            if table == Table.SALES:
                entry = service.add_sale(name, amount, business_day, user.id)
            else:
                entry = service.add_expense(name, amount, business_day, user.id)
            click.echo(f"Recorded {noun} '{entry.name}' {entry.total:.2f} on {entry.date} (ID: {entry.id})")
        except (DomainError, ValueError) as e:
            handle_domain_error(ctx, e)

    @group.command("list")
    @click.option("--from", "start_date", help="First day (e.g., 2024-03-01, yesterday)")
    @click.option("--to", "end_date", help="Last day")
    @click.option("--period", type=click.Choice(PERIODS), help="Named period")
    @click.pass_context
    def list_entries(ctx, start_date: str | None, end_date: str | None, period: str | None):
        """List entries, newest first, with the range total."""
        start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
        service = LedgerService(ctx.obj["db"])
        if table == Table.SALES:
            entries = service.list_sales(start, end)
        else:
            entries = service.list_expenses(start, end)
        if not entries:
            click.echo(f"No {table.value} found.")
            return

        for entry in entries:
            click.echo(f"{entry.date} | {entry.name:25s} | {entry.total:>10.2f} | {entry.id}")
        total = sum(e.total for e in entries)
        click.echo("-" * 60)
        click.echo(f"Total: {total:.2f}")

    @group.command("delete")
    @click.argument("entry_id")
    @click.pass_context
    def delete(ctx, entry_id: str):
        """Delete an entry."""
        service = LedgerService(ctx.obj["db"])
        try:
            if table == Table.SALES:
                service.delete_sale(entry_id)
            else:
                service.delete_expense(entry_id)
            click.echo(f"Deleted {noun} {entry_id}")
        except DomainError as e:
            handle_domain_error(ctx, e)

    return group


sale_group = _build_group(Table.SALES)
expense_group = _build_group(Table.EXPENSES)


@click.command("summary")
@click.option("--from", "start_date", help="First day")
@click.option("--to", "end_date", help="Last day")
@click.option("--period", type=click.Choice(PERIODS), help="Named period")
@click.pass_context
def summary(ctx, start_date: str | None, end_date: str | None, period: str | None):
    """Show sales, expenses and net over a day range (default: today)."""
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    if start is None and end is None:
        start = end = date.today()
    try:
        result = LedgerService(ctx.obj["db"]).summarize(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Period:   {start or '...'} to {end or '...'}")
    click.echo(f"Sales:    {result.sales_total:>12.2f} ({result.sale_count})")
    click.echo(f"Expenses: {result.expenses_total:>12.2f} ({result.expense_count})")
    click.echo(f"Net:      {result.net:>12.2f}")


def register_commands(cli):
    """Register sale, expense and summary commands with main CLI."""
    cli.add_command(sale_group)
    cli.add_command(expense_group)
    cli.add_command(summary)

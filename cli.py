# cli.py - interactive catalog console
import os
import sys
from datetime import datetime
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.storefront import StoreClient

console = Console()
c = StoreClient(base_url=os.getenv("STORE_API_URL", "http://127.0.0.1:8085"))


# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
category_cache: List[Dict[str, Any]] = []

# Custom prompt style for prompt_toolkit
custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def _stars(avg: Optional[float]) -> str:
    if avg is None:
        return "-"
    return f"★ {avg:.1f}"


def show_products(products: List[Dict[str, Any]], title: str = "📦 Products Catalog"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold", width=22)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Stock", justify="right", width=7)
    table.add_column("Category", width=14)
    table.add_column("Rating", justify="right", width=12)

    for p in products:
        category = (p.get("category") or {}).get("name", "N/A")
        stock = p.get("stock", 0)
        stock_style = "red" if stock == 0 else ("yellow" if stock <= 10 else "green")
        rating = _stars(p.get("averageRating"))
        if p.get("reviewCount"):
            rating += f" ({p['reviewCount']})"
        name = p.get("name", "N/A")
        if p.get("isActive") is False:
            name = f"[strike]{name}[/strike]"
        table.add_row(
            p.get("id", "N/A")[:12],
            name,
            f"${p.get('price', 0):.2f}",
            f"[{stock_style}]{stock}[/{stock_style}]",
            category,
            rating,
        )
    console.print(table)


def show_pagination(pagination: Dict[str, Any]):
    console.print(
        f"[dim]Page {pagination.get('page')} of {pagination.get('totalPages')} "
        f"· {pagination.get('total')} products · {pagination.get('limit')} per page[/dim]"
    )


def show_product_detail(product: Dict[str, Any]):
    lines = [
        f"[bold]{product.get('name')}[/bold]  [dim]{product.get('id')}[/dim]",
        product.get("description") or "[italic]No description available[/italic]",
        "",
        f"💰 [green]${product.get('price', 0):.2f}[/green]   📦 Stock: {product.get('stock', 0)}",
        f"🏷️ {(product.get('category') or {}).get('name', 'N/A')}"
        + (f"   Condition: {product['condition']}" if product.get("condition") else ""),
        f"{_stars(product.get('averageRating'))} from {product.get('reviewCount', 0)} review(s)",
    ]
    if product.get("isActive") is False:
        lines.append("[red]Inactive (deleted)[/red]")
    console.print(Panel("\n".join(lines), title="ℹ️ Product", border_style="cyan"))

    reviews = product.get("reviews") or []
    if reviews:
        show_reviews(reviews, title="💬 Reviews")


def show_categories(categories: List[Dict[str, Any]]):
    if not categories:
        console.print("[italic yellow]No categories available[/italic yellow]")
        return

    table = Table(title="🏷️ Categories", box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Description", width=36)
    table.add_column("Products", justify="right", width=9)
    for cat in categories:
        table.add_row(
            cat.get("id", "N/A")[:12],
            cat.get("name", "N/A"),
            cat.get("description") or "",
            str(cat.get("productCount", "-")),
        )
    console.print(table)


def show_reviews(reviews: List[Dict[str, Any]], title: str = "💬 Recent Reviews"):
    if not reviews:
        console.print("[italic yellow]No reviews found[/italic yellow]")
        return

    table = Table(title=title, box=box.ROUNDED, header_style="bold yellow", title_style="bold yellow", show_lines=True)
    table.add_column("Rating", width=8)
    table.add_column("Product", width=20)
    table.add_column("By", width=16)
    table.add_column("Comment", width=40)
    for r in reviews:
        table.add_row(
            "★" * int(r.get("rating", 0)),
            (r.get("product") or {}).get("name", r.get("productId", "")[:12]),
            (r.get("user") or {}).get("name", "N/A"),
            r.get("comment") or "",
        )
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper with enhanced exception handling
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Returns the result, or None after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_caches():
    global product_cache, category_cache
    listing = try_api(c.list_products, 1, 100)
    product_cache = listing["data"] if listing else []
    category_cache = try_api(c.list_categories, True) or []


def get_product_completer():
    if not product_cache:
        refresh_caches()
    ids = [p.get("id", "") for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True, meta_dict={p["id"]: p["name"] for p in product_cache})


def get_category_completer():
    if not category_cache:
        refresh_caches()
    ids = [cat.get("id", "") for cat in category_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True, meta_dict={cat["id"]: cat["name"] for cat in category_cache})


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Gadget Store",
        "[bold blue]Catalog Console[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def browse_products(search: Optional[str] = None, category: Optional[str] = None):
    page = 1
    while True:
        listing = try_api(c.list_products, page, 10, category, search)
        if listing is None:
            return
        show_products(listing["data"])
        pagination = listing["pagination"]
        show_pagination(pagination)
        if pagination["page"] >= pagination["totalPages"] or not Confirm.ask("Next page?", default=False):
            return
        page += 1


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message

    console.clear()
    console.print(create_header())

    # Preload products and categories for autocomplete
    refresh_caches()

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 Browse products", "7", "🏷️ List categories"),
            ("2", "🔍 Search products", "8", "➕ Create category"),
            ("3", "➕ Create product", "9", "⚠️ Low stock report"),
            ("4", "ℹ️ Product details", "10", "⭐ Top rated"),
            ("5", "📦 Update stock", "11", "💬 Recent reviews"),
            ("6", "🗑️ Delete product", "12", "✍️ Write a review"),
            ("", "", "q", "👋 Quit")
        ]

        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 13)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            category = prompt_with_autocomplete("Category (blank for all)", completer=get_category_completer()).strip()
            browse_products(category=category or None)

        elif choice == "2":
            term = prompt_with_autocomplete("Enter search term")
            browse_products(search=term)

        elif choice == "3":
            name = prompt_with_autocomplete("Enter product name")
            price = ask_float("💰 Price in dollars", default=10.0)
            stock = IntPrompt.ask("📦 Stock", default=0)
            category_id = prompt_with_autocomplete("🏷️ Category ID", completer=get_category_completer())
            condition = Prompt.ask("Condition (optional)", default="")
            resp = try_api(
                c.create_product, name, price, category_id, stock, condition=condition or None,
                success_msg=f"Product '{name}' created"
            )
            if resp:
                show_product_detail(resp)
                refresh_caches()

        elif choice == "4":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            resp = try_api(c.get_product, pid)
            if resp:
                show_product_detail(resp)

        elif choice == "5":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            stock = IntPrompt.ask("New stock level", default=0)
            resp = try_api(c.update_stock, pid, stock, success_msg=f"Stock for {pid[:12]} set to {stock}")
            if resp:
                show_products([resp])

        elif choice == "6":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            if Confirm.ask("[red]Deactivate this product?[/red]"):
                try_api(c.delete_product, pid, success_msg=f"Product {pid[:12]} deleted")
                refresh_caches()

        elif choice == "7":
            resp = try_api(c.list_categories, True)
            if resp is not None:
                show_categories(resp)

        elif choice == "8":
            name = prompt_with_autocomplete("Category name")
            description = Prompt.ask("Description (optional)", default="")
            resp = try_api(c.create_category, name, description or None, success_msg=f"Category '{name}' created")
            if resp:
                refresh_caches()

        elif choice == "9":
            threshold = IntPrompt.ask("Stock threshold", default=10)
            resp = try_api(c.low_stock, threshold)
            if resp is not None:
                show_products(resp, title=f"⚠️ Stock at or below {threshold}")

        elif choice == "10":
            resp = try_api(c.top_rated, 10)
            if resp is not None:
                show_products(resp, title="⭐ Top Rated")

        elif choice == "11":
            resp = try_api(c.recent_reviews, 10)
            if resp is not None:
                show_reviews(resp)

        elif choice == "12":
            email = prompt_with_autocomplete("Your email")
            user = try_api(c.find_user, email)
            if user is None:
                name = Prompt.ask("Your name")
                user = try_api(c.create_user, name, email)
            if user:
                pid = prompt_with_autocomplete("Product ID", completer=get_product_completer())
                rating = IntPrompt.ask("Rating (1-5)", choices=["1", "2", "3", "4", "5"], default=5)
                comment = Prompt.ask("Comment (optional)", default="")
                try_api(c.create_review, user["id"], pid, rating, comment or None, success_msg="Thanks for your review!")

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thanks for visiting Gadget Store! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
